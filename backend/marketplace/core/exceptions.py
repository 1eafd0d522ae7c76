"""
Service-layer errors for the fee configuration API.

Services raise these; routers turn them into a failure envelope
(``status=false``) instead of letting them reach the HTTP layer.
"""
from typing import Optional


class FeeServiceError(Exception):
    """Base class for errors reported through the response envelope."""

    default_message = "Fee operation failed"

    def __init__(self, message: Optional[str] = None, detail: Optional[str] = None):
        self.message = message or self.default_message
        self.detail = detail
        super().__init__(self.message)


class ValidationError(FeeServiceError):
    """A required field is missing or the payload is inconsistent."""

    default_message = "Invalid request"


class ConflictError(FeeServiceError):
    """The menu is already bound to another fee."""

    default_message = "Fees already assigned with the Menu"


class NotFoundError(FeeServiceError):
    default_message = "Not Found"


class PersistenceError(FeeServiceError):
    """A database statement failed; the surrounding transaction was rolled back."""

    default_message = "Database operation failed"
