from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

DataT = TypeVar("DataT")


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class ApiResponse(CamelModel, Generic[DataT]):
    """Envelope for every fees endpoint. Callers check ``status``, not the HTTP code."""

    status: bool
    message: str
    data: Optional[DataT] = None
    error: Optional[str] = None
    total_count: Optional[int] = None
