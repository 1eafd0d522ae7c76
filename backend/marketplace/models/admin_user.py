from sqlalchemy import Boolean, Column, DateTime, String
from sqlalchemy.sql import func

from marketplace.core.database import Base


class AdminUser(Base):
    """Admin identity resolved by the auth gate; accounts are managed by the auth service."""

    __tablename__ = "admin_users"

    id = Column(String(36), primary_key=True, index=True)
    username = Column(String(100), unique=True, index=True, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
