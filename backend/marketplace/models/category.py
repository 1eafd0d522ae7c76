from sqlalchemy import Column, DateTime, Enum, Integer, String
from sqlalchemy.sql import func

from marketplace.core.database import Base
from marketplace.models.fee import RecordStatus


class Category(Base):
    """Marketplace category / menu entry. Owned by the catalog; fees only reference it."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
