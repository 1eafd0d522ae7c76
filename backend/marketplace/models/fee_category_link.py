from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.core.database import Base
from marketplace.models.fee import RecordStatus


class FeeCategoryLink(Base):
    __tablename__ = "fee_category_links"
    __table_args__ = (UniqueConstraint("fee_id", "category_id", name="uq_fee_category_links_fee_category"),)

    id = Column(Integer, primary_key=True, index=True)
    fee_id = Column(Integer, ForeignKey("fees.id"), nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    category_location = Column(String(255), nullable=True)  # e.g. "store", "rfq", "factories"
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    fee = relationship("Fee", back_populates="category_links")
    category = relationship("Category")
