from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.core.database import Base
from marketplace.models.fee import RecordStatus


class FeeToFeeDetail(Base):
    """Pairing of one vendor detail and one consumer detail under a fee."""

    __tablename__ = "fee_to_fee_details"

    id = Column(Integer, primary_key=True, index=True)
    fee_id = Column(Integer, ForeignKey("fees.id"), nullable=False, index=True)
    vendor_detail_id = Column(Integer, ForeignKey("fee_details.id"), nullable=False, index=True)
    consumer_detail_id = Column(Integer, ForeignKey("fee_details.id"), nullable=False, index=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    fee = relationship("Fee", back_populates="pairings")
    vendor_detail = relationship("FeeDetail", foreign_keys=[vendor_detail_id])
    consumer_detail = relationship("FeeDetail", foreign_keys=[consumer_detail_id])
