import enum

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, Enum, ForeignKey, Integer, Numeric
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.core.database import Base
from marketplace.models.fee import RecordStatus


class FeeSide(str, enum.Enum):
    VENDOR = "VENDOR"
    CONSUMER = "CONSUMER"


def _amount() -> Column:
    return Column(Numeric(18, 4, asdecimal=False), nullable=True)


class FeeDetail(Base):
    """Charge parameters for one side (vendor or consumer) of a detail pair."""

    __tablename__ = "fee_details"
    __table_args__ = (
        # Global details have no location; scoped ones always have one
        CheckConstraint(
            "(is_global AND location_id IS NULL) OR (NOT is_global AND location_id IS NOT NULL)",
            name="ck_fee_details_global_location",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    fee_id = Column(Integer, ForeignKey("fees.id"), nullable=False, index=True)
    side = Column(Enum(FeeSide), nullable=False)
    percentage = _amount()
    max_cap_per_deal = _amount()
    max_cap_per_month = _amount()
    fix_fee = _amount()
    vat = _amount()
    payment_gateway_fee = _amount()
    is_global = Column(Boolean, default=True, nullable=False)
    location_id = Column(Integer, ForeignKey("fee_locations.id"), nullable=True, unique=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    fee = relationship("Fee", back_populates="details")
    # Clearing the reference deletes the location row (delete-orphan)
    location = relationship(
        "FeeLocation",
        cascade="all, delete-orphan",
        single_parent=True,
    )
