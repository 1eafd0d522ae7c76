from sqlalchemy import Column, DateTime, Enum, ForeignKey, Integer, String
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.core.database import Base
from marketplace.models.fee import RecordStatus
from marketplace.models.fee_detail import FeeSide


class FeeLocation(Base):
    """Geographic scope of one non-global fee detail. Lives and dies with that detail."""

    __tablename__ = "fee_locations"

    id = Column(Integer, primary_key=True, index=True)
    fee_id = Column(Integer, ForeignKey("fees.id"), nullable=False, index=True)
    side = Column(Enum(FeeSide), nullable=False)
    country_id = Column(Integer, ForeignKey("countries.id", ondelete="SET NULL"), nullable=True)
    state_id = Column(Integer, ForeignKey("states.id", ondelete="SET NULL"), nullable=True)
    city_id = Column(Integer, ForeignKey("cities.id", ondelete="SET NULL"), nullable=True)
    town = Column(String(255), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    country = relationship("Country")
    state = relationship("State")
    city = relationship("City")
