import enum

from sqlalchemy import Column, DateTime, Enum, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from marketplace.core.database import Base


class RecordStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    DELETE = "DELETE"


class FeeType(str, enum.Enum):
    GLOBAL = "GLOBAL"
    NONGLOBAL = "NONGLOBAL"


class Fee(Base):
    """Fee configuration bound to one marketplace menu; owns vendor/consumer detail pairs."""

    __tablename__ = "fees"
    __table_args__ = (
        # One live fee per menu; the service checks first so callers get a ConflictError
        Index(
            "uq_fees_menu_id_live",
            "menu_id",
            unique=True,
            postgresql_where=text("status <> 'DELETE'"),
            sqlite_where=text("status <> 'DELETE'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False, index=True)
    description = Column(Text, nullable=True)
    policy_id = Column(Integer, ForeignKey("policies.id", ondelete="SET NULL"), nullable=True, index=True)
    fee_type = Column(Enum(FeeType), default=FeeType.NONGLOBAL, nullable=False)
    menu_id = Column(Integer, ForeignKey("categories.id", ondelete="SET NULL"), nullable=True)
    status = Column(Enum(RecordStatus), default=RecordStatus.ACTIVE, nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    policy = relationship("Policy")
    menu = relationship("Category", foreign_keys=[menu_id])
    pairings = relationship("FeeToFeeDetail", back_populates="fee", order_by="FeeToFeeDetail.id")
    details = relationship("FeeDetail", back_populates="fee")
    category_links = relationship("FeeCategoryLink", back_populates="fee", order_by="FeeCategoryLink.id")
