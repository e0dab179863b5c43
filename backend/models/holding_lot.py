"""HoldingLot model - a single purchase batch of a holding."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class HoldingLot(Base):
    """A lot representing one purchase of a holding.

    Lots are immutable once created except for quantity reduction on
    disposal (and explicit user edits). ``position`` records insertion
    order so FIFO ties on ``purchase_date`` resolve oldest-inserted first.
    """

    __tablename__ = "holding_lots"
    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_holding_lot_unit_price_non_negative"),
        CheckConstraint("quantity >= 0", name="ck_holding_lot_quantity_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    holding_id = Column(
        String(36), ForeignKey("holdings.id", ondelete="CASCADE"), nullable=False, index=True
    )
    quantity = Column(Numeric(18, 8), nullable=False)
    unit_price = Column(Numeric(18, 8), nullable=False, default=Decimal("0"))
    purchase_date = Column(Date, nullable=False)
    notes = Column(Text, nullable=True)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    holding = relationship("Holding", back_populates="lots")
