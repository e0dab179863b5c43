"""Holding model - a stock or crypto position inside an investment account."""

from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class Holding(Base):
    """A position in one symbol, made up of one or more purchase lots.

    A holding exists only while it has at least one open lot; the
    investment service deletes it when its last lot is disposed.
    """

    __tablename__ = "holdings"
    __table_args__ = (
        UniqueConstraint("account_id", "symbol", name="uix_holding_account_symbol"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    symbol = Column(String, nullable=False)  # Always uppercase
    name = Column(String, nullable=True)
    asset_kind = Column(String, nullable=False, default="stock")  # "stock" | "crypto"
    current_price = Column(Numeric(18, 8), nullable=False, default=Decimal("0"))
    last_updated = Column(DateTime, default=utcnow)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    account = relationship("Account", back_populates="holdings")
    lots = relationship(
        "HoldingLot",
        back_populates="holding",
        cascade="all, delete-orphan",
        order_by="HoldingLot.position",
    )

    @property
    def total_quantity(self) -> Decimal:
        return sum((lot.quantity for lot in self.lots), Decimal("0"))

    @property
    def total_cost_basis(self) -> Decimal:
        return sum((lot.quantity * lot.unit_price for lot in self.lots), Decimal("0"))
