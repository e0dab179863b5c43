"""InvestmentTransaction model - append-only activity log of an investment account."""

from decimal import Decimal

from sqlalchemy import Column, DateTime, ForeignKey, Numeric, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class InvestmentTransaction(Base):
    """A buy/sell/remove/dividend/deposit/withdrawal event.

    Records are created once and never mutated. ``amount`` is signed from
    the account's cash point of view for cash-moving types; ``cash_delta``
    stores exactly what was applied to the account balance so deletion can
    reverse it.
    """

    __tablename__ = "investment_transactions"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type = Column(String, nullable=False)  # buy, sell, remove, dividend, deposit, withdrawal
    symbol = Column(String, nullable=True)
    name = Column(String, nullable=True)
    quantity = Column(Numeric(18, 8), nullable=True)
    price = Column(Numeric(18, 8), nullable=True)
    amount = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    cash_delta = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    date = Column(DateTime, nullable=False, default=utcnow)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    account = relationship("Account", back_populates="investment_transactions")
