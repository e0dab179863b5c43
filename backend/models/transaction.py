"""Transaction model - a cash-ledger entry (income, expense, payment, transfer)."""

from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class Transaction(Base):
    """A cash movement recorded against an account.

    ``payment`` and ``transfer`` transactions also reference a target
    account. Balance and budget side effects are applied by
    TransactionService when the record is created, updated or deleted.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=False, index=True)
    account_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    target_account_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="SET NULL"), nullable=True
    )
    budget_id = Column(
        String(36), ForeignKey("budgets.id", ondelete="SET NULL"), nullable=True, index=True
    )
    type = Column(String, nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    # Deltas applied to the source and target balances when the entry was
    # recorded; reversal undoes these rather than recomputing them.
    source_delta = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    target_delta = Column(Numeric(18, 2), nullable=True)
    description = Column(String, nullable=False, default="")
    category = Column(String, nullable=True)
    date = Column(DateTime, nullable=False, default=utcnow, index=True)
    is_recurring = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    # Relationships
    account = relationship("Account", foreign_keys=[account_id])
    target_account = relationship("Account", foreign_keys=[target_account_id])
    budget = relationship("Budget")
