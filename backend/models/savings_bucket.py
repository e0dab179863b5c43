"""SavingsBucket model - a named sub-balance earmarked within an account."""

from decimal import Decimal

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow


class SavingsBucket(Base):
    """A named bucket (e.g. "Emergency fund") inside a savings account.

    Buckets are bookkeeping only: they do not change the account balance.
    """

    __tablename__ = "savings_buckets"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_savings_bucket_amount_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    account_id = Column(
        String(36), ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    name = Column(String, nullable=False)
    amount = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    goal = Column(Numeric(18, 2), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    account = relationship("Account", back_populates="buckets")
