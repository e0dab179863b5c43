"""Budget model - a spending target with a running spent accumulator."""

from datetime import date
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Column, Date, DateTime, Integer, Numeric, String

from database import Base
from models.utils import generate_uuid, utcnow


class Budget(Base):
    """A per-category budget for a period.

    ``spent`` is an accumulator maintained by TransactionService; it is not
    recomputed from the transaction log.
    """

    __tablename__ = "budgets"
    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_budget_amount_non_negative"),
        CheckConstraint("spent >= 0", name="ck_budget_spent_non_negative"),
    )

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    category = Column(String, nullable=False)
    amount = Column(Numeric(18, 2), nullable=False)
    spent = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    period = Column(String, nullable=False, default="monthly")  # weekly | monthly | yearly
    start_date = Column(Date, nullable=False, default=date.today)
    end_date = Column(Date, nullable=True)
    is_recurring = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    __mapper_args__ = {"version_id_col": version}

    @property
    def remaining(self) -> Decimal:
        return self.amount - self.spent
