"""Account model - a checking, savings, investment, or liability account."""

from decimal import Decimal

from sqlalchemy import Boolean, Column, DateTime, Integer, Numeric, String, Text
from sqlalchemy.orm import relationship

from database import Base
from models.utils import generate_uuid, utcnow

LIABILITY_ACCOUNT_TYPES = frozenset({"credit_card", "loan", "mortgage"})


class Account(Base):
    """A user-owned financial account.

    ``balance`` is the cash balance for asset accounts and the amount owed
    for liability accounts (credit_card, loan, mortgage), always stored
    positive-as-owed. Investment accounts keep their uninvested cash in
    ``balance`` and their positions in ``holdings``.

    ``version`` is the optimistic-concurrency token: SQLAlchemy increments it
    on every UPDATE and raises ``StaleDataError`` when the row was changed by
    another writer since it was loaded.
    """

    __tablename__ = "accounts"

    id = Column(String(36), primary_key=True, default=generate_uuid)
    user_id = Column(String, nullable=False, index=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    institution = Column(String, nullable=True)
    balance = Column(Numeric(18, 2), nullable=False, default=Decimal("0"))
    interest_rate = Column(Numeric(7, 4), nullable=True)  # APR percent, e.g. 19.99
    is_active = Column(Boolean, default=True, nullable=False)
    notes = Column(Text, nullable=True)
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(
        DateTime,
        default=utcnow,
        onupdate=utcnow,
    )

    __mapper_args__ = {"version_id_col": version}

    # Relationships
    buckets = relationship(
        "SavingsBucket",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="SavingsBucket.created_at",
    )
    holdings = relationship(
        "Holding",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="Holding.symbol",
    )
    investment_transactions = relationship(
        "InvestmentTransaction",
        back_populates="account",
        cascade="all, delete-orphan",
    )

    @property
    def is_liability(self) -> bool:
        return self.account_type in LIABILITY_ACCOUNT_TYPES

    def touch(self) -> None:
        """Mark the row dirty so a child-only change still bumps ``version``."""
        self.updated_at = utcnow()
