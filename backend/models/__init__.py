"""SQLAlchemy ORM models."""

from .account import LIABILITY_ACCOUNT_TYPES, Account
from .asset import Asset
from .budget import Budget
from .holding import Holding
from .holding_lot import HoldingLot
from .investment_transaction import InvestmentTransaction
from .savings_bucket import SavingsBucket
from .transaction import Transaction
from .utils import generate_uuid

__all__ = ["Account", "Asset", "Budget", "Holding", "HoldingLot", "InvestmentTransaction", "LIABILITY_ACCOUNT_TYPES", "SavingsBucket", "Transaction", "generate_uuid"]
