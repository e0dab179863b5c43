"""Pydantic schemas for cash-ledger transactions."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from schemas.budget import BudgetCategory


class TransactionType(str, Enum):
    """Cash-ledger transaction types."""

    income = "income"
    expense = "expense"
    payment = "payment"
    transfer = "transfer"


class TransactionCreate(BaseModel):
    """Schema for recording a transaction.

    ``target_account_id`` is required for payment and transfer.
    """

    account_id: str
    type: TransactionType
    amount: Decimal = Field(gt=0, decimal_places=2)
    target_account_id: Optional[str] = None
    budget_id: Optional[str] = None
    description: str = ""
    category: Optional[BudgetCategory] = None
    date: Optional[datetime] = None
    is_recurring: bool = False


class TransactionUpdate(BaseModel):
    """Schema for updating a transaction.

    Unset fields keep their current value. Changing amount, type or
    accounts re-computes the balance and budget effects.
    """

    account_id: Optional[str] = None
    type: Optional[TransactionType] = None
    amount: Optional[Decimal] = Field(default=None, gt=0, decimal_places=2)
    target_account_id: Optional[str] = None
    budget_id: Optional[str] = None
    description: Optional[str] = None
    category: Optional[BudgetCategory] = None
    date: Optional[datetime] = None
    is_recurring: Optional[bool] = None


class TransactionResponse(BaseModel):
    """Schema for Transaction API response."""

    id: str
    account_id: str
    target_account_id: Optional[str] = None
    budget_id: Optional[str] = None
    type: str
    amount: Decimal
    description: str
    category: Optional[str] = None
    date: datetime
    is_recurring: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class Pagination(BaseModel):
    total: int
    limit: int
    skip: int
    has_more: bool


class TransactionListResponse(BaseModel):
    """A page of transactions, newest first."""

    transactions: list[TransactionResponse]
    pagination: Pagination
