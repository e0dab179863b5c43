"""Pydantic schemas for accounts and savings buckets."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AccountType(str, Enum):
    """Valid account types. The last three are liabilities."""

    checking = "checking"
    savings = "savings"
    investment = "investment"
    retirement = "retirement"
    other = "other"
    credit_card = "credit_card"
    loan = "loan"
    mortgage = "mortgage"


class SavingsBucketCreate(BaseModel):
    """Schema for creating a savings bucket."""

    name: str = Field(min_length=1)
    amount: Decimal = Field(default=Decimal("0"), ge=0, decimal_places=2)
    goal: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)


class SavingsBucketUpdate(BaseModel):
    """Schema for updating a savings bucket."""

    name: Optional[str] = Field(default=None, min_length=1)
    amount: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    goal: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)


class SavingsBucketResponse(BaseModel):
    """Schema for SavingsBucket API response."""

    id: str
    account_id: str
    name: str
    amount: Decimal
    goal: Optional[Decimal] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AccountCreate(BaseModel):
    """Schema for creating an account.

    For liability accounts ``balance`` is the amount owed. It may go
    negative when an account is overpaid.
    """

    name: str = Field(min_length=1)
    account_type: AccountType
    institution: Optional[str] = None
    balance: Decimal = Field(default=Decimal("0"), decimal_places=2)
    interest_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    notes: Optional[str] = None


class AccountUpdate(BaseModel):
    """Schema for updating an account.

    ``balance`` here is a manual correction; transactions adjust it
    automatically.
    """

    name: Optional[str] = Field(default=None, min_length=1)
    account_type: Optional[AccountType] = None
    institution: Optional[str] = None
    balance: Optional[Decimal] = Field(default=None, decimal_places=2)
    interest_rate: Optional[Decimal] = Field(default=None, ge=0, le=100)
    is_active: Optional[bool] = None
    notes: Optional[str] = None


class AccountResponse(BaseModel):
    """Schema for Account API response."""

    id: str
    name: str
    account_type: str
    institution: Optional[str] = None
    balance: Decimal
    interest_rate: Optional[Decimal] = None
    is_active: bool
    is_liability: bool
    notes: Optional[str] = None
    version: int
    created_at: datetime
    updated_at: datetime
    buckets: list[SavingsBucketResponse] = []

    model_config = ConfigDict(from_attributes=True)


class NetWorthSummary(BaseModel):
    """Totals across a user's active accounts and manually valued assets.

    ``total_assets`` includes ``manual_assets``.
    """

    total_assets: Decimal
    total_liabilities: Decimal
    net_worth: Decimal
    manual_assets: Decimal
    account_count: int
    asset_count: int
    by_type: dict[str, Decimal]
