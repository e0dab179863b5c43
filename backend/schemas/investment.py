"""Pydantic schemas for investment accounts, holdings and lots."""

from datetime import date as date_type
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AssetKind(str, Enum):
    stock = "stock"
    crypto = "crypto"


class InvestmentTransactionType(str, Enum):
    """Investment activity log types."""

    buy = "buy"
    sell = "sell"
    remove = "remove"
    dividend = "dividend"
    deposit = "deposit"
    withdrawal = "withdrawal"


class CashTransactionType(str, Enum):
    """Activity types that may be posted directly (they only move cash)."""

    dividend = "dividend"
    deposit = "deposit"
    withdrawal = "withdrawal"


class BuyRequest(BaseModel):
    """Buy into a holding: creates it if needed, then appends one lot."""

    symbol: str = Field(min_length=1)
    name: Optional[str] = None
    asset_kind: AssetKind = AssetKind.stock
    quantity: Decimal = Field(gt=0, decimal_places=8)
    price: Decimal = Field(ge=0, decimal_places=8)
    date: date_type = Field(default_factory=date_type.today)
    notes: Optional[str] = None


class LotCreate(BaseModel):
    """Schema for adding a lot to an existing holding."""

    quantity: Decimal = Field(gt=0, decimal_places=8)
    price: Decimal = Field(ge=0, decimal_places=8)
    date: date_type = Field(default_factory=date_type.today)
    notes: Optional[str] = None


class LotUpdate(BaseModel):
    """Schema for correcting a lot. A quantity of 0 is rejected; delete the lot instead."""

    quantity: Optional[Decimal] = Field(default=None, gt=0, decimal_places=8)
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=8)
    date: Optional[date_type] = None
    notes: Optional[str] = None


class SellRequest(BaseModel):
    """Sell part or all of a holding at ``price`` (FIFO across lots)."""

    quantity: Decimal = Field(gt=0, decimal_places=8)
    price: Decimal = Field(gt=0, decimal_places=8)
    date: Optional[datetime] = None
    notes: Optional[str] = None


class RemoveRequest(BaseModel):
    """Remove a holding (or ``quantity`` of it) without proceeds."""

    quantity: Optional[Decimal] = Field(default=None, gt=0, decimal_places=8)
    reason: Optional[str] = None


class CashUpdate(BaseModel):
    """Set an investment account's cash balance."""

    cash: Decimal = Field(ge=0, decimal_places=2)


class InvestmentTransactionCreate(BaseModel):
    """Post a dividend, deposit or withdrawal."""

    type: CashTransactionType
    amount: Decimal = Field(gt=0, decimal_places=2)
    symbol: Optional[str] = None
    date: Optional[datetime] = None
    notes: Optional[str] = None


class LotResponse(BaseModel):
    """Schema for HoldingLot API response."""

    id: str
    quantity: Decimal
    unit_price: Decimal
    purchase_date: date_type
    notes: Optional[str] = None
    cost_basis: Decimal

    model_config = ConfigDict(from_attributes=True)


class HoldingResponse(BaseModel):
    """Schema for Holding API response with computed valuation fields."""

    id: str
    symbol: str
    name: Optional[str] = None
    asset_kind: str
    current_price: Decimal
    last_updated: Optional[datetime] = None
    total_quantity: Decimal
    average_cost: Optional[Decimal] = None
    total_cost_basis: Decimal
    market_value: Decimal
    unrealized_gain_loss: Decimal
    lots: list[LotResponse] = []


class InvestmentTransactionResponse(BaseModel):
    """Schema for InvestmentTransaction API response."""

    id: str
    account_id: str
    type: str
    symbol: Optional[str] = None
    name: Optional[str] = None
    quantity: Optional[Decimal] = None
    price: Optional[Decimal] = None
    amount: Decimal
    date: datetime
    notes: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class LotConsumptionResponse(BaseModel):
    lot_id: str
    quantity: Decimal
    remaining: Decimal


class DisposalResponse(BaseModel):
    """Result of a sell or remove."""

    transaction: InvestmentTransactionResponse
    holding: Optional[HoldingResponse] = None  # None when the holding was emptied
    consumed: list[LotConsumptionResponse] = []
    cash: Decimal


class InvestmentAccountResponse(BaseModel):
    """An investment account with its holdings and portfolio totals."""

    id: str
    name: str
    account_type: str
    institution: Optional[str] = None
    cash: Decimal
    version: int
    holdings: list[HoldingResponse]
    holdings_value: Decimal
    total_cost_basis: Decimal
    unrealized_gain_loss: Decimal
    total_value: Decimal
