"""Pydantic schemas for manually valued assets."""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class AssetCategory(str, Enum):
    real_estate = "real_estate"
    watches = "watches"
    vehicles = "vehicles"
    art = "art"
    jewelry = "jewelry"
    other = "other"


class AssetCreate(BaseModel):
    """Schema for recording an asset. ``value`` is the item's total value."""

    category: AssetCategory
    name: str = Field(min_length=1)
    quantity: Decimal = Field(default=Decimal("1"), gt=0, decimal_places=8)
    value: Decimal = Field(ge=0, decimal_places=2)
    symbol: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=8)


class AssetUpdate(BaseModel):
    """Schema for revaluing or editing an asset. Unset fields are kept."""

    category: Optional[AssetCategory] = None
    name: Optional[str] = Field(default=None, min_length=1)
    quantity: Optional[Decimal] = Field(default=None, gt=0, decimal_places=8)
    value: Optional[Decimal] = Field(default=None, ge=0, decimal_places=2)
    symbol: Optional[str] = None
    price: Optional[Decimal] = Field(default=None, ge=0, decimal_places=8)


class AssetResponse(BaseModel):
    """Schema for Asset API response."""

    id: str
    category: str
    name: str
    quantity: Decimal
    value: Decimal
    symbol: Optional[str] = None
    price: Optional[Decimal] = None
    date_added: datetime
    last_updated: datetime

    model_config = ConfigDict(from_attributes=True)
