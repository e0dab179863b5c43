"""Pydantic schemas for price lookup and symbol search."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class QuoteResponse(BaseModel):
    """Current price for a symbol.

    ``source`` is internal detail and deliberately not exposed: callers see
    the same shape whether the price is live or a fallback.
    """

    symbol: str
    price: Decimal
    currency: str
    as_of: datetime


class SymbolMatchResponse(BaseModel):
    symbol: str
    name: str
    exchange: Optional[str] = None
    image: Optional[str] = None
