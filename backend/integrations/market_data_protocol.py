"""Market data provider protocol definitions.

Defines the interface for quote providers (live prices and symbol
search). Stocks and crypto are served by different implementations;
PriceService routes between them by asset kind.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional, Protocol


@dataclass
class Quote:
    """A single price observation for a symbol."""

    symbol: str
    price: Decimal
    source: str  # e.g. "yahoo", "coingecko", "reference", "synthetic"
    currency: str = "usd"
    as_of: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class SymbolMatch:
    """One symbol-search hit."""

    symbol: str
    name: str
    exchange: Optional[str] = None
    image: Optional[str] = None


class QuoteProvider(Protocol):
    """Protocol for live-quote providers.

    Implementations raise ``integrations.exceptions.MarketDataError``
    subclasses on failure; retries and fallbacks are the caller's job.
    """

    @property
    def provider_name(self) -> str:
        """Return the provider name (e.g., 'yahoo')."""
        ...

    def get_quote(self, symbol: str) -> Quote:
        """Fetch the latest price for ``symbol`` (uppercase)."""
        ...

    def search(self, query: str) -> list[SymbolMatch]:
        """Find symbols matching ``query``. May return an empty list."""
        ...
