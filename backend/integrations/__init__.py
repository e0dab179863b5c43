"""Market data integrations.

This package contains:
- Market data protocol: Quote and symbol-search interface for price sources
- Yahoo Finance client: stock quotes and search via yfinance
- CoinGecko client: crypto quotes and search over HTTP
"""

from integrations.market_data_protocol import Quote, QuoteProvider, SymbolMatch

__all__ = [
    "Quote",
    "QuoteProvider",
    "SymbolMatch",
]
