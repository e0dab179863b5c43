"""Yahoo Finance market data provider implementation."""

import logging
from decimal import Decimal

import yfinance as yf

from integrations.exceptions import MarketDataConnectionError, MarketDataParseError
from integrations.market_data_protocol import Quote, SymbolMatch

logger = logging.getLogger(__name__)

_SEARCHABLE_QUOTE_TYPES = {"EQUITY", "ETF"}


class YahooFinanceClient:
    """Quote provider using Yahoo Finance (yfinance library).

    Handles equities and ETFs. Crypto symbols are routed to CoinGecko
    by the PriceService.
    """

    def __init__(self, timeout: float = 10.0):
        self._timeout = timeout

    @property
    def provider_name(self) -> str:
        return "yahoo"

    def get_quote(self, symbol: str) -> Quote:
        """Latest close from a short daily history window.

        A 5-day window covers weekends and market holidays.
        """
        try:
            df = yf.Ticker(symbol).history(period="5d", timeout=self._timeout)
        except Exception as e:
            raise MarketDataConnectionError(
                f"yfinance history failed for {symbol}: {e}",
                provider_name=self.provider_name,
            ) from e

        if df is None or df.empty or "Close" not in df.columns:
            raise MarketDataParseError(
                f"Yahoo Finance: no price data for {symbol}",
                provider_name=self.provider_name,
            )

        closes = df["Close"].dropna()
        if closes.empty:
            raise MarketDataParseError(
                f"Yahoo Finance: no closing prices for {symbol}",
                provider_name=self.provider_name,
            )

        return Quote(
            symbol=symbol.upper(),
            price=Decimal(str(round(float(closes.iloc[-1]), 6))),
            source=self.provider_name,
        )

    def search(self, query: str) -> list[SymbolMatch]:
        """Search equities and ETFs by ticker or company name."""
        try:
            quotes = yf.Search(query, max_results=10, news_count=0).quotes
        except Exception as e:
            raise MarketDataConnectionError(
                f"yfinance search failed for {query!r}: {e}",
                provider_name=self.provider_name,
            ) from e

        results = []
        for quote in quotes or []:
            if quote.get("quoteType") not in _SEARCHABLE_QUOTE_TYPES:
                continue
            results.append(
                SymbolMatch(
                    symbol=quote.get("symbol", ""),
                    name=quote.get("shortname") or quote.get("longname") or "",
                    exchange=quote.get("exchDisp") or quote.get("exchange"),
                )
            )
        return results
