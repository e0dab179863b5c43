"""CoinGecko market data provider for cryptocurrency prices."""

import logging
from decimal import Decimal, InvalidOperation
from typing import Optional

import httpx

from integrations.exceptions import (
    MarketDataAPIError,
    MarketDataConnectionError,
    MarketDataParseError,
)
from integrations.market_data_protocol import Quote, SymbolMatch

logger = logging.getLogger(__name__)

# Hardcoded mapping for the most common crypto symbols.
# Covers the vast majority of real portfolios without an API call.
_KNOWN_COIN_IDS: dict[str, str] = {
    "BTC": "bitcoin",
    "ETH": "ethereum",
    "SOL": "solana",
    "ADA": "cardano",
    "DOT": "polkadot",
    "AVAX": "avalanche-2",
    "MATIC": "matic-network",
    "POL": "matic-network",
    "LINK": "chainlink",
    "XRP": "ripple",
    "DOGE": "dogecoin",
    "SHIB": "shiba-inu",
    "UNI": "uniswap",
    "ATOM": "cosmos",
    "LTC": "litecoin",
    "XLM": "stellar",
    "ALGO": "algorand",
    "FIL": "filecoin",
    "NEAR": "near",
    "ICP": "internet-computer",
    "VET": "vechain",
}

BASE_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoClient:
    """Quote provider using the CoinGecko API for crypto prices."""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        """Initialize with optional API key.

        Args:
            api_key: CoinGecko demo API key. If provided, uses the
                     x-cg-demo-api-key header for higher rate limits.
                     If None, uses the keyless public API.
            timeout: Per-request timeout in seconds.
        """
        headers: dict[str, str] = {}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._client = httpx.Client(
            base_url=BASE_URL,
            headers=headers,
            timeout=timeout,
        )
        self._resolved_ids: dict[str, str] = dict(_KNOWN_COIN_IDS)

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._client.close()

    @property
    def provider_name(self) -> str:
        return "coingecko"

    def _get_json(self, path: str, params: dict) -> dict:
        """GET ``path`` and decode JSON, translating httpx failures."""
        try:
            response = self._client.get(path, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise MarketDataAPIError(
                f"CoinGecko {path} returned {e.response.status_code}",
                provider_name=self.provider_name,
                status_code=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise MarketDataConnectionError(
                f"CoinGecko {path} unreachable: {e}",
                provider_name=self.provider_name,
            ) from e

        try:
            data = response.json()
        except ValueError as e:
            raise MarketDataParseError(
                f"CoinGecko {path} returned invalid JSON",
                provider_name=self.provider_name,
            ) from e
        if not isinstance(data, dict):
            raise MarketDataParseError(
                f"CoinGecko {path} returned {type(data).__name__}, expected an object",
                provider_name=self.provider_name,
            )
        return data

    def _resolve_coin_id(self, symbol: str) -> str:
        """Resolve a ticker symbol to a CoinGecko coin ID.

        Checks the cached mapping first, then falls back to the
        /search endpoint, picking the exact symbol match with the best
        (lowest) market_cap_rank.
        """
        upper = symbol.upper()
        if upper in self._resolved_ids:
            return self._resolved_ids[upper]

        data = self._get_json("/search", {"query": symbol})
        best = None
        for coin in data.get("coins", []):
            if coin.get("symbol", "").upper() != upper:
                continue
            rank = coin.get("market_cap_rank")
            if best is None:
                best = coin
            elif rank is not None and rank < (best.get("market_cap_rank") or float("inf")):
                best = coin

        if best is None:
            raise MarketDataParseError(
                f"CoinGecko: no coin matches symbol {symbol}",
                provider_name=self.provider_name,
            )

        coin_id = best["id"]
        self._resolved_ids[upper] = coin_id
        logger.info("CoinGecko: resolved %s -> %s", symbol, coin_id)
        return coin_id

    def get_quote(self, symbol: str) -> Quote:
        """Fetch the current USD price from ``/simple/price``.

        The response is shaped ``{coin_id: {"usd": price}}``.
        """
        coin_id = self._resolve_coin_id(symbol)
        data = self._get_json("/simple/price", {"ids": coin_id, "vs_currencies": "usd"})

        entry = data.get(coin_id)
        price = entry.get("usd") if isinstance(entry, dict) else None
        if price is None:
            raise MarketDataParseError(
                f"CoinGecko: no price data returned for {coin_id}",
                provider_name=self.provider_name,
            )
        try:
            value = Decimal(str(price))
        except InvalidOperation:
            value = None
        if value is None or not value.is_finite():
            raise MarketDataParseError(
                f"CoinGecko: unreadable price {price!r} for {coin_id}",
                provider_name=self.provider_name,
            )

        return Quote(
            symbol=symbol.upper(),
            price=value,
            source=self.provider_name,
        )

    def search(self, query: str) -> list[SymbolMatch]:
        """Search coins by name or symbol via ``/search``."""
        data = self._get_json("/search", {"query": query})
        return [
            SymbolMatch(
                symbol=coin.get("symbol", "").upper(),
                name=coin.get("name", ""),
                image=coin.get("thumb"),
            )
            for coin in data.get("coins", [])
            if coin.get("symbol")
        ]
