"""Price lookup with bounded retries, a TTL memo and offline fallbacks.

Lookup order for ``get_price``:
1. Fresh memo entry (quotes live for PRICE_QUOTE_TTL_SECONDS).
2. The provider for the asset kind, retried on transient errors with
   linear backoff.
3. A static table of approximate reference prices.
4. A synthetic price derived from the symbol's hash.

Upstream failures never reach the caller; they are logged and masked by
the fallback chain. Only live quotes are memoised.
"""

import hashlib
import logging
import time
from decimal import Decimal
from typing import Callable, Optional, TypeVar

from config import settings
from integrations.exceptions import MarketDataError, UpstreamUnavailableError
from integrations.market_data_protocol import Quote, QuoteProvider, SymbolMatch
from utils.ttl_cache import TTLCache

T = TypeVar("T")
logger = logging.getLogger(__name__)

ASSET_KINDS = ("stock", "crypto")

# Approximate reference prices used when the live source is unavailable.
REFERENCE_STOCK_PRICES: dict[str, Decimal] = {
    "AAPL": Decimal("202.38"),
    "MSFT": Decimal("415.50"),
    "GOOGL": Decimal("173.41"),
    "AMZN": Decimal("178.25"),
    "TSLA": Decimal("215.32"),
    "META": Decimal("472.14"),
    "NVDA": Decimal("116.64"),
    "BRK.B": Decimal("408.98"),
    "JPM": Decimal("198.73"),
    "V": Decimal("275.96"),
}

REFERENCE_CRYPTO_PRICES: dict[str, Decimal] = {
    "BTC": Decimal("119000"),
    "ETH": Decimal("8500"),
    "SOL": Decimal("450"),
    "ADA": Decimal("2.5"),
    "DOT": Decimal("35"),
    "AVAX": Decimal("120"),
    "MATIC": Decimal("5.2"),
    "LINK": Decimal("60"),
    "XRP": Decimal("3.2"),
    "DOGE": Decimal("0.45"),
    "SHIB": Decimal("0.0005"),
    "UNI": Decimal("25"),
    "ATOM": Decimal("42"),
    "LTC": Decimal("280"),
    "XLM": Decimal("0.85"),
}

FALLBACK_STOCK_SEARCH: list[SymbolMatch] = [
    SymbolMatch("AAPL", "Apple Inc.", "NASDAQ"),
    SymbolMatch("MSFT", "Microsoft Corporation", "NASDAQ"),
    SymbolMatch("GOOGL", "Alphabet Inc.", "NASDAQ"),
    SymbolMatch("AMZN", "Amazon.com Inc.", "NASDAQ"),
    SymbolMatch("TSLA", "Tesla, Inc.", "NASDAQ"),
    SymbolMatch("META", "Meta Platforms, Inc.", "NASDAQ"),
    SymbolMatch("NVDA", "NVIDIA Corporation", "NASDAQ"),
    SymbolMatch("BRK.B", "Berkshire Hathaway Inc.", "NYSE"),
    SymbolMatch("JPM", "JPMorgan Chase & Co.", "NYSE"),
    SymbolMatch("V", "Visa Inc.", "NYSE"),
    SymbolMatch("VOO", "Vanguard S&P 500 ETF", "NYSE ARCA"),
    SymbolMatch("VTI", "Vanguard Total Stock Market ETF", "NYSE ARCA"),
    SymbolMatch("QQQ", "Invesco QQQ Trust", "NASDAQ"),
    SymbolMatch("SPY", "SPDR S&P 500 ETF Trust", "NYSE ARCA"),
    SymbolMatch("VEA", "Vanguard FTSE Developed Markets ETF", "NYSE ARCA"),
]

FALLBACK_CRYPTO_SEARCH: list[SymbolMatch] = [
    SymbolMatch("BTC", "Bitcoin"),
    SymbolMatch("ETH", "Ethereum"),
    SymbolMatch("SOL", "Solana"),
    SymbolMatch("ADA", "Cardano"),
    SymbolMatch("DOT", "Polkadot"),
    SymbolMatch("AVAX", "Avalanche"),
    SymbolMatch("MATIC", "Polygon"),
    SymbolMatch("LINK", "Chainlink"),
    SymbolMatch("XRP", "Ripple"),
    SymbolMatch("DOGE", "Dogecoin"),
    SymbolMatch("SHIB", "Shiba Inu"),
    SymbolMatch("UNI", "Uniswap"),
    SymbolMatch("ATOM", "Cosmos"),
    SymbolMatch("LTC", "Litecoin"),
    SymbolMatch("XLM", "Stellar"),
    SymbolMatch("ALGO", "Algorand"),
    SymbolMatch("FIL", "Filecoin"),
    SymbolMatch("NEAR", "NEAR Protocol"),
    SymbolMatch("ICP", "Internet Computer"),
    SymbolMatch("VET", "VeChain"),
]


def _hash_fraction(symbol: str) -> Decimal:
    """Stable value in [0, 1) derived from the symbol."""
    digest = hashlib.sha256(symbol.encode()).hexdigest()[:8]
    return Decimal(int(digest, 16)) / Decimal(16**8)


def synthetic_price(symbol: str, asset_kind: str) -> Decimal:
    """Deterministic stand-in price for a symbol no source knows.

    Stocks land in ``[0.5, 1.5) * (10 + 15 * len(symbol))``; crypto in
    ``[0.01, 100.01)``. The same symbol always gets the same price.
    """
    fraction = _hash_fraction(symbol)
    if asset_kind == "crypto":
        price = Decimal("0.01") + fraction * Decimal("100")
        return price.quantize(Decimal("0.0001"))
    base = Decimal(10 + 15 * len(symbol))
    return (base * (Decimal("0.5") + fraction)).quantize(Decimal("0.01"))


def fallback_quote(symbol: str, asset_kind: str) -> Quote:
    """Reference-table price, or a synthetic one for unknown symbols."""
    table = REFERENCE_CRYPTO_PRICES if asset_kind == "crypto" else REFERENCE_STOCK_PRICES
    if symbol in table:
        return Quote(symbol=symbol, price=table[symbol], source="reference")
    return Quote(symbol=symbol, price=synthetic_price(symbol, asset_kind), source="synthetic")


def fallback_search(query: str, asset_kind: str) -> list[SymbolMatch]:
    """Substring match over the static symbol list."""
    needle = query.strip().lower()
    candidates = FALLBACK_CRYPTO_SEARCH if asset_kind == "crypto" else FALLBACK_STOCK_SEARCH
    return [
        m for m in candidates
        if needle in m.symbol.lower() or needle in m.name.lower()
    ]


class PriceService:
    """Best-effort quote and symbol-search lookups.

    Providers, memos, retry policy, sleep and clock are all injectable
    so the service can be exercised without network or wall-clock time.
    """

    def __init__(
        self,
        stock_provider: Optional[QuoteProvider] = None,
        crypto_provider: Optional[QuoteProvider] = None,
        quote_cache: Optional[TTLCache] = None,
        search_cache: Optional[TTLCache] = None,
        retries: Optional[int] = None,
        backoff_seconds: Optional[float] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Optional[Callable[[], float]] = None,
    ):
        """Initialize with optional collaborators for dependency injection.

        Args:
            stock_provider: Equity quote provider. If None, a
                YahooFinanceClient is created on first use.
            crypto_provider: Crypto quote provider. If None, a
                CoinGeckoClient is created on first use.
            quote_cache: Memo for quotes (default TTL from settings).
            search_cache: Memo for search results (default TTL from settings).
            retries: Extra attempts after the first (default from settings).
            backoff_seconds: Delay unit; attempt N waits ``N * backoff``.
            sleep: Sleep function used between attempts.
            clock: Time source for the default memos.
        """
        self._stock_provider = stock_provider
        self._crypto_provider = crypto_provider
        if quote_cache is None:
            quote_cache = TTLCache(settings.PRICE_QUOTE_TTL_SECONDS, clock=clock)
        if search_cache is None:
            search_cache = TTLCache(settings.PRICE_SEARCH_TTL_SECONDS, clock=clock)
        self.quote_cache = quote_cache
        self.search_cache = search_cache
        self.retries = settings.PRICE_FETCH_RETRIES if retries is None else retries
        self.backoff_seconds = (
            settings.PRICE_FETCH_BACKOFF_SECONDS if backoff_seconds is None else backoff_seconds
        )
        self._sleep = sleep

    @property
    def stock_provider(self) -> QuoteProvider:
        """Get the equity provider, creating if not provided."""
        if self._stock_provider is None:
            from integrations.yahoo_finance_client import YahooFinanceClient

            self._stock_provider = YahooFinanceClient(timeout=settings.PRICE_FETCH_TIMEOUT_SECONDS)
        return self._stock_provider

    @property
    def crypto_provider(self) -> QuoteProvider:
        """Get the crypto provider, creating if not provided."""
        if self._crypto_provider is None:
            from integrations.coingecko_client import CoinGeckoClient

            self._crypto_provider = CoinGeckoClient(
                api_key=settings.COINGECKO_API_KEY or None,
                timeout=settings.PRICE_FETCH_TIMEOUT_SECONDS,
            )
        return self._crypto_provider

    def provider_for(self, asset_kind: str) -> QuoteProvider:
        if asset_kind not in ASSET_KINDS:
            raise ValueError(f"Unknown asset kind: {asset_kind!r}")
        return self.crypto_provider if asset_kind == "crypto" else self.stock_provider

    def _call_with_retry(self, provider: QuoteProvider, description: str, fn: Callable[[], T]) -> T:
        """Call ``fn`` up to ``retries + 1`` times.

        Non-retriable errors (bad symbol, 4xx) stop immediately.

        Raises:
            UpstreamUnavailableError: every attempt failed.
        """
        attempts = self.retries + 1
        last_exc: Optional[MarketDataError] = None
        for attempt in range(1, attempts + 1):
            try:
                return fn()
            except MarketDataError as e:
                last_exc = e
                if not e.retriable or attempt == attempts:
                    break
                delay = self.backoff_seconds * attempt
                logger.warning(
                    "%s: %s failed (%s), retrying in %.1fs (attempt %d/%d)",
                    provider.provider_name, description, e, delay, attempt, attempts,
                )
                self._sleep(delay)

        raise UpstreamUnavailableError(
            f"{provider.provider_name}: {description} failed: {last_exc}",
            provider_name=provider.provider_name,
            attempts=attempt,
        ) from last_exc

    def get_price(self, symbol: str, asset_kind: str = "stock") -> Quote:
        """Current price for ``symbol``; never raises for upstream failures."""
        symbol = symbol.strip().upper()
        key = f"{asset_kind}:{symbol}"

        cached = self.quote_cache.get(key)
        if cached is not None:
            return cached

        provider = self.provider_for(asset_kind)
        try:
            quote = self._call_with_retry(
                provider, f"quote {symbol}", lambda: provider.get_quote(symbol)
            )
        except UpstreamUnavailableError as e:
            quote = fallback_quote(symbol, asset_kind)
            logger.warning(
                "Price source unavailable for %s (%s); using %s price %s",
                symbol, e, quote.source, quote.price,
            )
            return quote

        self.quote_cache.set(key, quote)
        return quote

    def search(self, query: str, asset_kind: str = "stock") -> list[SymbolMatch]:
        """Symbol search; falls back to a static list when the source fails or finds nothing."""
        key = f"{asset_kind}:{query.strip().lower()}"

        cached = self.search_cache.get(key)
        if cached is not None:
            return cached

        provider = self.provider_for(asset_kind)
        try:
            results = self._call_with_retry(
                provider, f"search {query!r}", lambda: provider.search(query)
            )
        except UpstreamUnavailableError as e:
            logger.warning("Symbol search unavailable for %r (%s); using fallback list", query, e)
            return fallback_search(query, asset_kind)

        if not results:
            return fallback_search(query, asset_kind)

        self.search_cache.set(key, results)
        return results
