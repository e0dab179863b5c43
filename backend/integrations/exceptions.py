"""Typed exception hierarchy for market-data provider errors.

Provides structured exceptions so the price service can tell transient
failures (worth a retry) from permanent ones (fall back immediately).
"""


class MarketDataError(Exception):
    """Base exception for all market-data errors.

    Carries the provider name so callers can identify which provider failed.
    """

    def __init__(self, message: str, provider_name: str = ""):
        self.provider_name = provider_name
        super().__init__(message)

    @property
    def retriable(self) -> bool:
        return False


class MarketDataConnectionError(MarketDataError):
    """Network failures — timeouts, DNS resolution, connection refused.

    Retriable by default.
    """

    def __init__(self, message: str, provider_name: str = "", retriable: bool = True):
        self._retriable = retriable
        super().__init__(message, provider_name)

    @property
    def retriable(self) -> bool:
        return self._retriable


class MarketDataAPIError(MarketDataError):
    """HTTP 4xx/5xx responses from the provider API."""

    def __init__(
        self,
        message: str,
        provider_name: str = "",
        status_code: int | None = None,
    ):
        self.status_code = status_code
        super().__init__(message, provider_name)

    @property
    def retriable(self) -> bool:
        """429 (rate limit) and 5xx errors are generally retriable."""
        if self.status_code is None:
            return False
        return self.status_code == 429 or self.status_code >= 500


class MarketDataParseError(MarketDataError):
    """Malformed response, or no price for the requested symbol."""

    pass


class UpstreamUnavailableError(MarketDataError):
    """Every attempt against the provider failed.

    Raised by the price service after its retries are exhausted and
    absorbed there by the fallback chain; never surfaced to API callers.
    """

    def __init__(self, message: str, provider_name: str = "", attempts: int = 0):
        self.attempts = attempts
        super().__init__(message, provider_name)
