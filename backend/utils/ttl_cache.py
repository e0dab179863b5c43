"""Small in-memory TTL memo with an injectable clock."""

from __future__ import annotations

import time
from dataclasses import dataclass
from threading import Lock
from typing import Callable, Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass
class _CacheItem(Generic[T]):
    value: T
    stored_at: float


class TTLCache(Generic[T]):
    """Thread-safe memo keyed by string.

    Entries are never evicted: a lookup past the TTL reports a miss and
    the caller overwrites the entry with a fresh value.

    Args:
        ttl_seconds: How long an entry counts as fresh.
        clock: Returns the current time in seconds. Defaults to
            ``time.monotonic``; tests pass a fake.
    """

    def __init__(self, ttl_seconds: float, clock: Optional[Callable[[], float]] = None) -> None:
        if ttl_seconds <= 0:
            raise ValueError(f"ttl_seconds must be positive, got {ttl_seconds}")
        self.ttl_seconds = ttl_seconds
        self._clock = clock or time.monotonic
        self._data: dict[str, _CacheItem[T]] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[T]:
        """Return the fresh value for ``key``, or None if absent or stale."""
        now = self._clock()
        with self._lock:
            item = self._data.get(key)
            if item is None or now - item.stored_at >= self.ttl_seconds:
                return None
            return item.value

    def set(self, key: str, value: T) -> None:
        with self._lock:
            self._data[key] = _CacheItem(value=value, stored_at=self._clock())

    def __contains__(self, key: str) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        """Number of stored entries, stale ones included."""
        with self._lock:
            return len(self._data)

    def clear(self) -> None:
        with self._lock:
            self._data.clear()
