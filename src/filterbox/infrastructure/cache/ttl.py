"""TTL (Time-To-Live) cache implementation.

Entries expire ``ttl`` seconds after they were written. The clock is
injectable so expiry can be tested without sleeping.
"""

import time
from typing import Callable, Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class TTLCache(Generic[K, V]):
    """TTL-based cache implementation.

    Expired entries are dropped lazily on read.

    Example:
        >>> cache = TTLCache[str, int](ttl=60.0)
        >>> cache.set("key1", 42)
        >>> cache.get("key1")
        42
    """

    def __init__(self, ttl: float = 60.0, clock: Callable[[], float] = time.monotonic) -> None:
        """Initialize a TTL cache.

        Args:
            ttl: Time-to-live in seconds. Default is 60 seconds.
            clock: Source of the current time in seconds.
        """
        self._data: dict[K, tuple[V, float]] = {}  # (value, expiration_time)
        self.ttl = ttl
        self._clock = clock

    def _cleanup_expired(self) -> None:
        now = self._clock()
        expired_keys = [key for key, (_, expires_at) in self._data.items() if now >= expires_at]
        for key in expired_keys:
            del self._data[key]

    def get(self, key: K) -> V | None:
        """Return the cached value if present and not expired, None otherwise."""
        entry = self._data.get(key)
        if entry is None:
            return None

        value, expires_at = entry
        if self._clock() >= expires_at:
            del self._data[key]
            return None

        return value

    def set(self, key: K, value: V) -> None:
        self._data[key] = (value, self._clock() + self.ttl)

    def clear(self, key: K | None = None) -> None:
        """
        Clear cache entries.

        Args:
            key: If provided, clear only this key. If None, clear all entries.
        """
        if key is None:
            self._data.clear()
        else:
            self._data.pop(key, None)

    def __len__(self) -> int:
        """Return the number of cached entries (excluding expired ones)."""
        self._cleanup_expired()
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return self.get(key) is not None  # type: ignore[arg-type]
