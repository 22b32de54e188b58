"""In-memory cache with no expiration."""

from typing import Generic, TypeVar

K = TypeVar("K")
V = TypeVar("V")


class MemoryCache(Generic[K, V]):
    """Dictionary-backed cache.

    Used for per-query suggestion caches that live as long as their
    suggestion source.

    Example:
        >>> cache = MemoryCache[str, list]()
        >>> cache.set("ali", ["alice"])
        >>> cache.get("ali")
        ['alice']
    """

    def __init__(self) -> None:
        self._data: dict[K, V] = {}

    def get(self, key: K) -> V | None:
        return self._data.get(key)

    def set(self, key: K, value: V) -> None:
        self._data[key] = value

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
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data
