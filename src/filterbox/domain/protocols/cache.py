"""Cache protocol."""

from typing import Protocol, TypeVar

__all__ = ["Cache", "K", "V"]

K = TypeVar("K")
V = TypeVar("V")


class Cache(Protocol[K, V]):
    """Protocol for the key/value caches used by suggestion sources.

    Type Parameters:
        K: The key type
        V: The value type
    """

    def get(self, key: K) -> V | None:
        """Return the cached value, or None when missing or expired."""
        ...

    def set(self, key: K, value: V) -> None:
        ...

    def clear(self, key: K | None = None) -> None:
        """Clear one key, or every entry when ``key`` is None."""
        ...

    def __contains__(self, key: object) -> bool:
        ...

    def __len__(self) -> int:
        ...
