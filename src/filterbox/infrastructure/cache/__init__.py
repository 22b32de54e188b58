"""Cache implementations for suggestion sources."""

from .memory import MemoryCache
from .ttl import TTLCache

__all__ = ["MemoryCache", "TTLCache"]
