"""Functions that build new suggestion sources out of existing ones."""

import asyncio
import time
from typing import Callable, Optional

from filterbox.domain.protocols import AutocompleteContext, Autocompleter
from filterbox.domain.types import AutocompleteItem
from filterbox.infrastructure.cache import TTLCache

from .base import BaseAutocompleter, WrappingAutocompleter, fetch_suggestions

__all__ = [
    "CombinedAutocompleter",
    "MappedAutocompleter",
    "CachedAutocompleter",
    "DebouncedAutocompleter",
    "combine_autocompleters",
    "map_autocompleter",
    "with_cache",
    "with_debounce",
]


class CombinedAutocompleter(BaseAutocompleter):
    """Queries every source concurrently and concatenates the results in source order."""

    def __init__(self, *sources: Autocompleter):
        self.sources = list(sources)

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        results = await asyncio.gather(*(fetch_suggestions(source, context) for source in self.sources))
        return [item for items in results for item in items]


class MappedAutocompleter(WrappingAutocompleter):
    """Applies ``transform`` to every suggestion of the wrapped source."""

    def __init__(self, inner: Autocompleter, transform: Callable[[AutocompleteItem], AutocompleteItem]):
        super().__init__(inner)
        self.transform = transform

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        return [self.transform(item) for item in await fetch_suggestions(self.inner, context)]


class CachedAutocompleter(WrappingAutocompleter):
    """Caches the wrapped source's answers per input text for ``ttl`` seconds."""

    def __init__(self, inner: Autocompleter, ttl: float, clock: Callable[[], float] = time.monotonic):
        super().__init__(inner)
        self.cache: TTLCache[str, list[AutocompleteItem]] = TTLCache(ttl=ttl, clock=clock)

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        cached = self.cache.get(context.input_value)
        if cached is not None:
            return list(cached)
        items = await fetch_suggestions(self.inner, context)
        self.cache.set(context.input_value, items)
        return list(items)


class DebouncedAutocompleter(WrappingAutocompleter):
    """Waits ``delay`` seconds of quiet before asking the wrapped source.

    A call superseded by a newer one inside the window resolves to an
    empty list instead of hitting the source.
    """

    def __init__(self, inner: Autocompleter, delay: float):
        super().__init__(inner)
        self.delay = delay
        self._generation = 0

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        self._generation += 1
        generation = self._generation
        await asyncio.sleep(self.delay)
        if generation != self._generation:
            return []
        return await fetch_suggestions(self.inner, context)


def combine_autocompleters(*sources: Autocompleter) -> CombinedAutocompleter:
    return CombinedAutocompleter(*sources)


def map_autocompleter(
    source: Autocompleter, transform: Callable[[AutocompleteItem], AutocompleteItem]
) -> MappedAutocompleter:
    return MappedAutocompleter(source, transform)


def with_cache(
    source: Autocompleter, ttl: float, clock: Optional[Callable[[], float]] = None
) -> CachedAutocompleter:
    return CachedAutocompleter(source, ttl, clock or time.monotonic)


def with_debounce(source: Autocompleter, delay: float) -> DebouncedAutocompleter:
    return DebouncedAutocompleter(source, delay)
