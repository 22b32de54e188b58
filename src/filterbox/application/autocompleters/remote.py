"""Suggestion source backed by an asynchronous fetch function."""

import asyncio
from typing import Awaitable, Callable, Optional

from filterbox.core.cancellation import AbortController, AbortSignal
from filterbox.domain.errors import AbortError
from filterbox.domain.protocols import AutocompleteContext, Cache
from filterbox.domain.types import AutocompleteItem
from filterbox.infrastructure.cache import MemoryCache
from filterbox.logger import get_logger

from .base import BaseAutocompleter

logger = get_logger("autocompleters.remote")

__all__ = ["AsyncAutocompleter", "FetchFunction"]

FetchFunction = Callable[[str, AutocompleteContext, AbortSignal], Awaitable[list[AutocompleteItem]]]


class AsyncAutocompleter(BaseAutocompleter):
    """Debounced, cancellable, cached remote lookups.

    Every call supersedes the previous one: the in-flight fetch's signal is
    aborted and its caller receives an empty list. Calls arriving inside the
    debounce window collapse so that only the last query is fetched.

    Args:
        fetch: ``async fetch(query, context, signal)`` returning suggestions.
            Should raise :class:`AbortError` (or return early) once
            ``signal.aborted`` is set.
        debounce: Seconds to wait before fetching a changed query. 0 disables.
        min_chars: Queries shorter than this return no suggestions.
        cache_results: Keep results per query and serve repeats without fetching.
        cache: Cache to use instead of the default unbounded in-memory one.
    """

    def __init__(
        self,
        fetch: FetchFunction,
        debounce: float = 0.3,
        min_chars: int = 1,
        cache_results: bool = True,
        cache: Optional[Cache[str, list[AutocompleteItem]]] = None,
    ):
        self.fetch = fetch
        self.debounce = debounce
        self.min_chars = min_chars
        self.cache_results = cache_results
        self.cache: Cache[str, list[AutocompleteItem]] = cache if cache is not None else MemoryCache()
        self._controller: Optional[AbortController] = None
        self._generation = 0
        self._last_query: Optional[str] = None

    def cancel(self) -> None:
        """Abort the in-flight request, if any."""
        self._generation += 1
        if self._controller is not None:
            self._controller.abort()
            self._controller = None

    def clear_cache(self) -> None:
        self.cache.clear()

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        self.cancel()
        generation = self._generation
        query = context.input_value

        if len(query) < self.min_chars:
            return []

        if self.cache_results:
            cached = self.cache.get(query)
            if cached is not None:
                return list(cached)

        controller = AbortController()
        self._controller = controller

        if self.debounce > 0 and query != self._last_query:
            await asyncio.sleep(self.debounce)
            if generation != self._generation or controller.signal.aborted:
                return []

        self._last_query = query
        try:
            items = await self.fetch(query, context, controller.signal)
        except AbortError:
            logger.debug(f"Fetch for {query!r} aborted")
            return []
        except Exception:
            if controller.signal.aborted or generation != self._generation:
                logger.debug(f"Superseded fetch for {query!r} failed; result ignored")
                return []
            raise

        if controller.signal.aborted or generation != self._generation:
            return []

        self._controller = None
        if self.cache_results:
            self.cache.set(query, list(items))
        return list(items)
