"""Stale-while-revalidate caching for suggestion sources."""

import asyncio
import time
from dataclasses import dataclass
from typing import Callable, Optional

from filterbox.domain.protocols import AutocompleteContext, Autocompleter
from filterbox.domain.types import AutocompleteItem
from filterbox.logger import get_logger

from .base import WrappingAutocompleter, fetch_suggestions

logger = get_logger("autocompleters.revalidate")

__all__ = ["StaleWhileRevalidate", "with_stale_while_revalidate"]


@dataclass(slots=True)
class _Entry:
    items: list[AutocompleteItem]
    fetched_at: float


class StaleWhileRevalidate(WrappingAutocompleter):
    """Serves cached answers immediately and refreshes them in the background.

    For an entry of age ``a``:

    * ``a < max_age``: served from cache.
    * ``max_age <= a < stale_age``: served from cache while one background
      refresh per key runs; ``on_update`` receives the refreshed items.
    * ``a >= stale_age`` or no entry: fetched before answering.

    Background failures are logged and leave the stale entry in place.
    """

    def __init__(
        self,
        inner: Autocompleter,
        max_age: float,
        stale_age: Optional[float] = None,
        on_update: Optional[Callable[[list[AutocompleteItem]], None]] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(inner)
        self.max_age = max_age
        self.stale_age = stale_age if stale_age is not None else max_age * 2
        self.on_update = on_update
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._revalidating: set[str] = set()
        self._tasks: set[asyncio.Task] = set()

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        key = context.input_value
        entry = self._entries.get(key)
        if entry is not None:
            age = self._clock() - entry.fetched_at
            if age < self.max_age:
                return list(entry.items)
            if age < self.stale_age:
                self._schedule_revalidation(key, context)
                return list(entry.items)

        return await self._fetch(key, context)

    async def _fetch(self, key: str, context: AutocompleteContext) -> list[AutocompleteItem]:
        items = await fetch_suggestions(self.inner, context)
        self._entries[key] = _Entry(items=list(items), fetched_at=self._clock())
        return items

    def _schedule_revalidation(self, key: str, context: AutocompleteContext) -> None:
        if key in self._revalidating:
            return
        self._revalidating.add(key)
        task = asyncio.create_task(self._revalidate(key, context))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _revalidate(self, key: str, context: AutocompleteContext) -> None:
        try:
            items = await self._fetch(key, context)
        except Exception as e:
            logger.debug(f"Background refresh for {key!r} failed: {e}")
            return
        finally:
            self._revalidating.discard(key)
        if self.on_update is not None:
            self.on_update(items)

    async def wait_for_revalidation(self) -> None:
        """Wait until every scheduled background refresh has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def aclose(self) -> None:
        """Cancel outstanding background refreshes."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        self._tasks.clear()
        self._revalidating.clear()

    def clear(self) -> None:
        self._entries.clear()


def with_stale_while_revalidate(
    source: Autocompleter,
    max_age: float,
    stale_age: Optional[float] = None,
    on_update: Optional[Callable[[list[AutocompleteItem]], None]] = None,
) -> StaleWhileRevalidate:
    return StaleWhileRevalidate(source, max_age, stale_age=stale_age, on_update=on_update)
