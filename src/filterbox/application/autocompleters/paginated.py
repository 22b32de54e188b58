"""Page-at-a-time suggestion source."""

import asyncio
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Optional

from filterbox.core.cancellation import AbortController, AbortSignal
from filterbox.domain.errors import AbortError
from filterbox.domain.protocols import AutocompleteContext
from filterbox.domain.types import AutocompleteItem
from filterbox.logger import get_logger

from .base import BaseAutocompleter

logger = get_logger("autocompleters.paginated")

__all__ = ["PageResult", "PaginationState", "PaginatedAutocompleter", "PageFetcher"]


@dataclass(frozen=True, slots=True)
class PageResult:
    items: list[AutocompleteItem]
    has_more: bool
    total: Optional[int] = None
    next_cursor: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PaginationState:
    page: int = 0
    has_more: bool = True
    is_loading: bool = False
    total: Optional[int] = None
    cursor: Optional[str] = None


PageFetcher = Callable[[str, int, int, Optional[str], AbortSignal], Awaitable[PageResult]]
"""``async fetch_page(query, page, page_size, cursor, signal)``."""


@dataclass(slots=True)
class _QueryPages:
    pages: "OrderedDict[int, list[AutocompleteItem]]" = field(default_factory=OrderedDict)
    has_more: bool = True
    total: Optional[int] = None
    cursor: Optional[str] = None
    last_page: int = 0

    def all_items(self) -> list[AutocompleteItem]:
        return [item for page in sorted(self.pages) for item in self.pages[page]]


class PaginatedAutocompleter(BaseAutocompleter):
    """Fetches the first page per query and appends further pages on :meth:`load_more`.

    Each query keeps at most ``max_cached_pages`` pages; the lowest page
    number is evicted first. A new query aborts any in-flight page fetch.
    """

    def __init__(
        self,
        fetch_page: PageFetcher,
        page_size: int = 20,
        debounce: float = 0.3,
        min_chars: int = 0,
        cache_results: bool = True,
        max_cached_pages: int = 5,
    ):
        self.fetch_page = fetch_page
        self.page_size = page_size
        self.debounce = debounce
        self.min_chars = min_chars
        self.cache_results = cache_results
        self.max_cached_pages = max_cached_pages
        self._queries: dict[str, _QueryPages] = {}
        self._query: Optional[str] = None
        self._controller: Optional[AbortController] = None
        self._generation = 0
        self._loading = False

    @property
    def pagination_state(self) -> PaginationState:
        pages = self._queries.get(self._query) if self._query is not None else None
        if pages is None:
            return PaginationState(is_loading=self._loading)
        return PaginationState(
            page=pages.last_page,
            has_more=pages.has_more,
            is_loading=self._loading,
            total=pages.total,
            cursor=pages.cursor,
        )

    def _abort(self) -> None:
        if self._controller is not None:
            self._controller.abort()
            self._controller = None

    def reset(self) -> None:
        """Forget the current query and abort its fetch."""
        self._generation += 1
        self._abort()
        if not self.cache_results and self._query is not None:
            self._queries.pop(self._query, None)
        self._query = None
        self._loading = False

    def _store(self, pages: _QueryPages, page: int, result: PageResult) -> None:
        pages.pages[page] = list(result.items)
        while len(pages.pages) > self.max_cached_pages:
            pages.pages.pop(min(pages.pages))
        pages.has_more = result.has_more
        pages.total = result.total
        pages.cursor = result.next_cursor
        pages.last_page = page

    async def _load(self, query: str, page: int, cursor: Optional[str]) -> Optional[PageResult]:
        controller = AbortController()
        self._controller = controller
        self._loading = True
        try:
            result = await self.fetch_page(query, page, self.page_size, cursor, controller.signal)
        except AbortError:
            logger.debug(f"Page {page} for {query!r} aborted")
            return None
        except Exception:
            if controller.signal.aborted:
                logger.debug(f"Aborted page {page} for {query!r} failed; result ignored")
                return None
            raise
        finally:
            if self._controller is controller:
                self._controller = None
                self._loading = False
        if controller.signal.aborted:
            return None
        return result

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        query = context.input_value
        if query != self._query:
            self.reset()
        else:
            self._generation += 1
            self._abort()
        generation = self._generation
        self._query = query

        if len(query) < self.min_chars:
            return []

        cached = self._queries.get(query)
        if self.cache_results and cached is not None and cached.pages:
            return cached.all_items()

        if self.debounce > 0:
            await asyncio.sleep(self.debounce)
            if generation != self._generation:
                return []

        result = await self._load(query, 0, None)
        if result is None or generation != self._generation:
            return []

        pages = _QueryPages()
        self._queries[query] = pages
        self._store(pages, 0, result)
        return pages.all_items()

    async def load_more(self) -> list[AutocompleteItem]:
        """Fetch the next page for the current query and return every loaded item."""
        if self._query is None:
            return []
        pages = self._queries.get(self._query)
        if pages is None:
            return []
        if not pages.has_more or self._loading:
            return pages.all_items()

        next_page = pages.last_page + 1
        if next_page in pages.pages:
            pages.last_page = next_page
            return pages.all_items()

        generation = self._generation
        result = await self._load(self._query, next_page, pages.cursor)
        if result is None or generation != self._generation:
            return pages.all_items()
        self._store(pages, next_page, result)
        return pages.all_items()
