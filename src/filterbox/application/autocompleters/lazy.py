"""Sources that are created on first use."""

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from filterbox.domain.protocols import AutocompleteContext, Autocompleter
from filterbox.domain.types import AutocompleteItem
from filterbox.logger import get_logger

from .base import BaseAutocompleter, fetch_suggestions

logger = get_logger("autocompleters.lazy")

__all__ = ["LazyAutocompleter", "DynamicAutocompleter", "AutocompleterLoader"]

AutocompleterLoader = Callable[[], Awaitable[Autocompleter]]


class LazyAutocompleter(BaseAutocompleter):
    """Loads the real source once, on the first request.

    Concurrent first requests share a single load. While loading fails,
    ``fallback_items`` are served and the next request retries.
    """

    def __init__(
        self,
        loader: AutocompleterLoader,
        fallback_items: Optional[Sequence[AutocompleteItem]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.loader = loader
        self.fallback_items = list(fallback_items or [])
        self.on_error = on_error
        self._loaded: Optional[Autocompleter] = None
        self._lock = asyncio.Lock()

    @property
    def is_loaded(self) -> bool:
        return self._loaded is not None

    async def load(self) -> Autocompleter:
        if self._loaded is not None:
            return self._loaded
        async with self._lock:
            if self._loaded is None:
                self._loaded = await self.loader()
                logger.debug(f"Loaded {type(self._loaded).__name__}")
        return self._loaded

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        try:
            source = await self.load()
        except Exception as e:
            logger.warning(f"Failed to load suggestion source: {e}")
            if self.on_error is not None:
                self.on_error(e)
            return list(self.fallback_items)
        return await fetch_suggestions(source, context)


class DynamicAutocompleter(BaseAutocompleter):
    """Picks a lazily loaded source by the selected field's key.

    Fields without their own loader use the ``"default"`` entry, if any.
    """

    DEFAULT_KEY = "default"

    def __init__(self, loaders: dict[str, AutocompleterLoader]):
        self._sources = {key: LazyAutocompleter(loader) for key, loader in loaders.items()}

    async def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        key = context.field.key if context.field is not None else self.DEFAULT_KEY
        source = self._sources.get(key) or self._sources.get(self.DEFAULT_KEY)
        if source is None:
            return []
        return await source.get_suggestions(context)
