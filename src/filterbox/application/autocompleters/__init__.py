"""Built-in suggestion sources for the value step."""

from .base import BaseAutocompleter, WrappingAutocompleter, fetch_suggestions
from .combinators import (
    CachedAutocompleter,
    CombinedAutocompleter,
    DebouncedAutocompleter,
    MappedAutocompleter,
    combine_autocompleters,
    map_autocompleter,
    with_cache,
    with_debounce,
)
from .lazy import DynamicAutocompleter, LazyAutocompleter
from .numeric import NumberAutocompleter
from .paginated import PageResult, PaginatedAutocompleter, PaginationState
from .remote import AsyncAutocompleter
from .revalidate import StaleWhileRevalidate, with_stale_while_revalidate
from .static import EnumAutocompleter, EnumValue, MatchMode, StaticAutocompleter, fuzzy_match
from .temporal import DateAutocompleter, DatePreset, DateTimeAutocompleter

__all__ = [
    "AsyncAutocompleter",
    "BaseAutocompleter",
    "CachedAutocompleter",
    "CombinedAutocompleter",
    "DateAutocompleter",
    "DatePreset",
    "DateTimeAutocompleter",
    "DebouncedAutocompleter",
    "DynamicAutocompleter",
    "EnumAutocompleter",
    "EnumValue",
    "LazyAutocompleter",
    "MappedAutocompleter",
    "MatchMode",
    "NumberAutocompleter",
    "PageResult",
    "PaginatedAutocompleter",
    "PaginationState",
    "StaleWhileRevalidate",
    "StaticAutocompleter",
    "WrappingAutocompleter",
    "combine_autocompleters",
    "fetch_suggestions",
    "fuzzy_match",
    "map_autocompleter",
    "with_cache",
    "with_debounce",
    "with_stale_while_revalidate",
]
