"""In-memory suggestion sources."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Optional, Sequence, Union

from filterbox.domain.protocols import AutocompleteContext
from filterbox.domain.types import AutocompleteItem, SuggestionType

from .base import BaseAutocompleter

__all__ = ["MatchMode", "StaticAutocompleter", "EnumValue", "EnumAutocompleter", "fuzzy_match"]


class MatchMode(str, Enum):
    PREFIX = "prefix"
    SUBSTRING = "substring"
    FUZZY = "fuzzy"


def fuzzy_match(text: str, pattern: str) -> bool:
    """True when ``pattern`` is a subsequence of ``text``."""
    remaining = iter(text)
    return all(char in remaining for char in pattern)


def _to_item(value: Union[str, AutocompleteItem]) -> AutocompleteItem:
    if isinstance(value, AutocompleteItem):
        return value
    return AutocompleteItem(type=SuggestionType.VALUE, key=value, label=value)


class StaticAutocompleter(BaseAutocompleter):
    """Filters a fixed list of values by the input text.

    Example:
        >>> ac = StaticAutocompleter(["open", "closed"], match_mode="prefix")
        >>> [item.key for item in ac.get_suggestions(AutocompleteContext(input_value="c"))]
        ['closed']
    """

    def __init__(
        self,
        values: Iterable[Union[str, AutocompleteItem]],
        match_mode: Union[MatchMode, str] = MatchMode.SUBSTRING,
        case_sensitive: bool = False,
        max_results: Optional[int] = None,
    ):
        self.items: list[AutocompleteItem] = [_to_item(value) for value in values]
        self.match_mode = MatchMode(match_mode)
        self.case_sensitive = case_sensitive
        self.max_results = max_results

    def _matches(self, label: str, query: str) -> bool:
        if self.match_mode == MatchMode.PREFIX:
            return label.startswith(query)
        if self.match_mode == MatchMode.FUZZY:
            return fuzzy_match(label, query)
        return query in label

    def _cap(self, items: list[AutocompleteItem]) -> list[AutocompleteItem]:
        return items[: self.max_results] if self.max_results else items

    def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        if not context.input_value:
            return self._cap(list(self.items))

        query = context.input_value if self.case_sensitive else context.input_value.lower()
        matched = [
            item
            for item in self.items
            if self._matches(item.label if self.case_sensitive else item.label.lower(), query)
        ]
        return self._cap(matched)


@dataclass(frozen=True)
class EnumValue:
    key: str
    label: str
    description: Optional[str] = None


class EnumAutocompleter(BaseAutocompleter):
    """Suggests the members of a closed set and validates against it."""

    def __init__(
        self,
        values: Sequence[Union[EnumValue, str]],
        searchable: bool = True,
        allow_multiple: bool = False,
    ):
        members = [EnumValue(key=v, label=v) if isinstance(v, str) else v for v in values]
        self.items = [
            AutocompleteItem(type=SuggestionType.VALUE, key=m.key, label=m.label, description=m.description)
            for m in members
        ]
        self.searchable = searchable
        self.allow_multiple = allow_multiple
        self._keys = {m.key for m in members}

    def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        if not self.searchable or not context.input_value:
            return list(self.items)
        query = context.input_value.lower()
        return [
            item
            for item in self.items
            if query in item.label.lower() or (item.description is not None and query in item.description.lower())
        ]

    def validate(self, value: Any, context: Optional[AutocompleteContext] = None) -> bool:
        if isinstance(value, (list, tuple)):
            return self.allow_multiple and bool(value) and all(v in self._keys for v in value)
        return value in self._keys
