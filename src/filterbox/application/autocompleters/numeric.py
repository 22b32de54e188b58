"""Numeric value suggestions."""

from typing import Any, Callable, Optional, Union

from filterbox.domain.protocols import AutocompleteContext
from filterbox.domain.types import AutocompleteItem, SuggestionType

from .base import BaseAutocompleter

__all__ = ["NumberAutocompleter"]

Number = Union[int, float]

_SUGGESTION_COUNT = 5


class NumberAutocompleter(BaseAutocompleter):
    """Echoes the typed number back as a suggestion, or offers a few starting values.

    Values outside ``[min_value, max_value]`` or non-integral values when
    ``integer`` is set are not suggested and fail :meth:`validate`.
    """

    def __init__(
        self,
        min_value: Optional[Number] = None,
        max_value: Optional[Number] = None,
        step: Number = 1,
        integer: bool = False,
        formatter: Optional[Callable[[Number], str]] = None,
    ):
        self.min_value = min_value
        self.max_value = max_value
        self.step = step
        self.integer = integer
        self.formatter = formatter

    def _in_range(self, value: Number) -> bool:
        if self.min_value is not None and value < self.min_value:
            return False
        if self.max_value is not None and value > self.max_value:
            return False
        return True

    def _item(self, value: Number) -> AutocompleteItem:
        text = self.format(value)
        return AutocompleteItem(type=SuggestionType.VALUE, key=text, label=text)

    def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        text = context.input_value.strip()
        if not text:
            start = self.min_value if self.min_value is not None else 0
            candidates = [start + i * self.step for i in range(_SUGGESTION_COUNT)]
            return [self._item(value) for value in candidates if self._in_range(value)]

        value = self.parse(text)
        if value is None or not self.validate(value):
            return []
        return [self._item(value)]

    def parse(self, text: str, context: Optional[AutocompleteContext] = None) -> Optional[Number]:
        text = text.strip()
        try:
            return int(text)
        except ValueError:
            pass
        if self.integer:
            return None
        try:
            return float(text)
        except ValueError:
            return None

    def format(self, value: Any, context: Optional[AutocompleteContext] = None) -> str:
        if self.formatter is not None:
            return self.formatter(value)
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)

    def validate(self, value: Any, context: Optional[AutocompleteContext] = None) -> bool:
        if isinstance(value, str):
            value = self.parse(value)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return False
        if self.integer and isinstance(value, float) and not value.is_integer():
            return False
        return self._in_range(value)
