"""Suggestion source contracts."""

from __future__ import annotations

from dataclasses import dataclass, field as dataclass_field
from typing import Any, Awaitable, Optional, Protocol, Union, runtime_checkable

from filterbox.domain.schema import FieldConfig, FilterSchema, OperatorConfig
from filterbox.domain.types import AutocompleteItem, FilterExpression

__all__ = ["AutocompleteContext", "Autocompleter", "CustomWidget", "SuggestionResult"]

SuggestionResult = Union[list[AutocompleteItem], Awaitable[list[AutocompleteItem]]]


@dataclass(slots=True)
class AutocompleteContext:
    """Everything a suggestion source may look at to answer a request."""

    input_value: str
    field: Optional[FieldConfig] = None
    operator: Optional[OperatorConfig] = None
    existing_expressions: list[FilterExpression] = dataclass_field(default_factory=list)
    schema: Optional[FilterSchema] = None

    def with_input(self, input_value: str) -> "AutocompleteContext":
        return AutocompleteContext(
            input_value=input_value,
            field=self.field,
            operator=self.operator,
            existing_expressions=self.existing_expressions,
            schema=self.schema,
        )


@runtime_checkable
class Autocompleter(Protocol):
    """A source of suggestions for the value step.

    ``get_suggestions`` may answer synchronously or return an awaitable.
    Sources may additionally provide ``validate(value, context)``,
    ``format(value, context)``, ``parse(text, context)`` and a
    ``custom_widget`` attribute; callers look those up with ``getattr``.
    """

    def get_suggestions(self, context: AutocompleteContext) -> SuggestionResult:
        ...


@runtime_checkable
class CustomWidget(Protocol):
    """A non-dropdown input experience for the value step.

    The widget hands back a raw value and its display text; ``serialize``
    turns the raw value into the wire string.
    """

    def serialize(self, value: Any) -> str:
        ...

    def validate(self, value: Any) -> bool:
        ...
