"""Event types published by the filter engine.

The engine publishes these on its :class:`~filterbox.domain.events.EventBus`;
front-ends and callers subscribe to them instead of polling engine state.
"""

import time
from dataclasses import dataclass, field

from filterbox.domain.types import AutocompleteItem, FilterExpression, FilterStep, ValidationError


@dataclass
class Event:
    """Base class for all events.

    The timestamp field is automatically set when the event is created.
    """

    timestamp: float = field(default_factory=time.time, init=False)
    """Timestamp when the event was created (Unix timestamp)."""


@dataclass
class ExpressionsChanged(Event):
    """A commit, edit or delete produced a new expression list."""

    expressions: list[FilterExpression]
    """The new list. Always a fresh list, never the one previously reported."""


@dataclass
class ValidationFailed(Event):
    """Validation of a value or of the whole expression list failed."""

    errors: list[ValidationError]


@dataclass
class StepChanged(Event):
    """The state machine moved to a different primary step."""

    step: FilterStep
    previous_step: FilterStep


@dataclass
class SuggestionsUpdated(Event):
    """Asynchronously fetched value suggestions became available."""

    suggestions: list[AutocompleteItem]
    query: str
    """Input text the suggestions were fetched for."""
