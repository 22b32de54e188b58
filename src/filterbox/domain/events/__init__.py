"""Event bus and event types."""

from .bus import EventBus, EventHandler
from .types import Event, ExpressionsChanged, StepChanged, SuggestionsUpdated, ValidationFailed

__all__ = [
    "Event",
    "EventBus",
    "EventHandler",
    "ExpressionsChanged",
    "StepChanged",
    "SuggestionsUpdated",
    "ValidationFailed",
]
