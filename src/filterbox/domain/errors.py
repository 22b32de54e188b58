"""Exception types raised by filterbox."""

__all__ = [
    "FilterBoxError",
    "AbortError",
    "DeserializationError",
    "SchemaConfigError",
]


class FilterBoxError(Exception):
    """Base class for all filterbox errors."""


class AbortError(FilterBoxError):
    """Raised inside a suggestion fetch whose request has been cancelled.

    Suggestion sources never let this escape to their callers: an aborted
    request resolves to an empty list of suggestions.
    """

    def __init__(self, message: str = "The operation was aborted") -> None:
        super().__init__(message)


class DeserializationError(FilterBoxError, ValueError):
    """Raised when wire data references a field or operator the schema does not know."""


class SchemaConfigError(FilterBoxError):
    """Raised when a schema file cannot be read or parsed."""
