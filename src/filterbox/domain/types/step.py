"""Enumerations describing the construction flow."""

from enum import Enum

__all__ = ["FilterStep", "TokenType", "FieldType", "SuggestionType", "EditMode"]


class FilterStep(str, Enum):
    """Primary step of the filter construction state machine."""

    IDLE = "idle"
    SELECTING_FIELD = "selecting-field"
    SELECTING_OPERATOR = "selecting-operator"
    ENTERING_VALUE = "entering-value"
    SELECTING_CONNECTOR = "selecting-connector"
    EDITING_TOKEN = "editing-token"


class TokenType(str, Enum):
    """Kind of a projected token."""

    FIELD = "field"
    OPERATOR = "operator"
    VALUE = "value"
    CONNECTOR = "connector"


class FieldType(str, Enum):
    """Value type of a filter field. Determines its default operators."""

    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    DATETIME = "datetime"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ID = "id"
    CUSTOM = "custom"


class SuggestionType(str, Enum):
    """Kind of an autocomplete item."""

    FIELD = "field"
    OPERATOR = "operator"
    VALUE = "value"
    CONNECTOR = "connector"
    CUSTOM = "custom"


class EditMode(str, Enum):
    """Which activity currently owns the input.

    Exactly one mode is active at any time.
    """

    IDLE = "idle"
    BUILDING = "building"
    EDITING_VALUE = "editing-value"
    EDITING_OPERATOR = "editing-operator"
    EDITING_CONNECTOR = "editing-connector"
