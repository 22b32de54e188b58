"""Domain types for filterbox."""

from .expression import (
    AutocompleteItem,
    ConditionValue,
    Connector,
    ConnectorValue,
    FieldValue,
    FilterCondition,
    FilterExpression,
    OperatorValue,
    SerializedExpression,
    TokenData,
    TokenValue,
)
from .step import EditMode, FieldType, FilterStep, SuggestionType, TokenType
from .validation import ValidationError, ValidationErrorType, ValidationResult, ValidationWarning

__all__ = [
    "AutocompleteItem",
    "ConditionValue",
    "Connector",
    "ConnectorValue",
    "EditMode",
    "FieldType",
    "FieldValue",
    "FilterCondition",
    "FilterExpression",
    "FilterStep",
    "OperatorValue",
    "SerializedExpression",
    "SuggestionType",
    "TokenData",
    "TokenType",
    "TokenValue",
    "ValidationError",
    "ValidationErrorType",
    "ValidationResult",
    "ValidationWarning",
]
