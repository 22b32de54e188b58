"""Domain layer: expression types, schema configuration, protocols and events."""

from .errors import AbortError, DeserializationError, FilterBoxError, SchemaConfigError
from .operators import get_default_operators
from .schema import (
    DEFAULT_CONNECTORS,
    ConnectorConfig,
    FieldConfig,
    FilterSchema,
    FreeformFieldConfig,
    MultiValueConfig,
    OperatorConfig,
    ValidationContext,
)

__all__ = [
    "AbortError",
    "ConnectorConfig",
    "DEFAULT_CONNECTORS",
    "DeserializationError",
    "FieldConfig",
    "FilterBoxError",
    "FilterSchema",
    "FreeformFieldConfig",
    "MultiValueConfig",
    "OperatorConfig",
    "SchemaConfigError",
    "ValidationContext",
    "get_default_operators",
]
