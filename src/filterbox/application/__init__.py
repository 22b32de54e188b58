"""Application layer: the engine, suggestion sources and schema utilities."""

from .engine import FilterEngine
from .keyboard import KeyEvent, Keys
from .schema_builder import (
    FieldBuilder,
    SchemaBuilder,
    create_schema,
    extend_schema,
    merge_schemas,
    omit_fields,
    pick_fields,
)
from .schema_config import SchemaSpec, load_schema_config, load_serialized_expressions
from .serialization import deserialize, from_query_string, serialize, to_display_string, to_query_string
from .validation import validate_expression, validate_expressions, validate_schema

__all__ = [
    "FieldBuilder",
    "FilterEngine",
    "KeyEvent",
    "Keys",
    "SchemaBuilder",
    "SchemaSpec",
    "create_schema",
    "deserialize",
    "extend_schema",
    "from_query_string",
    "load_schema_config",
    "load_serialized_expressions",
    "merge_schemas",
    "omit_fields",
    "pick_fields",
    "serialize",
    "to_display_string",
    "to_query_string",
    "validate_expression",
    "validate_expressions",
    "validate_schema",
]
