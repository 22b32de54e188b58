"""Fluent construction and composition of filter schemas.

Example:
    >>> schema = (
    ...     create_schema()
    ...     .field("status", "Status").type(FieldType.ENUM).operators(["eq", "neq"]).done()
    ...     .field("age", "Age").type(FieldType.NUMBER).allow_multiple(False).done()
    ...     .max(5)
    ...     .build()
    ... )
"""

from dataclasses import replace
from typing import Iterable, Optional, Sequence, Union

from filterbox.domain.operators import get_default_operators
from filterbox.domain.protocols import Autocompleter
from filterbox.domain.schema import ConnectorConfig, FieldConfig, FilterSchema, OperatorConfig
from filterbox.domain.types import FieldType

__all__ = [
    "FieldBuilder",
    "SchemaBuilder",
    "create_schema",
    "merge_schemas",
    "pick_fields",
    "omit_fields",
    "extend_schema",
]


class FieldBuilder:
    def __init__(self, schema_builder: "SchemaBuilder", key: str, label: str):
        self._schema_builder = schema_builder
        self._config = FieldConfig(key=key, label=label)

    def type(self, field_type: Union[FieldType, str]) -> "FieldBuilder":
        """Set the value type; fields without explicit operators get the type's defaults."""
        self._config.type = FieldType(field_type)
        if not self._config.operators:
            self._config.operators = get_default_operators(self._config.type)
        return self

    def description(self, description: str) -> "FieldBuilder":
        self._config.description = description
        return self

    def group(self, group: str) -> "FieldBuilder":
        self._config.group = group
        return self

    def operators(self, operators: Sequence[Union[OperatorConfig, str]]) -> "FieldBuilder":
        """Replace the operators. Keys pick from the defaults of the current type, in default order."""
        if operators and all(isinstance(op, str) for op in operators):
            wanted = set(operators)
            self._config.operators = [op for op in get_default_operators(self._config.type) if op.key in wanted]
        else:
            self._config.operators = list(operators)  # type: ignore[arg-type]
        return self

    def add_operator(self, operator: OperatorConfig) -> "FieldBuilder":
        self._config.operators = [*self._config.operators, operator]
        return self

    def default_operator(self, key: str) -> "FieldBuilder":
        self._config.default_operator = key
        return self

    def allow_multiple(self, allow: bool) -> "FieldBuilder":
        self._config.allow_multiple = allow
        return self

    def value_required(self, required: bool) -> "FieldBuilder":
        self._config.value_required = required
        return self

    def value_autocompleter(self, autocompleter: Autocompleter) -> "FieldBuilder":
        self._config.value_autocompleter = autocompleter
        return self

    def done(self) -> "SchemaBuilder":
        """Finish the field and return to the schema builder."""
        if not self._config.operators:
            self._config.operators = get_default_operators(self._config.type)
        self._schema_builder.add_field(self._config)
        return self._schema_builder


class SchemaBuilder:
    def __init__(self) -> None:
        self._fields: list[FieldConfig] = []
        self._max_expressions: Optional[int] = None
        self._connectors: Optional[list[ConnectorConfig]] = None
        self._allow_freeform = False

    def field(self, key: str, label: str) -> FieldBuilder:
        return FieldBuilder(self, key, label)

    def add_field(self, config: FieldConfig) -> "SchemaBuilder":
        self._fields.append(config)
        return self

    def max(self, count: int) -> "SchemaBuilder":
        self._max_expressions = count
        return self

    def with_connectors(self, connectors: Iterable[ConnectorConfig]) -> "SchemaBuilder":
        self._connectors = list(connectors)
        return self

    def allow_freeform_fields(self, allow: bool = True) -> "SchemaBuilder":
        self._allow_freeform = allow
        return self

    def build(self) -> FilterSchema:
        return FilterSchema(
            fields=list(self._fields),
            connectors=self._connectors,
            max_expressions=self._max_expressions,
            allow_freeform_fields=self._allow_freeform,
        )


def create_schema() -> SchemaBuilder:
    return SchemaBuilder()


def merge_schemas(*schemas: FilterSchema) -> FilterSchema:
    """Union of the fields (first definition of a key wins); other settings come from the last schema."""
    fields: list[FieldConfig] = []
    seen: set[str] = set()
    for schema in schemas:
        for field in schema.fields:
            if field.key not in seen:
                fields.append(field)
                seen.add(field.key)
    last = schemas[-1] if schemas else None
    return FilterSchema(
        fields=fields,
        connectors=last.connectors if last else None,
        max_expressions=last.max_expressions if last else None,
    )


def pick_fields(schema: FilterSchema, keys: Iterable[str]) -> FilterSchema:
    wanted = set(keys)
    return replace(schema, fields=[field for field in schema.fields if field.key in wanted])


def omit_fields(schema: FilterSchema, keys: Iterable[str]) -> FilterSchema:
    unwanted = set(keys)
    return replace(schema, fields=[field for field in schema.fields if field.key not in unwanted])


def extend_schema(base: FilterSchema, fields: Iterable[FieldConfig] = (), **changes) -> FilterSchema:
    """Copy ``base`` with ``fields`` appended and any other schema attributes overridden."""
    return replace(base, fields=[*base.fields, *fields], **changes)
