"""Conversion between expressions and their wire, display and query-string forms."""

from typing import Any, Callable, Iterable, Mapping, Optional, Sequence, Union
from urllib.parse import parse_qsl, urlencode

from filterbox.domain.errors import DeserializationError
from filterbox.domain.schema import FieldConfig, FilterSchema
from filterbox.domain.types import (
    ConditionValue,
    Connector,
    FieldValue,
    FilterCondition,
    FilterExpression,
    OperatorValue,
    SerializedExpression,
)
from filterbox.logger import get_logger

logger = get_logger("serialization")

__all__ = [
    "serialize",
    "deserialize",
    "to_display_string",
    "to_query_string",
    "from_query_string",
    "condition_value_from_raw",
]

WireItem = Union[SerializedExpression, Mapping[str, Any]]


def condition_value_from_raw(raw: Any) -> ConditionValue:
    """Default conversion of a wire value: the wire form is kept as is, lists display comma-joined."""
    if isinstance(raw, (list, tuple)):
        text = ", ".join(str(part) for part in raw)
    else:
        text = "" if raw is None else str(raw)
    return ConditionValue(raw=raw, display=text, serialized=raw)


def _as_serialized(item: WireItem) -> SerializedExpression:
    if isinstance(item, SerializedExpression):
        return item
    return SerializedExpression.model_validate(dict(item))


def serialize(
    expressions: Sequence[FilterExpression],
    schema: Optional[FilterSchema] = None,
    use_field_serializers: bool = True,
    use_schema_serializer: bool = True,
) -> list[SerializedExpression]:
    """
    Convert expressions to their wire form.

    A schema-level ``serialize`` hook wins when it returns a list; otherwise
    each value's ``serialized`` form is used, passed through the field's own
    ``serialize`` hook when it has one.
    """
    if use_schema_serializer and schema is not None and schema.serialize is not None:
        result = schema.serialize(list(expressions))
        if isinstance(result, list):
            return [_as_serialized(item) for item in result]

    serialized: list[SerializedExpression] = []
    for expression in expressions:
        condition = expression.condition
        value: Any = condition.value.serialized
        if use_field_serializers and schema is not None:
            field = schema.find_field(condition.field.key)
            if field is not None and field.serialize is not None:
                value = field.serialize(condition.value)
        serialized.append(
            SerializedExpression(
                field=condition.field.key,
                operator=condition.operator.key,
                value=value,
                connector=expression.connector,
            )
        )
    return serialized


def _resolve_field(schema: FilterSchema, key: str) -> FieldConfig:
    field = schema.resolve_field(key)
    if field is None:
        raise DeserializationError(f"Unknown field: {key}")
    return field


def deserialize(
    serialized: Iterable[WireItem],
    schema: FilterSchema,
    use_field_deserializers: bool = True,
    use_schema_deserializer: bool = True,
) -> list[FilterExpression]:
    """
    Rebuild expressions from wire data.

    Raises:
        DeserializationError: An item names a field or operator the schema does not know
    """
    items = [_as_serialized(item) for item in serialized]

    if use_schema_deserializer and schema.deserialize is not None:
        return list(schema.deserialize([item.to_dict() for item in items]))

    expressions: list[FilterExpression] = []
    for item in items:
        field = _resolve_field(schema, item.field)
        operator = field.find_operator(item.operator)
        if operator is None:
            raise DeserializationError(f"Unknown operator: {item.operator} for field {item.field}")

        if use_field_deserializers and field.deserialize is not None:
            value = field.deserialize(item.value)
        else:
            value = condition_value_from_raw(item.value)

        expressions.append(
            FilterExpression(
                condition=FilterCondition(field=field.to_value(), operator=operator.to_value(), value=value),
                connector=item.connector,
            )
        )
    logger.debug(f"Deserialized {len(expressions)} expressions")
    return expressions


def to_display_string(
    expressions: Sequence[FilterExpression],
    format_field: Optional[Callable[[FieldValue], str]] = None,
    format_operator: Optional[Callable[[OperatorValue], str]] = None,
    format_value: Optional[Callable[[ConditionValue, FieldValue, OperatorValue], str]] = None,
    format_connector: Optional[Callable[[Connector], str]] = None,
    format_expression: Optional[Callable[[FilterExpression, int], str]] = None,
) -> str:
    """Human readable rendering, e.g. ``Status equals open AND Priority greater than 3``."""
    parts: list[str] = []
    last = len(expressions) - 1
    for index, expression in enumerate(expressions):
        if format_expression is not None:
            part = format_expression(expression, index)
        else:
            condition = expression.condition
            field = format_field(condition.field) if format_field else condition.field.label
            operator = format_operator(condition.operator) if format_operator else condition.operator.label
            value = (
                format_value(condition.value, condition.field, condition.operator)
                if format_value
                else condition.value.display
            )
            part = f"{field} {operator} {value}"

        if expression.connector and index < last:
            connector = format_connector(expression.connector) if format_connector else expression.connector
            part = f"{part} {connector}"
        parts.append(part)
    return " ".join(parts)


def to_query_string(expressions: Sequence[FilterExpression]) -> str:
    """``field=value`` pairs; a field that appears twice keeps its last value."""
    params: dict[str, str] = {}
    for expression in expressions:
        value = expression.condition.value.serialized
        if isinstance(value, (list, tuple)):
            value = ",".join(str(part) for part in value)
        params[expression.condition.field.key] = str(value)
    return urlencode(params)


def from_query_string(query_string: str, schema: FilterSchema) -> list[FilterExpression]:
    """
    Parse ``field=value`` pairs into expressions joined by AND.

    Each field uses its first operator. Unknown fields and fields without
    operators are skipped.
    """
    expressions: list[FilterExpression] = []
    for key, value in parse_qsl(query_string.lstrip("?"), keep_blank_values=True):
        field = schema.find_field(key)
        if field is None or not field.operators:
            logger.debug(f"Skipping query parameter {key!r}")
            continue
        expressions.append(
            FilterExpression(
                condition=FilterCondition(
                    field=field.to_value(),
                    operator=field.operators[0].to_value(),
                    value=ConditionValue.from_text(value),
                )
            )
        )

    return [
        expression.with_connector("AND") if index < len(expressions) - 1 else expression
        for index, expression in enumerate(expressions)
    ]
