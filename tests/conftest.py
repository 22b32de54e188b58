"""Shared schema and expression fixtures."""

from typing import Any, Callable, Optional

import pytest

from filterbox.application.autocompleters import EnumAutocompleter, NumberAutocompleter
from filterbox.domain.operators import get_default_operators
from filterbox.domain.schema import FieldConfig, FilterSchema
from filterbox.domain.types import ConditionValue, FieldType, FilterCondition, FilterExpression


@pytest.fixture
def schema() -> FilterSchema:
    """Status (enum), priority (number), name (single operator) and created (date, once)."""
    return FilterSchema(
        fields=[
            FieldConfig(
                key="status",
                label="Status",
                type=FieldType.ENUM,
                operators=get_default_operators(FieldType.ENUM),
                value_autocompleter=EnumAutocompleter(["open", "closed", "pending"]),
            ),
            FieldConfig(
                key="priority",
                label="Priority",
                type=FieldType.NUMBER,
                operators=get_default_operators(FieldType.NUMBER),
                value_autocompleter=NumberAutocompleter(min_value=1, max_value=5, integer=True),
            ),
            FieldConfig(
                key="name",
                label="Name",
                operators=[op for op in get_default_operators(FieldType.STRING) if op.key == "contains"],
            ),
            FieldConfig(
                key="created",
                label="Created",
                type=FieldType.DATE,
                operators=get_default_operators(FieldType.DATE),
                allow_multiple=False,
            ),
        ]
    )


@pytest.fixture
def make_expression(schema: FilterSchema) -> Callable[..., FilterExpression]:
    """Build a committed expression for a field of the ``schema`` fixture."""

    def make(
        field_key: str,
        value: Any,
        operator_key: Optional[str] = None,
        connector: Optional[str] = None,
    ) -> FilterExpression:
        field = schema.find_field(field_key)
        assert field is not None, field_key
        operator = field.find_operator(operator_key) if operator_key else field.operators[0]
        assert operator is not None, operator_key
        display = ", ".join(value) if isinstance(value, list) else str(value)
        return FilterExpression(
            condition=FilterCondition(
                field=field.to_value(),
                operator=operator.to_value(),
                value=ConditionValue(raw=value, display=display, serialized=display),
            ),
            connector=connector,
        )

    return make
