"""Read-only views derived from reducer state."""

from typing import Optional, Sequence

from filterbox.domain.schema import DEFAULT_CREATE_LABEL, FilterSchema
from filterbox.domain.types import (
    AutocompleteItem,
    FilterExpression,
    FilterStep,
    SuggestionType,
    TokenData,
    TokenType,
)

from .actions import FilterState
from .tokens import project_tokens

__all__ = [
    "FREEFORM_METADATA_KEY",
    "select_tokens",
    "select_suggestions",
    "select_placeholder",
    "select_is_token_editable",
    "select_token_expression_index",
    "filter_by_input",
    "freeform_suggestion",
]

FREEFORM_METADATA_KEY = "freeform"

_PLACEHOLDERS: dict[FilterStep, str] = {
    FilterStep.SELECTING_FIELD: "Select field...",
    FilterStep.SELECTING_OPERATOR: "Select operator...",
    FilterStep.ENTERING_VALUE: "Enter value...",
    FilterStep.SELECTING_CONNECTOR: "AND or OR?",
}
DEFAULT_PLACEHOLDER = "Add filter..."


def select_tokens(state: FilterState, expressions: Sequence[FilterExpression]) -> tuple[TokenData, ...]:
    return project_tokens(expressions, state.current_field, state.current_operator)


def filter_by_input(items: Sequence[AutocompleteItem], input_value: str) -> list[AutocompleteItem]:
    """Case-insensitive substring match on label or description."""
    if not input_value:
        return list(items)
    query = input_value.lower()
    return [
        item
        for item in items
        if query in item.label.lower() or (item.description is not None and query in item.description.lower())
    ]


def freeform_suggestion(schema: FilterSchema, input_value: str) -> Optional[AutocompleteItem]:
    """The "Create field" item for ``input_value``, or None when it should not be offered."""
    name = input_value.strip()
    if not schema.allow_freeform_fields or not name:
        return None
    lowered = name.lower()
    if any(field.key.lower() == lowered or field.label.lower() == lowered for field in schema.fields):
        return None
    options = schema.freeform_field_config
    if options is not None and options.validate_field_name is not None and not options.validate_field_name(name):
        return None
    create_label = options.create_label if options is not None else DEFAULT_CREATE_LABEL
    return AutocompleteItem(
        type=SuggestionType.FIELD,
        key=name,
        label=f'{create_label}"{name}"',
        metadata={FREEFORM_METADATA_KEY: True},
    )


def select_suggestions(
    state: FilterState,
    schema: FilterSchema,
    expressions: Sequence[FilterExpression],
) -> list[AutocompleteItem]:
    """
    Suggestions the reducer state implies for field, operator and connector steps.

    Value suggestions come from autocompleters and are fetched by the engine,
    so the value step yields an empty list here.
    """
    if state.editing_connector_index >= 0:
        if state.editing_connector_index >= len(expressions):
            return []
        return [connector.to_item() for connector in schema.get_connectors()]

    if state.editing_operator_index >= 0:
        if state.editing_operator_index >= len(expressions):
            return []
        expression = expressions[state.editing_operator_index]
        field = schema.resolve_field(expression.condition.field.key)
        if field is None:
            return []
        return [operator.to_item() for operator in field.operators]

    if state.step == FilterStep.SELECTING_FIELD:
        if schema.max_expressions is not None and len(expressions) >= schema.max_expressions:
            return []
        items = filter_by_input([field.to_item() for field in schema.fields], state.input_value)
        create = freeform_suggestion(schema, state.input_value)
        if create is not None:
            items.append(create)
        return items

    if state.step == FilterStep.SELECTING_OPERATOR:
        if state.current_field is None:
            return []
        field = schema.resolve_field(state.current_field.key)
        if field is None:
            return []
        return filter_by_input([operator.to_item() for operator in field.operators], state.input_value)

    if state.step == FilterStep.SELECTING_CONNECTOR:
        return filter_by_input([connector.to_item() for connector in schema.get_connectors()], state.input_value)

    return []


def select_placeholder(step: FilterStep, schema: Optional[FilterSchema] = None) -> str:
    if (
        step == FilterStep.SELECTING_FIELD
        and schema is not None
        and schema.allow_freeform_fields
        and schema.freeform_field_config is not None
        and schema.freeform_field_config.placeholder
    ):
        return schema.freeform_field_config.placeholder
    return _PLACEHOLDERS.get(step, DEFAULT_PLACEHOLDER)


def select_is_token_editable(tokens: Sequence[TokenData], token_index: int) -> bool:
    """Only committed value tokens are editable in place."""
    if not 0 <= token_index < len(tokens):
        return False
    token = tokens[token_index]
    return token.type == TokenType.VALUE and not token.is_pending


def select_token_expression_index(tokens: Sequence[TokenData], token_index: int) -> int:
    if not 0 <= token_index < len(tokens):
        return -1
    return tokens[token_index].expression_index
