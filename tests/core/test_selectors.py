from filterbox.core.actions import FilterState
from filterbox.core.selectors import (
    FREEFORM_METADATA_KEY,
    select_is_token_editable,
    select_placeholder,
    select_suggestions,
    select_token_expression_index,
    select_tokens,
)
from filterbox.domain.schema import FreeformFieldConfig
from filterbox.domain.types import FieldValue, FilterStep, SuggestionType


def test_field_suggestions_filter_on_label(schema):
    state = FilterState(step=FilterStep.SELECTING_FIELD, input_value="pri")

    items = select_suggestions(state, schema, [])

    assert [item.key for item in items] == ["priority"]
    assert items[0].type == SuggestionType.FIELD


def test_field_suggestions_empty_at_max_expressions(schema, make_expression):
    schema.max_expressions = 1
    state = FilterState(step=FilterStep.SELECTING_FIELD)

    assert select_suggestions(state, schema, [make_expression("status", "open", connector="AND")]) == []


def test_operator_suggestions_for_current_field(schema):
    state = FilterState(step=FilterStep.SELECTING_OPERATOR, current_field=FieldValue(key="status", label="Status"))

    keys = [item.key for item in select_suggestions(state, schema, [])]

    assert keys == ["eq", "neq", "in"]


def test_connector_suggestions_default_to_and_or(schema):
    state = FilterState(step=FilterStep.SELECTING_CONNECTOR)

    assert [item.key for item in select_suggestions(state, schema, [])] == ["AND", "OR"]


def test_value_step_has_no_reducer_suggestions(schema):
    assert select_suggestions(FilterState(step=FilterStep.ENTERING_VALUE), schema, []) == []


def test_freeform_create_item(schema):
    schema.allow_freeform_fields = True
    schema.freeform_field_config = FreeformFieldConfig(
        create_label="New: ", validate_field_name=lambda name: name.isidentifier()
    )

    items = select_suggestions(FilterState(step=FilterStep.SELECTING_FIELD, input_value="team"), schema, [])
    assert items[-1].label == 'New: "team"'
    assert items[-1].metadata == {FREEFORM_METADATA_KEY: True}

    invalid = select_suggestions(FilterState(step=FilterStep.SELECTING_FIELD, input_value="two words"), schema, [])
    assert invalid == []

    existing = select_suggestions(FilterState(step=FilterStep.SELECTING_FIELD, input_value="status"), schema, [])
    assert [item.key for item in existing] == ["status"]


def test_placeholders(schema):
    assert select_placeholder(FilterStep.IDLE) == "Add filter..."
    assert select_placeholder(FilterStep.SELECTING_FIELD) == "Select field..."
    assert select_placeholder(FilterStep.SELECTING_CONNECTOR) == "AND or OR?"

    schema.allow_freeform_fields = True
    schema.freeform_field_config = FreeformFieldConfig(placeholder="Pick or type a field")
    assert select_placeholder(FilterStep.SELECTING_FIELD, schema) == "Pick or type a field"


def test_token_helpers(make_expression):
    tokens = select_tokens(FilterState(), [make_expression("status", "open", connector="AND")])

    assert select_is_token_editable(tokens, 2)
    assert not select_is_token_editable(tokens, 0)
    assert not select_is_token_editable(tokens, 9)
    assert select_token_expression_index(tokens, 3) == 0
    assert select_token_expression_index(tokens, 9) == -1
