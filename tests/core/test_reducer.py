import pytest

from filterbox.core import actions as actions_module
from filterbox.core.actions import (
    INITIAL_STATE,
    Blur,
    CancelTokenEdit,
    ClearAll,
    Complete,
    CompleteConnectorEdit,
    CompleteOperatorEdit,
    CompleteTokenEdit,
    ConfirmValue,
    DeleteExpression,
    DeleteLastStep,
    DeleteToken,
    FilterAction,
    FilterState,
    Focus,
    InputChange,
    NavigateLeft,
    NavigateRight,
    OpenDropdown,
    Reset,
    SelectAllTokens,
    SelectConnector,
    SelectField,
    SelectOperator,
    SelectToken,
    StartConnectorEdit,
    StartOperatorEdit,
    StartTokenEdit,
)
from filterbox.core.reducer import filter_reducer, handled_actions, remove_expression
from filterbox.domain.types import ConditionValue, EditMode, FieldValue, FilterStep, OperatorValue

STATUS = FieldValue(key="status", label="Status")
EQUALS = OperatorValue(key="eq", label="is")
NOT_EQUALS = OperatorValue(key="neq", label="is not")


def reduce_all(state, actions, expressions=()):
    expressions = tuple(expressions)
    for action in actions:
        result = filter_reducer(state, action, expressions)
        state = result.state
        if result.expressions is not None:
            expressions = result.expressions
    return state, expressions


class TestConstruction:
    def test_focus_from_idle_opens_field_selection(self):
        result = filter_reducer(INITIAL_STATE, Focus())

        assert result.state.step == FilterStep.SELECTING_FIELD
        assert result.state.is_dropdown_open
        assert result.expressions is None

    def test_focus_opens_field_selection_when_last_expression_is_open(self, make_expression):
        result = filter_reducer(INITIAL_STATE, Focus(), [make_expression("status", "open")])

        assert result.state.step == FilterStep.SELECTING_FIELD
        assert result.state.is_dropdown_open

    def test_open_last_expression_gets_default_connector_on_next_confirm(self, make_expression):
        state, expressions = reduce_all(
            INITIAL_STATE,
            [Focus(), SelectField(STATUS), SelectOperator(EQUALS), ConfirmValue(ConditionValue.from_text("closed"))],
            (make_expression("status", "open"),),
        )

        assert [e.connector for e in expressions] == ["AND", None]
        assert state.step == FilterStep.SELECTING_CONNECTOR

    def test_full_expression_flow(self):
        state, expressions = reduce_all(
            INITIAL_STATE,
            [Focus(), SelectField(STATUS), SelectOperator(EQUALS), ConfirmValue(ConditionValue.from_text("open"))],
        )

        assert state.step == FilterStep.SELECTING_CONNECTOR
        assert state.current_field is None
        assert state.current_operator is None
        assert len(expressions) == 1
        condition = expressions[0].condition
        assert (condition.field.key, condition.operator.key, condition.value.raw) == ("status", "eq", "open")
        assert expressions[0].connector is None
        assert 'Filter added: value "open"' in state.announcement

    def test_select_field_announces_next_step(self):
        state, _ = reduce_all(INITIAL_STATE, [Focus(), SelectField(STATUS)])

        assert state.step == FilterStep.SELECTING_OPERATOR
        assert state.current_field == STATUS
        assert state.announcement == "Selected Status. Now select an operator."

    def test_single_operator_field_skips_operator_step(self):
        state, _ = reduce_all(INITIAL_STATE, [Focus(), SelectField(STATUS, auto_operator=EQUALS)])

        assert state.step == FilterStep.ENTERING_VALUE
        assert state.current_operator == EQUALS
        assert not state.is_dropdown_open

    def test_select_field_outside_field_step_is_ignored(self):
        result = filter_reducer(INITIAL_STATE, SelectField(STATUS))

        assert result.state is INITIAL_STATE

    def test_second_confirm_links_previous_expression(self, make_expression):
        expressions = [make_expression("status", "open")]
        state = FilterState(step=FilterStep.ENTERING_VALUE, current_field=STATUS, current_operator=EQUALS)

        result = filter_reducer(state, ConfirmValue(ConditionValue.from_text("closed"), default_connector="OR"), expressions)

        assert [e.connector for e in result.expressions] == ["OR", None]

    def test_connector_then_complete(self, make_expression):
        expressions = (make_expression("status", "open"),)
        state = FilterState(step=FilterStep.SELECTING_CONNECTOR, is_dropdown_open=True)

        result = filter_reducer(state, SelectConnector("AND"), expressions)
        assert result.state.step == FilterStep.SELECTING_FIELD
        assert result.expressions[0].connector == "AND"

        done = filter_reducer(state, Complete(), expressions)
        assert done.state.step == FilterStep.IDLE
        assert not done.state.is_dropdown_open
        assert done.state.announcement == "Filter expression complete."

    def test_delete_last_step_walks_back(self):
        state = FilterState(step=FilterStep.ENTERING_VALUE, current_field=STATUS, current_operator=EQUALS)

        state = filter_reducer(state, DeleteLastStep()).state
        assert state.step == FilterStep.SELECTING_OPERATOR
        assert state.current_operator is None

        state = filter_reducer(state, DeleteLastStep()).state
        assert state.step == FilterStep.SELECTING_FIELD
        assert state.current_field is None

        assert filter_reducer(state, DeleteLastStep()).state is state

    def test_blur_drops_pending_condition(self):
        state = FilterState(step=FilterStep.SELECTING_OPERATOR, current_field=STATUS, input_value="x")

        state = filter_reducer(state, Blur()).state

        assert state.step == FilterStep.IDLE
        assert state.current_field is None
        assert state.input_value == ""

    def test_input_change_resets_highlight_and_selection(self):
        state = FilterState(step=FilterStep.SELECTING_FIELD, highlighted_index=3, selected_token_index=1)

        state = filter_reducer(state, InputChange("sta")).state

        assert state.input_value == "sta"
        assert state.highlighted_index == 0
        assert state.selected_token_index == -1
        assert state.is_dropdown_open


class TestDeletion:
    def test_deleting_only_expression_returns_to_idle(self, make_expression):
        expressions = (make_expression("status", "open"),)
        state = FilterState(step=FilterStep.SELECTING_CONNECTOR, is_dropdown_open=True)

        result = filter_reducer(state, DeleteToken(2), expressions)

        assert result.expressions == ()
        assert result.state.step == FilterStep.IDLE
        assert result.state.announcement == "Filter expression 1 deleted."

    def test_deleting_connector_token_clears_connector(self, make_expression):
        expressions = (
            make_expression("status", "open", connector="AND"),
            make_expression("priority", "3"),
        )

        result = filter_reducer(FilterState(step=FilterStep.IDLE), DeleteToken(3), expressions)

        assert result.expressions[0].connector is None
        assert len(result.expressions) == 2
        assert result.state.announcement == "Connector after filter expression 1 removed."

    def test_deleting_last_expression_trims_dangling_connector(self, make_expression):
        expressions = (
            make_expression("status", "open", connector="AND"),
            make_expression("priority", "3"),
        )

        result = filter_reducer(FilterState(step=FilterStep.SELECTING_CONNECTOR), DeleteExpression(1), expressions)

        assert len(result.expressions) == 1
        assert result.expressions[0].connector is None
        assert result.state.step == FilterStep.SELECTING_CONNECTOR

    def test_deleting_while_building_keeps_the_build(self, make_expression):
        expressions = (make_expression("status", "open", connector="AND"),)
        state = FilterState(step=FilterStep.SELECTING_OPERATOR, current_field=STATUS)

        result = filter_reducer(state, DeleteExpression(0), expressions)

        assert result.expressions == ()
        assert result.state.step == FilterStep.SELECTING_OPERATOR
        assert result.state.current_field == STATUS

    def test_deleting_pending_operator_token(self, make_expression):
        expressions = (make_expression("status", "open", connector="AND"),)
        state = FilterState(step=FilterStep.ENTERING_VALUE, current_field=STATUS, current_operator=EQUALS)

        result = filter_reducer(state, DeleteToken(5), expressions)

        assert result.expressions is None
        assert result.state.step == FilterStep.SELECTING_OPERATOR
        assert result.state.current_operator is None

    def test_out_of_range_delete_is_a_no_op(self, make_expression):
        expressions = (make_expression("status", "open"),)

        assert filter_reducer(INITIAL_STATE, DeleteExpression(5), expressions).state is INITIAL_STATE
        assert filter_reducer(INITIAL_STATE, DeleteToken(-1), expressions).state is INITIAL_STATE

    def test_clear_all(self, make_expression):
        state = FilterState(step=FilterStep.SELECTING_CONNECTOR, is_dropdown_open=True)

        result = filter_reducer(state, ClearAll(), [make_expression("status", "open")])

        assert result.expressions == ()
        assert result.state.step == FilterStep.IDLE
        assert result.state.announcement == "All filters cleared."

    def test_remove_expression_without_trim(self, make_expression):
        expressions = [make_expression("status", "open", connector="AND"), make_expression("priority", "3")]

        remaining = remove_expression(expressions, 1, trim=False)

        assert remaining[0].connector == "AND"
        assert len(expressions) == 2


class TestEditing:
    def test_value_edit_round_trip(self, make_expression):
        expressions = (make_expression("status", "open"),)
        idle = FilterState(step=FilterStep.SELECTING_CONNECTOR)

        editing = filter_reducer(idle, StartTokenEdit(2), expressions).state
        assert editing.step == FilterStep.EDITING_TOKEN
        assert editing.mode == EditMode.EDITING_VALUE
        assert editing.resume_step == FilterStep.SELECTING_CONNECTOR

        result = filter_reducer(editing, CompleteTokenEdit(ConditionValue.from_text("closed")), expressions)
        assert result.expressions[0].condition.value.raw == "closed"
        assert result.state.step == FilterStep.SELECTING_CONNECTOR
        assert result.state.editing_token_index == -1
        assert result.state.is_dropdown_open

    def test_cancel_value_edit_keeps_expressions(self, make_expression):
        expressions = (make_expression("status", "open"),)
        editing = filter_reducer(INITIAL_STATE, StartTokenEdit(2), expressions).state

        result = filter_reducer(editing, CancelTokenEdit(), expressions)

        assert result.expressions is None
        assert result.state.step == FilterStep.IDLE
        assert result.state.announcement == "Edit cancelled."
        assert not result.state.is_dropdown_open

    def test_only_value_tokens_are_editable(self, make_expression):
        expressions = (make_expression("status", "open"),)

        assert filter_reducer(INITIAL_STATE, StartTokenEdit(0), expressions).state is INITIAL_STATE

    def test_operator_edit(self, make_expression):
        expressions = (make_expression("status", "open"),)

        editing = filter_reducer(INITIAL_STATE, StartOperatorEdit(0), expressions).state
        assert editing.mode == EditMode.EDITING_OPERATOR
        assert editing.is_dropdown_open

        result = filter_reducer(editing, CompleteOperatorEdit(NOT_EQUALS), expressions)
        assert result.expressions[0].condition.operator == NOT_EQUALS
        assert result.state.editing_operator_index == -1

    def test_connector_edit_requires_a_connector(self, make_expression):
        expressions = (make_expression("status", "open", connector="AND"), make_expression("priority", "3"))

        assert filter_reducer(INITIAL_STATE, StartConnectorEdit(1), expressions).state is INITIAL_STATE

        editing = filter_reducer(INITIAL_STATE, StartConnectorEdit(0), expressions).state
        result = filter_reducer(editing, CompleteConnectorEdit("OR"), expressions)
        assert result.expressions[0].connector == "OR"

    def test_finished_edit_reopens_connector_choices(self, make_expression):
        expressions = (make_expression("status", "open", connector="AND"), make_expression("priority", "3"))
        resumed = FilterState(step=FilterStep.SELECTING_CONNECTOR, is_dropdown_open=True)

        editing = filter_reducer(resumed, StartConnectorEdit(0), expressions).state
        result = filter_reducer(editing, CompleteConnectorEdit("OR"), expressions)

        assert result.state.step == FilterStep.SELECTING_CONNECTOR
        assert result.state.is_dropdown_open

    def test_starting_an_edit_replaces_the_active_one(self, make_expression):
        expressions = (make_expression("status", "open", connector="AND"), make_expression("priority", "3"))
        state, _ = reduce_all(INITIAL_STATE, [StartOperatorEdit(0), StartConnectorEdit(0)], expressions)

        assert state.editing_operator_index == -1
        assert state.editing_connector_index == 0


class TestSelection:
    def test_navigate_left_from_input_selects_last_token(self, make_expression):
        expressions = (make_expression("status", "open"),)

        state = filter_reducer(INITIAL_STATE, NavigateLeft(), expressions).state
        assert state.selected_token_index == 2

        state = filter_reducer(state, NavigateLeft(), expressions).state
        assert state.selected_token_index == 1

    def test_navigate_right_past_last_token_returns_to_input(self, make_expression):
        expressions = (make_expression("status", "open"),)
        state = FilterState(selected_token_index=2)

        assert filter_reducer(state, NavigateRight(), expressions).state.selected_token_index == -1

    def test_select_token_bounds(self, make_expression):
        expressions = (make_expression("status", "open"),)

        assert filter_reducer(INITIAL_STATE, SelectToken(1), expressions).state.selected_token_index == 1
        assert filter_reducer(INITIAL_STATE, SelectToken(3), expressions).state is INITIAL_STATE

    def test_select_all_needs_tokens(self, make_expression):
        assert filter_reducer(INITIAL_STATE, SelectAllTokens(), ()).state is INITIAL_STATE
        state = filter_reducer(INITIAL_STATE, SelectAllTokens(), (make_expression("status", "open"),)).state
        assert state.all_tokens_selected


def test_unknown_action_leaves_state_untouched():
    class Unknown(FilterAction):
        pass

    result = filter_reducer(INITIAL_STATE, Unknown())

    assert result.state is INITIAL_STATE
    assert not result.changed_expressions


def test_reducer_does_not_mutate_its_inputs(make_expression):
    expressions = [make_expression("status", "open")]
    snapshot = list(expressions)
    state = FilterState(step=FilterStep.ENTERING_VALUE, current_field=STATUS, current_operator=EQUALS)

    filter_reducer(state, ConfirmValue(ConditionValue.from_text("closed")), expressions)

    assert expressions == snapshot
    assert state.step == FilterStep.ENTERING_VALUE


@pytest.mark.parametrize("step", list(FilterStep))
def test_complete_only_applies_in_connector_step(step):
    state = FilterState(step=step)
    result = filter_reducer(state, Complete())
    if step == FilterStep.SELECTING_CONNECTOR:
        assert result.state.step == FilterStep.IDLE
    else:
        assert result.state is state


def test_every_action_has_a_handler():
    names = set(actions_module.__all__) - {"FilterAction", "FilterState", "INITIAL_STATE"}
    actions = {getattr(actions_module, name) for name in names}

    assert all(issubclass(action, FilterAction) for action in actions)
    assert actions == handled_actions()


def test_reset_and_dropdown_actions(make_expression):
    expressions = (make_expression("status", "open"),)
    state = FilterState(step=FilterStep.SELECTING_CONNECTOR, input_value="x", is_dropdown_open=False)

    opened = filter_reducer(state, OpenDropdown(), expressions).state
    assert opened.is_dropdown_open

    result = filter_reducer(opened, Reset(), expressions)
    assert result.state == INITIAL_STATE
    assert not result.changed_expressions
