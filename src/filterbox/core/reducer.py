"""Pure reducer for the filter construction state machine.

``filter_reducer(state, action, expressions)`` applies one action to
completion and returns the next state together with a new expression tuple
when the action changed the expressions. It never mutates its inputs and
never raises for unknown or inapplicable actions; those return the state
unchanged.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Sequence, Type, TypeVar

from filterbox.domain.types import FilterCondition, FilterExpression, FilterStep, TokenType

from .actions import (
    BUILDING_STEPS,
    INITIAL_STATE,
    SELECTING_STEPS,
    Blur,
    CancelConnectorEdit,
    CancelOperatorEdit,
    CancelTokenEdit,
    ClearAll,
    CloseDropdown,
    Complete,
    CompleteConnectorEdit,
    CompleteOperatorEdit,
    CompleteTokenEdit,
    ConfirmValue,
    DeleteExpression,
    DeleteLastStep,
    DeleteToken,
    DeselectTokens,
    FilterAction,
    FilterState,
    Focus,
    HighlightSuggestion,
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
    SetAnnouncement,
    StartConnectorEdit,
    StartOperatorEdit,
    StartTokenEdit,
)
from .tokens import project_tokens

__all__ = ["ReducerResult", "filter_reducer", "remove_expression", "handled_actions"]

Expressions = tuple[FilterExpression, ...]
A = TypeVar("A", bound=FilterAction)


@dataclass(frozen=True, slots=True)
class ReducerResult:
    state: FilterState
    expressions: Optional[Expressions] = None
    """New expression list, or None when the action left the expressions alone."""

    @property
    def changed_expressions(self) -> bool:
        return self.expressions is not None


Handler = Callable[[FilterState, FilterAction, Expressions], ReducerResult]

_HANDLERS: dict[Type[FilterAction], Handler] = {}


def _handles(action_type: Type[A]) -> Callable[[Callable[[FilterState, A, Expressions], ReducerResult]], Handler]:
    def register(handler):
        _HANDLERS[action_type] = handler
        return handler

    return register


def handled_actions() -> frozenset[Type[FilterAction]]:
    return frozenset(_HANDLERS)


def filter_reducer(
    state: FilterState,
    action: FilterAction,
    expressions: Sequence[FilterExpression] = (),
) -> ReducerResult:
    """
    Apply ``action`` to ``state``.

    Args:
        state: Current state
        action: Action to apply
        expressions: Current committed expressions (read only)

    Returns:
        ReducerResult with the next state and, if they changed, the new expressions
    """
    handler = _HANDLERS.get(type(action))
    if handler is None:
        return ReducerResult(state)
    return handler(state, action, tuple(expressions))


def _unchanged(state: FilterState) -> ReducerResult:
    return ReducerResult(state)


def remove_expression(expressions: Sequence[FilterExpression], index: int, trim: bool = True) -> Expressions:
    """Drop ``expressions[index]``; with ``trim`` the new last expression loses its connector."""
    remaining = [expression for i, expression in enumerate(expressions) if i != index]
    if trim and remaining and remaining[-1].connector:
        remaining[-1] = remaining[-1].with_connector(None)
    return tuple(remaining)


def _clear_edits(state: FilterState) -> FilterState:
    """Drop any edit overlay and fall back to the step it interrupted."""
    return state.evolve(
        step=state.primary_step,
        editing_token_index=-1,
        editing_operator_index=-1,
        editing_connector_index=-1,
        resume_step=None,
    )


def _after_removal(state: FilterState, expressions: Expressions, announcement: str) -> FilterState:
    state = _clear_edits(state).evolve(
        selected_token_index=-1,
        all_tokens_selected=False,
        highlighted_index=0,
        announcement=announcement,
    )
    if state.step in BUILDING_STEPS:
        return state
    if not expressions:
        return state.evolve(step=FilterStep.IDLE, is_dropdown_open=False, input_value="")
    return state.evolve(step=FilterStep.SELECTING_CONNECTOR)


# ---------------------------------------------------------------------------
# Focus and input
# ---------------------------------------------------------------------------


@_handles(Focus)
def _focus(state: FilterState, action: Focus, expressions: Expressions) -> ReducerResult:
    step = FilterStep.SELECTING_FIELD if state.step == FilterStep.IDLE else state.step
    return ReducerResult(state.evolve(step=step, is_dropdown_open=True))


@_handles(Blur)
def _blur(state: FilterState, action: Blur, expressions: Expressions) -> ReducerResult:
    return ReducerResult(
        state.evolve(
            step=FilterStep.IDLE,
            is_dropdown_open=False,
            input_value="",
            current_field=None,
            current_operator=None,
            editing_token_index=-1,
            editing_operator_index=-1,
            editing_connector_index=-1,
            resume_step=None,
        )
    )


@_handles(InputChange)
def _input_change(state: FilterState, action: InputChange, expressions: Expressions) -> ReducerResult:
    is_open = state.is_dropdown_open or state.step in SELECTING_STEPS
    return ReducerResult(
        state.evolve(
            input_value=action.value,
            selected_token_index=-1,
            all_tokens_selected=False,
            highlighted_index=0,
            is_dropdown_open=is_open,
        )
    )


@_handles(HighlightSuggestion)
def _highlight(state: FilterState, action: HighlightSuggestion, expressions: Expressions) -> ReducerResult:
    return ReducerResult(state.evolve(highlighted_index=max(action.index, 0)))


# ---------------------------------------------------------------------------
# Construction
# ---------------------------------------------------------------------------


@_handles(SelectField)
def _select_field(state: FilterState, action: SelectField, expressions: Expressions) -> ReducerResult:
    if state.step != FilterStep.SELECTING_FIELD:
        return _unchanged(state)
    field = action.field
    if action.auto_operator is not None:
        operator = action.auto_operator
        return ReducerResult(
            state.evolve(
                step=FilterStep.ENTERING_VALUE,
                current_field=field,
                current_operator=operator,
                input_value="",
                highlighted_index=0,
                is_dropdown_open=action.open_value_dropdown,
                announcement=f"Selected {field.label} with {operator.label}. Now enter a value.",
            )
        )
    return ReducerResult(
        state.evolve(
            step=FilterStep.SELECTING_OPERATOR,
            current_field=field,
            input_value="",
            highlighted_index=0,
            is_dropdown_open=True,
            announcement=f"Selected {field.label}. Now select an operator.",
        )
    )


@_handles(SelectOperator)
def _select_operator(state: FilterState, action: SelectOperator, expressions: Expressions) -> ReducerResult:
    if state.step != FilterStep.SELECTING_OPERATOR or state.current_field is None:
        return _unchanged(state)
    return ReducerResult(
        state.evolve(
            step=FilterStep.ENTERING_VALUE,
            current_operator=action.operator,
            input_value="",
            highlighted_index=0,
            is_dropdown_open=action.open_value_dropdown,
            announcement=f"Selected {action.operator.label}. Now enter a value.",
        )
    )


@_handles(ConfirmValue)
def _confirm_value(state: FilterState, action: ConfirmValue, expressions: Expressions) -> ReducerResult:
    if state.step != FilterStep.ENTERING_VALUE:
        return _unchanged(state)
    if state.current_field is None or state.current_operator is None:
        return _unchanged(state)

    expression = FilterExpression(
        condition=FilterCondition(
            field=state.current_field,
            operator=state.current_operator,
            value=action.value,
        )
    )
    updated = list(expressions)
    if updated and not updated[-1].connector:
        updated[-1] = updated[-1].with_connector(action.default_connector)
    updated.append(expression)

    return ReducerResult(
        state.evolve(
            step=FilterStep.SELECTING_CONNECTOR,
            current_field=None,
            current_operator=None,
            input_value="",
            is_dropdown_open=True,
            highlighted_index=0,
            announcement=(
                f'Filter added: value "{action.value.display}". '
                f"Select AND, OR, or press Enter to finish."
            ),
        ),
        tuple(updated),
    )


@_handles(SelectConnector)
def _select_connector(state: FilterState, action: SelectConnector, expressions: Expressions) -> ReducerResult:
    if state.step != FilterStep.SELECTING_CONNECTOR or not expressions:
        return _unchanged(state)
    updated = expressions[:-1] + (expressions[-1].with_connector(action.connector),)
    return ReducerResult(
        state.evolve(
            step=FilterStep.SELECTING_FIELD,
            input_value="",
            highlighted_index=0,
            is_dropdown_open=True,
            announcement=f"Added {action.connector} connector. Now select a field.",
        ),
        updated,
    )


@_handles(Complete)
def _complete(state: FilterState, action: Complete, expressions: Expressions) -> ReducerResult:
    if state.step != FilterStep.SELECTING_CONNECTOR:
        return _unchanged(state)
    return ReducerResult(
        state.evolve(
            step=FilterStep.IDLE,
            is_dropdown_open=False,
            input_value="",
            announcement="Filter expression complete.",
        )
    )


@_handles(DeleteLastStep)
def _delete_last_step(state: FilterState, action: DeleteLastStep, expressions: Expressions) -> ReducerResult:
    if state.step == FilterStep.ENTERING_VALUE:
        return ReducerResult(
            state.evolve(
                step=FilterStep.SELECTING_OPERATOR,
                current_operator=None,
                input_value="",
                highlighted_index=0,
                is_dropdown_open=True,
                announcement="Operator removed. Select operator.",
            )
        )
    if state.step == FilterStep.SELECTING_OPERATOR:
        return ReducerResult(
            state.evolve(
                step=FilterStep.SELECTING_FIELD,
                current_field=None,
                input_value="",
                highlighted_index=0,
                is_dropdown_open=True,
                announcement="Field removed. Select field.",
            )
        )
    return _unchanged(state)


# ---------------------------------------------------------------------------
# Deletion
# ---------------------------------------------------------------------------


@_handles(DeleteToken)
def _delete_token(state: FilterState, action: DeleteToken, expressions: Expressions) -> ReducerResult:
    tokens = project_tokens(expressions, state.current_field, state.current_operator)
    if not 0 <= action.token_index < len(tokens):
        return _unchanged(state)
    token = tokens[action.token_index]

    if token.is_pending:
        # Pending tokens unwind the expression being built
        if token.type == TokenType.OPERATOR:
            return ReducerResult(
                state.evolve(
                    step=FilterStep.SELECTING_OPERATOR,
                    current_operator=None,
                    selected_token_index=-1,
                    is_dropdown_open=True,
                    announcement="Operator removed. Select operator.",
                )
            )
        return ReducerResult(
            state.evolve(
                step=FilterStep.SELECTING_FIELD,
                current_field=None,
                current_operator=None,
                selected_token_index=-1,
                is_dropdown_open=True,
                announcement="Field removed. Select field.",
            )
        )

    index = token.expression_index
    if token.type == TokenType.CONNECTOR:
        updated = list(expressions)
        updated[index] = updated[index].with_connector(None)
        updated_tuple = tuple(updated)
        return ReducerResult(
            _after_removal(state, updated_tuple, f"Connector after filter expression {index + 1} removed."),
            updated_tuple,
        )

    building = _clear_edits(state).step in BUILDING_STEPS
    updated_tuple = remove_expression(expressions, index, trim=not building)
    return ReducerResult(
        _after_removal(state, updated_tuple, f"Filter expression {index + 1} deleted."),
        updated_tuple,
    )


@_handles(DeleteExpression)
def _delete_expression(state: FilterState, action: DeleteExpression, expressions: Expressions) -> ReducerResult:
    index = action.expression_index
    if not 0 <= index < len(expressions):
        return _unchanged(state)
    building = _clear_edits(state).step in BUILDING_STEPS
    updated = remove_expression(expressions, index, trim=not building)
    return ReducerResult(_after_removal(state, updated, f"Filter expression {index + 1} deleted."), updated)


@_handles(ClearAll)
def _clear_all(state: FilterState, action: ClearAll, expressions: Expressions) -> ReducerResult:
    return ReducerResult(INITIAL_STATE.evolve(announcement="All filters cleared."), ())


# ---------------------------------------------------------------------------
# Edit overlays
# ---------------------------------------------------------------------------


def _begin_edit(state: FilterState) -> FilterState:
    """Close any active edit so that only one overlay exists, remembering the primary step."""
    state = _clear_edits(state)
    return state.evolve(resume_step=state.step, selected_token_index=-1, all_tokens_selected=False)


def _end_edit(state: FilterState, announcement: str) -> FilterState:
    """Leave the edit overlay; a resumed selecting step gets its dropdown back."""
    state = _clear_edits(state)
    return state.evolve(
        is_dropdown_open=state.step in SELECTING_STEPS,
        input_value="",
        highlighted_index=0,
        announcement=announcement,
    )


@_handles(StartTokenEdit)
def _start_token_edit(state: FilterState, action: StartTokenEdit, expressions: Expressions) -> ReducerResult:
    tokens = project_tokens(expressions, state.current_field, state.current_operator)
    if not 0 <= action.token_index < len(tokens):
        return _unchanged(state)
    token = tokens[action.token_index]
    if token.type != TokenType.VALUE or token.is_pending:
        return _unchanged(state)
    state = _begin_edit(state)
    return ReducerResult(
        state.evolve(
            step=FilterStep.EDITING_TOKEN,
            editing_token_index=action.token_index,
            is_dropdown_open=action.open_dropdown,
            input_value="",
            highlighted_index=0,
            announcement="Editing value. Press Enter to confirm or Escape to cancel.",
        )
    )


@_handles(CompleteTokenEdit)
def _complete_token_edit(state: FilterState, action: CompleteTokenEdit, expressions: Expressions) -> ReducerResult:
    if state.step != FilterStep.EDITING_TOKEN or state.editing_token_index < 0:
        return _unchanged(state)
    tokens = project_tokens(expressions, state.current_field, state.current_operator)
    if state.editing_token_index >= len(tokens):
        return ReducerResult(_end_edit(state, "Edit cancelled."))
    token = tokens[state.editing_token_index]
    index = token.expression_index
    if token.type != TokenType.VALUE or not 0 <= index < len(expressions):
        return ReducerResult(_end_edit(state, "Edit cancelled."))

    updated = list(expressions)
    updated[index] = updated[index].with_value(action.value)
    return ReducerResult(
        _end_edit(state, f'Value changed to "{action.value.display}".'),
        tuple(updated),
    )


@_handles(CancelTokenEdit)
def _cancel_token_edit(state: FilterState, action: CancelTokenEdit, expressions: Expressions) -> ReducerResult:
    if state.step != FilterStep.EDITING_TOKEN:
        return _unchanged(state)
    return ReducerResult(_end_edit(state, "Edit cancelled."))


@_handles(StartOperatorEdit)
def _start_operator_edit(state: FilterState, action: StartOperatorEdit, expressions: Expressions) -> ReducerResult:
    if not 0 <= action.expression_index < len(expressions):
        return _unchanged(state)
    state = _begin_edit(state)
    return ReducerResult(
        state.evolve(
            editing_operator_index=action.expression_index,
            is_dropdown_open=True,
            input_value="",
            highlighted_index=0,
            announcement="Select a new operator.",
        )
    )


@_handles(CompleteOperatorEdit)
def _complete_operator_edit(
    state: FilterState, action: CompleteOperatorEdit, expressions: Expressions
) -> ReducerResult:
    index = state.editing_operator_index
    if not 0 <= index < len(expressions):
        return _unchanged(state)
    updated = list(expressions)
    updated[index] = updated[index].with_operator(action.operator)
    return ReducerResult(
        _end_edit(state, f"Operator changed to {action.operator.label}."),
        tuple(updated),
    )


@_handles(CancelOperatorEdit)
def _cancel_operator_edit(state: FilterState, action: CancelOperatorEdit, expressions: Expressions) -> ReducerResult:
    if state.editing_operator_index < 0:
        return _unchanged(state)
    return ReducerResult(_end_edit(state, "Operator edit cancelled."))


@_handles(StartConnectorEdit)
def _start_connector_edit(state: FilterState, action: StartConnectorEdit, expressions: Expressions) -> ReducerResult:
    index = action.expression_index
    if not 0 <= index < len(expressions) or not expressions[index].connector:
        return _unchanged(state)
    state = _begin_edit(state)
    return ReducerResult(
        state.evolve(
            editing_connector_index=index,
            is_dropdown_open=True,
            input_value="",
            highlighted_index=0,
            announcement="Select a new connector.",
        )
    )


@_handles(CompleteConnectorEdit)
def _complete_connector_edit(
    state: FilterState, action: CompleteConnectorEdit, expressions: Expressions
) -> ReducerResult:
    index = state.editing_connector_index
    if not 0 <= index < len(expressions):
        return _unchanged(state)
    updated = list(expressions)
    updated[index] = updated[index].with_connector(action.connector)
    return ReducerResult(
        _end_edit(state, f"Connector changed to {action.connector}."),
        tuple(updated),
    )


@_handles(CancelConnectorEdit)
def _cancel_connector_edit(
    state: FilterState, action: CancelConnectorEdit, expressions: Expressions
) -> ReducerResult:
    if state.editing_connector_index < 0:
        return _unchanged(state)
    return ReducerResult(_end_edit(state, "Connector edit cancelled."))


# ---------------------------------------------------------------------------
# Token selection and navigation
# ---------------------------------------------------------------------------


def _token_count(state: FilterState, expressions: Expressions) -> int:
    return len(project_tokens(expressions, state.current_field, state.current_operator))


@_handles(SelectToken)
def _select_token(state: FilterState, action: SelectToken, expressions: Expressions) -> ReducerResult:
    if not 0 <= action.token_index < _token_count(state, expressions):
        return _unchanged(state)
    return ReducerResult(
        state.evolve(
            selected_token_index=action.token_index,
            all_tokens_selected=False,
            is_dropdown_open=False,
        )
    )


@_handles(SelectAllTokens)
def _select_all(state: FilterState, action: SelectAllTokens, expressions: Expressions) -> ReducerResult:
    if _token_count(state, expressions) == 0:
        return _unchanged(state)
    return ReducerResult(state.evolve(all_tokens_selected=True))


@_handles(DeselectTokens)
def _deselect(state: FilterState, action: DeselectTokens, expressions: Expressions) -> ReducerResult:
    return ReducerResult(state.evolve(selected_token_index=-1, all_tokens_selected=False))


@_handles(NavigateLeft)
def _navigate_left(state: FilterState, action: NavigateLeft, expressions: Expressions) -> ReducerResult:
    count = _token_count(state, expressions)
    if count == 0:
        return _unchanged(state)
    if state.selected_token_index < 0:
        return ReducerResult(state.evolve(selected_token_index=count - 1, is_dropdown_open=False))
    if state.selected_token_index > 0:
        return ReducerResult(state.evolve(selected_token_index=state.selected_token_index - 1))
    return _unchanged(state)


@_handles(NavigateRight)
def _navigate_right(state: FilterState, action: NavigateRight, expressions: Expressions) -> ReducerResult:
    if state.selected_token_index < 0:
        return _unchanged(state)
    if state.selected_token_index < _token_count(state, expressions) - 1:
        return ReducerResult(state.evolve(selected_token_index=state.selected_token_index + 1))
    return ReducerResult(state.evolve(selected_token_index=-1))


# ---------------------------------------------------------------------------
# Misc
# ---------------------------------------------------------------------------


@_handles(SetAnnouncement)
def _set_announcement(state: FilterState, action: SetAnnouncement, expressions: Expressions) -> ReducerResult:
    return ReducerResult(state.evolve(announcement=action.message))


@_handles(CloseDropdown)
def _close_dropdown(state: FilterState, action: CloseDropdown, expressions: Expressions) -> ReducerResult:
    return ReducerResult(state.evolve(is_dropdown_open=False))


@_handles(OpenDropdown)
def _open_dropdown(state: FilterState, action: OpenDropdown, expressions: Expressions) -> ReducerResult:
    return ReducerResult(state.evolve(is_dropdown_open=True))


@_handles(Reset)
def _reset(state: FilterState, action: Reset, expressions: Expressions) -> ReducerResult:
    return ReducerResult(INITIAL_STATE)
