"""Stateful wrapper around the pure reducer.

:class:`FilterStateMachine` owns the current :class:`FilterState` and the
latest expression snapshot, applies actions one at a time, and logs each
primary-step transition.
"""

from typing import Callable, Iterable, Optional, Type

from filterbox.domain.types import FilterExpression, FilterStep, TokenData
from filterbox.logger import get_logger

from .actions import (
    INITIAL_STATE,
    Blur,
    CancelConnectorEdit,
    CancelOperatorEdit,
    CancelTokenEdit,
    Complete,
    CompleteConnectorEdit,
    CompleteOperatorEdit,
    CompleteTokenEdit,
    ConfirmValue,
    DeleteLastStep,
    FilterAction,
    FilterState,
    Focus,
    SelectConnector,
    SelectField,
    SelectOperator,
)
from .reducer import ReducerResult, filter_reducer, handled_actions
from .tokens import project_tokens

logger = get_logger("state_machine")

__all__ = ["FilterStateMachine", "STEP_ACTIONS", "TransitionListener"]

STEP_ACTIONS: dict[FilterStep, frozenset[Type[FilterAction]]] = {
    FilterStep.IDLE: frozenset({Focus}),
    FilterStep.SELECTING_FIELD: frozenset({SelectField, Blur}),
    FilterStep.SELECTING_OPERATOR: frozenset({SelectOperator, Blur, DeleteLastStep}),
    FilterStep.ENTERING_VALUE: frozenset({ConfirmValue, Blur, DeleteLastStep}),
    FilterStep.SELECTING_CONNECTOR: frozenset({SelectConnector, Complete, Blur}),
    FilterStep.EDITING_TOKEN: frozenset({CompleteTokenEdit, CancelTokenEdit, Blur}),
}
"""Construction actions accepted in each primary step."""

_STEP_GATED: frozenset[Type[FilterAction]] = frozenset().union(*STEP_ACTIONS.values()) | {
    CompleteOperatorEdit,
    CancelOperatorEdit,
    CompleteConnectorEdit,
    CancelConnectorEdit,
}

TransitionListener = Callable[[FilterState, FilterState, FilterAction], None]


class FilterStateMachine:
    """Holds reducer state and the expression snapshot it operates on."""

    def __init__(
        self,
        expressions: Iterable[FilterExpression] = (),
        state: FilterState = INITIAL_STATE,
    ):
        self._state = state
        self._expressions: tuple[FilterExpression, ...] = tuple(expressions)
        self._listeners: list[TransitionListener] = []

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def step(self) -> FilterStep:
        return self._state.step

    @property
    def expressions(self) -> tuple[FilterExpression, ...]:
        return self._expressions

    @property
    def tokens(self) -> tuple[TokenData, ...]:
        return project_tokens(self._expressions, self._state.current_field, self._state.current_operator)

    def load_expressions(self, expressions: Iterable[FilterExpression]) -> None:
        """Replace the expression snapshot without touching the step (external sync)."""
        self._expressions = tuple(expressions)

    def add_listener(self, listener: TransitionListener) -> None:
        self._listeners.append(listener)

    def available_actions(self) -> frozenset[Type[FilterAction]]:
        """Every action type the reducer would act on in the current state."""
        state = self._state
        gated = set(STEP_ACTIONS.get(state.step, frozenset()))
        if state.editing_operator_index >= 0:
            gated |= {CompleteOperatorEdit, CancelOperatorEdit}
        if state.editing_connector_index >= 0:
            gated |= {CompleteConnectorEdit, CancelConnectorEdit}
        return frozenset(gated) | (handled_actions() - _STEP_GATED)

    def can_dispatch(self, action: FilterAction) -> bool:
        return type(action) in self.available_actions()

    def dispatch(self, action: FilterAction) -> ReducerResult:
        """Apply ``action`` and adopt the resulting state and expressions."""
        previous = self._state
        result = filter_reducer(previous, action, self._expressions)
        self._state = result.state
        if result.expressions is not None:
            self._expressions = result.expressions

        if previous.step != result.state.step:
            logger.debug(f"{type(action).__name__}: {previous.step.value} -> {result.state.step.value}")
        if result.state is not previous:
            for listener in list(self._listeners):
                listener(previous, result.state, action)
        return result

    def reset(self, expressions: Optional[Iterable[FilterExpression]] = None) -> None:
        self._state = INITIAL_STATE
        if expressions is not None:
            self._expressions = tuple(expressions)
