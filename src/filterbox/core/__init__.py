"""State machine, reducer and token projection."""

from .actions import (
    INITIAL_STATE,
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
from .cancellation import AbortController, AbortSignal
from .reducer import ReducerResult, filter_reducer, remove_expression
from .selectors import (
    select_is_token_editable,
    select_placeholder,
    select_suggestions,
    select_token_expression_index,
    select_tokens,
)
from .state_machine import FilterStateMachine
from .store import ExpressionStore
from .tokens import count_tokens, project_tokens

__all__ = [
    "INITIAL_STATE",
    "AbortController",
    "AbortSignal",
    "Blur",
    "CancelConnectorEdit",
    "CancelOperatorEdit",
    "CancelTokenEdit",
    "ClearAll",
    "CloseDropdown",
    "Complete",
    "CompleteConnectorEdit",
    "CompleteOperatorEdit",
    "CompleteTokenEdit",
    "ConfirmValue",
    "DeleteExpression",
    "DeleteLastStep",
    "DeleteToken",
    "DeselectTokens",
    "ExpressionStore",
    "FilterAction",
    "FilterState",
    "FilterStateMachine",
    "Focus",
    "HighlightSuggestion",
    "InputChange",
    "NavigateLeft",
    "NavigateRight",
    "OpenDropdown",
    "ReducerResult",
    "Reset",
    "SelectAllTokens",
    "SelectConnector",
    "SelectField",
    "SelectOperator",
    "SelectToken",
    "SetAnnouncement",
    "StartConnectorEdit",
    "StartOperatorEdit",
    "StartTokenEdit",
    "count_tokens",
    "filter_reducer",
    "project_tokens",
    "remove_expression",
    "select_is_token_editable",
    "select_placeholder",
    "select_suggestions",
    "select_token_expression_index",
    "select_tokens",
]
