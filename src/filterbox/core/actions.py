"""Reducer state and actions.

Every action is a small frozen dataclass. The reducer dispatches on the
action's type, so adding an action means adding a class here and a
handler in :mod:`filterbox.core.reducer`.
"""

from dataclasses import dataclass, replace
from typing import Optional

from filterbox.domain.types import (
    ConditionValue,
    Connector,
    EditMode,
    FieldValue,
    FilterStep,
    OperatorValue,
)

__all__ = [
    "FilterState",
    "INITIAL_STATE",
    "FilterAction",
    "Focus",
    "Blur",
    "InputChange",
    "HighlightSuggestion",
    "SelectField",
    "SelectOperator",
    "ConfirmValue",
    "SelectConnector",
    "Complete",
    "DeleteLastStep",
    "DeleteToken",
    "DeleteExpression",
    "ClearAll",
    "StartTokenEdit",
    "CompleteTokenEdit",
    "CancelTokenEdit",
    "StartOperatorEdit",
    "CompleteOperatorEdit",
    "CancelOperatorEdit",
    "StartConnectorEdit",
    "CompleteConnectorEdit",
    "CancelConnectorEdit",
    "SelectToken",
    "SelectAllTokens",
    "DeselectTokens",
    "NavigateLeft",
    "NavigateRight",
    "SetAnnouncement",
    "CloseDropdown",
    "OpenDropdown",
    "Reset",
]

BUILDING_STEPS = frozenset(
    {FilterStep.SELECTING_FIELD, FilterStep.SELECTING_OPERATOR, FilterStep.ENTERING_VALUE}
)
SELECTING_STEPS = frozenset(
    {FilterStep.SELECTING_FIELD, FilterStep.SELECTING_OPERATOR, FilterStep.SELECTING_CONNECTOR}
)


@dataclass(frozen=True, slots=True)
class FilterState:
    """Ephemeral, engine-owned state of one filter input."""

    step: FilterStep = FilterStep.IDLE
    is_dropdown_open: bool = False
    input_value: str = ""
    highlighted_index: int = 0
    editing_token_index: int = -1
    selected_token_index: int = -1
    all_tokens_selected: bool = False
    current_field: Optional[FieldValue] = None
    current_operator: Optional[OperatorValue] = None
    editing_operator_index: int = -1
    editing_connector_index: int = -1
    resume_step: Optional[FilterStep] = None
    """Primary step to return to when the active edit completes or is cancelled."""
    announcement: str = ""

    @property
    def mode(self) -> EditMode:
        if self.editing_operator_index >= 0:
            return EditMode.EDITING_OPERATOR
        if self.editing_connector_index >= 0:
            return EditMode.EDITING_CONNECTOR
        if self.step == FilterStep.EDITING_TOKEN:
            return EditMode.EDITING_VALUE
        if self.step in BUILDING_STEPS or self.step == FilterStep.SELECTING_CONNECTOR:
            return EditMode.BUILDING
        return EditMode.IDLE

    @property
    def is_editing(self) -> bool:
        return self.mode in (EditMode.EDITING_VALUE, EditMode.EDITING_OPERATOR, EditMode.EDITING_CONNECTOR)

    @property
    def primary_step(self) -> FilterStep:
        """The construction step, looking through an active edit overlay."""
        if self.is_editing and self.resume_step is not None:
            return self.resume_step
        return self.step

    def evolve(self, **changes) -> "FilterState":
        return replace(self, **changes)


INITIAL_STATE = FilterState()


class FilterAction:
    """Marker base class for reducer actions."""

    __slots__ = ()


@dataclass(frozen=True, slots=True)
class Focus(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class Blur(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class InputChange(FilterAction):
    value: str


@dataclass(frozen=True, slots=True)
class HighlightSuggestion(FilterAction):
    index: int


@dataclass(frozen=True, slots=True)
class SelectField(FilterAction):
    field: FieldValue
    auto_operator: Optional[OperatorValue] = None
    """Set when the field has exactly one operator; the operator step is skipped."""
    open_value_dropdown: bool = False
    """Keep the dropdown open after auto-advancing (value suggestions or a custom widget exist)."""


@dataclass(frozen=True, slots=True)
class SelectOperator(FilterAction):
    operator: OperatorValue
    open_value_dropdown: bool = False


@dataclass(frozen=True, slots=True)
class ConfirmValue(FilterAction):
    value: ConditionValue
    default_connector: Connector = "AND"
    """Applied to the previous last expression when it has no connector."""


@dataclass(frozen=True, slots=True)
class SelectConnector(FilterAction):
    connector: Connector


@dataclass(frozen=True, slots=True)
class Complete(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class DeleteLastStep(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class DeleteToken(FilterAction):
    token_index: int


@dataclass(frozen=True, slots=True)
class DeleteExpression(FilterAction):
    expression_index: int


@dataclass(frozen=True, slots=True)
class ClearAll(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class StartTokenEdit(FilterAction):
    token_index: int
    open_dropdown: bool = False


@dataclass(frozen=True, slots=True)
class CompleteTokenEdit(FilterAction):
    value: ConditionValue


@dataclass(frozen=True, slots=True)
class CancelTokenEdit(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class StartOperatorEdit(FilterAction):
    expression_index: int


@dataclass(frozen=True, slots=True)
class CompleteOperatorEdit(FilterAction):
    operator: OperatorValue


@dataclass(frozen=True, slots=True)
class CancelOperatorEdit(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class StartConnectorEdit(FilterAction):
    expression_index: int


@dataclass(frozen=True, slots=True)
class CompleteConnectorEdit(FilterAction):
    connector: Connector


@dataclass(frozen=True, slots=True)
class CancelConnectorEdit(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class SelectToken(FilterAction):
    token_index: int


@dataclass(frozen=True, slots=True)
class SelectAllTokens(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class DeselectTokens(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class NavigateLeft(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class NavigateRight(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class SetAnnouncement(FilterAction):
    message: str


@dataclass(frozen=True, slots=True)
class CloseDropdown(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class OpenDropdown(FilterAction):
    pass


@dataclass(frozen=True, slots=True)
class Reset(FilterAction):
    pass
