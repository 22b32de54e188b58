"""Command dispatcher for one filter input.

:class:`FilterEngine` turns focus, typing, key presses and pointer
selections into reducer actions, fetches value suggestions from the
schema's autocompleters, validates values before they are committed and
publishes the outcome on an :class:`EventBus`.

Example:
    >>> store = ExpressionStore()
    >>> engine = FilterEngine(schema, on_change=store.replace)
    >>> engine.handle_focus()
    >>> engine.handle_select(engine.suggestions[0])
"""

import asyncio
import inspect
import re
from typing import Any, Awaitable, Callable, Iterable, Optional

from filterbox.core.actions import (
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
    SelectAllTokens,
    SelectConnector,
    SelectField,
    SelectOperator,
    SetAnnouncement,
    StartConnectorEdit,
    StartOperatorEdit,
    StartTokenEdit,
)
from filterbox.core.reducer import ReducerResult
from filterbox.core.selectors import FREEFORM_METADATA_KEY, select_placeholder, select_suggestions
from filterbox.core.state_machine import FilterStateMachine
from filterbox.domain.errors import AbortError
from filterbox.domain.events import EventBus, ExpressionsChanged, StepChanged, SuggestionsUpdated, ValidationFailed
from filterbox.domain.protocols import AutocompleteContext, Autocompleter, CustomWidget
from filterbox.domain.schema import FieldConfig, FilterSchema, OperatorConfig, ValidationContext
from filterbox.domain.types import (
    AutocompleteItem,
    ConditionValue,
    FilterExpression,
    FilterStep,
    SuggestionType,
    TokenData,
    TokenType,
    ValidationError,
)
from filterbox.logger import get_logger

from .keyboard import KeyEvent, Keys
from .validation import validate_expressions

logger = get_logger("engine")

__all__ = ["FilterEngine"]

ChangeHandler = Callable[[list[FilterExpression]], None]
ErrorHandler = Callable[[list[ValidationError]], None]

_VALUE_STEPS = frozenset({FilterStep.ENTERING_VALUE, FilterStep.EDITING_TOKEN})


class FilterEngine:
    """Drives a :class:`FilterStateMachine` from user input.

    Args:
        schema: Fields, operators and hooks available to the user
        expressions: Initial committed expressions (never mutated)
        on_change: Called with a new list after every commit, edit or delete
        on_error: Called with the errors when a value or the list fails validation
        bus: Event bus to publish on; a private one is created when omitted
    """

    def __init__(
        self,
        schema: FilterSchema,
        expressions: Iterable[FilterExpression] = (),
        on_change: Optional[ChangeHandler] = None,
        on_error: Optional[ErrorHandler] = None,
        bus: Optional[EventBus] = None,
    ):
        self.schema = schema
        self.bus = bus or EventBus()
        self._machine = FilterStateMachine(expressions)
        self._freeform_fields: dict[str, FieldConfig] = {}
        self._value_suggestions: list[AutocompleteItem] = []
        self._suggestion_generation = 0
        self._tasks: set[asyncio.Task] = set()

        if on_change is not None:
            self.bus.subscribe(ExpressionsChanged, lambda event: on_change(list(event.expressions)))
        if on_error is not None:
            self.bus.subscribe(ValidationFailed, lambda event: on_error(list(event.errors)))

    # ------------------------------------------------------------------
    # Read-only view
    # ------------------------------------------------------------------

    @property
    def state(self) -> FilterState:
        return self._machine.state

    @property
    def step(self) -> FilterStep:
        return self._machine.step

    @property
    def expressions(self) -> tuple[FilterExpression, ...]:
        return self._machine.expressions

    @property
    def tokens(self) -> tuple[TokenData, ...]:
        return self._machine.tokens

    @property
    def input_value(self) -> str:
        return self.state.input_value

    @property
    def is_dropdown_open(self) -> bool:
        return self.state.is_dropdown_open

    @property
    def highlighted_index(self) -> int:
        return self.state.highlighted_index

    @property
    def announcement(self) -> str:
        return self.state.announcement

    @property
    def placeholder(self) -> str:
        return select_placeholder(self.step, self.schema)

    @property
    def suggestions(self) -> list[AutocompleteItem]:
        state = self.state
        if state.editing_operator_index < 0 and state.editing_connector_index < 0 and state.step in _VALUE_STEPS:
            return list(self._value_suggestions)
        return select_suggestions(state, self.schema, self.expressions)

    @property
    def highlighted_item(self) -> Optional[AutocompleteItem]:
        suggestions = self.suggestions
        index = self.state.highlighted_index
        if 0 <= index < len(suggestions):
            return suggestions[index]
        return None

    @property
    def current_field_config(self) -> Optional[FieldConfig]:
        field = self.state.current_field
        return self._field_config(field.key) if field is not None else None

    @property
    def current_operator_config(self) -> Optional[OperatorConfig]:
        field = self.current_field_config
        operator = self.state.current_operator
        if field is None or operator is None:
            return None
        return field.find_operator(operator.key)

    @property
    def active_custom_widget(self) -> Optional[CustomWidget]:
        """The operator's custom input while a value is being entered."""
        if self.step != FilterStep.ENTERING_VALUE:
            return None
        operator = self.current_operator_config
        return operator.custom_input if operator is not None else None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _field_config(self, key: str) -> Optional[FieldConfig]:
        field = self.schema.find_field(key)
        if field is None:
            field = self._freeform_fields.get(key)
        if field is None:
            field = self.schema.resolve_field(key)
        return field

    def _dispatch(self, action: FilterAction) -> ReducerResult:
        previous = self._machine.state
        previous_expressions = self._machine.expressions
        result = self._machine.dispatch(action)

        if result.expressions is not None and result.expressions != previous_expressions:
            self._publish_change(result.expressions)
        if previous.step != result.state.step:
            self.bus.publish(StepChanged(step=result.state.step, previous_step=previous.step))
        return result

    def _publish_change(self, expressions: tuple[FilterExpression, ...]) -> None:
        self.bus.publish(ExpressionsChanged(expressions=list(expressions)))
        result = validate_expressions(expressions, self.schema)
        if not result.valid:
            logger.debug(f"Expression list invalid: {[error.message for error in result.errors]}")
            self.bus.publish(ValidationFailed(errors=list(result.errors)))

    def _value_target(self) -> tuple[Optional[FieldConfig], Optional[OperatorConfig]]:
        """Field and operator whose value is being entered or edited."""
        state = self.state
        if state.step == FilterStep.EDITING_TOKEN:
            tokens = self.tokens
            if not 0 <= state.editing_token_index < len(tokens):
                return None, None
            index = tokens[state.editing_token_index].expression_index
            condition = self.expressions[index].condition
            field = self._field_config(condition.field.key)
            operator = field.find_operator(condition.operator.key) if field is not None else None
            return field, operator
        return self.current_field_config, self.current_operator_config

    def _value_autocompleter(
        self, field: Optional[FieldConfig], operator: Optional[OperatorConfig]
    ) -> Optional[Autocompleter]:
        if operator is not None and operator.value_autocompleter is not None:
            return operator.value_autocompleter
        if field is not None:
            return field.value_autocompleter
        return None

    def _context(self, field: Optional[FieldConfig], operator: Optional[OperatorConfig]) -> AutocompleteContext:
        return AutocompleteContext(
            input_value=self.state.input_value,
            field=field,
            operator=operator,
            existing_expressions=list(self.expressions),
            schema=self.schema,
        )

    def _has_value_source(self, field: Optional[FieldConfig], operator: Optional[OperatorConfig]) -> bool:
        if operator is not None and operator.custom_input is not None:
            return True
        return self._value_autocompleter(field, operator) is not None

    def _set_value_suggestions(self, generation: int, items: list[AutocompleteItem], query: str) -> None:
        if generation != self._suggestion_generation:
            logger.debug(f"Discarding stale suggestions for {query!r}")
            return
        self._value_suggestions = items
        if items and self.state.highlighted_index >= len(items):
            self._dispatch(HighlightSuggestion(0))
        self.bus.publish(SuggestionsUpdated(suggestions=list(items), query=query))

    async def _await_suggestions(self, generation: int, pending: Awaitable[list[AutocompleteItem]], query: str):
        try:
            items = list(await pending)
        except AbortError:
            items = []
        except Exception:
            logger.exception(f"Suggestion source failed for {query!r}")
            items = []
        self._set_value_suggestions(generation, items, query)
        return items if generation == self._suggestion_generation else []

    def _start_fetch(self) -> tuple[int, Optional[Any], str]:
        """Ask the current value source for suggestions; returns (generation, result, query)."""
        self._suggestion_generation += 1
        generation = self._suggestion_generation
        query = self.state.input_value

        if self.state.step not in _VALUE_STEPS:
            self._value_suggestions = []
            return generation, None, query

        field, operator = self._value_target()
        autocompleter = self._value_autocompleter(field, operator)
        if autocompleter is None:
            self._value_suggestions = []
            return generation, None, query

        logger.debug(f"Fetching value suggestions for {query!r}")
        try:
            return generation, autocompleter.get_suggestions(self._context(field, operator)), query
        except AbortError:
            self._value_suggestions = []
        except Exception:
            logger.exception(f"Suggestion source failed for {query!r}")
            self._value_suggestions = []
        return generation, None, query

    def _refresh_value_suggestions(self) -> None:
        """Refresh value suggestions, in the background when the source is asynchronous."""
        generation, result, query = self._start_fetch()
        if result is None:
            return
        if not inspect.isawaitable(result):
            self._set_value_suggestions(generation, list(result), query)
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("No running event loop; call load_suggestions() to fetch asynchronous suggestions")
            if inspect.iscoroutine(result):
                result.close()
            return
        task = loop.create_task(self._await_suggestions(generation, result, query))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _invalidate_suggestions(self) -> None:
        self._suggestion_generation += 1
        self._value_suggestions = []

    async def load_suggestions(self) -> list[AutocompleteItem]:
        """Fetch value suggestions for the current input and wait for them."""
        generation, result, query = self._start_fetch()
        if result is None:
            return list(self._value_suggestions)
        if not inspect.isawaitable(result):
            self._set_value_suggestions(generation, list(result), query)
            return list(result)
        return await self._await_suggestions(generation, result, query)

    async def wait_for_suggestions(self) -> None:
        """Wait for background suggestion fetches started by input handlers."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _build_value(self, text: str, field: Optional[FieldConfig], operator: Optional[OperatorConfig]) -> ConditionValue:
        if operator is not None and operator.multi_value is not None:
            separator = operator.multi_value.separator
            pattern = rf"\s+{re.escape(separator)}\s+" if separator.isalpha() else rf"\s*{re.escape(separator)}\s*"
            parts = [part for part in re.split(pattern, text) if part]
            joiner = f" {separator} " if separator.isalpha() else f"{separator} "
            return ConditionValue(raw=parts, display=joiner.join(parts), serialized=",".join(parts))

        raw: Any = text
        parse = getattr(self._value_autocompleter(field, operator), "parse", None)
        if parse is not None:
            parsed = parse(text, self._context(field, operator))
            if parsed is not None:
                raw = parsed
        return ConditionValue(raw=raw, display=text, serialized=text)

    def _value_errors(
        self, value: ConditionValue, field: Optional[FieldConfig], operator: Optional[OperatorConfig]
    ) -> list[ValidationError]:
        if field is None or operator is None:
            return []
        errors: list[ValidationError] = []
        context = self._context(field, operator)
        candidates = value.raw if operator.multi_value is not None and isinstance(value.raw, list) else [value.raw]

        validate = getattr(self._value_autocompleter(field, operator), "validate", None)
        if validate is not None and not all(validate(candidate, context) for candidate in candidates):
            errors.append(
                ValidationError(type="value", message=f'Invalid value "{value.display}" for {field.label}', field=field.key)
            )

        widget = operator.custom_input
        widget_validate = getattr(widget, "validate", None)
        if widget_validate is not None and not widget_validate(value.raw):
            errors.append(
                ValidationError(type="value", message=f'Invalid value "{value.display}" for {field.label}', field=field.key)
            )

        if field.validate is not None:
            result = field.validate(
                value,
                ValidationContext(field=field, operator=operator, expressions=list(self.expressions), schema=self.schema),
            )
            errors.extend(result.errors)
        return errors

    def _reject(self, errors: list[ValidationError]) -> None:
        logger.debug(f"Value rejected: {[error.message for error in errors]}")
        self.bus.publish(ValidationFailed(errors=errors))
        self._dispatch(SetAnnouncement(errors[0].message))

    def _confirm(self, value: ConditionValue) -> bool:
        errors = self._value_errors(value, self.current_field_config, self.current_operator_config)
        if errors:
            self._reject(errors)
            return False
        self._dispatch(ConfirmValue(value, default_connector=self.schema.default_connector))
        self._invalidate_suggestions()
        return True

    def _complete_edit(self, value: ConditionValue) -> bool:
        field, operator = self._value_target()
        errors = self._value_errors(value, field, operator)
        if errors:
            self._reject(errors)
            return False
        self._dispatch(CompleteTokenEdit(value))
        self._invalidate_suggestions()
        return True

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def set_expressions(self, expressions: Iterable[FilterExpression]) -> None:
        """Adopt an externally changed expression list without reporting it back."""
        self._machine.load_expressions(expressions)

    def handle_focus(self) -> None:
        self._dispatch(Focus())
        self._refresh_value_suggestions()

    def handle_blur(self) -> None:
        self._dispatch(Blur())
        self._invalidate_suggestions()

    def handle_input_change(self, value: str) -> None:
        self._dispatch(InputChange(value))
        if self.state.step in _VALUE_STEPS:
            self._refresh_value_suggestions()

    def handle_highlight(self, index: int) -> None:
        self._dispatch(HighlightSuggestion(index))

    def handle_select(self, item: AutocompleteItem) -> None:
        """Apply a suggestion picked from the dropdown."""
        if item.disabled:
            return
        state = self.state

        if state.editing_connector_index >= 0:
            if item.type == SuggestionType.CONNECTOR and item.key in ("AND", "OR"):
                self._dispatch(CompleteConnectorEdit(item.key))  # type: ignore[arg-type]
            return

        if state.editing_operator_index >= 0:
            if item.type == SuggestionType.OPERATOR and state.editing_operator_index < len(self.expressions):
                condition = self.expressions[state.editing_operator_index].condition
                field = self._field_config(condition.field.key)
                operator = field.find_operator(item.key) if field is not None else None
                if operator is not None:
                    self._dispatch(CompleteOperatorEdit(operator.to_value()))
            return

        if state.step == FilterStep.SELECTING_FIELD:
            self._select_field(item)
        elif state.step == FilterStep.SELECTING_OPERATOR:
            self._select_operator(item)
        elif state.step == FilterStep.ENTERING_VALUE:
            self._confirm(self._value_from_item(item))
        elif state.step == FilterStep.EDITING_TOKEN:
            self._complete_edit(self._value_from_item(item))
        elif state.step == FilterStep.SELECTING_CONNECTOR:
            if item.type == SuggestionType.CONNECTOR and item.key in ("AND", "OR"):
                self._dispatch(SelectConnector(item.key))  # type: ignore[arg-type]

    def _value_from_item(self, item: AutocompleteItem) -> ConditionValue:
        return ConditionValue(raw=item.key, display=item.label, serialized=item.key)

    def _select_field(self, item: AutocompleteItem) -> None:
        if isinstance(item.metadata, dict) and item.metadata.get(FREEFORM_METADATA_KEY):
            field = self.schema.freeform_field(item.key)
            self._freeform_fields[field.key] = field
            logger.info(f"Created freeform field {field.key!r}")
        else:
            field = self.schema.find_field(item.key)
        if field is None or not field.operators:
            return

        if len(field.operators) == 1:
            operator = field.operators[0]
            self._dispatch(
                SelectField(
                    field.to_value(),
                    auto_operator=operator.to_value(),
                    open_value_dropdown=self._has_value_source(field, operator),
                )
            )
            self._refresh_value_suggestions()
            return

        self._dispatch(SelectField(field.to_value()))
        if field.default_operator is not None:
            keys = [operator.key for operator in field.operators]
            if field.default_operator in keys:
                self._dispatch(HighlightSuggestion(keys.index(field.default_operator)))

    def _select_operator(self, item: AutocompleteItem) -> None:
        field = self.current_field_config
        operator = field.find_operator(item.key) if field is not None else None
        if operator is None:
            return
        self._dispatch(
            SelectOperator(operator.to_value(), open_value_dropdown=self._has_value_source(field, operator))
        )
        self._refresh_value_suggestions()

    def handle_confirm_value(self) -> bool:
        """Commit the typed text as the value (or as the edited token's new value)."""
        text = self.state.input_value.strip()
        if not text:
            return False
        if self.step == FilterStep.ENTERING_VALUE:
            field, operator = self.current_field_config, self.current_operator_config
            return self._confirm(self._build_value(text, field, operator))
        if self.step == FilterStep.EDITING_TOKEN:
            field, operator = self._value_target()
            return self._complete_edit(self._build_value(text, field, operator))
        return False

    def handle_custom_widget_confirm(self, value: Any, display: str) -> bool:
        if self.step != FilterStep.ENTERING_VALUE:
            return False
        widget = self.active_custom_widget
        serialize = getattr(widget, "serialize", None)
        serialized = serialize(value) if serialize is not None else str(value)
        return self._confirm(ConditionValue(raw=value, display=display, serialized=serialized))

    def handle_custom_widget_cancel(self) -> None:
        if self.step != FilterStep.ENTERING_VALUE:
            return
        self._dispatch(DeleteLastStep())
        self._dispatch(SetAnnouncement("Value input cancelled. Select an operator."))
        self._invalidate_suggestions()

    def handle_clear(self) -> None:
        self._dispatch(ClearAll())
        self._invalidate_suggestions()

    def handle_token_edit(self, token_index: int) -> None:
        tokens = self.tokens
        if not 0 <= token_index < len(tokens) or tokens[token_index].is_pending:
            return
        condition = self.expressions[tokens[token_index].expression_index].condition
        field = self._field_config(condition.field.key)
        operator = field.find_operator(condition.operator.key) if field is not None else None
        self._dispatch(StartTokenEdit(token_index, open_dropdown=self._has_value_source(field, operator)))
        self._refresh_value_suggestions()

    def handle_token_edit_complete(self, value: ConditionValue) -> bool:
        if self.step != FilterStep.EDITING_TOKEN:
            return False
        return self._complete_edit(value)

    def handle_token_edit_cancel(self) -> None:
        self._dispatch(CancelTokenEdit())
        self._invalidate_suggestions()

    def handle_operator_edit(self, expression_index: int) -> None:
        self._dispatch(StartOperatorEdit(expression_index))

    def handle_operator_edit_cancel(self) -> None:
        self._dispatch(CancelOperatorEdit())

    def handle_connector_edit(self, expression_index: int) -> None:
        self._dispatch(StartConnectorEdit(expression_index))

    def handle_connector_edit_cancel(self) -> None:
        self._dispatch(CancelConnectorEdit())

    def handle_expression_delete(self, expression_index: int) -> None:
        self._dispatch(DeleteExpression(expression_index))

    def handle_token_delete(self, token_index: int) -> None:
        self._dispatch(DeleteToken(token_index))
        if self.state.step not in _VALUE_STEPS:
            self._invalidate_suggestions()

    def _start_edit_for_selected(self) -> None:
        tokens = self.tokens
        token = tokens[self.state.selected_token_index]
        if token.is_pending:
            return
        if token.type == TokenType.VALUE:
            self.handle_token_edit(self.state.selected_token_index)
        elif token.type == TokenType.OPERATOR:
            self.handle_operator_edit(token.expression_index)
        elif token.type == TokenType.CONNECTOR:
            self.handle_connector_edit(token.expression_index)

    def handle_key_down(self, event: KeyEvent) -> bool:
        """
        React to a key press.

        Returns:
            True when the key was consumed and the front-end should not
            apply its default behaviour
        """
        state = self.state
        key = event.key

        if key == Keys.ARROW_DOWN:
            count = len(self.suggestions)
            if count:
                self._dispatch(HighlightSuggestion(min(state.highlighted_index + 1, count - 1)))
            return True

        if key == Keys.ARROW_UP:
            self._dispatch(HighlightSuggestion(max(state.highlighted_index - 1, 0)))
            return True

        if key == Keys.ARROW_LEFT:
            if state.input_value == "" and self.tokens:
                self._dispatch(NavigateLeft())
                return True
            return False

        if key == Keys.ARROW_RIGHT:
            if state.selected_token_index >= 0:
                self._dispatch(NavigateRight())
                return True
            return False

        if key == Keys.ENTER:
            if state.selected_token_index >= 0 and state.input_value == "":
                self._start_edit_for_selected()
            elif state.is_dropdown_open and self.highlighted_item is not None:
                self.handle_select(self.highlighted_item)
            elif state.step in _VALUE_STEPS:
                self.handle_confirm_value()
            elif state.step == FilterStep.SELECTING_CONNECTOR and state.input_value == "":
                self._dispatch(Complete())
            return True

        if key == Keys.ESCAPE:
            if state.editing_operator_index >= 0:
                self.handle_operator_edit_cancel()
            elif state.editing_connector_index >= 0:
                self.handle_connector_edit_cancel()
            elif state.step == FilterStep.EDITING_TOKEN:
                self.handle_token_edit_cancel()
            elif state.selected_token_index >= 0 or state.all_tokens_selected:
                self._dispatch(DeselectTokens())
            else:
                self._dispatch(CloseDropdown())
            return True

        if key == Keys.TAB:
            if state.is_dropdown_open and self.highlighted_item is not None:
                self.handle_select(self.highlighted_item)
                return True
            return False

        if key == Keys.BACKSPACE:
            return self._handle_backspace(event)

        if key == Keys.DELETE:
            if state.all_tokens_selected:
                self.handle_clear()
                return True
            if state.selected_token_index >= 0:
                self.handle_token_delete(state.selected_token_index)
                return True
            return False

        if key.lower() == "a" and (event.ctrl or event.meta) and state.input_value == "":
            if self.tokens:
                self._dispatch(SelectAllTokens())
                return True
            return False

        if event.is_character and (state.selected_token_index >= 0 or state.all_tokens_selected):
            self._dispatch(DeselectTokens())
        return False

    def _handle_backspace(self, event: KeyEvent) -> bool:
        state = self.state
        if event.ctrl:
            if self.tokens:
                self.handle_clear()
                return True
            return False
        if state.input_value:
            return False
        if state.all_tokens_selected:
            self.handle_clear()
            return True
        if state.selected_token_index >= 0:
            self.handle_token_delete(state.selected_token_index)
            return True
        if state.step in (FilterStep.ENTERING_VALUE, FilterStep.SELECTING_OPERATOR):
            self._dispatch(DeleteLastStep())
            self._invalidate_suggestions()
            return True
        if self.tokens:
            self._dispatch(NavigateLeft())
            return True
        return False
