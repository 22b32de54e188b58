"""
FilterApp - interactive Textual front-end for a FilterEngine.

Renders the token bar, the filter input and the suggestion dropdown, and
shows the current filter as a display string and a query string.
"""

from typing import Iterable, Optional

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import Footer, Header, Input, OptionList, Static

from filterbox.application.engine import FilterEngine
from filterbox.application.serialization import to_display_string, to_query_string
from filterbox.core.store import ExpressionStore
from filterbox.domain.events import StepChanged, SuggestionsUpdated
from filterbox.domain.schema import FilterSchema
from filterbox.domain.types import FilterExpression, ValidationError
from filterbox.logger import get_logger
from filterbox.presentation.widgets import FilterInput, SuggestionList, TokenBar

logger = get_logger("filter_app")


class FilterApp(App):
    """Build filter expressions from the keyboard."""

    TITLE = "filterbox"
    SUB_TITLE = "Interactive filter expressions"
    CSS_PATH = "styles.tcss"

    BINDINGS = [
        Binding("ctrl+q", "quit", "Quit", priority=True),
        Binding("ctrl+l", "clear_filters", "Clear", priority=True),
    ]

    def __init__(
        self,
        schema: FilterSchema,
        expressions: Iterable[FilterExpression] = (),
        store: Optional[ExpressionStore] = None,
    ):
        super().__init__()
        self.schema = schema
        self.store = store or ExpressionStore(expressions)
        self.engine = FilterEngine(
            schema,
            self.store.expressions,
            on_change=self.store.replace,
            on_error=self._on_errors,
        )
        self.engine.bus.subscribe(SuggestionsUpdated, self._on_suggestions_updated)
        self.engine.bus.subscribe(StepChanged, self._on_step_changed)
        self._errors: list[ValidationError] = []

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical(id="filter-panel"):
            yield TokenBar(id="tokens")
            yield FilterInput(self.engine, id="filter-input")
            yield SuggestionList(id="suggestions")
            yield Static(id="announcement")
        yield Static(id="summary")
        yield Footer()

    def on_mount(self) -> None:
        self.query_one(FilterInput).focus()
        self.refresh_view()

    # Engine callbacks

    def _on_errors(self, errors: list[ValidationError]) -> None:
        self._errors = errors
        for error in errors:
            logger.info(f"Validation error: {error.message}")

    def _on_suggestions_updated(self, event: SuggestionsUpdated) -> None:
        self.refresh_view()

    def _on_step_changed(self, event: StepChanged) -> None:
        self._errors = []

    # Textual events

    def on_input_changed(self, event: Input.Changed) -> None:
        if event.value != self.engine.input_value:
            self.engine.handle_input_change(event.value)
        self.refresh_view()

    def on_filter_input_handled(self, message: FilterInput.Handled) -> None:
        self.refresh_view()

    def on_option_list_option_selected(self, event: OptionList.OptionSelected) -> None:
        if event.option_id is None:
            return
        suggestions = self.engine.suggestions
        index = int(event.option_id)
        if 0 <= index < len(suggestions):
            self.engine.handle_select(suggestions[index])
        self.query_one(FilterInput).focus()
        self.refresh_view()

    def action_clear_filters(self) -> None:
        self.engine.handle_clear()
        self.refresh_view()

    # Rendering

    def refresh_view(self) -> None:
        """Copy engine state into the widgets."""
        engine = self.engine
        state = engine.state

        self.query_one(TokenBar).show_tokens(
            engine.tokens,
            selected_index=state.selected_token_index,
            all_selected=state.all_tokens_selected,
            editing_index=state.editing_token_index,
        )

        filter_input = self.query_one(FilterInput)
        filter_input.placeholder = engine.placeholder
        if filter_input.value != engine.input_value:
            filter_input.value = engine.input_value

        self.query_one(SuggestionList).show_suggestions(
            engine.suggestions, engine.highlighted_index, engine.is_dropdown_open
        )

        messages = [error.message for error in self._errors]
        if engine.announcement:
            messages.append(engine.announcement)
        self.query_one("#announcement", Static).update("\n".join(messages))

        expressions = self.store.expressions
        if expressions:
            summary = f"{to_display_string(expressions)}\n?{to_query_string(expressions)}"
        else:
            summary = ""
        self.query_one("#summary", Static).update(summary)
