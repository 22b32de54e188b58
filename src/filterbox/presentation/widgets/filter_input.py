"""
FilterInput - text input that feeds its keys into a FilterEngine.

Keys the engine cares about are bound on the widget so that they reach the
engine before the Input's own editing behaviour. When the engine does not
consume a key, the Input's default action for it runs.
"""

from textual.binding import Binding
from textual.message import Message
from textual.widgets import Input

from filterbox.application.engine import FilterEngine
from filterbox.application.keyboard import KeyEvent
from filterbox.logger import get_logger

logger = get_logger("filter_input")


class FilterInput(Input):
    """Input bound to a :class:`FilterEngine`."""

    BORDER_TITLE = "Filter"

    BINDINGS = [
        Binding("up", "engine_key('up')", show=False),
        Binding("down", "engine_key('down')", show=False),
        Binding("left", "engine_key('left')", show=False),
        Binding("right", "engine_key('right')", show=False),
        Binding("enter", "engine_key('enter')", show=False),
        Binding("escape", "engine_key('escape')", show=False),
        Binding("tab", "engine_key('tab')", show=False),
        Binding("backspace", "engine_key('backspace')", show=False),
        Binding("ctrl+backspace", "engine_key('ctrl+backspace')", "Clear all"),
        Binding("delete", "engine_key('delete')", show=False),
        Binding("ctrl+a", "engine_key('ctrl+a')", "Select all"),
    ]

    class Handled(Message):
        """The engine processed an event; views should re-render."""

    def __init__(self, engine: FilterEngine, **kwargs):
        self.engine = engine
        super().__init__(placeholder=engine.placeholder, **kwargs)

    def on_focus(self) -> None:
        self.engine.handle_focus()
        self.post_message(self.Handled())

    def on_blur(self) -> None:
        self.engine.handle_blur()
        self.post_message(self.Handled())

    def action_engine_key(self, combo: str) -> None:
        event = KeyEvent.parse(combo)
        consumed = self.engine.handle_key_down(event)
        logger.debug(f"{combo}: consumed={consumed}")
        if not consumed:
            self._default_action(event)
        self.post_message(self.Handled())

    def _default_action(self, event: KeyEvent) -> None:
        if event.key == "ArrowLeft":
            self.action_cursor_left()
        elif event.key == "ArrowRight":
            self.action_cursor_right()
        elif event.key == "Backspace":
            self.action_delete_left()
        elif event.key == "Delete":
            self.action_delete_right()
        elif event.key == "Tab":
            self.screen.focus_next()
