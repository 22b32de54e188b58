"""Key events fed into the engine by front-ends."""

from dataclasses import dataclass

__all__ = ["KeyEvent", "Keys"]


class Keys:
    """Key names understood by :meth:`FilterEngine.handle_key_down`."""

    ARROW_UP = "ArrowUp"
    ARROW_DOWN = "ArrowDown"
    ARROW_LEFT = "ArrowLeft"
    ARROW_RIGHT = "ArrowRight"
    ENTER = "Enter"
    ESCAPE = "Escape"
    TAB = "Tab"
    BACKSPACE = "Backspace"
    DELETE = "Delete"


_ALIASES = {
    "up": Keys.ARROW_UP,
    "down": Keys.ARROW_DOWN,
    "left": Keys.ARROW_LEFT,
    "right": Keys.ARROW_RIGHT,
    "enter": Keys.ENTER,
    "return": Keys.ENTER,
    "escape": Keys.ESCAPE,
    "esc": Keys.ESCAPE,
    "tab": Keys.TAB,
    "backspace": Keys.BACKSPACE,
    "delete": Keys.DELETE,
}


@dataclass(frozen=True, slots=True)
class KeyEvent:
    key: str
    ctrl: bool = False
    shift: bool = False
    meta: bool = False

    @classmethod
    def parse(cls, combo: str) -> "KeyEvent":
        """Build an event from a ``+``-joined combination such as ``"ctrl+backspace"``.

        Named keys are normalised (``"left"`` -> ``"ArrowLeft"``); anything
        else is kept as the key itself.
        """
        *modifiers, key = combo.split("+") if combo != "+" else ["+"]
        lowered = {modifier.lower() for modifier in modifiers}
        return cls(
            key=_ALIASES.get(key.lower(), key),
            ctrl="ctrl" in lowered,
            shift="shift" in lowered,
            meta="meta" in lowered or "cmd" in lowered,
        )

    @property
    def is_character(self) -> bool:
        """A single printable character typed without Ctrl/Meta."""
        return len(self.key) == 1 and not (self.ctrl or self.meta)
