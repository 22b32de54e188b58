"""
SuggestionList - the dropdown of the filter input.
"""

from typing import Sequence

from rich.text import Text
from textual.widgets import OptionList
from textual.widgets.option_list import Option

from filterbox.domain.types import AutocompleteItem
from filterbox.logger import get_logger

logger = get_logger("suggestion_list")


class SuggestionList(OptionList):
    """
    Shows the engine's suggestions. Keyboard focus stays on the input;
    the list is only clicked or driven by the engine's highlighted index.
    """

    can_focus = False

    def show_suggestions(self, items: Sequence[AutocompleteItem], highlighted: int, is_open: bool) -> None:
        self.clear_options()
        self.display = is_open and bool(items)
        if not self.display:
            return

        options = []
        for index, item in enumerate(items):
            prompt = Text(item.label)
            if item.description:
                prompt.append(f"  {item.description}", style="dim")
            options.append(Option(prompt, id=str(index), disabled=item.disabled))
        self.add_options(options)
        if 0 <= highlighted < len(items):
            self.highlighted = highlighted
        logger.debug(f"Showing {len(items)} suggestions (highlighted={highlighted})")
