"""
TokenBar - renders the projected tokens of the filter engine.
"""

from typing import Sequence

from rich.text import Text
from textual.widgets import Static

from filterbox.domain.types import ConditionValue, TokenData, TokenType

TOKEN_STYLES: dict[TokenType, str] = {
    TokenType.FIELD: "bold cyan",
    TokenType.OPERATOR: "magenta",
    TokenType.VALUE: "green",
    TokenType.CONNECTOR: "bold yellow",
}


def token_label(token: TokenData) -> str:
    if isinstance(token.value, ConditionValue):
        return token.value.display
    return token.value.label


def render_tokens(
    tokens: Sequence[TokenData],
    selected_index: int = -1,
    all_selected: bool = False,
    editing_index: int = -1,
) -> Text:
    """Build the rich text shown in the token bar."""
    text = Text()
    for index, token in enumerate(tokens):
        style = TOKEN_STYLES[token.type]
        if token.is_pending:
            style += " dim"
        if all_selected or index == selected_index:
            style += " reverse"
        if index == editing_index:
            style += " underline"
        label = token_label(token)
        if index:
            text.append(" ")
        text.append(f" {label} ", style=style)
    return text


class TokenBar(Static):
    """One line of styled tokens above the filter input."""

    BORDER_TITLE = "Filters"

    def show_tokens(
        self,
        tokens: Sequence[TokenData],
        selected_index: int = -1,
        all_selected: bool = False,
        editing_index: int = -1,
    ) -> None:
        if not tokens:
            self.update(Text("No filters", style="dim italic"))
            return
        self.update(render_tokens(tokens, selected_index, all_selected, editing_index))
