"""
Textual widgets for the filterbox demo.
"""

from .filter_input import FilterInput
from .suggestion_list import SuggestionList
from .token_bar import TokenBar, render_tokens

__all__ = [
    "FilterInput",
    "SuggestionList",
    "TokenBar",
    "render_tokens",
]
