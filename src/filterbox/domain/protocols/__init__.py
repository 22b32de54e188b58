"""Protocols implemented by pluggable collaborators."""

from .autocompleter import AutocompleteContext, Autocompleter, CustomWidget, SuggestionResult
from .cache import Cache

__all__ = ["AutocompleteContext", "Autocompleter", "Cache", "CustomWidget", "SuggestionResult"]
