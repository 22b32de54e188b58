"""Common base for the built-in suggestion sources."""

from typing import Any, Optional

from filterbox.domain.protocols import AutocompleteContext, Autocompleter, CustomWidget, SuggestionResult
from filterbox.domain.types import AutocompleteItem
from filterbox.utils import resolve

__all__ = ["BaseAutocompleter", "WrappingAutocompleter", "fetch_suggestions"]


async def fetch_suggestions(autocompleter: Autocompleter, context: AutocompleteContext) -> list[AutocompleteItem]:
    """Ask ``autocompleter`` for suggestions, awaiting the answer if needed."""
    return list(await resolve(autocompleter.get_suggestions(context)))


class BaseAutocompleter:
    """Default implementations of the optional autocompleter capabilities.

    Subclasses implement :meth:`get_suggestions`; ``validate`` accepts
    anything, ``format`` falls back to ``str`` and ``parse`` returns the text
    unchanged.
    """

    custom_widget: Optional[CustomWidget] = None

    def get_suggestions(self, context: AutocompleteContext) -> SuggestionResult:
        raise NotImplementedError

    def validate(self, value: Any, context: Optional[AutocompleteContext] = None) -> bool:
        return True

    def format(self, value: Any, context: Optional[AutocompleteContext] = None) -> str:
        return str(value)

    def parse(self, text: str, context: Optional[AutocompleteContext] = None) -> Any:
        return text


class WrappingAutocompleter(BaseAutocompleter):
    """A source that decorates another one and forwards its optional capabilities."""

    def __init__(self, inner: Autocompleter):
        self.inner = inner

    @property
    def custom_widget(self) -> Optional[CustomWidget]:  # type: ignore[override]
        return getattr(self.inner, "custom_widget", None)

    def validate(self, value: Any, context: Optional[AutocompleteContext] = None) -> bool:
        validate = getattr(self.inner, "validate", None)
        return validate(value, context) if validate is not None else True

    def format(self, value: Any, context: Optional[AutocompleteContext] = None) -> str:
        format_value = getattr(self.inner, "format", None)
        return format_value(value, context) if format_value is not None else str(value)

    def parse(self, text: str, context: Optional[AutocompleteContext] = None) -> Any:
        parse = getattr(self.inner, "parse", None)
        return parse(text, context) if parse is not None else text
