import pytest

from filterbox.application.autocompleters import (
    EnumAutocompleter,
    EnumValue,
    MatchMode,
    StaticAutocompleter,
    fuzzy_match,
)
from filterbox.domain.protocols import AutocompleteContext, Autocompleter
from filterbox.domain.types import AutocompleteItem


def keys(items):
    return [item.key for item in items]


class TestStaticAutocompleter:
    def test_substring_match_is_case_insensitive_by_default(self):
        source = StaticAutocompleter(["Open", "Reopened", "Closed"])

        assert keys(source.get_suggestions(AutocompleteContext(input_value="open"))) == ["Open", "Reopened"]

    def test_prefix_match(self):
        source = StaticAutocompleter(["open", "reopened"], match_mode="prefix")

        assert keys(source.get_suggestions(AutocompleteContext(input_value="op"))) == ["open"]

    def test_fuzzy_match(self):
        source = StaticAutocompleter(["in_progress", "open"], match_mode=MatchMode.FUZZY)

        assert keys(source.get_suggestions(AutocompleteContext(input_value="ipg"))) == ["in_progress"]
        assert fuzzy_match("abc", "ac")
        assert not fuzzy_match("abc", "ca")

    def test_case_sensitive(self):
        source = StaticAutocompleter(["Open", "open"], case_sensitive=True)

        assert keys(source.get_suggestions(AutocompleteContext(input_value="O"))) == ["Open"]

    def test_empty_input_returns_capped_list(self):
        source = StaticAutocompleter(["a", "b", "c"], max_results=2)

        assert keys(source.get_suggestions(AutocompleteContext(input_value=""))) == ["a", "b"]

    def test_accepts_prebuilt_items(self):
        item = AutocompleteItem(key="p1", label="Project One")
        source = StaticAutocompleter([item])

        assert source.get_suggestions(AutocompleteContext(input_value="one")) == [item]

    def test_satisfies_protocol(self):
        assert isinstance(StaticAutocompleter([]), Autocompleter)


class TestEnumAutocompleter:
    @pytest.fixture
    def source(self):
        return EnumAutocompleter(
            [EnumValue("open", "Open", "Waiting for triage"), EnumValue("closed", "Closed"), "pending"]
        )

    def test_searches_label_and_description(self, source):
        assert keys(source.get_suggestions(AutocompleteContext(input_value="triage"))) == ["open"]
        assert keys(source.get_suggestions(AutocompleteContext(input_value="clo"))) == ["closed"]

    def test_not_searchable_returns_everything(self):
        source = EnumAutocompleter(["a", "b"], searchable=False)

        assert keys(source.get_suggestions(AutocompleteContext(input_value="zzz"))) == ["a", "b"]

    def test_validate_membership(self, source):
        assert source.validate("open")
        assert source.validate("pending")
        assert not source.validate("archived")
        assert not source.validate(["open", "closed"])

    def test_validate_lists_when_multiple_allowed(self):
        source = EnumAutocompleter(["a", "b"], allow_multiple=True)

        assert source.validate(["a", "b"])
        assert not source.validate(["a", "c"])
        assert not source.validate([])
