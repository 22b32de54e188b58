import asyncio

import pytest

from filterbox.application.autocompleters import DynamicAutocompleter, LazyAutocompleter, StaticAutocompleter
from filterbox.domain.protocols import AutocompleteContext
from filterbox.domain.schema import FieldConfig
from filterbox.domain.types import AutocompleteItem


def keys(items):
    return [item.key for item in items]


@pytest.mark.asyncio
async def test_loads_once_for_concurrent_requests():
    loads = []

    async def loader():
        loads.append(1)
        await asyncio.sleep(0.01)
        return StaticAutocompleter(["red", "blue"])

    source = LazyAutocompleter(loader)
    assert not source.is_loaded

    results = await asyncio.gather(
        source.get_suggestions(AutocompleteContext(input_value="re")),
        source.get_suggestions(AutocompleteContext(input_value="bl")),
    )

    assert loads == [1]
    assert source.is_loaded
    assert [keys(items) for items in results] == [["red"], ["blue"]]


@pytest.mark.asyncio
async def test_failed_load_serves_fallback_and_retries():
    attempts = []
    errors = []

    async def loader():
        attempts.append(1)
        if len(attempts) == 1:
            raise OSError("catalog unavailable")
        return StaticAutocompleter(["loaded"])

    fallback = [AutocompleteItem(key="fallback", label="Fallback")]
    source = LazyAutocompleter(loader, fallback_items=fallback, on_error=errors.append)

    first = await source.get_suggestions(AutocompleteContext(input_value=""))
    second = await source.get_suggestions(AutocompleteContext(input_value=""))

    assert keys(first) == ["fallback"]
    assert isinstance(errors[0], OSError)
    assert keys(second) == ["loaded"]


@pytest.mark.asyncio
async def test_dynamic_picks_loader_by_field():
    async def countries():
        return StaticAutocompleter(["France", "Japan"])

    async def anything():
        return StaticAutocompleter(["other"])

    source = DynamicAutocompleter({"country": countries, "default": anything})

    by_field = await source.get_suggestions(
        AutocompleteContext(input_value="", field=FieldConfig(key="country", label="Country"))
    )
    fallback = await source.get_suggestions(
        AutocompleteContext(input_value="", field=FieldConfig(key="city", label="City"))
    )

    assert keys(by_field) == ["France", "Japan"]
    assert keys(fallback) == ["other"]


@pytest.mark.asyncio
async def test_dynamic_without_match_returns_nothing():
    async def countries():
        return StaticAutocompleter(["France"])

    source = DynamicAutocompleter({"country": countries})

    assert await source.get_suggestions(AutocompleteContext(input_value="", field=FieldConfig(key="x", label="X"))) == []
