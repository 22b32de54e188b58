import asyncio

import pytest

from filterbox.application.autocompleters import AsyncAutocompleter
from filterbox.domain.errors import AbortError
from filterbox.domain.protocols import AutocompleteContext
from filterbox.domain.types import AutocompleteItem


def ctx(text: str) -> AutocompleteContext:
    return AutocompleteContext(input_value=text)


class RecordingFetch:
    def __init__(self):
        self.queries = []

    async def __call__(self, query, context, signal):
        self.queries.append(query)
        return [AutocompleteItem(key=query, label=query.title())]


@pytest.mark.asyncio
async def test_rapid_typing_fetches_once():
    fetch = RecordingFetch()
    source = AsyncAutocompleter(fetch, debounce=0.05)

    results = await asyncio.gather(*(source.get_suggestions(ctx(q)) for q in ["a", "al", "ali"]))

    assert fetch.queries == ["ali"]
    assert results[0] == []
    assert results[1] == []
    assert [item.key for item in results[2]] == ["ali"]


@pytest.mark.asyncio
async def test_cancel_aborts_in_flight_fetch():
    started = asyncio.Event()
    seen_signals = []

    async def fetch(query, context, signal):
        seen_signals.append(signal)
        started.set()
        await signal.wait()
        raise AbortError()

    source = AsyncAutocompleter(fetch, debounce=0)
    task = asyncio.create_task(source.get_suggestions(ctx("al")))
    await started.wait()

    source.cancel()

    assert await task == []
    assert seen_signals[0].aborted


@pytest.mark.asyncio
async def test_superseded_result_is_discarded_even_if_fetch_ignores_abort():
    release = asyncio.Event()

    async def fetch(query, context, signal):
        if query == "slow":
            await release.wait()
        return [AutocompleteItem(key=query, label=query)]

    source = AsyncAutocompleter(fetch, debounce=0, cache_results=False)
    slow = asyncio.create_task(source.get_suggestions(ctx("slow")))
    await asyncio.sleep(0)

    fast = await source.get_suggestions(ctx("fast"))
    release.set()

    assert [item.key for item in fast] == ["fast"]
    assert await slow == []


@pytest.mark.asyncio
async def test_results_are_cached_per_query():
    fetch = RecordingFetch()
    source = AsyncAutocompleter(fetch, debounce=0)

    first = await source.get_suggestions(ctx("bob"))
    second = await source.get_suggestions(ctx("bob"))

    assert first == second
    assert fetch.queries == ["bob"]

    source.clear_cache()
    await source.get_suggestions(ctx("bob"))
    assert fetch.queries == ["bob", "bob"]


@pytest.mark.asyncio
async def test_short_queries_are_not_fetched():
    fetch = RecordingFetch()
    source = AsyncAutocompleter(fetch, debounce=0, min_chars=3)

    assert await source.get_suggestions(ctx("ab")) == []
    assert fetch.queries == []


@pytest.mark.asyncio
async def test_fetch_errors_propagate():
    async def fetch(query, context, signal):
        raise ConnectionError("directory unavailable")

    source = AsyncAutocompleter(fetch, debounce=0)

    with pytest.raises(ConnectionError):
        await source.get_suggestions(ctx("bob"))


@pytest.mark.asyncio
async def test_new_request_aborts_previous_signal():
    started = asyncio.Event()
    signals = {}

    async def fetch(query, context, signal):
        signals[query] = signal
        if query == "slow":
            started.set()
            await signal.wait()
        return [AutocompleteItem(key=query, label=query)]

    source = AsyncAutocompleter(fetch, debounce=0, cache_results=False)
    slow = asyncio.create_task(source.get_suggestions(ctx("slow")))
    await started.wait()

    await source.get_suggestions(ctx("fast"))

    assert signals["slow"].aborted
    assert not signals["fast"].aborted
    assert await slow == []


@pytest.mark.asyncio
async def test_failure_after_abort_resolves_empty():
    started = asyncio.Event()

    async def fetch(query, context, signal):
        if query == "slow":
            started.set()
            await signal.wait()
            raise ConnectionError("connection reset after abort")
        return [AutocompleteItem(key=query, label=query)]

    source = AsyncAutocompleter(fetch, debounce=0, cache_results=False)
    slow = asyncio.create_task(source.get_suggestions(ctx("slow")))
    await started.wait()

    fast = await source.get_suggestions(ctx("fast"))

    assert [item.key for item in fast] == ["fast"]
    assert await slow == []
