"""
Built-in schema used by ``filterbox demo`` when no schema file is given.

The assignee field is backed by a simulated remote directory so the demo
exercises debouncing, cancellation and caching of asynchronous suggestions.
"""

import asyncio
from typing import Optional

from filterbox.application.autocompleters import (
    AsyncAutocompleter,
    DateAutocompleter,
    EnumAutocompleter,
    EnumValue,
    NumberAutocompleter,
    with_cache,
)
from filterbox.application.schema_builder import create_schema
from filterbox.config import EngineSettings
from filterbox.core.cancellation import AbortSignal
from filterbox.domain.errors import AbortError
from filterbox.domain.protocols import AutocompleteContext
from filterbox.domain.schema import FilterSchema
from filterbox.domain.types import AutocompleteItem, FieldType
from filterbox.logger import get_logger

logger = get_logger("demo_schema")

DIRECTORY = [
    ("ada", "Ada Lovelace", "Engineering"),
    ("alan", "Alan Turing", "Research"),
    ("grace", "Grace Hopper", "Engineering"),
    ("edsger", "Edsger Dijkstra", "Research"),
    ("barbara", "Barbara Liskov", "Architecture"),
    ("ken", "Ken Thompson", "Infrastructure"),
]


async def search_directory(
    query: str,
    context: AutocompleteContext,
    signal: AbortSignal,
    latency: float = 0.2,
) -> list[AutocompleteItem]:
    """Pretend to query a people directory over the network."""
    logger.debug(f"Directory lookup for {query!r}")
    await asyncio.sleep(latency)
    if signal.aborted:
        raise AbortError()
    lowered = query.lower()
    return [
        AutocompleteItem(key=key, label=name, description=team)
        for key, name, team in DIRECTORY
        if lowered in key or lowered in name.lower()
    ]


def build_demo_schema(settings: Optional[EngineSettings] = None) -> FilterSchema:
    settings = settings or EngineSettings()

    assignees = AsyncAutocompleter(
        search_directory,
        debounce=settings.debounce,
        min_chars=settings.min_chars,
    )

    return (
        create_schema()
        .field("status", "Status")
        .type(FieldType.ENUM)
        .description("Workflow state")
        .operators(["eq", "neq", "in"])
        .value_autocompleter(
            EnumAutocompleter(
                [
                    EnumValue("open", "Open", "Waiting for triage"),
                    EnumValue("in_progress", "In progress"),
                    EnumValue("closed", "Closed"),
                ]
            )
        )
        .done()
        .field("priority", "Priority")
        .type(FieldType.NUMBER)
        .default_operator("gte")
        .value_autocompleter(NumberAutocompleter(min_value=1, max_value=5, integer=True))
        .done()
        .field("assignee", "Assignee")
        .type(FieldType.STRING)
        .operators(["eq", "neq"])
        .value_autocompleter(with_cache(assignees, ttl=settings.cache_ttl))
        .done()
        .field("created", "Created")
        .type(FieldType.DATE)
        .allow_multiple(False)
        .value_autocompleter(DateAutocompleter())
        .done()
        .field("title", "Title")
        .type(FieldType.STRING)
        .done()
        .max(10)
        .allow_freeform_fields()
        .build()
    )
