"""Date and date-time value suggestions."""

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Callable, Optional, Sequence, Union

from filterbox.domain.protocols import AutocompleteContext
from filterbox.domain.types import AutocompleteItem, SuggestionType

from .base import BaseAutocompleter

__all__ = ["DatePreset", "DateAutocompleter", "DateTimeAutocompleter", "default_date_presets"]

DATE_LABEL_FORMAT = "%b %d, %Y"
DATETIME_LABEL_FORMAT = "%b %d, %Y, %I:%M %p"


@dataclass(frozen=True)
class DatePreset:
    label: str
    value: Union[date, datetime, Callable[[], Union[date, datetime]]]

    def resolve(self) -> Union[date, datetime]:
        return self.value() if callable(self.value) else self.value


def default_date_presets(today: date) -> list[DatePreset]:
    return [
        DatePreset("Today", today),
        DatePreset("Yesterday", today - timedelta(days=1)),
        DatePreset("Last 7 days", today - timedelta(days=7)),
        DatePreset("Last 30 days", today - timedelta(days=30)),
        DatePreset("Last 90 days", today - timedelta(days=90)),
    ]


class DateAutocompleter(BaseAutocompleter):
    """Offers relative-date presets and accepts typed ISO dates (``YYYY-MM-DD``).

    With no explicit presets the defaults are recomputed from ``clock`` on
    every call, so a long-lived source never serves yesterday's "Today".
    """

    def __init__(
        self,
        presets: Optional[Sequence[DatePreset]] = None,
        min_date: Optional[date] = None,
        max_date: Optional[date] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.presets = list(presets) if presets is not None else None
        self.min_date = min_date
        self.max_date = max_date
        self.clock = clock

    def _presets(self) -> list[DatePreset]:
        if self.presets is not None:
            return self.presets
        return default_date_presets(self.clock().date())

    def _as_date(self, value: Union[date, datetime]) -> date:
        return value.date() if isinstance(value, datetime) else value

    def _in_range(self, value: date) -> bool:
        if self.min_date is not None and value < self.min_date:
            return False
        if self.max_date is not None and value > self.max_date:
            return False
        return True

    def _item(self, value: date, label: Optional[str] = None) -> AutocompleteItem:
        return AutocompleteItem(
            type=SuggestionType.VALUE,
            key=value.isoformat(),
            label=label or value.strftime(DATE_LABEL_FORMAT),
            description=value.isoformat() if label else None,
        )

    def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        query = context.input_value.strip()
        items: list[AutocompleteItem] = []

        parsed = self.parse(query) if query else None
        if parsed is not None and self._in_range(parsed):
            items.append(self._item(parsed))

        lowered = query.lower()
        for preset in self._presets():
            value = self._as_date(preset.resolve())
            if lowered and lowered not in preset.label.lower():
                continue
            if self._in_range(value):
                items.append(self._item(value, preset.label))
        return items

    def parse(self, text: str, context: Optional[AutocompleteContext] = None) -> Optional[date]:
        try:
            return date.fromisoformat(text.strip())
        except ValueError:
            return None

    def format(self, value: Any, context: Optional[AutocompleteContext] = None) -> str:
        if isinstance(value, (date, datetime)):
            return self._as_date(value).strftime(DATE_LABEL_FORMAT)
        return str(value)

    def validate(self, value: Any, context: Optional[AutocompleteContext] = None) -> bool:
        if isinstance(value, str):
            value = self.parse(value)
        if not isinstance(value, date):
            return False
        return self._in_range(self._as_date(value))


class DateTimeAutocompleter(BaseAutocompleter):
    """Like :class:`DateAutocompleter` with minute precision (ISO ``YYYY-MM-DDTHH:MM``)."""

    def __init__(
        self,
        presets: Optional[Sequence[DatePreset]] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.presets = list(presets) if presets is not None else None
        self.clock = clock

    def _presets(self) -> list[DatePreset]:
        if self.presets is not None:
            return self.presets
        now = self.clock().replace(second=0, microsecond=0)
        return [
            DatePreset("Now", now),
            DatePreset("1 hour ago", now - timedelta(hours=1)),
            DatePreset("24 hours ago", now - timedelta(hours=24)),
            DatePreset("7 days ago", now - timedelta(days=7)),
        ]

    def _item(self, value: datetime, label: Optional[str] = None) -> AutocompleteItem:
        key = value.isoformat(timespec="minutes")
        return AutocompleteItem(
            type=SuggestionType.VALUE,
            key=key,
            label=label or value.strftime(DATETIME_LABEL_FORMAT),
            description=key if label else None,
        )

    def get_suggestions(self, context: AutocompleteContext) -> list[AutocompleteItem]:
        query = context.input_value.strip()
        items: list[AutocompleteItem] = []

        parsed = self.parse(query) if query else None
        if parsed is not None:
            items.append(self._item(parsed))

        lowered = query.lower()
        for preset in self._presets():
            if lowered and lowered not in preset.label.lower():
                continue
            value = preset.resolve()
            if not isinstance(value, datetime):
                value = datetime(value.year, value.month, value.day)
            items.append(self._item(value, preset.label))
        return items

    def parse(self, text: str, context: Optional[AutocompleteContext] = None) -> Optional[datetime]:
        try:
            return datetime.fromisoformat(text.strip())
        except ValueError:
            return None

    def format(self, value: Any, context: Optional[AutocompleteContext] = None) -> str:
        if isinstance(value, datetime):
            return value.strftime(DATETIME_LABEL_FORMAT)
        return str(value)

    def validate(self, value: Any, context: Optional[AutocompleteContext] = None) -> bool:
        if isinstance(value, str):
            value = self.parse(value)
        return isinstance(value, datetime)
