"""Date range presets and date/datetime boundary conversion."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, timezone
from typing import Union

DateLike = Union[date, datetime]

START_OF_DAY = time(0, 0, 0)
END_OF_DAY = time(23, 59, 59)

# Accepted target representations.  "datetime" and "utc_datetime" both mean
# a timezone-aware UTC datetime.
DATE = "date"
DATETIME = "datetime"
UTC_DATETIME = "utc_datetime"
NAIVE_DATETIME = "naive_datetime"

_AWARE_TARGETS = frozenset({DATETIME, UTC_DATETIME})
_TARGETS = frozenset({DATE, NAIVE_DATETIME}) | _AWARE_TARGETS

PRESET_LABELS: dict[str, str] = {
    "today": "Today",
    "tomorrow": "Tomorrow",
    "yesterday": "Yesterday",
    "last_7_days": "Last 7 days",
    "next_7_days": "Next 7 days",
    "last_30_days": "Last 30 days",
    "next_30_days": "Next 30 days",
    "this_month": "This month",
    "last_month": "Last month",
    "this_year": "This year",
    "last_year": "Last year",
}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def _last_day_of_month(day: date) -> date:
    return day.replace(day=calendar.monthrange(day.year, day.month)[1])


def _preset_dates(name: str, today: date) -> tuple[date, date] | None:
    if name == "today":
        return today, today
    if name == "tomorrow":
        tomorrow = today + timedelta(days=1)
        return tomorrow, tomorrow
    if name == "yesterday":
        yesterday = today - timedelta(days=1)
        return yesterday, yesterday
    if name == "last_7_days":
        return today - timedelta(days=6), today
    if name == "next_7_days":
        return today, today + timedelta(days=6)
    if name == "last_30_days":
        return today - timedelta(days=29), today
    if name == "next_30_days":
        return today, today + timedelta(days=29)
    if name == "this_month":
        first = today.replace(day=1)
        return first, _last_day_of_month(first)
    if name == "last_month":
        last = today.replace(day=1) - timedelta(days=1)
        return last.replace(day=1), last
    if name == "this_year":
        return date(today.year, 1, 1), date(today.year, 12, 31)
    if name == "last_year":
        return date(today.year - 1, 1, 1), date(today.year - 1, 12, 31)
    return None


def resolve_preset(
    name: str,
    target_type: str = DATE,
    today: date | None = None,
) -> tuple[DateLike, DateLike] | None:
    """Resolve a named preset to a concrete inclusive range.

    Args:
        name: Preset name such as ``"last_7_days"``.
        target_type: Representation for the boundaries (``"date"``,
            ``"datetime"``, ``"utc_datetime"`` or ``"naive_datetime"``).
        today: Reference day; defaults to today in UTC.

    Returns:
        ``(start, end)`` or None for an unknown preset.
    """
    if today is None:
        today = utc_today()
    dates = _preset_dates(name, today)
    if dates is None:
        return None
    return convert_range_to_type(dates, target_type)


def parse_date_range(
    value: object,
    target_type: str = DATE,
    today: date | None = None,
) -> tuple[DateLike, DateLike] | None:
    """Turn a preset name or a ``(start, end)`` pair into a typed range."""
    if value is None:
        return None
    if isinstance(value, str):
        return resolve_preset(value, target_type, today=today)
    if isinstance(value, (tuple, list)) and len(value) == 2:
        start, end = value
        if isinstance(start, date) and isinstance(end, date):
            return convert_range_to_type((start, end), target_type)
    return None


def convert_range_to_type(
    date_range: tuple[DateLike, DateLike], target_type: str
) -> tuple[DateLike, DateLike]:
    start, end = date_range
    return (
        convert_to_type(start, target_type, "start"),
        convert_to_type(end, target_type, "end"),
    )


def convert_to_type(value: DateLike, target_type: str, position: str = "start") -> DateLike:
    """Convert a date or datetime to the target representation.

    A bare date becomes a timestamp at 00:00:00 when ``position`` is
    ``"start"`` and at 23:59:59 when it is ``"end"``, so a range on a
    timestamp column covers the whole last day.  Datetimes converted to
    ``"date"`` lose their time of day.  Values already in the target
    representation are returned unchanged.
    """
    target_type = str(target_type)
    if target_type not in _TARGETS:
        return value

    if isinstance(value, datetime):
        if target_type == DATE:
            return value.date()
        if target_type == NAIVE_DATETIME:
            if value.tzinfo is None:
                return value
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    # Plain date from here on.
    if target_type == DATE:
        return value
    boundary = END_OF_DAY if position == "end" else START_OF_DAY
    combined = datetime.combine(value, boundary)
    if target_type == NAIVE_DATETIME:
        return combined
    return combined.replace(tzinfo=timezone.utc)


def date_presets() -> list[dict[str, str]]:
    """Preset options for date pickers, in display order."""
    order = [
        "today",
        "yesterday",
        "last_7_days",
        "last_30_days",
        "this_month",
        "last_month",
        "this_year",
        "last_year",
    ]
    return [{"label": PRESET_LABELS[name], "value": name} for name in order]


def preset_names() -> list[str]:
    return list(PRESET_LABELS)
