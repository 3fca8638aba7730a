"""Conversion helpers for values arriving from URLs, forms and config."""

from __future__ import annotations

import enum
from datetime import date, datetime
from typing import Any

from live_filter.exceptions import ValidationError


def to_wire(value: Any) -> Any:
    """Render a scalar the way it appears in a URL parameter.

    Dates and datetimes become ISO-8601, enums and booleans become their
    lowercase string form.  Anything else is passed through untouched.
    """
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, enum.Enum):
        return str(value.value)
    return value


def from_wire(value: Any) -> Any:
    """Best-effort typing of a string taken off the wire.

    ``"true"``/``"false"`` always become booleans.  Otherwise an ISO-8601
    datetime is tried first, then an ISO-8601 date.  Strings that match
    neither are returned as-is, so numbers and enum values stay strings.
    """
    if not isinstance(value, str):
        return value
    if value == "true":
        return True
    if value == "false":
        return False
    parsed = _parse_iso_datetime(value)
    if parsed is not None:
        return parsed
    if len(value) != 10 or value[4] != "-":
        return value
    try:
        return date.fromisoformat(value)
    except ValueError:
        return value


def _parse_iso_datetime(value: str) -> datetime | None:
    # A bare date also satisfies datetime.fromisoformat on newer Pythons,
    # so require a time separator first.
    if len(value) <= 10 or value[10] not in ("T", " "):
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


def convert_value(value: Any, kind: str) -> Any:
    """Convert ``value`` to ``kind`` (string, integer, float or boolean).

    Raises:
        ValidationError: If the value cannot be converted.
    """
    if kind == "string":
        if isinstance(value, enum.Enum):
            return str(value.value)
        return str(value)

    if kind == "integer":
        if isinstance(value, bool):
            raise ValidationError("integer", value, f"not an integer: {value!r}")
        if isinstance(value, int):
            return value
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                pass
        raise ValidationError("integer", value, f"not an integer: {value!r}")

    if kind == "float":
        if isinstance(value, bool):
            raise ValidationError("float", value, f"not a number: {value!r}")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                pass
        raise ValidationError("float", value, f"not a number: {value!r}")

    if kind == "boolean":
        if isinstance(value, bool):
            return value
        if value == "true":
            return True
        if value == "false":
            return False
        raise ValidationError("boolean", value, f"not a boolean: {value!r}")

    raise ValidationError(kind, value, f"cannot convert {value!r} to {kind}")
