"""Pluggable field kinds.

A field kind knows how to turn UI input into a filter value and back, which
operators it supports, and how to validate a value.  Built-in types and
application-defined kinds implement the same ``FieldKind`` protocol; nothing
inherits from a shared base class.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Protocol, runtime_checkable

from live_filter.exceptions import ValidationError
from live_filter.filters.ast_nodes import Filter, FilterGroup
from live_filter.filters.coerce import convert_value, from_wire, to_wire
from live_filter.filters.vocabulary import (
    FieldType,
    Operator,
    default_operator,
    input_component_for,
    operators_for,
)


@runtime_checkable
class FieldKind(Protocol):
    def to_filter_value(self, ui_value: Any) -> Any: ...

    def to_ui_value(self, filter_value: Any) -> Any: ...

    def default_operator(self) -> Operator: ...

    def validate(self, value: Any) -> None:
        """Raise ``ValidationError`` if ``value`` is not acceptable."""
        ...

    def operators(self) -> list[Operator]: ...

    def ui_component(self) -> str | None: ...


def _to_integer(value: Any) -> int | None:
    try:
        return convert_value(value, "integer")
    except ValidationError:
        return None


def _to_float(value: Any) -> float | None:
    try:
        return convert_value(value, "float")
    except ValidationError:
        return None


def _to_boolean(value: Any) -> bool | None:
    try:
        return convert_value(value, "boolean")
    except ValidationError:
        return None


def _to_date(value: Any) -> date | None:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        try:
            return date.fromisoformat(value)
        except ValueError:
            return None
    return None


def _to_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if isinstance(value, str):
        parsed = from_wire(value)
        if isinstance(parsed, datetime):
            return parsed
    return None


@dataclass(frozen=True)
class BuiltinField:
    """``FieldKind`` for one of the built-in vocabulary types."""

    type: FieldType

    def to_filter_value(self, ui_value: Any) -> Any:
        """Convert form input into a filter value; None means "ignore"."""
        ft = self.type
        if ft in (FieldType.STRING, FieldType.TEXT):
            if ui_value is None or ui_value == "":
                return None
            return ui_value if isinstance(ui_value, str) else str(to_wire(ui_value))
        if ft == FieldType.INTEGER:
            return _to_integer(ui_value)
        if ft == FieldType.FLOAT:
            return _to_float(ui_value)
        if ft == FieldType.BOOLEAN:
            return _to_boolean(ui_value)
        if ft == FieldType.DATE:
            return _to_date(ui_value)
        if ft == FieldType.DATETIME:
            return _to_datetime(ui_value)
        if ft in (FieldType.ENUM, FieldType.SELECT_SEARCH):
            if isinstance(ui_value, (str, list, tuple)):
                return ui_value
            return None
        if ft in (FieldType.ARRAY, FieldType.MULTI_SELECT):
            if isinstance(ui_value, (list, tuple)):
                return list(ui_value)
            if isinstance(ui_value, str):
                return [ui_value]
            return []
        return ui_value

    def to_ui_value(self, filter_value: Any) -> Any:
        ft = self.type
        if ft in (FieldType.STRING, FieldType.TEXT):
            return "" if filter_value is None else str(filter_value)
        if ft == FieldType.BOOLEAN:
            return filter_value is True
        if ft in (FieldType.DATE, FieldType.DATETIME) and isinstance(filter_value, date):
            return filter_value.isoformat()
        if ft in (FieldType.ARRAY, FieldType.MULTI_SELECT):
            return list(filter_value or [])
        return filter_value

    def default_operator(self) -> Operator:
        return default_operator(self.type)

    def validate(self, value: Any) -> None:
        ft = self.type
        if ft in (FieldType.STRING, FieldType.TEXT, FieldType.TEXT_SEARCH):
            ok = isinstance(value, str)
        elif ft == FieldType.INTEGER:
            ok = isinstance(value, int) and not isinstance(value, bool)
        elif ft == FieldType.FLOAT:
            ok = isinstance(value, (int, float)) and not isinstance(value, bool)
        elif ft == FieldType.BOOLEAN:
            ok = isinstance(value, bool)
        elif ft == FieldType.DATE:
            ok = isinstance(value, date) and not isinstance(value, datetime)
        elif ft == FieldType.DATETIME:
            ok = isinstance(value, datetime)
        elif ft in (FieldType.ENUM, FieldType.SELECT_SEARCH):
            ok = isinstance(value, str)
        else:
            ok = isinstance(value, (list, tuple))
        if not ok:
            raise ValidationError(str(ft), value, f"expected a {ft} value, got {value!r}")

    def operators(self) -> list[Operator]:
        return operators_for(self.type)

    def ui_component(self) -> str | None:
        return input_component_for(self.type, self.default_operator())


@dataclass(frozen=True)
class ChoiceField:
    """A closed set of choices, optionally with named shortcuts.

    ``aliases`` maps a UI shortcut (``"high_and_up"``) to the list of
    choices it stands for.  Filter values are always lists of choices.

    Example::

        priority = ChoiceField(
            choices=("low", "medium", "high", "urgent"),
            aliases={"high_and_up": ("high", "urgent")},
        )
        priority.to_filter_value("high_and_up")  # ["high", "urgent"]
    """

    choices: tuple[str, ...]
    aliases: Mapping[str, Sequence[str]] = field(default_factory=dict)
    operator: Operator = Operator.IN

    def to_filter_value(self, ui_value: Any) -> list[str] | None:
        if isinstance(ui_value, str):
            if ui_value in self.aliases:
                return list(self.aliases[ui_value])
            if ui_value in self.choices:
                return [ui_value]
            return None
        if isinstance(ui_value, (list, tuple)):
            picked = [v for v in ui_value if v in self.choices]
            return picked or None
        return None

    def to_ui_value(self, filter_value: Any) -> Any:
        if not filter_value:
            return None
        values = list(filter_value)
        for alias, expanded in self.aliases.items():
            if list(expanded) == values:
                return alias
        if len(values) == 1:
            return values[0]
        return values

    def default_operator(self) -> Operator:
        return self.operator

    def validate(self, value: Any) -> None:
        values = value if isinstance(value, (list, tuple)) else [value]
        unknown = [v for v in values if v not in self.choices]
        if unknown:
            joined = ", ".join(map(str, unknown))
            raise ValidationError("choice", value, f"unknown choices: {joined}")

    def operators(self) -> list[Operator]:
        return [Operator.IN, Operator.NOT_IN, Operator.EQUALS]

    def ui_component(self) -> str | None:
        return "multi_select_search"


def retype_filter(flt: Filter, kind: FieldKind | None = None) -> Filter:
    """Re-apply typed coercion to a filter whose values arrived as strings.

    Decoding a URL leaves numbers and enum values as strings.  Callers that
    need typed values run decoded filters through this.  A value that can't
    be converted is kept as it was.
    """
    if flt.value is None:
        return flt
    if kind is None:
        kind = BuiltinField(flt.type)

    if not isinstance(kind, BuiltinField):
        converted = kind.to_filter_value(flt.value)
        return flt if converted is None else flt.replace(value=converted)

    def convert(item: Any) -> Any:
        converted = kind.to_filter_value(item)
        return item if converted is None else converted

    value = flt.value
    if flt.operator == Operator.BETWEEN and isinstance(value, tuple) and len(value) == 2:
        return flt.replace(value=(convert(value[0]), convert(value[1])))
    if isinstance(value, (list, tuple)):
        if kind.type in (FieldType.ARRAY, FieldType.MULTI_SELECT):
            return flt
        return flt.replace(value=[convert(item) for item in value])
    return flt.replace(value=convert(value))


def retype_group(group: FilterGroup, kinds: Mapping[str, FieldKind] | None = None) -> FilterGroup:
    """Apply ``retype_filter`` to every filter, recursively."""
    kinds = kinds or {}
    return FilterGroup(
        filters=tuple(retype_filter(f, kinds.get(f.field)) for f in group.filters),
        groups=tuple(retype_group(g, kinds) for g in group.groups),
        conjunction=group.conjunction,
    )
