"""Small builders for common filters, and extractors that read them back.

Builders return None when there is nothing to filter on, so results can be
collected and the Nones dropped::

    filters = [
        search_filter(params.get("q")),
        multi_select_filter("status", params.get("status")),
        boolean_filter("is_urgent", params.get("urgent") == "true", true_only=True),
    ]
    group = FilterGroup(filters=[f for f in filters if f is not None])

Extractors do the reverse for a decoded group, e.g. to pre-fill a form.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import date, datetime
from typing import Any

from live_filter.filters.ast_nodes import Filter, FilterGroup
from live_filter.filters.dates import parse_date_range
from live_filter.filters.query import SEARCH_FIELD
from live_filter.filters.vocabulary import FieldType, Operator

FilterBuilder = Callable[[Any], Filter | None]


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------


def search_filter(
    query: str | None,
    *,
    field: str = SEARCH_FIELD,
    operator: Operator | str = Operator.CUSTOM,
    field_type: FieldType | str = FieldType.STRING,
    min_length: int = 0,
    trim: bool = True,
) -> Filter | None:
    """Build a free-text search filter.

    By default this is the virtual ``_search`` field, which
    ``expand_search`` turns into an OR over real columns.

    Returns:
        The filter, or None if the query is empty or shorter than
        ``min_length``.
    """
    if not isinstance(query, str):
        return None
    if trim:
        query = query.strip()
    if not query or len(query) < min_length:
        return None
    return Filter(field, operator, query, field_type)


def multi_select_filter(
    field_name: str,
    values: Any,
    *,
    operator: Operator | str | None = None,
    field_type: FieldType | str = FieldType.ENUM,
    reject_empty: bool = True,
) -> Filter | None:
    """Filter an enum-like field on one or several values.

    A list uses ``in`` and a single value uses ``equals`` unless
    ``operator`` says otherwise.
    """
    if reject_empty and (values is None or values == [] or values == ()):
        return None
    if isinstance(values, (list, tuple)):
        return Filter(field_name, operator or Operator.IN, list(values), field_type)
    return Filter(field_name, operator or Operator.EQUALS, values, field_type)


def date_range_filter(
    field_name: str,
    date_or_range: Any,
    *,
    operator: Operator | str | None = None,
    field_type: FieldType | str = FieldType.DATE,
    today: date | None = None,
) -> Filter | None:
    """Filter a date field on a range, a single date, or a preset name.

    Presets such as ``"last_7_days"`` are resolved immediately, so the
    filter always holds concrete dates.
    """
    if date_or_range is None:
        return None

    if isinstance(date_or_range, (tuple, list)) and len(date_or_range) == 2:
        start, end = date_or_range
        if start is None or end is None:
            return None
        return Filter(field_name, operator or Operator.BETWEEN, (start, end), field_type)

    if isinstance(date_or_range, (date, datetime)):
        return Filter(field_name, operator or Operator.EQUALS, date_or_range, field_type)

    if isinstance(date_or_range, str):
        resolved = parse_date_range(date_or_range, str(field_type), today=today)
        if resolved is None:
            return None
        return Filter(field_name, operator or Operator.BETWEEN, resolved, field_type)

    return None


def boolean_filter(
    field_name: str,
    value: Any,
    *,
    operator: Operator | str = Operator.EQUALS,
    true_only: bool = False,
) -> Filter | None:
    """Filter a boolean field; with ``true_only`` a False value is ignored."""
    if true_only and value is not True:
        return None
    if not isinstance(value, bool):
        return None
    return Filter(field_name, operator, value, FieldType.BOOLEAN)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def numeric_filter(
    field_name: str,
    value: Any,
    *,
    operator: Operator | str = Operator.EQUALS,
    field_type: FieldType | str | None = None,
) -> Filter | None:
    """Filter a number, or a ``(min, max)`` pair for ``between``.

    The type is detected from the value (integer unless a float is
    involved) when ``field_type`` isn't given.
    """
    if isinstance(value, tuple) and len(value) == 2 and all(map(_is_number, value)):
        detected = (
            FieldType.INTEGER if all(isinstance(v, int) for v in value) else FieldType.FLOAT
        )
    elif isinstance(value, int) and not isinstance(value, bool):
        detected = FieldType.INTEGER
    elif isinstance(value, float):
        detected = FieldType.FLOAT
    else:
        return None
    return Filter(field_name, operator, value, field_type or detected)


def array_filter(
    field_name: str,
    values: Sequence[Any] | None,
    *,
    operator: Operator | str = Operator.CONTAINS_ANY,
    field_type: FieldType | str = FieldType.ARRAY,
) -> Filter | None:
    """Filter an array column; ``contains_any`` unless told otherwise."""
    if not values:
        return None
    return Filter(field_name, operator, list(values), field_type)


def filters_from_params(
    params: Mapping[str, Any],
    definitions: Iterable[tuple[str, FilterBuilder]],
    *,
    prefix: str = "",
) -> list[Filter]:
    """Run a builder for each parameter that is present.

    Args:
        params: Request parameters.
        definitions: ``(param_key, builder)`` pairs, in output order.
        prefix: Prepended to every ``param_key`` before lookup.

    Returns:
        The filters the builders produced, skipping Nones.
    """
    filters: list[Filter] = []
    for param_key, build in definitions:
        value = params.get(f"{prefix}{param_key}")
        if value is None:
            continue
        built = build(value)
        if built is not None:
            filters.append(built)
    return filters


# ---------------------------------------------------------------------------
# Extractors
# ---------------------------------------------------------------------------


def extract_search_query(
    group: FilterGroup,
    *,
    field: str = SEARCH_FIELD,
    operator: Operator | None = None,
) -> Any:
    flt = group.find_filter(field, operator)
    return flt.value if flt is not None else None


def extract_multi_select(group: FilterGroup, field_name: str, *, single_value: bool = False) -> Any:
    """Selected values for an enum field.

    Returns a list, or with ``single_value`` a lone value (or None).
    """
    flt = group.find_filter(field_name)
    if flt is not None and flt.operator == Operator.IN and isinstance(flt.value, (list, tuple)):
        values = list(flt.value)
        if single_value and len(values) == 1:
            return values[0]
        return values
    if flt is not None and flt.operator == Operator.EQUALS:
        return flt.value if single_value else [flt.value]
    return None if single_value else []


def extract_value(group: FilterGroup, field_name: str, default: Any = None) -> Any:
    """The raw value of the first filter on ``field_name``.

    Covers dates, date ranges and numbers alike.
    """
    flt = group.find_filter(field_name)
    return flt.value if flt is not None else default


def extract_boolean(group: FilterGroup, field_name: str, default: bool | None = None) -> Any:
    flt = group.find_filter(field_name)
    if flt is None:
        return default
    if flt.operator == Operator.IS_TRUE:
        return True
    if flt.operator == Operator.IS_FALSE:
        return False
    if flt.operator == Operator.EQUALS:
        return flt.value
    return default


def extract_array(group: FilterGroup, field_name: str, default: Any = None) -> Any:
    flt = group.find_filter(field_name)
    if flt is None:
        return [] if default is None else default
    return flt.value


def extract_all(
    group: FilterGroup, extractors: Mapping[str, Callable[[FilterGroup], Any]]
) -> dict[str, Any]:
    """Run several extractors, keyed by name."""
    return {name: extract(group) for name, extract in extractors.items()}


def extract_optional_filters(
    group: FilterGroup, excluded_fields: Iterable[str]
) -> tuple[list[str], dict[str, Any]]:
    """Fields with direct filters outside ``excluded_fields``, plus their values.

    Returns:
        ``(active_fields, values_by_field)``, fields in filter order.
    """
    excluded = set(excluded_fields)
    active: list[str] = []
    values: dict[str, Any] = {}
    for flt in group.filters:
        if flt.field in excluded:
            continue
        if flt.field not in values:
            active.append(flt.field)
        values[flt.field] = flt.value
    return active, values
