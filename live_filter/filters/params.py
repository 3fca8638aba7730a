"""Encode filter state into URL parameters and decode it back.

Layout of the encoded map (before query-string flattening)::

    {
        "filters": {
            "status": {"value": "open", "operator": "equals", "type": "enum"},
            "due_date": {"start": "2025-01-01", "end": "2025-01-31",
                         "operator": "between", "type": "date"},
            "tags": {"values": ["bug", "urgent"],
                     "operator": "contains_any", "type": "array"},
            "conjunction": "or",
            "group_0": {"conjunction": "or",
                        "filters": {"0": {"field": "title", ...}}},
        },
        "sort": {"field": "due_date", "direction": "asc"},
        "page": 2,
        "per_page": 25,
    }

Top-level filters are keyed by field name, so two filters on the same field
keep only the last one.  Nested groups use positional keys and keep all of
theirs.  Decoding never raises on malformed input: bad entries are skipped
and bad pagination falls back to the defaults.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

from live_filter.filters.ast_nodes import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    MAX_PER_PAGE,
    Conjunction,
    Filter,
    FilterGroup,
    Pagination,
    Sort,
    parse_conjunction,
)
from live_filter.filters.coerce import from_wire, to_wire
from live_filter.filters.vocabulary import (
    FieldType,
    Operator,
    parse_field_type,
    parse_operator,
)

logger = logging.getLogger(__name__)

DEFAULT_PARAM_KEY = "filters"
SORT_KEY = "sort"
PAGE_KEY = "page"
PER_PAGE_KEY = "per_page"

_GROUP_KEY = re.compile(r"group_(\d+)")

# Sentinel for "leave the existing sort parameter alone".
_UNCHANGED: Any = object()


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def _encode_filter(flt: Filter) -> dict[str, Any] | None:
    value = flt.value
    if value is None:
        return None

    entry: dict[str, Any] = {}
    if flt.operator == Operator.BETWEEN and isinstance(value, (tuple, list)) and len(value) == 2:
        start, end = value
        if start is None and end is None:
            return None
        if start is not None:
            entry["start"] = to_wire(start)
        if end is not None:
            entry["end"] = to_wire(end)
    elif isinstance(value, (list, tuple, set, frozenset)):
        entry["values"] = [to_wire(item) for item in value]
    else:
        entry["value"] = to_wire(value)

    entry["operator"] = str(flt.operator)
    entry["type"] = str(flt.type)
    return entry


def _encode_nested_group(group: FilterGroup) -> dict[str, Any]:
    entry: dict[str, Any] = {}

    filters: dict[str, Any] = {}
    for flt in group.filters:
        item = _encode_filter(flt)
        if item is not None:
            item["field"] = flt.field
            filters[str(len(filters))] = item
    if filters:
        entry["filters"] = filters

    for index, nested in enumerate(group.groups):
        encoded = _encode_nested_group(nested)
        if encoded:
            entry[f"group_{index}"] = encoded

    if not entry:
        return {}
    return {"conjunction": str(group.conjunction), **entry}


def encode_filter_group(group: FilterGroup | None) -> dict[str, Any]:
    """Encode a FilterGroup as a nested parameter map.

    Filters whose value is None are left out entirely, so value-less
    operators such as ``is_empty`` do not survive a URL round trip.

    Args:
        group: The group to encode.  None encodes as an empty map.

    Returns:
        The map stored under the ``filters`` parameter.  Empty when nothing
        in the group can be encoded.
    """
    if group is None:
        return {}

    encoded: dict[str, Any] = {}
    for flt in group.filters:
        entry = _encode_filter(flt)
        if entry is not None:
            encoded[flt.field] = entry

    for index, nested in enumerate(group.groups):
        entry = _encode_nested_group(nested)
        if entry:
            encoded[f"group_{index}"] = entry

    if encoded and group.conjunction != Conjunction.AND:
        encoded["conjunction"] = str(group.conjunction)
    return encoded


def _encode_sort(sort: Sort) -> dict[str, str]:
    return {"field": sort.field, "direction": str(sort.direction)}


def encode_sorts(sorts: Sort | Iterable[Sort] | None) -> dict[str, Any] | None:
    """Encode sorts: one sort as a flat map, several as an indexed map."""
    if sorts is None:
        return None
    if isinstance(sorts, Sort):
        return _encode_sort(sorts)
    items = list(sorts)
    if not items:
        return None
    if len(items) == 1:
        return _encode_sort(items[0])
    return {str(index): _encode_sort(sort) for index, sort in enumerate(items)}


def encode_pagination(pagination: Pagination | None) -> dict[str, int]:
    """Encode page and per_page, leaving out values equal to the defaults."""
    if pagination is None:
        return {}
    encoded: dict[str, int] = {}
    if pagination.page != DEFAULT_PAGE:
        encoded[PAGE_KEY] = pagination.page
    if pagination.per_page != DEFAULT_PER_PAGE:
        encoded[PER_PAGE_KEY] = pagination.per_page
    return encoded


def update_params(
    params: Mapping[str, Any],
    group: FilterGroup | None,
    sorts: Sort | Iterable[Sort] | None = _UNCHANGED,
    pagination: Pagination | None = None,
    *,
    param_key: str = DEFAULT_PARAM_KEY,
) -> dict[str, Any]:
    """Return a copy of ``params`` carrying the given filter state.

    Unrelated parameters are kept.  The filter key is removed when the group
    encodes to nothing.  When ``sorts`` is passed, the sort parameter is
    replaced (or removed for None).  When ``pagination`` is passed, page and
    per_page are replaced, and removed where they equal the defaults.

    Args:
        params: Existing request parameters.
        group: Filter state to store.
        sorts: Sort state, if it should change.
        pagination: Page state, if it should change.
        param_key: Name of the filter parameter.

    Returns:
        The updated parameter map.
    """
    updated = dict(params)

    encoded = encode_filter_group(group)
    if encoded:
        updated[param_key] = encoded
    else:
        updated.pop(param_key, None)

    if sorts is not _UNCHANGED:
        encoded_sorts = encode_sorts(sorts)
        if encoded_sorts is None:
            updated.pop(SORT_KEY, None)
        else:
            updated[SORT_KEY] = encoded_sorts

    if pagination is not None:
        updated.pop(PAGE_KEY, None)
        updated.pop(PER_PAGE_KEY, None)
        updated.update(encode_pagination(pagination))

    return updated


def encode_params(
    group: FilterGroup | None,
    sorts: Sort | Iterable[Sort] | None = None,
    pagination: Pagination | None = None,
    *,
    param_key: str = DEFAULT_PARAM_KEY,
) -> dict[str, Any]:
    """Encode filter, sort and page state into a fresh parameter map."""
    return update_params({}, group, sorts, pagination, param_key=param_key)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def _index_sort_key(key: Any) -> tuple[int, int]:
    try:
        return (0, int(str(key)))
    except ValueError:
        return (1, 0)


def indexed_map_to_list(value: Any) -> list[Any]:
    """Recover a list that a query parser turned into ``{"0": a, "1": b}``.

    Numeric keys are ordered numerically; non-numeric keys keep their order
    and go last.  Lists pass through and a scalar becomes a one-item list.
    """
    if value is None:
        return []
    if isinstance(value, list):
        return value
    if isinstance(value, Mapping):
        return [value[key] for key in sorted(value, key=_index_sort_key)]
    return [value]


def _bound(value: Any) -> Any:
    if value is None or value == "":
        return None
    return from_wire(value)


def _decode_filter(name: str, entry: Any) -> Filter | None:
    if isinstance(entry, str):
        return Filter(name, Operator.EQUALS, from_wire(entry), FieldType.STRING)
    if isinstance(entry, list):
        return Filter(name, Operator.IN, [from_wire(v) for v in entry], FieldType.STRING)
    if not isinstance(entry, Mapping):
        return None

    field_type = parse_field_type(entry.get("type")) or FieldType.STRING
    operator = parse_operator(entry.get("operator"))

    if "start" in entry or "end" in entry:
        start, end = _bound(entry.get("start")), _bound(entry.get("end"))
        if start is None and end is None:
            return None
        return Filter(name, operator or Operator.BETWEEN, (start, end), field_type)

    if "values" in entry:
        values = [from_wire(v) for v in indexed_map_to_list(entry["values"])]
        return Filter(name, operator or Operator.IN, values, field_type)

    if "value" in entry:
        value = entry["value"]
        if isinstance(value, (Mapping, list)):
            return None
        return Filter(name, operator or Operator.EQUALS, from_wire(value), field_type)

    return None


def _is_group_entry(key: str, entry: Any) -> int | None:
    match = _GROUP_KEY.fullmatch(key)
    if match is None or not isinstance(entry, Mapping):
        return None
    if "conjunction" not in entry and "filters" not in entry:
        return None
    return int(match.group(1))


def _decode_groups(raw: Mapping[str, Any]) -> list[FilterGroup]:
    found: list[tuple[int, FilterGroup]] = []
    for key, entry in raw.items():
        index = _is_group_entry(str(key), entry)
        if index is not None:
            found.append((index, _decode_nested_group(entry)))
    found.sort(key=lambda pair: pair[0])
    return [group for _, group in found]


def _decode_nested_group(raw: Mapping[str, Any]) -> FilterGroup:
    filters = []
    for item in indexed_map_to_list(raw.get("filters")):
        name = item.get("field") if isinstance(item, Mapping) else None
        if not isinstance(name, str) or not name:
            logger.debug("Skipping nested filter without a field: %r", item)
            continue
        flt = _decode_filter(name, item)
        if flt is None:
            logger.debug("Skipping malformed nested filter on %s", name)
            continue
        filters.append(flt)

    return FilterGroup(
        filters=filters,
        groups=_decode_groups(raw),
        conjunction=parse_conjunction(raw.get("conjunction", Conjunction.AND)),
    )


def decode_filter_group(
    params: Mapping[str, Any],
    *,
    param_key: str = DEFAULT_PARAM_KEY,
) -> FilterGroup:
    """Rebuild a FilterGroup from request parameters.

    Entries are read by shape: ``start``/``end`` make a ``between`` range,
    ``values`` a list (default ``in``), ``value`` a scalar (default
    ``equals``).  A bare string or list under a field name is accepted too.
    A missing or unknown ``type`` reads as ``string``; an unknown
    ``operator`` reads as the default for the entry's shape.

    Values are typed with ``from_wire``: booleans, datetimes and dates are
    recovered, numbers and enum values stay strings.

    Args:
        params: Request parameters, as produced by ``parse_query_string``.
        param_key: Name of the filter parameter.

    Returns:
        The decoded group; empty when the parameter is missing or unusable.
    """
    raw = params.get(param_key) if isinstance(params, Mapping) else None
    if not isinstance(raw, Mapping):
        return FilterGroup()

    conjunction = Conjunction.AND
    filters = []
    for key, entry in raw.items():
        key = str(key)
        if key == "conjunction" and isinstance(entry, str):
            conjunction = parse_conjunction(entry)
            continue
        if _is_group_entry(key, entry) is not None:
            continue
        flt = _decode_filter(key, entry)
        if flt is None:
            logger.debug("Skipping malformed filter entry %s=%r", key, entry)
            continue
        filters.append(flt)

    return FilterGroup(filters=filters, groups=_decode_groups(raw), conjunction=conjunction)


def _decode_sort(item: Any) -> Sort | None:
    if not isinstance(item, Mapping):
        return None
    name = item.get("field")
    if not isinstance(name, str) or not name:
        return None
    return Sort.create(name, item.get("direction", "asc"))


def decode_sorts(params: Mapping[str, Any]) -> list[Sort] | None:
    """Read the sort parameter; None when there is no usable sort."""
    raw = params.get(SORT_KEY) if isinstance(params, Mapping) else None
    if raw is None:
        return None
    if isinstance(raw, Mapping) and "field" in raw:
        items = [raw]
    elif isinstance(raw, (Mapping, list)):
        items = indexed_map_to_list(raw)
    else:
        logger.debug("Ignoring malformed sort parameter %r", raw)
        return None

    sorts = [sort for sort in map(_decode_sort, items) if sort is not None]
    return sorts or None


def _positive_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if number > 0 else None


def decode_pagination(params: Mapping[str, Any]) -> Pagination:
    """Read page and per_page, falling back to the defaults when invalid.

    per_page above the maximum also resets to the default.
    """
    if not isinstance(params, Mapping):
        return Pagination()

    raw_page = params.get(PAGE_KEY)
    page = _positive_int(raw_page)
    if page is None:
        if raw_page is not None:
            logger.debug("Invalid page %r, using %d", raw_page, DEFAULT_PAGE)
        page = DEFAULT_PAGE

    raw_per_page = params.get(PER_PAGE_KEY)
    per_page = _positive_int(raw_per_page)
    if per_page is None or per_page > MAX_PER_PAGE:
        if raw_per_page is not None:
            logger.debug("Invalid per_page %r, using %d", raw_per_page, DEFAULT_PER_PAGE)
        per_page = DEFAULT_PER_PAGE

    return Pagination(page=page, per_page=per_page)


def decode_params(
    params: Mapping[str, Any],
    *,
    param_key: str = DEFAULT_PARAM_KEY,
) -> tuple[FilterGroup, list[Sort] | None, Pagination]:
    """Decode filter group, sorts and pagination in one call."""
    return (
        decode_filter_group(params, param_key=param_key),
        decode_sorts(params),
        decode_pagination(params),
    )
