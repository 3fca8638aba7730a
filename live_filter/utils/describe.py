"""Plain JSON-friendly descriptions of filter state.

Used by the CLI: ``decode --format json`` writes this shape and ``encode``
reads it back::

    {
        "conjunction": "and",
        "filters": [
            {"field": "status", "operator": "equals", "value": "open", "type": "enum"}
        ],
        "groups": [],
        "sort": [{"field": "due_date", "direction": "asc"}],
        "page": 1,
        "per_page": 10
    }
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from live_filter.exceptions import ValidationError
from live_filter.filters.ast_nodes import (
    DEFAULT_PAGE,
    DEFAULT_PER_PAGE,
    Filter,
    FilterGroup,
    Pagination,
    Sort,
)
from live_filter.filters.coerce import from_wire, to_wire
from live_filter.filters.vocabulary import FieldType, Operator


def _json_value(value: Any) -> Any:
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_wire(item) for item in value]
    return to_wire(value)


def filter_to_dict(flt: Filter) -> dict[str, Any]:
    return {
        "field": flt.field,
        "operator": str(flt.operator),
        "value": _json_value(flt.value),
        "type": str(flt.type),
    }


def group_to_dict(group: FilterGroup) -> dict[str, Any]:
    return {
        "conjunction": str(group.conjunction),
        "filters": [filter_to_dict(f) for f in group.filters],
        "groups": [group_to_dict(g) for g in group.groups],
    }


def state_to_dict(
    group: FilterGroup,
    sorts: Iterable[Sort] | None,
    pagination: Pagination,
) -> dict[str, Any]:
    """Describe a decoded group, its sorts and its page."""
    data = group_to_dict(group)
    data["sort"] = [{"field": s.field, "direction": str(s.direction)} for s in sorts or ()]
    data["page"] = pagination.page
    data["per_page"] = pagination.per_page
    return data


def filter_from_dict(data: Any) -> Filter:
    """Build a Filter from its description.

    Raises:
        ValidationError: If the description has no field or operator.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("filter", data, "must be an object")
    name = data.get("field")
    if not isinstance(name, str) or not name:
        raise ValidationError("filter", data, "missing 'field'")
    if "operator" not in data:
        raise ValidationError("filter", data, f"missing 'operator' for {name}")

    operator = data["operator"]
    value = data.get("value")
    if isinstance(value, list):
        value = [from_wire(item) for item in value]
        if str(operator) == Operator.BETWEEN and len(value) == 2:
            value = (value[0], value[1])
    else:
        value = from_wire(value)
    return Filter(name, operator, value, data.get("type", FieldType.STRING))


def group_from_dict(data: Any) -> FilterGroup:
    """Build a FilterGroup, with nested groups, from its description.

    Raises:
        ValidationError: If the description or one of its filters is malformed.
    """
    if not isinstance(data, Mapping):
        raise ValidationError("group", data, "must be an object")
    return FilterGroup(
        filters=[filter_from_dict(item) for item in data.get("filters", [])],
        groups=[group_from_dict(item) for item in data.get("groups", [])],
        conjunction=data.get("conjunction", "and"),
    )


def sorts_from_dict(data: Mapping[str, Any]) -> list[Sort]:
    raw = data.get("sort") or []
    if isinstance(raw, Mapping):
        raw = [raw]
    elif not isinstance(raw, list):
        raise ValidationError("sort", raw, "must be an object or a list of objects")
    sorts = []
    for item in raw:
        if not isinstance(item, Mapping) or not item.get("field"):
            raise ValidationError("sort", item, "missing 'field'")
        sorts.append(Sort.create(item["field"], item.get("direction", "asc")))
    return sorts


def pagination_from_dict(data: Mapping[str, Any]) -> Pagination:
    page = data.get("page", DEFAULT_PAGE)
    per_page = data.get("per_page", DEFAULT_PER_PAGE)
    if not isinstance(page, int) or page < 1:
        raise ValidationError("page", page, "must be a positive integer")
    if not isinstance(per_page, int) or per_page < 1:
        raise ValidationError("per_page", per_page, "must be a positive integer")
    return Pagination(page=page, per_page=per_page)
