"""Immutable data classes for filter expressions.

A ``FilterGroup`` is a small boolean AST: leaf ``Filter`` values plus nested
groups, all combined with the group's single conjunction.  Every helper that
"changes" a group returns a new one.
"""

from __future__ import annotations

import dataclasses
import enum
from collections.abc import Iterator
from dataclasses import dataclass
from typing import Any

from live_filter.filters.vocabulary import (
    FieldType,
    Operator,
    is_valid_operator,
    parse_field_type,
    parse_operator,
)


class Conjunction(str, enum.Enum):
    AND = "and"
    OR = "or"

    def __str__(self) -> str:
        return self.value


def parse_conjunction(value: object) -> Conjunction:
    """Parse a conjunction, treating anything unrecognised as AND."""
    try:
        return Conjunction(str(value).strip().lower())
    except ValueError:
        return Conjunction.AND


class Direction(str, enum.Enum):
    ASC = "asc"
    DESC = "desc"

    def __str__(self) -> str:
        return self.value

    def opposite(self) -> Direction:
        return Direction.DESC if self is Direction.ASC else Direction.ASC


@dataclass(frozen=True)
class Filter:
    """A single field predicate.

    ``value`` depends on the operator:
        - ``None`` for ``is_empty``, ``is_true`` and friends
        - a ``(min, max)`` tuple for ``between``
        - a tuple/list for ``in``, ``not_in`` and the array operators
        - a scalar otherwise
    """

    field: str
    operator: Operator
    value: Any = None
    type: FieldType = FieldType.STRING

    def __post_init__(self) -> None:
        # Normalise plain strings to the enums; unknown names are kept as-is
        # so the compiler can treat them as inactive.
        operator = parse_operator(self.operator)
        if operator is not None:
            object.__setattr__(self, "operator", operator)
        field_type = parse_field_type(self.type)
        if field_type is not None:
            object.__setattr__(self, "type", field_type)

    def replace(self, **changes: Any) -> Filter:
        """Return a copy with the given attributes changed."""
        return dataclasses.replace(self, **changes)

    def is_valid(self) -> bool:
        """Whether the operator is legal for this filter's type."""
        return is_valid_operator(self.type, self.operator)


@dataclass(frozen=True)
class FilterGroup:
    """Filters and nested groups joined by one conjunction."""

    filters: tuple[Filter, ...] = ()
    groups: tuple[FilterGroup, ...] = ()
    conjunction: Conjunction = Conjunction.AND

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples. Filter values are not
        # frozen, so a group is only hashable when its values are.
        if not isinstance(self.filters, tuple):
            object.__setattr__(self, "filters", tuple(self.filters))
        if not isinstance(self.groups, tuple):
            object.__setattr__(self, "groups", tuple(self.groups))
        if not isinstance(self.conjunction, Conjunction):
            object.__setattr__(self, "conjunction", parse_conjunction(self.conjunction))

    def add_filter(self, new_filter: Filter) -> FilterGroup:
        return dataclasses.replace(self, filters=(*self.filters, new_filter))

    def remove_filter(self, index: int) -> FilterGroup:
        """Remove the filter at ``index``.

        Negative indices count from the end (``-1`` is the last filter).
        An index outside the list returns the group unchanged.
        """
        size = len(self.filters)
        if index < -size or index >= size:
            return self
        position = index % size
        remaining = self.filters[:position] + self.filters[position + 1 :]
        return dataclasses.replace(self, filters=remaining)

    def update_filter(self, index: int, new_filter: Filter) -> FilterGroup:
        """Replace the filter at ``index``; out-of-range indices are a no-op."""
        size = len(self.filters)
        if index < -size or index >= size:
            return self
        position = index % size
        updated = self.filters[:position] + (new_filter,) + self.filters[position + 1 :]
        return dataclasses.replace(self, filters=updated)

    def add_group(self, group: FilterGroup) -> FilterGroup:
        return dataclasses.replace(self, groups=(*self.groups, group))

    def has_filters(self) -> bool:
        """True if this group or any nested group holds a filter."""
        return bool(self.filters) or any(g.has_filters() for g in self.groups)

    def count_filters(self) -> int:
        """Count filters in this group and all nested groups."""
        return len(self.filters) + sum(g.count_filters() for g in self.groups)

    def all_filters(self) -> Iterator[Filter]:
        """Yield every filter, depth first, in display order."""
        yield from self.filters
        for group in self.groups:
            yield from group.all_filters()

    def find_filter(self, field_name: str, operator: Operator | None = None) -> Filter | None:
        """Return the first direct filter on ``field_name`` (and ``operator``)."""
        for candidate in self.filters:
            if candidate.field != field_name:
                continue
            if operator is None or candidate.operator == operator:
                return candidate
        return None


@dataclass(frozen=True)
class Sort:
    """Sort on one field.  Lists of sorts are applied in priority order."""

    field: str
    direction: Direction = Direction.ASC

    @classmethod
    def create(cls, field_name: str, direction: Direction | str = Direction.ASC) -> Sort:
        """Build a Sort, falling back to ascending for unknown directions."""
        try:
            parsed = Direction(str(direction).lower())
        except ValueError:
            parsed = Direction.ASC
        return cls(field=field_name, direction=parsed)

    def toggle(self) -> Sort:
        return dataclasses.replace(self, direction=self.direction.opposite())


DEFAULT_PAGE = 1
DEFAULT_PER_PAGE = 10
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class Pagination:
    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per_page

