"""Compile FilterGroup ASTs into SQLAlchemy predicates and run them."""

from __future__ import annotations

import logging
import math
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import DateTime, String, and_, cast, column, func, not_, or_, select
from sqlalchemy.dialects.postgresql import ARRAY, array

from live_filter.exceptions import UnknownFieldError
from live_filter.filters.ast_nodes import (
    Conjunction,
    Direction,
    Filter,
    FilterGroup,
    Pagination,
    Sort,
)
from live_filter.filters.dates import convert_to_type
from live_filter.filters.vocabulary import (
    ARRAY_TYPES,
    NO_VALUE_OPERATORS,
    STRING_TYPES,
    FieldType,
    Operator,
)

if TYPE_CHECKING:
    from sqlalchemy.orm import Session
    from sqlalchemy.sql import ColumnElement, Select

logger = logging.getLogger(__name__)

# Maps a field name to the column expression the predicate is built on.
FieldResolver = Callable[[str], Any]

SEARCH_FIELD = "_search"

# equals/not_equals against None compile to IS NULL / IS NOT NULL; every
# other value operator is inactive without a value.
_NULL_AWARE_OPERATORS = NO_VALUE_OPERATORS | {Operator.EQUALS, Operator.NOT_EQUALS}


def default_resolver(field_name: str):
    """Resolve a field to an unbound column of the same name.

    No validation happens here: an unknown column only fails when the
    statement is executed.
    """
    return column(field_name)


def compile_group(
    group: FilterGroup | None,
    resolve: FieldResolver = default_resolver,
) -> ColumnElement[bool] | None:
    """Compile a FilterGroup into a single predicate.

    Returns None (no predicate) when nothing in the group constrains the
    result.  None means "apply no filtering", never "match nothing".
    """
    if group is None:
        return None

    clauses = []
    for flt in group.filters:
        clause = compile_filter(flt, resolve)
        if clause is not None:
            clauses.append(clause)
    for nested in group.groups:
        clause = compile_group(nested, resolve)
        if clause is not None:
            clauses.append(clause)

    if not clauses:
        return None
    if len(clauses) == 1:
        return clauses[0]
    if group.conjunction == Conjunction.OR:
        return or_(*clauses)
    return and_(*clauses)


def compile_filter(flt: Filter, resolve: FieldResolver = default_resolver):
    """Compile one Filter, or return None if it is inactive or malformed."""
    operator = flt.operator
    if flt.value is None and operator not in _NULL_AWARE_OPERATORS:
        logger.debug("Dropping filter on %s: %s has no value", flt.field, operator)
        return None

    builder = _BUILDERS.get(operator)
    if builder is None:
        logger.debug("Dropping filter on %s: unsupported operator %s", flt.field, operator)
        return None
    return builder(resolve(flt.field), flt)


def _equals(col, flt: Filter):
    if flt.value is None:
        return col.is_(None)
    return col == flt.value


def _not_equals(col, flt: Filter):
    if flt.value is None:
        return col.is_not(None)
    return col != flt.value


def _pattern(template: str, negate: bool = False):
    def build(col, flt: Filter):
        clause = col.ilike(template.format(flt.value))
        return not_(clause) if negate else clause

    return build


def _empty_array(col):
    col_type = col.type if isinstance(col.type, ARRAY) else ARRAY(String)
    return cast(array([]), col_type)


def _is_empty(col, flt: Filter):
    if flt.type in STRING_TYPES:
        return or_(col.is_(None), col == "")
    if flt.type in ARRAY_TYPES:
        return or_(col.is_(None), col == _empty_array(col))
    return col.is_(None)


def _is_not_empty(col, flt: Filter):
    if flt.type in STRING_TYPES:
        return and_(col.is_not(None), col != "")
    if flt.type in ARRAY_TYPES:
        return and_(col.is_not(None), col != _empty_array(col))
    return col.is_not(None)


def _between(col, flt: Filter):
    value = flt.value
    if not isinstance(value, (tuple, list)) or len(value) != 2:
        logger.debug("Dropping between filter on %s: value is not a pair", flt.field)
        return None
    low, high = value
    if low is None and high is None:
        return None
    if flt.type == FieldType.DATETIME:
        # Widen date bounds to whole days so the end date is included entirely.
        target = _datetime_target(col)
        if _is_plain_date(low):
            low = convert_to_type(low, target, "start")
        if _is_plain_date(high):
            high = convert_to_type(high, target, "end")
    if low is None:
        return col <= high
    if high is None:
        return col >= low
    return and_(col >= low, col <= high)


def _is_plain_date(value: Any) -> bool:
    return isinstance(value, date) and not isinstance(value, datetime)


def _datetime_target(col) -> str:
    """Naive UTC bounds for `timestamp without time zone` columns, aware otherwise."""
    col_type = getattr(col, "type", None)
    if isinstance(col_type, DateTime) and not col_type.timezone:
        return "naive_datetime"
    return "datetime"


def _list_value(flt: Filter) -> list:
    value = flt.value
    if isinstance(value, (list, tuple, set, frozenset)):
        return list(value)
    return [value]


def _array_op(sql_operator: str, negate: bool = False):
    def build(col, flt: Filter):
        values = _list_value(flt)
        if not values:
            logger.debug("Dropping %s filter on %s: no values", flt.operator, flt.field)
            return None
        clause = col.op(sql_operator)(array(values))
        return not_(clause) if negate else clause

    return build


_BUILDERS: dict[Operator, Callable[[Any, Filter], Any]] = {
    Operator.EQUALS: _equals,
    Operator.NOT_EQUALS: _not_equals,
    Operator.CONTAINS: _pattern("%{}%"),
    Operator.NOT_CONTAINS: _pattern("%{}%", negate=True),
    Operator.STARTS_WITH: _pattern("{}%"),
    Operator.ENDS_WITH: _pattern("%{}"),
    Operator.MATCHES: _pattern("%{}%"),
    Operator.IS_EMPTY: _is_empty,
    Operator.IS_NOT_EMPTY: _is_not_empty,
    Operator.GREATER_THAN: lambda col, f: col > f.value,
    Operator.LESS_THAN: lambda col, f: col < f.value,
    Operator.GREATER_THAN_OR_EQUAL: lambda col, f: col >= f.value,
    Operator.LESS_THAN_OR_EQUAL: lambda col, f: col <= f.value,
    Operator.BETWEEN: _between,
    Operator.IS_TRUE: lambda col, f: col.is_(True),
    Operator.IS_FALSE: lambda col, f: col.is_(False),
    Operator.BEFORE: lambda col, f: col < f.value,
    Operator.AFTER: lambda col, f: col > f.value,
    Operator.ON_OR_BEFORE: lambda col, f: col <= f.value,
    Operator.ON_OR_AFTER: lambda col, f: col >= f.value,
    Operator.IN: lambda col, f: col.in_(_list_value(f)),
    Operator.NOT_IN: lambda col, f: col.not_in(_list_value(f)),
    # PostgreSQL array overlap / containment.
    Operator.CONTAINS_ANY: _array_op("&&"),
    Operator.CONTAINS_ALL: _array_op("@>"),
    Operator.NOT_CONTAINS_ANY: _array_op("&&", negate=True),
}


def expand_search(
    group: FilterGroup,
    fields: Sequence[str],
    search_field: str = SEARCH_FIELD,
) -> FilterGroup:
    """Replace a virtual search filter with an OR over real text columns.

    The first direct filter on ``search_field`` becomes a nested group of
    ``contains`` filters, one per entry in ``fields``.  Groups without a
    search filter, or an empty ``fields`` list, are returned unchanged.
    """
    search = group.find_filter(search_field)
    if search is None or not fields:
        return group
    remaining = tuple(f for f in group.filters if f.field != search_field)
    if search.value in (None, ""):
        return FilterGroup(remaining, group.groups, group.conjunction)
    search_group = FilterGroup(
        filters=tuple(
            Filter(name, Operator.CONTAINS, search.value, FieldType.STRING) for name in fields
        ),
        conjunction=Conjunction.OR,
    )
    return FilterGroup(remaining, (search_group, *group.groups), group.conjunction)


def apply_filters(
    stmt: Select,
    group: FilterGroup | None,
    resolve: FieldResolver = default_resolver,
):
    """Add a WHERE clause for ``group`` only if it constrains anything."""
    predicate = compile_group(group, resolve)
    if predicate is None:
        return stmt
    return stmt.where(predicate)


def _as_sort_list(sorts: Sort | Iterable[Sort] | None) -> list[Sort]:
    if sorts is None:
        return []
    if isinstance(sorts, Sort):
        return [sorts]
    return list(sorts)


def apply_sort(
    stmt: Select,
    sorts: Sort | Iterable[Sort] | None,
    resolve: FieldResolver = default_resolver,
):
    """Order by one sort or a list of sorts, in priority order."""
    for sort in _as_sort_list(sorts):
        col = resolve(sort.field)
        stmt = stmt.order_by(col.desc() if sort.direction == Direction.DESC else col.asc())
    return stmt


def apply_pagination(stmt: Select, pagination: Pagination | None):
    if pagination is None:
        return stmt
    return stmt.limit(pagination.per_page).offset(pagination.offset)


@dataclass
class Page:
    """One page of records plus totals."""

    items: list[Any]
    total_count: int
    page: int
    per_page: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_count / self.per_page) if self.per_page else 0


@dataclass
class RecordStore:
    """Runs compiled filters against one ORM model through a Session.

    Field names are resolved against the model's mapped attributes.  A name
    the model doesn't have raises ``UnknownFieldError``; it is a programming
    error and is never turned into "no filter".
    """

    session: Session
    model: type
    search_fields: Sequence[str] = field(default_factory=tuple)

    def resolve(self, field_name: str):
        attr = getattr(self.model, field_name, None)
        if attr is None or not hasattr(attr, "expression"):
            raise UnknownFieldError(field_name, self.model.__name__)
        return attr

    def _prepare(self, group: FilterGroup | None) -> FilterGroup | None:
        if group is None or not self.search_fields:
            return group
        return expand_search(group, self.search_fields)

    def _filtered(self, group: FilterGroup | None):
        return apply_filters(select(self.model), self._prepare(group), self.resolve)

    def all(self, group: FilterGroup | None = None, sorts: Sort | Iterable[Sort] | None = None):
        stmt = apply_sort(self._filtered(group), sorts, self.resolve)
        return list(self.session.scalars(stmt))

    def count(self, group: FilterGroup | None = None) -> int:
        stmt = select(func.count()).select_from(self._filtered(group).subquery())
        return self.session.scalar(stmt) or 0

    def paginate(
        self,
        group: FilterGroup | None = None,
        sorts: Sort | Iterable[Sort] | None = None,
        pagination: Pagination | None = None,
    ) -> Page:
        pagination = pagination or Pagination()
        total = self.count(group)
        stmt = apply_sort(self._filtered(group), sorts, self.resolve)
        stmt = apply_pagination(stmt, pagination)
        items = list(self.session.scalars(stmt))
        return Page(
            items=items,
            total_count=total,
            page=pagination.page,
            per_page=pagination.per_page,
        )
