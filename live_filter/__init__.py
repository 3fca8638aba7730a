"""live-filter: filter expressions compiled to SQL and encoded into URLs."""

from live_filter.filters import (
    Conjunction,
    Direction,
    FieldType,
    Filter,
    FilterGroup,
    Operator,
    Pagination,
    Sort,
)

__version__ = "0.3.0"

__all__ = [
    "Conjunction",
    "Direction",
    "FieldType",
    "Filter",
    "FilterGroup",
    "Operator",
    "Pagination",
    "Sort",
    "__version__",
]
