"""Filter expressions, their SQL compilation and their URL encoding."""

from live_filter.filters.ast_nodes import (
    Conjunction,
    Direction,
    Filter,
    FilterGroup,
    Pagination,
    Sort,
)
from live_filter.filters.dates import date_presets, parse_date_range, resolve_preset
from live_filter.filters.params import (
    decode_filter_group,
    decode_pagination,
    decode_params,
    decode_sorts,
    encode_filter_group,
    encode_params,
    update_params,
)
from live_filter.filters.query import Page, RecordStore, apply_filters, compile_group
from live_filter.filters.querystring import encode_query, parse_query_string
from live_filter.filters.vocabulary import (
    FieldType,
    Operator,
    default_operator,
    is_valid_operator,
    operators_for,
)

__all__ = [
    "Conjunction",
    "Direction",
    "FieldType",
    "Filter",
    "FilterGroup",
    "Operator",
    "Page",
    "Pagination",
    "RecordStore",
    "Sort",
    "apply_filters",
    "compile_group",
    "date_presets",
    "decode_filter_group",
    "decode_pagination",
    "decode_params",
    "decode_sorts",
    "default_operator",
    "encode_filter_group",
    "encode_params",
    "encode_query",
    "is_valid_operator",
    "operators_for",
    "parse_date_range",
    "parse_query_string",
    "resolve_preset",
    "update_params",
]
