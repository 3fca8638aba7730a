"""Field types, operators, and the table that ties them together.

The compiler, the URL codec and the field-type interface all consult the
tables in this module, so a type/operator pair means the same thing
everywhere.
"""

from __future__ import annotations

import enum


class FieldType(str, enum.Enum):
    """Semantic type of a filterable field."""

    STRING = "string"
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"
    DATETIME = "datetime"
    ENUM = "enum"
    ARRAY = "array"
    MULTI_SELECT = "multi_select"
    TEXT_SEARCH = "text_search"
    SELECT_SEARCH = "select_search"

    def __str__(self) -> str:
        return self.value


class Operator(str, enum.Enum):
    """Comparison or test applied to a single field."""

    EQUALS = "equals"
    NOT_EQUALS = "not_equals"
    CONTAINS = "contains"
    NOT_CONTAINS = "not_contains"
    STARTS_WITH = "starts_with"
    ENDS_WITH = "ends_with"
    IS_EMPTY = "is_empty"
    IS_NOT_EMPTY = "is_not_empty"
    GREATER_THAN = "greater_than"
    LESS_THAN = "less_than"
    GREATER_THAN_OR_EQUAL = "greater_than_or_equal"
    LESS_THAN_OR_EQUAL = "less_than_or_equal"
    BETWEEN = "between"
    IS_TRUE = "is_true"
    IS_FALSE = "is_false"
    BEFORE = "before"
    AFTER = "after"
    ON_OR_BEFORE = "on_or_before"
    ON_OR_AFTER = "on_or_after"
    IN = "in"
    NOT_IN = "not_in"
    CONTAINS_ANY = "contains_any"
    CONTAINS_ALL = "contains_all"
    NOT_CONTAINS_ANY = "not_contains_any"
    MATCHES = "matches"
    CUSTOM = "custom"

    def __str__(self) -> str:
        return self.value


_O = Operator

_STRING_OPERATORS = (
    _O.EQUALS,
    _O.NOT_EQUALS,
    _O.CONTAINS,
    _O.NOT_CONTAINS,
    _O.STARTS_WITH,
    _O.ENDS_WITH,
    _O.IS_EMPTY,
    _O.IS_NOT_EMPTY,
)

_NUMERIC_OPERATORS = (
    _O.EQUALS,
    _O.NOT_EQUALS,
    _O.GREATER_THAN,
    _O.LESS_THAN,
    _O.GREATER_THAN_OR_EQUAL,
    _O.LESS_THAN_OR_EQUAL,
    _O.BETWEEN,
    _O.IS_EMPTY,
    _O.IS_NOT_EMPTY,
)

_DATE_OPERATORS = (
    _O.EQUALS,
    _O.BEFORE,
    _O.AFTER,
    _O.ON_OR_BEFORE,
    _O.ON_OR_AFTER,
    _O.BETWEEN,
    _O.IS_EMPTY,
    _O.IS_NOT_EMPTY,
)

_ARRAY_OPERATORS = (
    _O.CONTAINS_ANY,
    _O.CONTAINS_ALL,
    _O.NOT_CONTAINS_ANY,
    _O.IS_EMPTY,
    _O.IS_NOT_EMPTY,
)

# Ordered legal operators per type.  The first entry is not the default;
# see _DEFAULT_OPERATORS.
TYPE_OPERATORS: dict[FieldType, tuple[Operator, ...]] = {
    FieldType.STRING: _STRING_OPERATORS,
    FieldType.TEXT: _STRING_OPERATORS,
    FieldType.INTEGER: _NUMERIC_OPERATORS,
    FieldType.FLOAT: _NUMERIC_OPERATORS,
    FieldType.BOOLEAN: (_O.IS_TRUE, _O.IS_FALSE),
    FieldType.DATE: _DATE_OPERATORS,
    FieldType.DATETIME: _DATE_OPERATORS,
    FieldType.ENUM: (
        _O.EQUALS,
        _O.NOT_EQUALS,
        _O.IN,
        _O.NOT_IN,
        _O.IS_EMPTY,
        _O.IS_NOT_EMPTY,
    ),
    FieldType.ARRAY: _ARRAY_OPERATORS,
    FieldType.MULTI_SELECT: _ARRAY_OPERATORS,
    FieldType.TEXT_SEARCH: (_O.MATCHES,),
    FieldType.SELECT_SEARCH: (_O.EQUALS, _O.NOT_EQUALS),
}

OPERATOR_LABELS: dict[Operator, str] = {
    _O.EQUALS: "equals",
    _O.NOT_EQUALS: "does not equal",
    _O.CONTAINS: "contains",
    _O.NOT_CONTAINS: "does not contain",
    _O.STARTS_WITH: "starts with",
    _O.ENDS_WITH: "ends with",
    _O.IS_EMPTY: "is empty",
    _O.IS_NOT_EMPTY: "is not empty",
    _O.GREATER_THAN: "greater than",
    _O.LESS_THAN: "less than",
    _O.GREATER_THAN_OR_EQUAL: "greater than or equal to",
    _O.LESS_THAN_OR_EQUAL: "less than or equal to",
    _O.BETWEEN: "between",
    _O.IS_TRUE: "is true",
    _O.IS_FALSE: "is false",
    _O.BEFORE: "before",
    _O.AFTER: "after",
    _O.ON_OR_BEFORE: "on or before",
    _O.ON_OR_AFTER: "on or after",
    _O.IN: "in",
    _O.NOT_IN: "not in",
    _O.CONTAINS_ANY: "contains any of",
    _O.CONTAINS_ALL: "contains all of",
    _O.NOT_CONTAINS_ANY: "does not contain any of",
    _O.MATCHES: "matches",
    _O.CUSTOM: "custom",
}

# Operators that take no value.  The compiler keeps these even when the
# filter value is None.
NO_VALUE_OPERATORS: frozenset[Operator] = frozenset(
    {_O.IS_EMPTY, _O.IS_NOT_EMPTY, _O.IS_TRUE, _O.IS_FALSE}
)

STRING_TYPES: frozenset[FieldType] = frozenset({FieldType.STRING, FieldType.TEXT})
ARRAY_TYPES: frozenset[FieldType] = frozenset({FieldType.ARRAY, FieldType.MULTI_SELECT})
DATE_TYPES: frozenset[FieldType] = frozenset({FieldType.DATE, FieldType.DATETIME})
NUMERIC_TYPES: frozenset[FieldType] = frozenset({FieldType.INTEGER, FieldType.FLOAT})

_DEFAULT_OPERATORS: dict[FieldType, Operator] = {
    FieldType.STRING: _O.CONTAINS,
    FieldType.TEXT: _O.CONTAINS,
    FieldType.ARRAY: _O.CONTAINS_ANY,
    FieldType.MULTI_SELECT: _O.CONTAINS_ANY,
    FieldType.TEXT_SEARCH: _O.MATCHES,
}


def parse_field_type(value: object) -> FieldType | None:
    """Parse an untrusted value into a FieldType, or None if unknown."""
    if isinstance(value, FieldType):
        return value
    if isinstance(value, str):
        try:
            return FieldType(value.strip().lower())
        except ValueError:
            return None
    return None


def parse_operator(value: object) -> Operator | None:
    """Parse an untrusted value into an Operator, or None if unknown."""
    if isinstance(value, Operator):
        return value
    if isinstance(value, str):
        try:
            return Operator(value.strip().lower())
        except ValueError:
            return None
    return None


def field_types() -> list[FieldType]:
    """Return all built-in field types."""
    return list(TYPE_OPERATORS)


def operators_for(field_type: FieldType | str) -> list[Operator]:
    """Return the ordered operators legal for a type.

    Unknown types give an empty list instead of raising.
    """
    parsed = parse_field_type(field_type)
    if parsed is None:
        return []
    return list(TYPE_OPERATORS[parsed])


def operator_label(operator: Operator | str) -> str:
    """Return the human-readable label for an operator."""
    parsed = parse_operator(operator)
    if parsed is None:
        return str(operator)
    return OPERATOR_LABELS[parsed]


def requires_value(operator: Operator | str) -> bool:
    """Return whether an operator needs a value input."""
    parsed = parse_operator(operator)
    return parsed not in NO_VALUE_OPERATORS


def default_operator(field_type: FieldType | str) -> Operator:
    """Return the operator preselected when a field is first added."""
    parsed = parse_field_type(field_type)
    if parsed is None:
        return Operator.EQUALS
    return _DEFAULT_OPERATORS.get(parsed, Operator.EQUALS)


def is_valid_operator(field_type: FieldType | str, operator: Operator | str) -> bool:
    """Check whether ``operator`` is legal for ``field_type``."""
    parsed = parse_operator(operator)
    if parsed is None:
        return False
    return parsed in operators_for(field_type)


def input_component_for(field_type: FieldType | str, operator: Operator | str) -> str | None:
    """Suggest a UI input component for a type/operator combination.

    Returns None when the operator needs no input at all.
    """
    ft = parse_field_type(field_type)
    op = parse_operator(operator)

    if op in (Operator.IS_EMPTY, Operator.IS_NOT_EMPTY):
        return None
    if op == Operator.BETWEEN:
        if ft in DATE_TYPES:
            return "date_range_selector"
        return "range_input"
    if ft == FieldType.BOOLEAN:
        return "boolean_filter"
    if ft in DATE_TYPES:
        return "date_selector"
    if ft in (FieldType.ENUM, FieldType.SELECT_SEARCH):
        if op in (Operator.IN, Operator.NOT_IN):
            return "multi_select_search"
        return "search_select"
    if ft in ARRAY_TYPES:
        return "multi_select_search"
    if ft == FieldType.TEXT_SEARCH:
        return "search_input"
    if ft in NUMERIC_TYPES:
        return "number_input"
    return "text_input"
