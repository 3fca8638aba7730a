"""Unit tests for the URL parameter codec."""

from __future__ import annotations

from datetime import date, datetime

import pytest

from live_filter.filters.ast_nodes import (
    Conjunction,
    Direction,
    Filter,
    FilterGroup,
    Pagination,
    Sort,
)
from live_filter.filters.params import (
    decode_filter_group,
    decode_pagination,
    decode_params,
    decode_sorts,
    encode_filter_group,
    encode_pagination,
    encode_params,
    encode_sorts,
    indexed_map_to_list,
    update_params,
)
from live_filter.filters.querystring import encode_query, flatten_params, parse_query_string
from live_filter.filters.vocabulary import FieldType, Operator


def _due_and_status() -> FilterGroup:
    return FilterGroup(
        filters=[
            Filter(
                "due_date",
                Operator.BETWEEN,
                (date(2025, 1, 1), date(2025, 1, 31)),
                FieldType.DATE,
            ),
            Filter("status", Operator.IN, ["pending", "in_progress"], FieldType.ENUM),
        ]
    )


def _through_url(params: dict) -> dict:
    return parse_query_string(encode_query(params))


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


class TestEncodeFilterGroup:
    def test_range_and_list(self) -> None:
        assert encode_filter_group(_due_and_status()) == {
            "due_date": {
                "start": "2025-01-01",
                "end": "2025-01-31",
                "operator": "between",
                "type": "date",
            },
            "status": {
                "values": ["pending", "in_progress"],
                "operator": "in",
                "type": "enum",
            },
        }

    def test_flattened_keys(self) -> None:
        pairs = flatten_params(encode_params(_due_and_status()))
        assert ("filters[due_date][start]", "2025-01-01") in pairs
        assert ("filters[due_date][end]", "2025-01-31") in pairs
        assert ("filters[due_date][operator]", "between") in pairs
        assert ("filters[status][values][0]", "pending") in pairs
        assert ("filters[status][values][1]", "in_progress") in pairs
        assert ("filters[status][operator]", "in") in pairs

    def test_scalar_value(self) -> None:
        group = FilterGroup(filters=[Filter("is_urgent", Operator.EQUALS, True, "boolean")])
        assert encode_filter_group(group) == {
            "is_urgent": {"value": "true", "operator": "equals", "type": "boolean"}
        }

    def test_valueless_filters_are_left_out(self) -> None:
        group = FilterGroup(
            filters=[
                Filter("description", Operator.IS_EMPTY),
                Filter("assigned_to", Operator.EQUALS, None),
            ]
        )
        assert encode_filter_group(group) == {}

    def test_open_ended_range(self) -> None:
        group = FilterGroup(filters=[Filter("points", Operator.BETWEEN, (3, None), "integer")])
        assert encode_filter_group(group)["points"] == {
            "start": 3,
            "operator": "between",
            "type": "integer",
        }

    def test_same_field_keeps_last(self) -> None:
        group = FilterGroup(
            filters=[
                Filter("status", Operator.EQUALS, "todo"),
                Filter("status", Operator.EQUALS, "done"),
            ]
        )
        assert encode_filter_group(group)["status"]["value"] == "done"

    def test_conjunction_only_when_not_and(self) -> None:
        flt = Filter("status", Operator.EQUALS, "todo")
        assert "conjunction" not in encode_filter_group(FilterGroup(filters=[flt]))
        encoded = encode_filter_group(FilterGroup(filters=[flt], conjunction=Conjunction.OR))
        assert encoded["conjunction"] == "or"
        assert encode_filter_group(FilterGroup(conjunction=Conjunction.OR)) == {}

    def test_nested_groups_use_positional_keys(self) -> None:
        inner = FilterGroup(
            filters=[
                Filter("status", Operator.EQUALS, "todo"),
                Filter("status", Operator.EQUALS, "done"),
            ],
            conjunction=Conjunction.OR,
        )
        encoded = encode_filter_group(FilterGroup(groups=[inner]))
        status = {"field": "status"}
        assert encoded == {
            "group_0": {
                "conjunction": "or",
                "filters": {
                    "0": {"value": "todo", "operator": "equals", "type": "string", **status},
                    "1": {"value": "done", "operator": "equals", "type": "string", **status},
                },
            }
        }

    def test_none_group(self) -> None:
        assert encode_filter_group(None) == {}


class TestEncodeSortsAndPages:
    def test_single_sort_is_flat(self) -> None:
        assert encode_sorts(Sort("due_date", Direction.DESC)) == {
            "field": "due_date",
            "direction": "desc",
        }
        assert encode_sorts([Sort("title")]) == {"field": "title", "direction": "asc"}

    def test_multiple_sorts_are_indexed(self) -> None:
        assert encode_sorts([Sort("status"), Sort("title", Direction.DESC)]) == {
            "0": {"field": "status", "direction": "asc"},
            "1": {"field": "title", "direction": "desc"},
        }

    def test_no_sorts(self) -> None:
        assert encode_sorts(None) is None
        assert encode_sorts([]) is None

    def test_pagination_defaults_left_out(self) -> None:
        assert encode_pagination(Pagination()) == {}
        assert encode_pagination(Pagination(page=3)) == {"page": 3}
        assert encode_pagination(Pagination(per_page=50)) == {"per_page": 50}


class TestUpdateParams:
    def test_unrelated_params_are_kept(self) -> None:
        updated = update_params({"tab": "open"}, _due_and_status())
        assert updated["tab"] == "open"
        assert "due_date" in updated["filters"]

    def test_empty_group_removes_filter_key(self) -> None:
        updated = update_params({"filters": {"a": "b"}, "tab": "open"}, FilterGroup())
        assert updated == {"tab": "open"}

    def test_sort_untouched_unless_given(self) -> None:
        params = {"sort": {"field": "title", "direction": "asc"}}
        assert update_params(params, FilterGroup())["sort"] == params["sort"]
        assert "sort" not in update_params(params, FilterGroup(), None)

    def test_pagination_reset_to_defaults_removes_keys(self) -> None:
        params = {"page": "4", "per_page": "50"}
        assert update_params(params, FilterGroup(), pagination=Pagination()) == {}

    def test_custom_param_key(self) -> None:
        updated = update_params({}, _due_and_status(), param_key="f")
        assert set(updated) == {"f"}

    def test_original_params_untouched(self) -> None:
        params = {"tab": "open"}
        update_params(params, _due_and_status())
        assert params == {"tab": "open"}


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


class TestIndexedMapToList:
    def test_numeric_keys_sorted_numerically(self) -> None:
        assert indexed_map_to_list({"10": "c", "2": "b", "0": "a"}) == ["a", "b", "c"]

    def test_non_numeric_keys_go_last(self) -> None:
        assert indexed_map_to_list({"x": "z", "1": "b", "0": "a"}) == ["a", "b", "z"]

    @pytest.mark.parametrize(
        ("value", "expected"),
        [(None, []), (["a", "b"], ["a", "b"]), ("a", ["a"])],
    )
    def test_other_shapes(self, value: object, expected: list) -> None:
        assert indexed_map_to_list(value) == expected


class TestDecodeFilterGroup:
    def test_indexed_values_are_recovered_in_order(self) -> None:
        params = {
            "filters": {
                "tags": {
                    "values": {"2": "urgent", "0": "bug"},
                    "operator": "contains_any",
                    "type": "array",
                }
            }
        }
        group = decode_filter_group(params)
        assert group.filters == (
            Filter("tags", Operator.CONTAINS_ANY, ["bug", "urgent"], FieldType.ARRAY),
        )

    def test_missing_type_and_operator_use_defaults(self) -> None:
        group = decode_filter_group({"filters": {"title": {"value": "report"}}})
        assert group.filters == (Filter("title", Operator.EQUALS, "report", FieldType.STRING),)

    def test_unknown_type_and_operator_use_defaults(self) -> None:
        params = {"filters": {"title": {"value": "x", "operator": "sounds_like", "type": "blob"}}}
        flt = decode_filter_group(params).filters[0]
        assert flt.operator is Operator.EQUALS
        assert flt.type is FieldType.STRING

    def test_range_shape_defaults_to_between(self) -> None:
        params = {"filters": {"due_date": {"start": "2025-01-01", "end": "2025-01-31"}}}
        flt = decode_filter_group(params).filters[0]
        assert flt.operator is Operator.BETWEEN
        assert flt.value == (date(2025, 1, 1), date(2025, 1, 31))

    def test_open_ended_range(self) -> None:
        params = {"filters": {"due_date": {"start": "2025-01-01", "type": "date"}}}
        assert decode_filter_group(params).filters[0].value == (date(2025, 1, 1), None)

    def test_values_shape_defaults_to_in(self) -> None:
        params = {"filters": {"status": {"values": ["todo", "done"]}}}
        assert decode_filter_group(params).filters[0].operator is Operator.IN

    def test_bare_string_and_list(self) -> None:
        group = decode_filter_group({"filters": {"status": "todo", "tags": ["a", "b"]}})
        assert group.filters == (
            Filter("status", Operator.EQUALS, "todo"),
            Filter("tags", Operator.IN, ["a", "b"]),
        )

    def test_values_are_typed_from_wire(self) -> None:
        params = {
            "filters": {
                "is_urgent": {"value": "true", "type": "boolean"},
                "points": {"value": "5", "type": "integer"},
                "completed_at": {"value": "2025-07-09T08:30:00", "operator": "on_or_after"},
            }
        }
        values = [f.value for f in decode_filter_group(params).filters]
        assert values == [True, "5", datetime(2025, 7, 9, 8, 30)]

    def test_malformed_entries_are_skipped(self) -> None:
        params = {
            "filters": {
                "a": {"foo": "bar"},
                "b": 42,
                "c": {"value": {"nested": "map"}},
                "d": {"start": "", "end": ""},
                "e": {"value": "kept"},
            }
        }
        group = decode_filter_group(params)
        assert [f.field for f in group.filters] == ["e"]

    def test_missing_or_unusable_param(self) -> None:
        assert decode_filter_group({}) == FilterGroup()
        assert decode_filter_group({"filters": "status"}) == FilterGroup()

    def test_conjunction_key(self) -> None:
        group = decode_filter_group({"filters": {"conjunction": "or", "a": "x"}})
        assert group.conjunction is Conjunction.OR
        assert [f.field for f in group.filters] == ["a"]

    def test_field_named_conjunction(self) -> None:
        group = decode_filter_group({"filters": {"conjunction": {"value": "x"}}})
        assert group.conjunction is Conjunction.AND
        assert group.filters[0].field == "conjunction"

    def test_field_named_like_a_group(self) -> None:
        group = decode_filter_group({"filters": {"group_1": {"value": "x"}}})
        assert group.groups == ()
        assert group.filters[0].field == "group_1"

    def test_nested_groups_in_index_order(self) -> None:
        params = {
            "filters": {
                "group_1": {"conjunction": "and", "filters": {"0": {"field": "b", "value": "2"}}},
                "group_0": {"conjunction": "or", "filters": {"0": {"field": "a", "value": "1"}}},
            }
        }
        group = decode_filter_group(params)
        assert [g.filters[0].field for g in group.groups] == ["a", "b"]
        assert group.groups[0].conjunction is Conjunction.OR

    def test_nested_filter_without_field_is_skipped(self) -> None:
        params = {"filters": {"group_0": {"filters": {"0": {"value": "1"}}}}}
        assert decode_filter_group(params).groups[0].filters == ()


class TestDecodeSortsAndPages:
    def test_single_sort(self) -> None:
        assert decode_sorts({"sort": {"field": "title", "direction": "desc"}}) == [
            Sort("title", Direction.DESC)
        ]

    def test_indexed_sorts(self) -> None:
        params = {
            "sort": {
                "1": {"field": "title", "direction": "desc"},
                "0": {"field": "status"},
            }
        }
        assert decode_sorts(params) == [Sort("status"), Sort("title", Direction.DESC)]

    def test_unusable_sorts(self) -> None:
        assert decode_sorts({}) is None
        assert decode_sorts({"sort": "title"}) is None
        assert decode_sorts({"sort": {"0": {"direction": "asc"}}}) is None

    def test_pagination(self) -> None:
        assert decode_pagination({"page": "2", "per_page": "25"}) == Pagination(2, 25)

    @pytest.mark.parametrize(
        "params",
        [
            {},
            {"page": "0", "per_page": "-5"},
            {"page": "two", "per_page": "many"},
            {"page": "1", "per_page": "500"},
        ],
    )
    def test_invalid_pagination_falls_back(self, params: dict) -> None:
        assert decode_pagination(params) == Pagination()


class TestThroughQueryString:
    def test_filter_group_survives(self) -> None:
        group = _due_and_status()
        decoded = decode_filter_group(_through_url(encode_params(group)))
        assert decoded == group

    def test_nested_or_group_survives(self) -> None:
        inner = FilterGroup(
            filters=[
                Filter("status", Operator.EQUALS, "todo"),
                Filter("status", Operator.EQUALS, "done"),
            ],
            conjunction=Conjunction.OR,
        )
        group = FilterGroup(
            filters=[Filter("is_urgent", Operator.EQUALS, True, FieldType.BOOLEAN)],
            groups=[inner],
        )
        assert decode_filter_group(_through_url(encode_params(group))) == group

    def test_full_state_survives(self) -> None:
        sorts = [Sort("status"), Sort("due_date", Direction.DESC)]
        pagination = Pagination(page=3, per_page=25)
        params = _through_url(encode_params(_due_and_status(), sorts, pagination))
        assert decode_params(params) == (_due_and_status(), sorts, pagination)
