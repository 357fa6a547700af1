# File: /tests/test_filter_utils.py | Version: 1.0 | Title: Filter group normalization (editable + query-ready)
from gridbase.core.filter_utils import (
    FILTER_NUMBER_OPERATORS,
    FILTER_TEXT_OPERATORS,
    dump_filter_groups,
    get_default_filter_operator_for_field,
    get_filter_operators_for_field,
    is_operator_valid_for_field,
    normalize_filter_groups,
    normalize_filter_groups_for_query,
    operator_requires_value,
)
from gridbase.schemas.filters import FilterOperator


def _cond(column_id="c1", operator="contains", value="x", join="and", **extra):
    return {"columnId": column_id, "operator": operator, "value": value, "join": join, **extra}


def test_operator_catalogs():
    assert get_filter_operators_for_field("text") == FILTER_TEXT_OPERATORS
    assert get_filter_operators_for_field("number") == FILTER_NUMBER_OPERATORS
    assert get_filter_operators_for_field(None) == FILTER_TEXT_OPERATORS
    assert get_default_filter_operator_for_field("text") is FilterOperator.contains
    assert get_default_filter_operator_for_field("number") is FilterOperator.is_

    assert is_operator_valid_for_field("lessThan", "number")
    assert not is_operator_valid_for_field("lessThan", "text")
    assert not is_operator_valid_for_field("contains", "number")
    assert not is_operator_valid_for_field("bogus", "text")


def test_operator_requires_value():
    assert operator_requires_value("contains")
    assert operator_requires_value(FilterOperator.greater_than)
    assert not operator_requires_value("isEmpty")
    assert not operator_requires_value(FilterOperator.is_not_empty)


def test_non_list_input_yields_empty():
    for bad in (None, "x", 3, {"conditions": []}):
        assert normalize_filter_groups(bad) == []


def test_malformed_entries_are_skipped():
    groups = normalize_filter_groups(
        [
            "nope",
            {"conditions": "not-a-list"},
            {"conditions": [42, {"columnId": 1, "operator": "is"}, _cond()]},
        ]
    )
    assert len(groups) == 1
    assert len(groups[0].conditions) == 1
    assert groups[0].conditions[0].column_id == "c1"


def test_fallback_ids_are_positional_and_stable():
    raw = [{"conditions": [_cond(), _cond(column_id="c2", id="  ")]}]
    first = normalize_filter_groups(raw)
    second = normalize_filter_groups(raw)
    assert first[0].id == "group-0"
    assert [c.id for c in first[0].conditions] == ["condition-0-0", "condition-0-1"]
    assert dump_filter_groups(first) == dump_filter_groups(second)


def test_defaults_for_join_mode_and_value():
    groups = normalize_filter_groups(
        [{"id": "g", "mode": "weird", "join": "xor", "conditions": [_cond(value=5, join="maybe")]}]
    )
    g = groups[0]
    assert g.mode == "group"
    assert g.join == "and"
    assert g.conditions[0].value == ""
    assert g.conditions[0].join == "and"


def test_editable_form_keeps_leading_or():
    groups = normalize_filter_groups([{"join": "or", "conditions": [_cond(join="or")]}])
    assert groups[0].join == "or"
    assert groups[0].conditions[0].join == "or"


def test_unknown_operator_is_kept_for_editing():
    groups = normalize_filter_groups([{"conditions": [_cond(operator="fuzzy")]}])
    assert groups[0].conditions[0].operator == "fuzzy"


def test_normalization_is_idempotent():
    raw = [
        {"id": "g1", "mode": "single", "join": "or", "conditions": [_cond(id="a", join="or")]},
        {"conditions": [_cond(column_id="c2", operator="isEmpty", value="")]},
    ]
    once = normalize_filter_groups(raw)
    twice = normalize_filter_groups(dump_filter_groups(once))
    assert dump_filter_groups(once) == dump_filter_groups(twice)


def test_query_form_drops_blank_values_and_empty_groups():
    groups = normalize_filter_groups(
        [
            {"conditions": [_cond(value="   ")]},
            {"conditions": [_cond(column_id="", value="x"), _cond(value=" y ")]},
        ]
    )
    query = normalize_filter_groups_for_query(groups)
    assert len(query) == 1
    assert len(query[0].conditions) == 1
    assert query[0].conditions[0].value == "y"


def test_query_form_omits_value_for_valueless_operators():
    groups = normalize_filter_groups([{"conditions": [_cond(operator="isEmpty", value="ignored")]}])
    query = normalize_filter_groups_for_query(groups)
    assert query[0].conditions[0].value is None


def test_query_form_forces_leading_joins_to_and():
    groups = normalize_filter_groups(
        [
            {"join": "or", "conditions": [_cond(join="or"), _cond(column_id="c2", join="or")]},
            {"join": "or", "conditions": [_cond(column_id="c3")]},
        ]
    )
    query = normalize_filter_groups_for_query(groups)
    assert query[0].join == "and"
    assert query[0].conditions[0].join == "and"
    assert query[0].conditions[1].join == "or"
    assert query[1].join == "or"


def test_query_form_forces_and_when_leader_is_dropped():
    groups = normalize_filter_groups(
        [
            {"join": "and", "conditions": [_cond(value="")]},
            {"join": "or", "conditions": [_cond(value="", join="and"), _cond(column_id="c2", join="or")]},
        ]
    )
    query = normalize_filter_groups_for_query(groups)
    assert len(query) == 1
    assert query[0].join == "and"
    assert query[0].conditions[0].join == "and"
    assert query[0].conditions[0].column_id == "c2"
