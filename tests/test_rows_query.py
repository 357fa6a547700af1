# File: /tests/test_rows_query.py | Version: 1.0 | Title: Row scans: filters, sort, search & pagination
from __future__ import annotations

from typing import Any, Dict, List, Optional
from uuid import uuid4

import pytest

from gridbase.crud.filtering import build_filter_expression, combine_filter_groups
from gridbase.schemas.filters import QueryFilterCondition, QueryFilterGroup

SEED = [
    ("Alice", "10"),
    ("bob", "2.5"),
    ("Carol", "n/a"),
    (None, "30"),
    ("alice cooper", ""),
]


def _login_headers(client, email: str) -> Dict[str, str]:
    client.post("/auth/register", data={"email": email, "password": "p"})
    r = client.post("/auth/token", data={"username": email, "password": "p"})
    return {"Authorization": f"Bearer {r.json()['access_token']}"}


@pytest.fixture()
def grid(client, auth_headers) -> Dict[str, Any]:
    bid = client.post("/bases/", json={"name": "B"}, headers=auth_headers).json()["id"]
    tid = client.post(f"/bases/{bid}/tables", json={"name": "People"}, headers=auth_headers).json()["id"]
    name_col = client.post(
        f"/tables/{tid}/columns", json={"name": "Name", "type": "text"}, headers=auth_headers
    ).json()["id"]
    amount_col = client.post(
        f"/tables/{tid}/columns", json={"name": "Amount", "type": "number"}, headers=auth_headers
    ).json()["id"]

    rows = []
    for name, amount in SEED:
        cells = {amount_col: amount}
        if name is not None:
            cells[name_col] = name
        rows.append({"cells": cells})
    created = client.post(f"/tables/{tid}/rows/bulk", json={"rows": rows}, headers=auth_headers)
    assert created.status_code == 200, created.text
    return {
        "table_id": tid,
        "name": name_col,
        "amount": amount_col,
        "ids": [r["id"] for r in created.json()],
        "headers": auth_headers,
    }


def _query(client, grid, **payload) -> Dict[str, Any]:
    r = client.post(f"/tables/{grid['table_id']}/rows/query", json=payload, headers=grid["headers"])
    assert r.status_code == 200, r.text
    return r.json()


def _ids(body) -> List[str]:
    return [row["id"] for row in body["rows"]]


def _rows(grid, *positions: int) -> List[str]:
    return [grid["ids"][i] for i in positions]


def _single(column_id: str, operator: str, value: Optional[str] = None, join: str = "and") -> Dict[str, Any]:
    cond = {"columnId": column_id, "operator": operator, "join": join}
    if value is not None:
        cond["value"] = value
    return {"conditions": [cond]}


def test_number_cells_are_normalized_on_write(client, grid):
    body = _query(client, grid)
    amounts = [row["cells"].get(grid["amount"]) for row in body["rows"]]
    assert amounts == ["10.0", "2.5", "n/a", "30.0", ""]
    assert body["total"] == 5


@pytest.mark.parametrize(
    "operator, value, expected",
    [
        ("contains", "ALI", [0, 4]),
        ("doesNotContain", "ali", [1, 2, 3]),
        ("is", "BOB", [1]),
        ("isNot", "bob", [0, 2, 3, 4]),
        ("isEmpty", None, [3]),
        ("isNotEmpty", None, [0, 1, 2, 4]),
    ],
)
def test_text_operators(client, grid, operator, value, expected):
    body = _query(client, grid, filterGroups=[_single(grid["name"], operator, value)])
    assert _ids(body) == _rows(grid, *expected)
    assert body["total"] == len(expected)


@pytest.mark.parametrize(
    "operator, value, expected",
    [
        ("greaterThan", "5", [0, 3]),
        ("lessThan", "5", [1]),
        ("greaterThanOrEqual", "10", [0, 3]),
        ("lessThanOrEqual", "10", [0, 1]),
        ("is", "10", [0]),
        ("isNot", "10", [1, 2, 3, 4]),
        ("isEmpty", None, [4]),
    ],
)
def test_number_operators(client, grid, operator, value, expected):
    body = _query(client, grid, filterGroups=[_single(grid["amount"], operator, value)])
    assert _ids(body) == _rows(grid, *expected)


def test_unusable_conditions_are_skipped(client, grid):
    everything = _rows(grid, 0, 1, 2, 3, 4)
    # non-numeric value for a number column
    assert _ids(_query(client, grid, filterGroups=[_single(grid["amount"], "greaterThan", "abc")])) == everything
    # operator not offered for the column type
    assert _ids(_query(client, grid, filterGroups=[_single(grid["amount"], "contains", "1")])) == everything
    # unknown column
    assert _ids(_query(client, grid, filterGroups=[_single(str(uuid4()), "is", "x")])) == everything
    # blank value
    assert _ids(_query(client, grid, filterGroups=[_single(grid["name"], "contains", "   ")])) == everything


def test_or_within_a_group(client, grid):
    group = {
        "conditions": [
            {"columnId": grid["name"], "operator": "contains", "value": "carol"},
            {"columnId": grid["amount"], "operator": "lessThan", "value": "5", "join": "or"},
        ]
    }
    assert _ids(_query(client, grid, filterGroups=[group])) == _rows(grid, 1, 2)


def test_or_between_groups_and_leading_or_is_ignored(client, grid):
    groups = [
        {"join": "or", "conditions": [{"columnId": grid["name"], "operator": "is", "value": "bob", "join": "or"}]},
        {"join": "or", "conditions": [{"columnId": grid["amount"], "operator": "greaterThan", "value": "20"}]},
    ]
    assert _ids(_query(client, grid, filterGroups=groups)) == _rows(grid, 1, 3)


def test_and_between_groups(client, grid):
    groups = [
        _single(grid["name"], "contains", "alice"),
        _single(grid["amount"], "isNotEmpty"),
    ]
    assert _ids(_query(client, grid, filterGroups=groups)) == _rows(grid, 0)


def test_sort_number_column(client, grid):
    desc = _query(client, grid, sort={"columnId": grid["amount"], "direction": "desc"})
    assert _ids(desc) == _rows(grid, 3, 0, 1, 4, 2)
    asc = _query(client, grid, sort={"columnId": grid["amount"], "direction": "asc"})
    assert _ids(asc) == _rows(grid, 2, 4, 1, 0, 3)


def test_sort_text_column_is_case_insensitive(client, grid):
    body = _query(client, grid, sort={"columnId": grid["name"], "direction": "asc"})
    assert _ids(body) == _rows(grid, 3, 0, 4, 1, 2)


def test_search_matches_any_cell(client, grid):
    body = _query(client, grid, searchQuery="  COOPER ")
    assert _ids(body) == _rows(grid, 4)
    assert body["total"] == 1


def test_keyset_pagination_for_unsorted_scan(client, grid):
    page1 = _query(client, grid, limit=2)
    assert _ids(page1) == _rows(grid, 0, 1)
    assert page1["total"] == 5
    assert page1["next_cursor"] == {"lastOrder": 1, "lastId": grid["ids"][1]}

    page2 = _query(client, grid, limit=2, cursor=page1["next_cursor"])
    assert _ids(page2) == _rows(grid, 2, 3)
    assert page2["total"] == -1

    page3 = _query(client, grid, limit=2, cursor=page2["next_cursor"])
    assert _ids(page3) == _rows(grid, 4)
    assert page3["next_cursor"] is None


def test_offset_pagination_for_sorted_scan(client, grid):
    sort = {"columnId": grid["name"], "direction": "asc"}
    page1 = _query(client, grid, limit=2, sort=sort)
    assert page1["next_cursor"] == 2
    page2 = _query(client, grid, limit=2, sort=sort, cursor=page1["next_cursor"])
    assert _ids(page2) == _rows(grid, 4, 1)
    assert page2["total"] == 5
    page3 = _query(client, grid, limit=2, sort=sort, cursor=page2["next_cursor"])
    assert _ids(page3) == _rows(grid, 2)
    assert page3["next_cursor"] is None


def test_keyset_cursor_with_sort_is_rejected(client, grid):
    r = client.post(
        f"/tables/{grid['table_id']}/rows/query",
        json={"sort": {"columnId": grid["name"]}, "cursor": {"lastOrder": 0, "lastId": grid["ids"][0]}},
        headers=grid["headers"],
    )
    assert r.status_code == 400


def test_display_values_for_number_cells(client, grid):
    body = _query(client, grid, display=True, filterGroups=[_single(grid["amount"], "is", "10")])
    assert body["rows"][0]["display"][grid["amount"]] == "10.0"


def test_missing_table_yields_empty_page(client, auth_headers):
    r = client.post(f"/tables/{uuid4()}/rows/query", json={}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json() == {"rows": [], "total": 0, "next_cursor": None}


def test_foreign_table_is_forbidden(client, grid):
    other = _login_headers(client, "intruder@example.com")
    r = client.post(f"/tables/{grid['table_id']}/rows/query", json={}, headers=other)
    assert r.status_code == 403


def test_build_filter_expression_skips_invalid_input():
    text = QueryFilterCondition(column_id="c", operator="lessThan", value="1")
    assert build_filter_expression(text, "text") is None
    assert build_filter_expression(text, None) is None
    bad_number = QueryFilterCondition(column_id="c", operator="lessThan", value="ten")
    assert build_filter_expression(bad_number, "number") is None
    assert build_filter_expression(QueryFilterCondition(column_id="c", operator="isEmpty"), "number") is not None


def test_combine_filter_groups_with_nothing_usable_is_none():
    groups = [QueryFilterGroup(conditions=[QueryFilterCondition(column_id="c", operator="contains", value="x")])]
    assert combine_filter_groups(groups, {}) is None
    assert combine_filter_groups([], {"c": "text"}) is None


def test_negative_offset_cursor_is_rejected(client, grid):
    r = client.post(
        f"/tables/{grid['table_id']}/rows/query",
        json={"limit": 2, "cursor": -5},
        headers=grid["headers"],
    )
    assert r.status_code == 422


def test_filter_conditions_are_capped_across_groups(client, grid):
    cond = {"columnId": grid["name"], "operator": "contains", "value": "a"}
    # 4 groups of 8 conditions: under the group cap, over the condition cap
    groups = [{"conditions": [dict(cond) for _ in range(8)]} for _ in range(4)]
    url = f"/tables/{grid['table_id']}/rows/query"
    assert client.post(url, json={"filterGroups": groups}, headers=grid["headers"]).status_code == 422

    ok = [{"conditions": [dict(cond) for _ in range(10)]} for _ in range(3)]
    assert client.post(url, json={"filterGroups": ok}, headers=grid["headers"]).status_code == 200


def test_filter_value_length_is_bounded(client, grid):
    url = f"/tables/{grid['table_id']}/rows/query"
    too_long = [_single(grid["name"], "contains", "x" * 201)]
    assert client.post(url, json={"filterGroups": too_long}, headers=grid["headers"]).status_code == 422
    at_limit = [_single(grid["name"], "contains", "x" * 200)]
    assert client.post(url, json={"filterGroups": at_limit}, headers=grid["headers"]).status_code == 200


@pytest.mark.parametrize("value", ["nan", "inf", "-Infinity", "1e400"])
def test_non_finite_number_values_skip_the_condition(client, grid, value):
    assert build_filter_expression(
        QueryFilterCondition(column_id="c", operator="greaterThan", value=value), "number"
    ) is None
    body = _query(client, grid, filterGroups=[_single(grid["amount"], "greaterThan", value)])
    assert body["total"] == len(SEED)
