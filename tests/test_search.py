# File: /tests/test_search.py | Version: 1.0 | Title: Base-wide & per-table search
def test_search_in_base_and_table(client, auth_headers):
    bid = client.post("/bases/", json={"name": "S"}, headers=auth_headers).json()["id"]
    t1 = client.post(f"/bases/{bid}/tables", json={"name": "Animals"}, headers=auth_headers).json()["id"]
    t2 = client.post(f"/bases/{bid}/tables", json={"name": "Plants"}, headers=auth_headers).json()["id"]
    c1 = client.post(f"/tables/{t1}/columns", json={"name": "Kind", "type": "text"}, headers=auth_headers).json()["id"]
    c2 = client.post(f"/tables/{t2}/columns", json={"name": "Kind", "type": "text"}, headers=auth_headers).json()["id"]
    client.post(
        f"/tables/{t1}/rows/bulk",
        json={"rows": [{"cells": {c1: "Zebra"}}, {"cells": {c1: "Lion"}}, {"cells": {c1: "zebra finch"}}]},
        headers=auth_headers,
    )
    client.post(f"/tables/{t2}/rows/bulk", json={"rows": [{"cells": {c2: "Fern"}}]}, headers=auth_headers)

    base_hits = client.get(f"/search/bases/{bid}", params={"q": "ZEBRA"}, headers=auth_headers).json()
    assert len(base_hits) == 1
    assert base_hits[0]["table_id"] == t1
    assert base_hits[0]["table_name"] == "Animals"
    assert len(base_hits[0]["rows"]) == 2

    limited = client.get(f"/search/tables/{t1}", params={"q": "zebra", "limit": 1}, headers=auth_headers).json()
    assert len(limited) == 1
    assert limited[0]["cells"][c1] == "Zebra"

    assert client.get(f"/search/tables/{t2}", params={"q": "zebra"}, headers=auth_headers).json() == []


def test_search_requires_query(client, auth_headers):
    bid = client.post("/bases/", json={"name": "S"}, headers=auth_headers).json()["id"]
    assert client.get(f"/search/bases/{bid}", params={"q": ""}, headers=auth_headers).status_code == 422
