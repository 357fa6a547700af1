# File: /tests/test_view_crud_unit.py | Version: 1.0 | Title: View CRUD helpers (session-level)
import pytest

from gridbase.crud import core_entities as crud_core
from gridbase.crud import filtering as crud_filtering
from gridbase.crud import rows as crud_rows
from gridbase.crud import view as crud_view
from gridbase.models import Column, User


@pytest.fixture()
def table(db_session):
    user = User(email="vunit@example.com", hashed_password="x")
    db_session.add(user)
    db_session.commit()
    base = crud_core.create_base(db_session, user_id=user.id)
    return crud_core.create_table(db_session, base_id=base.id, name="T")


def test_ensure_default_view_is_idempotent(db_session, table):
    assert crud_view.ensure_default_view(db_session, table_id=table.id) is None
    assert len(crud_view.list_views(db_session, table_id=table.id)) == 1


def test_update_view_state_returns_none_for_unknown_view(db_session):
    assert crud_view.update_view_state(db_session, "no-such-view", {"searchQuery": "x"}) is None


def test_update_view_state_skips_equal_write(db_session, table):
    view = crud_view.list_views(db_session, table_id=table.id)[0]
    before = view.updated_at
    saved, state, changed = crud_view.update_view_state(db_session, view.id, {"searchQuery": ""})
    assert changed is False
    assert saved.updated_at == before
    assert state.search_query == ""


def test_last_grid_view_guard(db_session, table):
    view = crud_view.list_views(db_session, table_id=table.id)[0]
    with pytest.raises(crud_view.LastGridViewError):
        crud_view.delete_view(db_session, view)


def test_apply_view_runs_stored_state(db_session, table):
    col = Column(table_id=table.id, name="Name", type="text")
    db_session.add(col)
    db_session.commit()
    crud_rows.bulk_create_rows(
        db_session, table_id=table.id, rows=[{col.id: "pear"}, {col.id: "apple"}, {col.id: "plum"}]
    )
    view = crud_view.list_views(db_session, table_id=table.id)[0]
    crud_view.update_view_state(
        db_session,
        view.id,
        {
            "sorting": [{"id": col.id, "desc": True}],
            "filterGroups": [{"conditions": [{"columnId": col.id, "operator": "contains", "value": "p"}]}],
        },
    )

    page = crud_filtering.apply_view(
        db_session, view, crud_core.get_column_types(db_session, table_id=table.id), limit=10
    )
    assert [r["cells"][col.id] for r in page["rows"]] == ["plum", "pear", "apple"]
    assert page["total"] == 3
