# File: tests/test_permissions_unit.py | Version: 1.0 | Path: /tests/test_permissions_unit.py
import pytest
from fastapi import HTTPException

from gridbase.core.permissions import (
    get_base_owner_id,
    owns_table,
    require_base_owner,
    require_table_owner,
    require_view_owner,
)
from gridbase.crud import core_entities as crud_core
from gridbase.crud import view as crud_view
from gridbase.models import User


@pytest.fixture()
def owned_table(db_session):
    user = User(email="perm@example.com", hashed_password="x")
    db_session.add(user)
    db_session.commit()
    base = crud_core.create_base(db_session, user_id=user.id, name="P")
    table = crud_core.create_table(db_session, base_id=base.id, name="T")
    return user, base, table


def test_owner_lookup(db_session, owned_table):
    user, _, table = owned_table
    assert get_base_owner_id(db_session, table_id=table.id) == user.id
    assert get_base_owner_id(db_session, table_id="missing") is None
    assert owns_table(db_session, user_id=user.id, table_id=table.id)
    assert not owns_table(db_session, user_id="someone-else", table_id=table.id)


def test_require_base_owner_hides_foreign_and_missing_bases(db_session, owned_table):
    user, base, _ = owned_table
    assert require_base_owner(db_session, user_id=user.id, base_id=base.id) is base
    for user_id, base_id in (("intruder", base.id), (user.id, "missing")):
        with pytest.raises(HTTPException) as excinfo:
            require_base_owner(db_session, user_id=user_id, base_id=base_id)
        assert excinfo.value.status_code == 403


def test_require_table_owner_distinguishes_missing_from_foreign(db_session, owned_table):
    user, _, table = owned_table
    assert require_table_owner(db_session, user_id=user.id, table_id=table.id) is table

    with pytest.raises(HTTPException) as missing:
        require_table_owner(db_session, user_id=user.id, table_id="missing")
    assert missing.value.status_code == 404

    with pytest.raises(HTTPException) as foreign:
        require_table_owner(db_session, user_id="intruder", table_id=table.id)
    assert foreign.value.status_code == 403
    assert "permission" in str(foreign.value.detail)


def test_require_view_owner(db_session, owned_table):
    user, _, table = owned_table
    view = crud_view.list_views(db_session, table_id=table.id)[0]
    assert require_view_owner(db_session, user_id=user.id, view_id=view.id) is view
    with pytest.raises(HTTPException) as excinfo:
        require_view_owner(db_session, user_id="intruder", view_id=view.id)
    assert excinfo.value.status_code == 403
