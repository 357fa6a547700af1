# File: /gridbase/core/permissions.py | Version: 1.0 | Title: Per-row ownership checks (base -> table -> column/row/view)
from __future__ import annotations

from typing import Any, Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from gridbase.models import BaseEntity, Column, Row, Table, View


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"{what} not found")


def _forbidden(what: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail=f"You do not have permission to access this {what.lower()}",
    )


def get_base_owner_id(db: Session, *, table_id: Any) -> Optional[str]:
    """
    Return the owning user id of the base that holds `table_id`, or None if the table is gone.
    """
    row = (
        db.query(BaseEntity.user_id)
        .join(Table, Table.base_id == BaseEntity.id)
        .filter(Table.id == str(table_id))
        .first()
    )
    return row[0] if row else None


def owns_table(db: Session, *, user_id: Any, table_id: Any) -> bool:
    return get_base_owner_id(db, table_id=table_id) == str(user_id)


def require_base_owner(db: Session, *, user_id: Any, base_id: Any) -> BaseEntity:
    # Bases are only ever visible to their owner, so a foreign base is a 403 like upstream
    base = db.get(BaseEntity, str(base_id))
    if base is None or base.user_id != str(user_id):
        raise _forbidden("Base")
    return base


def require_table_owner(db: Session, *, user_id: Any, table_id: Any) -> Table:
    table = db.get(Table, str(table_id))
    if table is None:
        raise _not_found("Table")
    if get_base_owner_id(db, table_id=table.id) != str(user_id):
        raise _forbidden("Table")
    return table


def require_column_owner(db: Session, *, user_id: Any, column_id: Any) -> Column:
    column = db.get(Column, str(column_id))
    if column is None:
        raise _not_found("Column")
    if get_base_owner_id(db, table_id=column.table_id) != str(user_id):
        raise _forbidden("Column")
    return column


def require_row_owner(db: Session, *, user_id: Any, row_id: Any) -> Row:
    row = db.get(Row, str(row_id))
    if row is None:
        raise _not_found("Row")
    if get_base_owner_id(db, table_id=row.table_id) != str(user_id):
        raise _forbidden("Row")
    return row


def require_view_owner(db: Session, *, user_id: Any, view_id: Any) -> View:
    view = db.get(View, str(view_id))
    if view is None:
        raise _not_found("View")
    if get_base_owner_id(db, table_id=view.table_id) != str(user_id):
        raise _forbidden("View")
    return view
