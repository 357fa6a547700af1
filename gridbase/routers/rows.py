# File: /gridbase/routers/rows.py | Version: 1.0 | Title: Rows Router (query scan + CRUD + bulk)
from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from gridbase.core.permissions import get_base_owner_id, require_row_owner, require_table_owner
from gridbase.crud import core_entities as crud_core
from gridbase.crud import filtering as crud_filtering
from gridbase.crud import rows as crud_rows
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas import core_entities as schema
from gridbase.schemas.filters import RowPage, RowQueryPayload
from gridbase.security import get_current_user

router = APIRouter(tags=["Rows"])


@router.post("/tables/{table_id}/rows/query", response_model=RowPage)
def query_rows(
    table_id: str,
    payload: RowQueryPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Filtered, searched, sorted page of rows.

    A table that no longer exists yields an empty page (the grid may still be
    polling a table deleted in another tab).
    """
    owner_id = get_base_owner_id(db, table_id=table_id)
    if owner_id is None:
        return {"rows": [], "total": 0, "next_cursor": None}
    if owner_id != str(current_user.id):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You do not have permission to access this table",
        )

    scan = crud_filtering.scan_from_payload(table_id, payload)
    column_types = crud_core.get_column_types(db, table_id=table_id)
    number_configs = crud_core.get_number_configs(db, table_id=table_id) if payload.display else None
    try:
        return crud_filtering.list_rows(db, scan, column_types, number_configs)
    except crud_filtering.InvalidCursorError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/tables/{table_id}/rows/count")
def count_rows(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return {"count": crud_rows.count_rows(db, table_id=table_id)}


@router.post("/tables/{table_id}/rows", response_model=schema.RowOut)
def create_row(
    table_id: str,
    data: schema.RowCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return crud_rows.create_row(db, table_id=table_id, cells=data.cells)


@router.post("/tables/{table_id}/rows/bulk", response_model=List[schema.RowOut])
def bulk_create_rows(
    table_id: str,
    data: schema.RowBulkCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return crud_rows.bulk_create_rows(db, table_id=table_id, rows=[r.cells for r in data.rows])


@router.post("/tables/{table_id}/rows/generate")
def generate_rows(
    table_id: str,
    data: schema.RowBulkGenerate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    inserted = crud_rows.bulk_create_generated_rows(db, table_id=table_id, count=data.count, cells=data.cells)
    return {"inserted": inserted}


@router.put("/tables/{table_id}/columns/{column_id}/value")
def set_column_value(
    table_id: str,
    column_id: str,
    data: schema.CellUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    updated = crud_rows.set_column_value(db, table_id=table_id, column_id=column_id, value=data.value)
    return {"updated": updated}


@router.delete("/tables/{table_id}/rows")
def clear_rows(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return {"deleted": crud_rows.clear_rows(db, table_id=table_id)}


@router.get("/rows/{row_id}", response_model=schema.RowOut)
def get_row(
    row_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return require_row_owner(db, user_id=current_user.id, row_id=row_id)


@router.patch("/rows/{row_id}", response_model=schema.RowOut)
def update_row(
    row_id: str,
    data: schema.RowCellsUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = require_row_owner(db, user_id=current_user.id, row_id=row_id)
    return crud_rows.update_row_cells(db, row, data.cells)


@router.put("/rows/{row_id}/cells/{column_id}", response_model=schema.RowOut)
def update_cell(
    row_id: str,
    column_id: str,
    data: schema.CellUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = require_row_owner(db, user_id=current_user.id, row_id=row_id)
    return crud_rows.update_cell(db, row, column_id=column_id, value=data.value)


@router.delete("/rows/{row_id}")
def delete_row(
    row_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    row = require_row_owner(db, user_id=current_user.id, row_id=row_id)
    crud_rows.delete_row(db, row)
    return {"detail": "Row deleted"}
