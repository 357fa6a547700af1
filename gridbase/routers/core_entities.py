# File: /gridbase/routers/core_entities.py | Version: 1.0 | Path: /gridbase/routers/core_entities.py
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from gridbase.core.permissions import require_base_owner, require_column_owner, require_table_owner
from gridbase.crud import core_entities as crud_core
from gridbase.db.indexes import schedule_base_indexes, schedule_column_indexes
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas import core_entities as schema
from gridbase.schemas.view import ViewOut
from gridbase.security import get_current_user

router = APIRouter(tags=["Core Entities"])

# ----- BASE ROUTES -----


@router.post("/bases/", response_model=schema.BaseOut)
def create_base(
    data: schema.BaseCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_core.create_base(db, user_id=str(current_user.id), name=data.name)


@router.get("/bases/", response_model=List[schema.BaseOut])
def get_my_bases(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return crud_core.list_bases(db, user_id=str(current_user.id))


@router.get("/bases/{base_id}", response_model=schema.BaseOut)
def get_base(
    base_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    base = require_base_owner(db, user_id=current_user.id, base_id=base_id)
    # Opening a base warms the row indexes of all its columns
    schedule_base_indexes(background_tasks, base.id, crud_core.load_base_columns)
    return base


@router.patch("/bases/{base_id}", response_model=schema.BaseOut)
def update_base(
    base_id: str,
    data: schema.BaseUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    base = require_base_owner(db, user_id=current_user.id, base_id=base_id)
    return crud_core.update_base(db, base, data)


@router.delete("/bases/{base_id}")
def delete_base(
    base_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    base = require_base_owner(db, user_id=current_user.id, base_id=base_id)
    crud_core.delete_base(db, base)
    return {"detail": "Base deleted"}


# ----- TABLE ROUTES -----


@router.post("/bases/{base_id}/tables", response_model=schema.TableOut)
def create_table(
    base_id: str,
    data: schema.TableCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_base_owner(db, user_id=current_user.id, base_id=base_id)
    return crud_core.create_table(db, base_id=base_id, name=data.name)


@router.get("/bases/{base_id}/tables", response_model=List[schema.TableOut])
def get_tables(
    base_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_base_owner(db, user_id=current_user.id, base_id=base_id)
    return crud_core.list_tables(db, base_id=base_id)


@router.put("/bases/{base_id}/tables/order")
def reorder_tables(
    base_id: str,
    data: schema.ReorderPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_base_owner(db, user_id=current_user.id, base_id=base_id)
    return {"updated": crud_core.reorder_tables(db, base_id=base_id, table_ids=data.ids)}


@router.get("/tables/{table_id}", response_model=schema.TableOut)
def get_table(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return require_table_owner(db, user_id=current_user.id, table_id=table_id)


@router.get("/tables/{table_id}/bootstrap")
def get_table_bootstrap(
    table_id: str,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """Everything the grid needs to open a table: the table, its columns and views."""
    table = require_table_owner(db, user_id=current_user.id, table_id=table_id)
    payload = crud_core.get_table_bootstrap(db, table)
    queued = schedule_column_indexes(background_tasks, crud_core.column_refs(payload["columns"]))
    return {
        "table": schema.TableOut.model_validate(payload["table"]),
        "columns": [schema.ColumnOut.model_validate(c) for c in payload["columns"]],
        "views": [ViewOut.model_validate(v) for v in payload["views"]],
        "indexes_queued": queued,
    }


@router.patch("/tables/{table_id}", response_model=schema.TableOut)
def update_table(
    table_id: str,
    data: schema.TableUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    table = require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return crud_core.update_table(db, table, data)


@router.delete("/tables/{table_id}")
def delete_table(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    table = require_table_owner(db, user_id=current_user.id, table_id=table_id)
    crud_core.delete_table(db, table)
    return {"detail": "Table deleted"}


# ----- COLUMN ROUTES -----


@router.post("/tables/{table_id}/columns", response_model=schema.ColumnOut)
def create_column(
    table_id: str,
    data: schema.ColumnCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    column = crud_core.create_column(db, table_id=table_id, data=data)
    schedule_column_indexes(background_tasks, crud_core.column_refs([column]))
    return column


@router.get("/tables/{table_id}/columns", response_model=List[schema.ColumnOut])
def get_columns(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return crud_core.list_columns(db, table_id=table_id)


@router.put("/tables/{table_id}/columns/order")
def reorder_columns(
    table_id: str,
    data: schema.ReorderPayload,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return {"updated": crud_core.reorder_columns(db, table_id=table_id, column_ids=data.ids)}


@router.patch("/columns/{column_id}", response_model=schema.ColumnOut)
def update_column(
    column_id: str,
    data: schema.ColumnUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    column = require_column_owner(db, user_id=current_user.id, column_id=column_id)
    return crud_core.update_column(db, column, data)


@router.delete("/columns/{column_id}")
def delete_column(
    column_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    column = require_column_owner(db, user_id=current_user.id, column_id=column_id)
    crud_core.delete_column(db, column)
    return {"detail": "Column deleted"}
