# File: /gridbase/routers/views.py | Version: 1.0 | Title: Views Router (CRUD + view-scoped state + apply)
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from gridbase.core.config import settings
from gridbase.core.permissions import require_table_owner, require_view_owner
from gridbase.crud import core_entities as crud_core
from gridbase.crud import filtering as crud_filtering
from gridbase.crud.view import (
    LastGridViewError,
    create_view,
    delete_view as crud_delete_view,
    get_view_state,
    list_views as crud_list_views,
    update_view as crud_update_view,
    update_view_state,
)
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas.filters import RowPage
from gridbase.schemas.view import ViewCreate, ViewOut, ViewStateOut, ViewUpdate
from gridbase.security import get_current_user

log = logging.getLogger(__name__)

router = APIRouter(tags=["Views"])


# ----------------------------
# CRUD endpoints
# ----------------------------
@router.get(
    "/tables/{table_id}/views",
    response_model=List[ViewOut],
    summary="List the views of a table",
)
def list_views(
    table_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return crud_list_views(db, table_id=table_id)


@router.post("/tables/{table_id}/views", response_model=ViewOut, summary="Create a grid or form view")
def create_view_endpoint(
    table_id: str,
    data: ViewCreate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return create_view(db, table_id=table_id, name=data.name, kind=data.kind, state=data.state)


@router.get("/views/{view_id}", response_model=ViewOut, summary="Get a view")
def get_view_endpoint(
    view_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return require_view_owner(db, user_id=current_user.id, view_id=view_id)


@router.patch("/views/{view_id}", response_model=ViewOut, summary="Rename, reorder or replace a view's bag")
def update_view_endpoint(
    view_id: str,
    data: ViewUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    v = require_view_owner(db, user_id=current_user.id, view_id=view_id)
    try:
        return crud_update_view(db, v, data)
    except LastGridViewError:
        raise HTTPException(status_code=409, detail="A table must keep at least one grid view")


@router.delete("/views/{view_id}", summary="Delete a view (a table keeps at least one grid view)")
def delete_view_endpoint(
    view_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    v = require_view_owner(db, user_id=current_user.id, view_id=view_id)
    try:
        crud_delete_view(db, v)
    except LastGridViewError:
        raise HTTPException(status_code=409, detail="A table must keep at least one grid view")
    return {"detail": "View deleted"}


# ----------------------------
# View-scoped state
# ----------------------------
def _view_or_none(db: Session, view_id: str, current_user: User):
    """Ownership check that treats a vanished view as a no-op rather than a 404."""
    try:
        return require_view_owner(db, user_id=current_user.id, view_id=view_id)
    except HTTPException as e:
        if e.status_code == 404:
            log.info("State update for deleted view %s ignored", view_id)
            return None
        raise


@router.get("/views/{view_id}/state", response_model=ViewStateOut, summary="Canonical state of a view")
def get_view_state_endpoint(
    view_id: str,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    v = require_view_owner(db, user_id=current_user.id, view_id=view_id)
    return ViewStateOut(view_id=v.id, kind=v.kind, state=get_view_state(v))


@router.put("/views/{view_id}/state", response_model=Optional[ViewStateOut], summary="Save a view's state")
def put_view_state_endpoint(
    view_id: str,
    state: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    """
    Save search/sort/filters/hidden fields for a view.

    Returns null when the view was deleted in the meantime. Malformed pieces
    of the payload degrade to their defaults.
    """
    v = _view_or_none(db, view_id, current_user)
    if v is None:
        return None
    result = update_view_state(db, v.id, state)
    if result is None:
        return None
    saved, canonical, changed = result
    return ViewStateOut(view_id=saved.id, kind=saved.kind, state=canonical, changed=changed)


# ----------------------------
# APPLY: /views/{id}/rows
# ----------------------------
@router.get("/views/{view_id}/rows", response_model=RowPage, summary="Rows of a table through a view's state")
def apply_view_to_rows(
    view_id: str,
    limit: Optional[int] = Query(default=None, ge=1),
    cursor: Optional[int] = Query(default=None, ge=0),
    display: bool = Query(default=False),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    v = require_view_owner(db, user_id=current_user.id, view_id=view_id)
    page_size = min(limit or settings.ROWS_PAGE_SIZE, settings.ROWS_MAX_PAGE_SIZE)
    column_types = crud_core.get_column_types(db, table_id=v.table_id)
    number_configs = crud_core.get_number_configs(db, table_id=v.table_id) if display else None
    # Offset paging keeps follow-up pages valid whether or not the view sorts
    return crud_filtering.apply_view(
        db,
        v,
        column_types,
        limit=page_size,
        cursor=cursor if cursor is not None else 0,
        number_configs=number_configs,
    )
