# File: /gridbase/routers/search.py | Version: 1.0 | Title: Search Router (base-wide & per-table cell search)
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from gridbase.core.config import settings
from gridbase.core.permissions import require_base_owner, require_table_owner
from gridbase.crud import filtering as crud_filtering
from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas.core_entities import RowOut
from gridbase.security import get_current_user

router = APIRouter(prefix="/search", tags=["Search"])


@router.get("/bases/{base_id}")
def search_in_base(
    base_id: str,
    q: str = Query(min_length=1),
    limit: int = Query(default=20, ge=1, le=settings.SEARCH_MAX_RESULTS),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_base_owner(db, user_id=current_user.id, base_id=base_id)
    return crud_filtering.search_in_base(db, base_id=base_id, query=q, limit=limit)


@router.get("/tables/{table_id}", response_model=List[RowOut])
def search_in_table(
    table_id: str,
    q: str = Query(min_length=1),
    limit: int = Query(default=100, ge=1, le=settings.ROWS_MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    require_table_owner(db, user_id=current_user.id, table_id=table_id)
    return crud_filtering.search_in_table(db, table_id=table_id, query=q, limit=limit)
