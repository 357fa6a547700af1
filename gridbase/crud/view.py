# File: /gridbase/crud/view.py | Version: 1.0 | Title: CRUD helpers for table Views (state-aware)
from __future__ import annotations

import logging
from typing import Any, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from gridbase.core.constants import (
    DEFAULT_FORM_VIEW_NAME,
    DEFAULT_GRID_VIEW_NAME,
    VIEW_FILTER_GROUPS_FILTER_KEY,
    VIEW_HIDDEN_FIELDS_FILTER_KEY,
    VIEW_KIND_FILTER_KEY,
    VIEW_SEARCH_QUERY_FILTER_KEY,
    VIEW_SORTING_FILTER_KEY,
)
from gridbase.core.view_state import (
    apply_view_scoped_state_to_filters,
    are_view_scoped_states_equal,
    get_default_view_scoped_state,
    normalize_view_name,
    parse_view_scoped_state_from_filters,
    resolve_sidebar_view_kind,
)
from gridbase.models.view import View
from gridbase.schemas.filters import ViewScopedState

log = logging.getLogger(__name__)


class LastGridViewError(Exception):
    """Deleting this view would leave its table without a grid view."""


def _next_view_order(db: Session, table_id: str) -> int:
    current = db.query(func.coalesce(func.max(View.order), -1)).filter(View.table_id == str(table_id)).scalar()
    return int(current if current is not None else -1) + 1


def create_view(
    db: Session,
    *,
    table_id: str,
    name: str = "",
    kind: str = "grid",
    state: Any = None,
    commit: bool = True,
) -> View:
    default_name = DEFAULT_FORM_VIEW_NAME if kind == "form" else DEFAULT_GRID_VIEW_NAME
    parsed = (
        parse_view_scoped_state_from_filters(_state_to_bag(state))
        if isinstance(state, dict)
        else get_default_view_scoped_state()
    )
    v = View(
        table_id=str(table_id),
        name=(name or "").strip() or default_name,
        order=_next_view_order(db, table_id),
        filters=apply_view_scoped_state_to_filters({}, parsed, kind=kind),
    )
    db.add(v)
    if commit:
        db.commit()
        db.refresh(v)
    else:
        db.flush()
    return v


def _state_to_bag(state: dict) -> dict:
    """Accept either camelCase state ({"searchQuery": ...}) or an already reserved-key bag."""
    mapping = {
        "searchQuery": VIEW_SEARCH_QUERY_FILTER_KEY,
        "sorting": VIEW_SORTING_FILTER_KEY,
        "filterGroups": VIEW_FILTER_GROUPS_FILTER_KEY,
        "hiddenFieldIds": VIEW_HIDDEN_FIELDS_FILTER_KEY,
    }
    bag = {}
    for key, value in state.items():
        bag[mapping.get(key, key)] = value
    return bag


def get_view(db: Session, view_id: str) -> Optional[View]:
    return db.query(View).filter(View.id == str(view_id)).first()


def list_views(db: Session, *, table_id: str) -> List[View]:
    return (
        db.query(View)
        .filter(View.table_id == str(table_id))
        .order_by(View.order.asc(), View.created_at.asc(), View.id.asc())
        .all()
    )


def ensure_default_view(db: Session, *, table_id: str, commit: bool = True) -> Optional[View]:
    """Create the initial grid view when a table has none. Returns it, or None if not needed."""
    views = list_views(db, table_id=table_id)
    if any(v.kind == "grid" for v in views):
        return None
    log.info("Creating default grid view for table %s", table_id)
    return create_view(db, table_id=table_id, name=DEFAULT_GRID_VIEW_NAME, kind="grid", commit=commit)


def _has_other_grid_view(db: Session, v: View) -> bool:
    return any(other.id != v.id and other.kind == "grid" for other in list_views(db, table_id=v.table_id))


def update_view(db: Session, v: View, data) -> View:
    """
    Rename, reorder or replace the bag of a view.

    Raises LastGridViewError when the change would turn the table's only grid
    view into a form view.
    """
    current_kind = v.kind
    name = normalize_view_name(data.name) if getattr(data, "name", None) is not None else v.name
    filters = v.filters
    if getattr(data, "filters", None) is not None:
        # Keep the view's kind unless the new bag states one explicitly
        bag = dict(data.filters)
        filters = apply_view_scoped_state_to_filters(
            bag,
            parse_view_scoped_state_from_filters(bag),
            kind=None if VIEW_KIND_FILTER_KEY in bag else current_kind,
        )

    if current_kind == "grid" and resolve_sidebar_view_kind(name, filters) != "grid":
        if not _has_other_grid_view(db, v):
            raise LastGridViewError(v.id)

    v.name = name
    v.filters = filters
    if getattr(data, "order", None) is not None:
        v.order = data.order
    db.commit()
    db.refresh(v)
    return v


def get_view_state(v: View) -> ViewScopedState:
    return parse_view_scoped_state_from_filters(v.filters)


def update_view_state(db: Session, view_id: str, raw_state: Any) -> Optional[Tuple[View, ViewScopedState, bool]]:
    """
    Persist view-scoped state (search/sort/filters/hidden fields).

    Returns None when the view no longer exists: an autosave racing a delete is
    a no-op, not an error. Otherwise returns (view, canonical state, changed);
    an unchanged state skips the write.
    """
    v = get_view(db, view_id)
    if v is None:
        return None

    bag = _state_to_bag(raw_state) if isinstance(raw_state, dict) else {}
    next_state = parse_view_scoped_state_from_filters(bag)
    current_state = parse_view_scoped_state_from_filters(v.filters)
    if are_view_scoped_states_equal(current_state, next_state):
        return v, current_state, False

    v.filters = apply_view_scoped_state_to_filters(
        v.filters, next_state, kind=resolve_sidebar_view_kind(v.name, v.filters)
    )
    db.commit()
    db.refresh(v)
    return v, next_state, True


def delete_view(db: Session, v: View) -> bool:
    if v.kind == "grid" and not _has_other_grid_view(db, v):
        raise LastGridViewError(v.id)
    db.delete(v)
    db.commit()
    return True
