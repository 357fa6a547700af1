# File: /gridbase/crud/core_entities.py | Version: 1.0 | Title: Bases, Tables & Columns CRUD (ordered)
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from gridbase.core.constants import DEFAULT_BASE_NAME
from gridbase.crud import rows as crud_rows
from gridbase.crud import view as crud_view
from gridbase.db.session import SessionLocal
from gridbase.models import BaseEntity, Column, Table


def _next_order(db: Session, order_col, scope_col, scope_value: str) -> int:
    current = db.query(func.coalesce(func.max(order_col), -1)).filter(scope_col == scope_value).scalar()
    return int(current if current is not None else -1) + 1


def _reorder(db: Session, model, scope_col, scope_value: str, ids: Sequence[str]) -> int:
    """Set `order` to the list position; ids outside the scope are ignored."""
    updated = 0
    for index, entity_id in enumerate(ids):
        updated += (
            db.query(model)
            .filter(model.id == str(entity_id), scope_col == scope_value)
            .update({model.order: index}, synchronize_session=False)
        )
    db.commit()
    return updated


# -------- Bases --------

def create_base(db: Session, *, user_id: str, name: Optional[str] = None) -> BaseEntity:
    base = BaseEntity(user_id=str(user_id), name=(name or "").strip() or DEFAULT_BASE_NAME)
    db.add(base)
    db.commit()
    db.refresh(base)
    return base


def list_bases(db: Session, *, user_id: str) -> List[BaseEntity]:
    return (
        db.query(BaseEntity)
        .filter(BaseEntity.user_id == str(user_id))
        .order_by(BaseEntity.created_at.asc(), BaseEntity.id.asc())
        .all()
    )


def update_base(db: Session, base: BaseEntity, data) -> BaseEntity:
    if getattr(data, "name", None) is not None:
        base.name = data.name
    db.commit()
    db.refresh(base)
    return base


def delete_base(db: Session, base: BaseEntity) -> bool:
    db.delete(base)
    db.commit()
    return True


# -------- Tables --------

def list_tables(db: Session, *, base_id: str) -> List[Table]:
    return (
        db.query(Table)
        .filter(Table.base_id == str(base_id))
        .order_by(Table.order.asc(), Table.id.asc())
        .all()
    )


def create_table(db: Session, *, base_id: str, name: str) -> Table:
    table = Table(
        base_id=str(base_id),
        name=name,
        order=_next_order(db, Table.order, Table.base_id, str(base_id)),
    )
    db.add(table)
    db.flush()
    # A table always carries at least one grid view
    crud_view.ensure_default_view(db, table_id=table.id, commit=False)
    db.commit()
    db.refresh(table)
    return table


def update_table(db: Session, table: Table, data) -> Table:
    if getattr(data, "name", None) is not None:
        table.name = data.name
    if getattr(data, "order", None) is not None:
        table.order = data.order
    db.commit()
    db.refresh(table)
    return table


def delete_table(db: Session, table: Table) -> bool:
    db.delete(table)
    db.commit()
    return True


def reorder_tables(db: Session, *, base_id: str, table_ids: Sequence[str]) -> int:
    return _reorder(db, Table, Table.base_id, str(base_id), table_ids)


# -------- Columns --------

def list_columns(db: Session, *, table_id: str) -> List[Column]:
    return (
        db.query(Column)
        .filter(Column.table_id == str(table_id))
        .order_by(Column.order.asc(), Column.id.asc())
        .all()
    )


def get_column_types(db: Session, *, table_id: str) -> Dict[str, str]:
    return {c.id: c.type for c in list_columns(db, table_id=table_id)}


def get_number_configs(db: Session, *, table_id: str) -> Dict[str, Optional[Dict[str, Any]]]:
    return {c.id: c.number_config for c in list_columns(db, table_id=table_id) if c.type == "number"}


def create_column(db: Session, *, table_id: str, data) -> Column:
    column = Column(
        table_id=str(table_id),
        name=data.name,
        type=data.type,
        size=data.size,
        number_config=data.number_config if data.type == "number" else None,
        order=_next_order(db, Column.order, Column.table_id, str(table_id)),
    )
    db.add(column)
    db.commit()
    db.refresh(column)

    default_value = getattr(data, "default_value", None)
    if default_value not in (None, ""):
        crud_rows.set_column_value(db, table_id=str(table_id), column_id=column.id, value=default_value)
    return column


def update_column(db: Session, column: Column, data) -> Column:
    if getattr(data, "name", None) is not None:
        column.name = data.name
    if getattr(data, "size", None) is not None:
        column.size = data.size
    if getattr(data, "order", None) is not None:
        column.order = data.order
    if getattr(data, "number_config", None) is not None and column.type == "number":
        column.number_config = dict(data.number_config)
    db.commit()
    db.refresh(column)
    return column


def delete_column(db: Session, column: Column) -> bool:
    # Cell data keyed by this column stays in rows (absent column == ignored key)
    db.delete(column)
    db.commit()
    return True


def reorder_columns(db: Session, *, table_id: str, column_ids: Sequence[str]) -> int:
    return _reorder(db, Column, Column.table_id, str(table_id), column_ids)


# -------- Bootstrap & index helpers --------

def get_table_bootstrap(db: Session, table: Table) -> Dict[str, Any]:
    crud_view.ensure_default_view(db, table_id=table.id)
    return {
        "table": table,
        "columns": list_columns(db, table_id=table.id),
        "views": crud_view.list_views(db, table_id=table.id),
    }


def column_refs(columns: Sequence[Column]) -> List[Tuple[str, str, str]]:
    return [(c.table_id, c.id, c.type) for c in columns]


def load_base_columns(base_id: str) -> List[Tuple[str, str, str]]:
    """Column refs for every table of a base. Opens its own session (runs after the response)."""
    db = SessionLocal()
    try:
        columns = (
            db.query(Column)
            .join(Table, Table.id == Column.table_id)
            .filter(Table.base_id == str(base_id))
            .all()
        )
        return column_refs(columns)
    finally:
        db.close()
