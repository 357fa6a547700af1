# File: /gridbase/crud/rows.py | Version: 1.0 | Title: Row storage (JSON cells, merge updates, bulk inserts)
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence

from sqlalchemy import cast, func, select
from sqlalchemy.dialects.postgresql import JSONB, array
from sqlalchemy.orm import Session

from gridbase.core.constants import BULK_INSERT_CHUNK_SIZE
from gridbase.core.number_format import normalize_number_value_for_storage
from gridbase.models import Column, Row

log = logging.getLogger(__name__)


def _number_configs(db: Session, table_id: str) -> Dict[str, Optional[Dict[str, Any]]]:
    columns = db.query(Column).filter(Column.table_id == str(table_id), Column.type == "number").all()
    return {c.id: c.number_config for c in columns}


def prepare_cells(
    cells: Mapping[str, Any],
    number_configs: Mapping[str, Optional[Dict[str, Any]]],
) -> Dict[str, Any]:
    """Normalize typed text in number columns so it stays index/filter friendly."""
    prepared: Dict[str, Any] = {}
    for column_id, value in cells.items():
        if column_id in number_configs and isinstance(value, str):
            value = normalize_number_value_for_storage(value, number_configs[column_id])
        prepared[column_id] = value
    return prepared


def _next_row_order(db: Session, table_id: str) -> int:
    current = db.query(func.coalesce(func.max(Row.order), -1)).filter(Row.table_id == str(table_id)).scalar()
    return int(current if current is not None else -1) + 1


def get_row(db: Session, row_id: str) -> Optional[Row]:
    return db.get(Row, str(row_id))


def count_rows(db: Session, *, table_id: str) -> int:
    return int(db.query(func.count(Row.id)).filter(Row.table_id == str(table_id)).scalar() or 0)


def create_row(db: Session, *, table_id: str, cells: Mapping[str, Any]) -> Row:
    row = Row(
        table_id=str(table_id),
        cells=prepare_cells(cells, _number_configs(db, table_id)),
        order=_next_row_order(db, table_id),
    )
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


def bulk_create_rows(db: Session, *, table_id: str, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
    configs = _number_configs(db, table_id)
    next_order = _next_row_order(db, table_id)
    created: List[Row] = []
    for offset, cells in enumerate(rows):
        created.append(
            Row(table_id=str(table_id), cells=prepare_cells(cells, configs), order=next_order + offset)
        )
    db.add_all(created)
    db.commit()
    for row in created:
        db.refresh(row)
    return created


def bulk_create_generated_rows(db: Session, *, table_id: str, count: int, cells: Mapping[str, Any]) -> int:
    """Insert `count` copies of one cell template in chunks (large test datasets)."""
    template = prepare_cells(cells, _number_configs(db, table_id))
    next_order = _next_row_order(db, table_id)
    inserted = 0
    while inserted < count:
        chunk = min(BULK_INSERT_CHUNK_SIZE, count - inserted)
        db.add_all(
            Row(table_id=str(table_id), cells=dict(template), order=next_order + inserted + i)
            for i in range(chunk)
        )
        db.flush()
        inserted += chunk
    db.commit()
    log.info("Generated %s rows for table %s", inserted, table_id)
    return inserted


def update_row_cells(db: Session, row: Row, cells: Mapping[str, Any]) -> Row:
    """Merge `cells` into the row: named keys overwrite, all others stay."""
    locked = db.execute(
        select(Row)
        .where(Row.id == row.id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).scalar_one()
    partial = prepare_cells(cells, _number_configs(db, locked.table_id))
    # Assign a new dict so the JSON column is flagged dirty
    locked.cells = {**(locked.cells or {}), **partial}
    db.commit()
    db.refresh(locked)
    return locked


def update_cell(db: Session, row: Row, *, column_id: str, value: Any) -> Row:
    return update_row_cells(db, row, {column_id: value})


def set_column_value(db: Session, *, table_id: str, column_id: str, value: Any) -> int:
    """Write one column's value into every row of a table."""
    configs = _number_configs(db, table_id)
    prepared = prepare_cells({column_id: value}, configs)[column_id]
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        result = db.execute(
            Row.__table__.update()
            .where(Row.table_id == str(table_id))
            .values(
                cells=func.jsonb_set(
                    Row.cells,
                    array([column_id]),
                    cast(json.dumps(prepared), JSONB),
                    True,
                )
            )
        )
        db.commit()
        return int(result.rowcount or 0)

    updated = 0
    for row in db.query(Row).filter(Row.table_id == str(table_id)).all():
        row.cells = {**(row.cells or {}), column_id: prepared}
        updated += 1
    db.commit()
    return updated


def clear_rows(db: Session, *, table_id: str) -> int:
    deleted = db.query(Row).filter(Row.table_id == str(table_id)).delete(synchronize_session=False)
    db.commit()
    return int(deleted or 0)


def delete_row(db: Session, row: Row) -> bool:
    db.delete(row)
    db.commit()
    return True
