# File: /gridbase/crud/filtering.py | Version: 1.0 | Title: Row scans (filter groups + search + sort + pagination)
"""
Builds bounded row scans over the ``row`` table from query-ready filter groups.

Cell access goes through ``cells ->> '<column>'`` so that, on PostgreSQL, text
predicates line up with ``lower(cells ->> '<column>')`` and number predicates
with the regex-guarded numeric cast provisioned by ``gridbase.db.indexes``.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union

from sqlalchemy import Numeric, String, and_, case, cast, func, not_, or_, select
from sqlalchemy.orm import Session

from gridbase.core.constants import NUMERIC_CELL_PATTERN
from gridbase.core.filter_utils import (
    is_operator_valid_for_field,
    normalize_filter_groups,
    normalize_filter_groups_for_query,
)
from gridbase.core.number_format import format_number_cell_value
from gridbase.core.view_state import parse_view_scoped_state_from_filters
from gridbase.models import Row, Table, View
from gridbase.schemas.filters import (
    FilterOperator,
    KeysetCursor,
    QueryFilterCondition,
    QueryFilterGroup,
    RowSort,
)

log = logging.getLogger(__name__)


class InvalidCursorError(ValueError):
    """A keyset cursor was sent for a sorted scan (sorted scans page by offset)."""


@dataclass
class RowScan:
    table_id: str
    filter_groups: List[QueryFilterGroup] = field(default_factory=list)
    sort: Optional[RowSort] = None
    search_query: str = ""
    limit: int = 100
    cursor: Optional[Union[int, KeysetCursor]] = None


# -----------------------------
# Cell expressions
# -----------------------------
def _cell_text(column_id: str):
    return Row.cells[column_id].as_string()


def _cell_number(column_id: str):
    trimmed = func.trim(_cell_text(column_id))
    return case(
        (trimmed.regexp_match(NUMERIC_CELL_PATTERN), cast(trimmed, Numeric)),
        else_=None,
    )


def _parse_number(value: Optional[str]) -> Optional[float]:
    try:
        number = float((value or "").strip())
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _empty_expr(column_id: str):
    cell = _cell_text(column_id)
    return or_(cell.is_(None), func.trim(cell) == "")


def _text_expr(condition: QueryFilterCondition):
    cell = _cell_text(condition.column_id)
    lowered = func.lower(cell)
    value = (condition.value or "").lower()
    op = condition.operator

    if op == FilterOperator.contains.value:
        return lowered.contains(value, autoescape=True)
    if op == FilterOperator.does_not_contain.value:
        return or_(cell.is_(None), not_(lowered.contains(value, autoescape=True)))
    if op == FilterOperator.is_.value:
        return lowered == value
    if op == FilterOperator.is_not.value:
        return or_(cell.is_(None), lowered != value)
    return None


def _number_expr(condition: QueryFilterCondition):
    number = _parse_number(condition.value)
    if number is None:
        return None
    cell = _cell_number(condition.column_id)
    op = condition.operator

    if op == FilterOperator.is_.value:
        return cell == number
    if op == FilterOperator.is_not.value:
        return or_(cell.is_(None), cell != number)
    if op == FilterOperator.less_than.value:
        return cell < number
    if op == FilterOperator.greater_than.value:
        return cell > number
    if op == FilterOperator.less_than_or_equal.value:
        return cell <= number
    if op == FilterOperator.greater_than_or_equal.value:
        return cell >= number
    return None


def build_filter_expression(condition: QueryFilterCondition, column_type: Optional[str]):
    """SQL predicate for one condition, or None when it cannot apply (skipped)."""
    if column_type is None:
        return None
    if not is_operator_valid_for_field(condition.operator, column_type):
        return None

    if condition.operator == FilterOperator.is_empty.value:
        return _empty_expr(condition.column_id)
    if condition.operator == FilterOperator.is_not_empty.value:
        return not_(_empty_expr(condition.column_id))

    if column_type == "number":
        return _number_expr(condition)
    return _text_expr(condition)


def _fold(entries):
    combined = None
    for join, expr in entries:
        if combined is None:
            combined = expr
        elif join == "or":
            combined = or_(combined, expr)
        else:
            combined = and_(combined, expr)
    return combined


def combine_filter_groups(groups: Sequence[QueryFilterGroup], column_types: Mapping[str, str]):
    """Left fold of conditions by their join within a group, then of groups by group join."""
    group_exprs = []
    for group in groups:
        entries = []
        for condition in group.conditions:
            built = build_filter_expression(condition, column_types.get(condition.column_id))
            if built is not None:
                entries.append((condition.join, built))
        expr = _fold(entries)
        if expr is not None:
            group_exprs.append((group.join, expr))
    return _fold(group_exprs)


def _search_expr(search_query: str):
    q = (search_query or "").strip()
    if not q:
        return None
    return cast(Row.cells, String).icontains(q, autoescape=True)


def _sort_expr(sort: Optional[RowSort], column_types: Mapping[str, str]):
    if sort is None:
        return None
    column_type = column_types.get(sort.column_id)
    if column_type is None:
        return None
    if column_type == "number":
        return _cell_number(sort.column_id)
    return func.lower(_cell_text(sort.column_id))


# -----------------------------
# Query + response shaping
# -----------------------------
def _where_clauses(scan: RowScan, column_types: Mapping[str, str]) -> List[Any]:
    clauses: List[Any] = [Row.table_id == str(scan.table_id)]
    filters = combine_filter_groups(scan.filter_groups, column_types)
    if filters is not None:
        clauses.append(filters)
    search = _search_expr(scan.search_query)
    if search is not None:
        clauses.append(search)
    return clauses


def build_filtered_query(scan: RowScan, column_types: Mapping[str, str]):
    sort_value = _sort_expr(scan.sort, column_types)
    q = select(Row).where(*_where_clauses(scan, column_types))

    if sort_value is not None:
        if scan.sort.direction == "desc":
            q = q.order_by(sort_value.desc().nulls_last(), Row.order.desc(), Row.id.desc())
        else:
            q = q.order_by(sort_value.asc().nulls_first(), Row.order.asc(), Row.id.asc())
    else:
        q = q.order_by(Row.order.asc(), Row.id.asc())

    if isinstance(scan.cursor, KeysetCursor):
        if sort_value is not None:
            raise InvalidCursorError("Keyset cursors are only valid for unsorted scans")
        last = scan.cursor
        q = q.where(or_(Row.order > last.last_order, and_(Row.order == last.last_order, Row.id > last.last_id)))
    elif isinstance(scan.cursor, int) and scan.cursor > 0:
        q = q.offset(scan.cursor)

    return q.limit(scan.limit)


def _count(db: Session, scan: RowScan, column_types: Mapping[str, str]) -> int:
    q = select(func.count(Row.id)).where(*_where_clauses(scan, column_types))
    return int(db.execute(q).scalar() or 0)


def row_to_dict(
    row: Row,
    number_configs: Optional[Mapping[str, Optional[Dict[str, Any]]]] = None,
) -> Dict[str, Any]:
    out: Dict[str, Any] = {
        "id": row.id,
        "table_id": row.table_id,
        "cells": dict(row.cells or {}),
        "order": row.order,
    }
    if number_configs is not None:
        display = {}
        for column_id, config in number_configs.items():
            raw = out["cells"].get(column_id)
            if raw is None:
                continue
            display[column_id] = format_number_cell_value(str(raw), config)
        out["display"] = display
    return out


def list_rows(
    db: Session,
    scan: RowScan,
    column_types: Mapping[str, str],
    number_configs: Optional[Mapping[str, Optional[Dict[str, Any]]]] = None,
) -> Dict[str, Any]:
    """
    Returns {"rows", "total", "next_cursor"}.

    ``total`` is counted on the first page and on offset pages; keyset
    follow-up pages report -1. Pass ``number_configs`` to get formatted
    number cells under each row's ``display`` key.
    """
    rows = list(db.execute(build_filtered_query(scan, column_types)).scalars().all())

    keyset_follow_up = isinstance(scan.cursor, KeysetCursor)
    total = -1 if keyset_follow_up else _count(db, scan, column_types)

    sorted_scan = _sort_expr(scan.sort, column_types) is not None
    offset_mode = isinstance(scan.cursor, int) or sorted_scan

    next_cursor: Optional[Union[int, Dict[str, Any]]] = None
    if len(rows) >= scan.limit:
        if offset_mode:
            start = scan.cursor if isinstance(scan.cursor, int) else 0
            next_cursor = start + len(rows)
        else:
            last = rows[-1]
            next_cursor = {"lastOrder": last.order, "lastId": last.id}

    log.debug(
        "Row scan table=%s groups=%s sorted=%s rows=%s total=%s",
        scan.table_id,
        len(scan.filter_groups),
        sorted_scan,
        len(rows),
        total,
    )
    return {
        "rows": [row_to_dict(r, number_configs) for r in rows],
        "total": total,
        "next_cursor": next_cursor,
    }


def scan_from_payload(table_id: str, payload) -> RowScan:
    """RowQueryPayload -> RowScan (raw filter groups normalized for query here)."""
    return RowScan(
        table_id=str(table_id),
        filter_groups=normalize_filter_groups_for_query(normalize_filter_groups(payload.filter_groups or [])),
        sort=payload.sort,
        search_query=(payload.search_query or "").strip(),
        limit=payload.limit,
        cursor=payload.cursor,
    )


def scan_from_view(
    view: View,
    *,
    limit: int,
    cursor: Optional[Union[int, KeysetCursor]] = None,
) -> RowScan:
    state = parse_view_scoped_state_from_filters(view.filters)
    sort = None
    if state.sorting:
        entry = state.sorting[0]
        sort = RowSort(column_id=entry.id, direction="desc" if entry.desc else "asc")
    return RowScan(
        table_id=view.table_id,
        filter_groups=normalize_filter_groups_for_query(state.filter_groups),
        sort=sort,
        search_query=state.search_query.strip(),
        limit=limit,
        cursor=cursor,
    )


def apply_view(
    db: Session,
    view: View,
    column_types: Mapping[str, str],
    *,
    limit: int,
    cursor: Optional[Union[int, KeysetCursor]] = None,
    number_configs: Optional[Mapping[str, Optional[Dict[str, Any]]]] = None,
) -> Dict[str, Any]:
    """Run a view's stored search/sort/filters against its table."""
    return list_rows(db, scan_from_view(view, limit=limit, cursor=cursor), column_types, number_configs)


# -----------------------------
# Search
# -----------------------------
def search_in_table(db: Session, *, table_id: str, query: str, limit: int) -> List[Row]:
    search = _search_expr(query)
    if search is None:
        return []
    q = (
        select(Row)
        .where(Row.table_id == str(table_id), search)
        .order_by(Row.order.asc(), Row.id.asc())
        .limit(limit)
    )
    return list(db.execute(q).scalars().all())


def search_in_base(db: Session, *, base_id: str, query: str, limit: int) -> List[Dict[str, Any]]:
    """Matches per table of a base; tables without matches are left out."""
    results: List[Dict[str, Any]] = []
    for table in db.query(Table).filter(Table.base_id == str(base_id)).order_by(Table.order.asc(), Table.id.asc()):
        matches = search_in_table(db, table_id=table.id, query=query, limit=limit)
        if matches:
            results.append(
                {
                    "table_id": table.id,
                    "table_name": table.name,
                    "rows": [row_to_dict(r) for r in matches],
                }
            )
    return results
