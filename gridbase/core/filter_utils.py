# File: /gridbase/core/filter_utils.py | Version: 1.0 | Title: Filter group normalization (storage + query)
"""
Filter groups arrive from two untrusted places: the JSON bag persisted on a
view and client edits. Everything here is pure and fail-soft: malformed
pieces are skipped, never raised.

Two normal forms exist:

* ``normalize_filter_groups`` -- the editable working copy. Leading joins are
  kept as the user left them.
* ``normalize_filter_groups_for_query`` -- what a row scan consumes. The first
  group and the first condition of every group always join with ``and``.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence

from gridbase.schemas.filters import (
    FilterCondition,
    FilterConditionGroup,
    FilterOperator,
    QueryFilterCondition,
    QueryFilterGroup,
)

FILTER_TEXT_OPERATORS: tuple[FilterOperator, ...] = (
    FilterOperator.contains,
    FilterOperator.does_not_contain,
    FilterOperator.is_,
    FilterOperator.is_not,
    FilterOperator.is_empty,
    FilterOperator.is_not_empty,
)

FILTER_NUMBER_OPERATORS: tuple[FilterOperator, ...] = (
    FilterOperator.is_,
    FilterOperator.is_not,
    FilterOperator.less_than,
    FilterOperator.greater_than,
    FilterOperator.less_than_or_equal,
    FilterOperator.greater_than_or_equal,
    FilterOperator.is_empty,
    FilterOperator.is_not_empty,
)

_VALUELESS_OPERATORS = {FilterOperator.is_empty.value, FilterOperator.is_not_empty.value}


def operator_requires_value(operator: str | FilterOperator) -> bool:
    op = operator.value if isinstance(operator, FilterOperator) else operator
    return op not in _VALUELESS_OPERATORS


def get_filter_operators_for_field(field_kind: Optional[str]) -> tuple[FilterOperator, ...]:
    return FILTER_NUMBER_OPERATORS if field_kind == "number" else FILTER_TEXT_OPERATORS


def get_default_filter_operator_for_field(field_kind: Optional[str]) -> FilterOperator:
    return get_filter_operators_for_field(field_kind)[0]


def is_operator_valid_for_field(operator: str, field_kind: Optional[str]) -> bool:
    return operator in {op.value for op in get_filter_operators_for_field(field_kind)}


def _is_plain_object(value: Any) -> bool:
    return isinstance(value, dict)


def _non_blank_str(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip() != "":
        return value
    return None


def _normalize_condition(raw: Any, group_index: int, condition_index: int) -> Optional[FilterCondition]:
    if not _is_plain_object(raw):
        return None
    column_id = raw.get("columnId")
    operator = raw.get("operator")
    if not isinstance(column_id, str) or not isinstance(operator, str):
        return None
    value = raw.get("value")
    return FilterCondition(
        id=_non_blank_str(raw.get("id")) or f"condition-{group_index}-{condition_index}",
        column_id=column_id,
        operator=operator,
        value=value if isinstance(value, str) else "",
        join="or" if raw.get("join") == "or" else "and",
    )


def _normalize_group(raw: Any, group_index: int) -> Optional[FilterConditionGroup]:
    if not _is_plain_object(raw):
        return None
    raw_conditions = raw.get("conditions")
    if not isinstance(raw_conditions, list):
        raw_conditions = []

    conditions: List[FilterCondition] = []
    for condition_index, raw_condition in enumerate(raw_conditions):
        condition = _normalize_condition(raw_condition, group_index, condition_index)
        if condition is not None:
            conditions.append(condition)
    if not conditions:
        return None

    return FilterConditionGroup(
        id=_non_blank_str(raw.get("id")) or f"group-{group_index}",
        mode="single" if raw.get("mode") == "single" else "group",
        join="or" if raw.get("join") == "or" else "and",
        conditions=conditions,
    )


def normalize_filter_groups(value: Any) -> List[FilterConditionGroup]:
    """Canonicalize untrusted filter groups into the editable shape.

    Non-list input yields ``[]``. Fallback ids depend only on input position,
    so normalizing the same payload twice gives the same ids.
    """
    if not isinstance(value, list):
        return []
    groups: List[FilterConditionGroup] = []
    for group_index, raw_group in enumerate(value):
        group = _normalize_group(raw_group, group_index)
        if group is not None:
            groups.append(group)
    return groups


def normalize_filter_groups_for_query(
    groups: Sequence[FilterConditionGroup],
) -> List[QueryFilterGroup]:
    """Reduce editable groups to the shape a row scan consumes.

    - conditions without a column id are dropped
    - value-taking conditions with a blank (trimmed) value are dropped
    - ``value`` is only carried when the operator uses it
    - the first kept group, and the first kept condition of every group, joins
      with ``and`` (position in the output, so a dropped leader never leaves an
      ``or`` at the head of a chain)
    - groups left without conditions are dropped
    """
    query_groups: List[QueryFilterGroup] = []
    for group in groups:
        conditions: List[QueryFilterCondition] = []
        for condition in group.conditions:
            if not condition.column_id:
                continue
            value = (condition.value or "").strip()
            needs_value = operator_requires_value(condition.operator)
            if needs_value and not value:
                continue
            conditions.append(
                QueryFilterCondition(
                    column_id=condition.column_id,
                    operator=condition.operator,
                    join="and" if not conditions else condition.join,
                    value=value if needs_value else None,
                )
            )
        if not conditions:
            continue
        query_groups.append(
            QueryFilterGroup(
                join="and" if not query_groups else group.join,
                conditions=conditions,
            )
        )
    return query_groups


def clone_filter_groups(groups: Sequence[FilterConditionGroup]) -> List[FilterConditionGroup]:
    return [group.model_copy(deep=True) for group in groups]


def dump_filter_groups(groups: Sequence[FilterConditionGroup]) -> List[Dict[str, Any]]:
    return [group.model_dump(by_alias=True) for group in groups]
