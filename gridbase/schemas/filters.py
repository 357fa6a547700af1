# File: /gridbase/schemas/filters.py | Version: 1.0 | Title: Filter groups, sorting & view-scoped state schemas
from __future__ import annotations

from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from gridbase.core.constants import (
    FILTER_VALUE_MAX_LENGTH,
    MAX_QUERY_FILTER_CONDITIONS,
)

FilterJoin = Literal["and", "or"]
FilterGroupMode = Literal["group", "single"]
ViewKind = Literal["grid", "form"]
ColumnType = Literal["text", "number"]
SortDirection = Literal["asc", "desc"]
RowOffset = Annotated[int, Field(ge=0)]


class FilterOperator(str, Enum):
    contains = "contains"
    does_not_contain = "doesNotContain"
    is_ = "is"
    is_not = "isNot"
    less_than = "lessThan"
    greater_than = "greaterThan"
    less_than_or_equal = "lessThanOrEqual"
    greater_than_or_equal = "greaterThanOrEqual"
    is_empty = "isEmpty"
    is_not_empty = "isNotEmpty"


class CamelModel(BaseModel):
    """Persisted view state uses camelCase keys; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ----- Editable (UI working copy) shapes -----
class FilterCondition(CamelModel):
    id: str
    column_id: str
    # Unknown operator strings are kept here and ignored when a scan is built
    operator: str
    value: str = ""
    join: FilterJoin = "and"


class FilterConditionGroup(CamelModel):
    id: str
    mode: FilterGroupMode = "group"
    join: FilterJoin = "and"
    conditions: List[FilterCondition] = Field(default_factory=list)


class SortEntry(CamelModel):
    id: str
    desc: bool = False


class ViewScopedState(CamelModel):
    search_query: str = ""
    sorting: List[SortEntry] = Field(default_factory=list, max_length=1)
    filter_groups: List[FilterConditionGroup] = Field(default_factory=list)
    hidden_field_ids: List[str] = Field(default_factory=list)


# ----- Query-ready shapes (consumed by gridbase.crud.filtering) -----
class QueryFilterCondition(CamelModel):
    column_id: str
    operator: str
    join: FilterJoin = "and"
    # Omitted (None) when the operator takes no value
    value: Optional[str] = None


class QueryFilterGroup(CamelModel):
    join: FilterJoin = "and"
    conditions: List[QueryFilterCondition] = Field(default_factory=list)


class RowSort(CamelModel):
    column_id: str
    direction: SortDirection = "asc"


class KeysetCursor(CamelModel):
    last_order: int
    last_id: str


class RowQueryPayload(CamelModel):
    """Body of POST /tables/{table_id}/rows/query."""

    limit: int = Field(default=100, ge=1, le=1000)
    cursor: Optional[Union[RowOffset, KeysetCursor]] = None
    search_query: Optional[str] = Field(default=None, max_length=FILTER_VALUE_MAX_LENGTH)
    sort: Optional[RowSort] = None
    # Raw groups; normalized server-side before they reach SQL
    filter_groups: Optional[List[Dict[str, Any]]] = Field(
        default=None, max_length=MAX_QUERY_FILTER_CONDITIONS
    )
    display: bool = False  # include formatted number cells

    @model_validator(mode="after")
    def bounded_filters(self) -> "RowQueryPayload":
        conditions = [
            condition
            for group in self.filter_groups or []
            if isinstance(group.get("conditions"), list)
            for condition in group["conditions"]
        ]
        if len(conditions) > MAX_QUERY_FILTER_CONDITIONS:
            raise ValueError(f"At most {MAX_QUERY_FILTER_CONDITIONS} filter conditions are allowed")
        for condition in conditions:
            value = condition.get("value") if isinstance(condition, dict) else None
            if isinstance(value, str) and len(value) > FILTER_VALUE_MAX_LENGTH:
                raise ValueError(f"Filter values are limited to {FILTER_VALUE_MAX_LENGTH} characters")
        return self


class RowPage(BaseModel):
    rows: List[Dict[str, Any]]
    total: int
    next_cursor: Optional[Union[int, Dict[str, Any]]] = None
