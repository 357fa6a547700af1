# File: /gridbase/schemas/core_entities.py | Version: 1.0 | Title: Bases, Tables, Columns & Rows schemas
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import Field

from gridbase.schemas._base import BaseSchema
from gridbase.schemas.filters import ColumnType

CellValue = Union[str, int, float, None]


# ----- Bases -----
class BaseCreate(BaseSchema):
    name: str = Field(default="Untitled Base", min_length=1, max_length=255)


class BaseUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)


class BaseOut(BaseSchema):
    id: str
    user_id: str
    name: str
    created_at: datetime


# ----- Tables -----
class TableCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=255)


class TableUpdate(BaseSchema):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    order: Optional[int] = Field(default=None, ge=0)


class TableOut(BaseSchema):
    id: str
    base_id: str
    name: str
    order: int


class ReorderPayload(BaseSchema):
    ids: List[str]


# ----- Columns -----
class ColumnCreate(BaseSchema):
    name: str = Field(min_length=1, max_length=255)
    type: ColumnType
    size: int = Field(default=180, ge=40, le=1000)
    number_config: Optional[Dict[str, Any]] = None
    # Prefill every existing row with this value
    default_value: CellValue = None


class ColumnUpdate(BaseSchema):
    # No `type`: a column's type is fixed at creation
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    size: Optional[int] = Field(default=None, ge=40, le=1000)
    order: Optional[int] = Field(default=None, ge=0)
    number_config: Optional[Dict[str, Any]] = None


class ColumnOut(BaseSchema):
    id: str
    table_id: str
    name: str
    type: ColumnType
    size: int
    order: int
    number_config: Optional[Dict[str, Any]] = None


# ----- Rows -----
class RowCreate(BaseSchema):
    cells: Dict[str, CellValue] = Field(default_factory=dict)


class RowBulkCreate(BaseSchema):
    rows: List[RowCreate] = Field(max_length=1000)


class RowBulkGenerate(BaseSchema):
    count: int = Field(ge=1, le=100_000)
    cells: Dict[str, CellValue] = Field(default_factory=dict)


class RowCellsUpdate(BaseSchema):
    cells: Dict[str, CellValue]


class CellUpdate(BaseSchema):
    value: CellValue


class RowOut(BaseSchema):
    id: str
    table_id: str
    cells: Dict[str, Any]
    order: int
