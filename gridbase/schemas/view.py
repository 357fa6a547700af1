# File: /gridbase/schemas/view.py | Version: 1.0 | Title: Pydantic v2 schemas for table Views (ConfigDict + from_attributes)
from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, ConfigDict

from gridbase.schemas.filters import ViewKind, ViewScopedState


class ViewCreate(BaseModel):
    name: str = Field(default="", max_length=255)
    kind: ViewKind = "grid"
    # Optional initial state; anything malformed degrades to defaults
    state: Optional[Dict[str, Any]] = None


class ViewUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    order: Optional[int] = Field(default=None, ge=0)
    filters: Optional[Dict[str, Any]] = None


class ViewOut(BaseModel):
    id: str
    table_id: str
    name: str
    order: int
    filters: Dict[str, Any]
    kind: ViewKind
    created_at: datetime

    # Pydantic v2 style
    model_config = ConfigDict(from_attributes=True)


class ViewStateOut(BaseModel):
    view_id: str
    kind: ViewKind
    state: ViewScopedState
    changed: bool = False
