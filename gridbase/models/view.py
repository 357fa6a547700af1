# File: /gridbase/models/view.py | Version: 1.0 | Title: SQLAlchemy model for table Views
from __future__ import annotations

from datetime import datetime
from typing import Any

from sqlalchemy import DateTime, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridbase.core.view_state import resolve_sidebar_view_kind
from gridbase.db.base_class import Base
from gridbase.models.core_entities import JSONType, Table, _now, gen_uuid


class View(Base):
    __tablename__ = "view"

    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("table.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Opaque configuration bag. Reserved "__view*" keys carry the view-scoped
    # state (see gridbase.core.view_state); anything else is kept untouched.
    filters: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    table: Mapped["Table"] = relationship(back_populates="views")

    __table_args__ = (Index("ix_view_table_id_order", "table_id", "order"),)

    @property
    def kind(self) -> str:
        return resolve_sidebar_view_kind(self.name, self.filters)
