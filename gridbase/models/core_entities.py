# File: /gridbase/models/core_entities.py | Version: 1.0 | Path: /gridbase/models/core_entities.py
from __future__ import annotations

from datetime import datetime, UTC
from typing import Any, List as TList, Optional
from uuid import uuid4

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Boolean, Index
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from gridbase.db.base_class import Base

# JSONB on Postgres (operators, GIN), plain JSON everywhere else
JSONType = JSON().with_variant(JSONB(), "postgresql")


def gen_uuid() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(UTC)


class User(Base):
    __tablename__ = "user"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[Optional[str]] = mapped_column(String(255))
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    bases: Mapped[TList["BaseEntity"]] = relationship(back_populates="user", cascade="all, delete-orphan")


class BaseEntity(Base):
    """A base: the top-level container of tables, owned by one user."""

    __tablename__ = "base"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    user_id: Mapped[str] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    user: Mapped["User"] = relationship(back_populates="bases")
    tables: Mapped[TList["Table"]] = relationship(back_populates="base", cascade="all, delete-orphan")


class Table(Base):
    __tablename__ = "table"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    base_id: Mapped[str] = mapped_column(ForeignKey("base.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    base: Mapped["BaseEntity"] = relationship(back_populates="tables")
    columns: Mapped[TList["Column"]] = relationship(back_populates="table", cascade="all, delete-orphan")
    rows: Mapped[TList["Row"]] = relationship(back_populates="table", cascade="all, delete-orphan")
    views: Mapped[TList["View"]] = relationship(back_populates="table", cascade="all, delete-orphan")  # noqa: F821


class Column(Base):
    __tablename__ = "column"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("table.id", ondelete="CASCADE"), index=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)  # 'text' | 'number'; immutable
    size: Mapped[int] = mapped_column(Integer, default=180, nullable=False)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    number_config: Mapped[Optional[dict[str, Any]]] = mapped_column(JSONType, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)

    table: Mapped["Table"] = relationship(back_populates="columns")


class Row(Base):
    __tablename__ = "row"
    id: Mapped[str] = mapped_column(String, primary_key=True, default=gen_uuid)
    table_id: Mapped[str] = mapped_column(ForeignKey("table.id", ondelete="CASCADE"), index=True, nullable=False)
    # column id -> str | number | None; absent key means null
    cells: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=_now, onupdate=_now)

    table: Mapped["Table"] = relationship(back_populates="rows")


# Default scan order within a table: (order, id)
Index("ix_row_table_id_order_id", Row.table_id, Row.order, Row.id)
Index("ix_column_table_id_order", Column.table_id, Column.order)
