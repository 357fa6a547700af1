# File: /gridbase/db/indexes.py | Version: 1.0 | Title: Lazy per-column index provisioning over row.cells
"""
Rows of every table live in one ``row`` table with a JSON(B) ``cells`` map, so
a filter or sort on one column cannot use a plain column index. This module
builds partial expression indexes per (table, column) on demand:

text columns
    * GIN trigram index on ``lower(cells ->> '<column>')`` (contains / ILIKE)
    * btree index on the same expression (ordered sort)

number columns
    * btree index on ``CASE WHEN trim(cells ->> '<column>') ~ '<numeric>'
      THEN CAST(... AS numeric) ELSE NULL END``. Non-numeric cells index as
      NULL instead of failing the build.

Every index is partial on ``table_id = '<table>'``.

Provisioning is best-effort. Errors are logged and swallowed, and the key is
remembered either way, so a database role without DDL rights degrades to
unindexed scans instead of retrying on every request.
"""
from __future__ import annotations

import hashlib
import logging
from typing import Callable, Dict, Iterable, List, Optional, Set, Tuple

from fastapi import BackgroundTasks
from sqlalchemy import String
from sqlalchemy.dialects import postgresql
from sqlalchemy.engine import Dialect, Engine

from gridbase.core.config import settings
from gridbase.core.constants import NUMERIC_CELL_PATTERN, is_uuid

log = logging.getLogger(__name__)

StatementExecutor = Callable[[str], None]
IndexKey = Tuple[str, str, str]
ColumnRef = Tuple[str, str, str]  # (table_id, column_id, type)

# Provisioning outcomes kept per key
CREATED = "created"
FAILED = "failed"
SKIPPED = "skipped"

ROW_TABLE = "row"
CELLS_COLUMN = "cells"
TABLE_ID_COLUMN = "table_id"


def short_hash(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()[:8]


def make_index_name(prefix: str, table_id: str, column_id: str) -> str:
    # 8+8 hex chars keeps names well under Postgres' 63-byte identifier limit
    return f"{prefix}_{short_hash(table_id)}_{short_hash(column_id)}"


def index_names_for(table_id: str, column_id: str, column_type: str) -> List[str]:
    if column_type == "text":
        return [
            make_index_name("row_txt_trgm", table_id, column_id),
            make_index_name("row_txt_sort", table_id, column_id),
        ]
    if column_type == "number":
        return [make_index_name("row_num", table_id, column_id)]
    return []


class IndexProvisioner:
    """Owns the memo of attempted index builds for one process (or one test)."""

    def __init__(
        self,
        execute: StatementExecutor,
        *,
        dialect_name: str = "postgresql",
        concurrently: bool = True,
        dialect: Optional[Dialect] = None,
    ) -> None:
        self._execute = execute
        self.dialect_name = dialect_name
        self.concurrently = concurrently
        self._dialect = dialect if dialect is not None and dialect.name == "postgresql" else postgresql.dialect()
        self._quote_literal = String().literal_processor(dialect=self._dialect)
        self._status: Dict[IndexKey, str] = {}
        self._trgm_enabled = False
        self._prepared_bases: Set[str] = set()

    # ----- introspection -----
    def status(self, table_id: str, column_id: str, column_type: str) -> Optional[str]:
        return self._status.get((table_id, column_id, column_type))

    @property
    def trigram_enabled(self) -> bool:
        return self._trgm_enabled

    # ----- SQL fragments -----
    def _ident(self, name: str) -> str:
        return self._dialect.identifier_preparer.quote(name)

    def _cell_text(self, column_id: str) -> str:
        return f"({self._ident(CELLS_COLUMN)} ->> {self._quote_literal(column_id)})"

    def _create_index_prefix(self, name: str) -> str:
        concurrently = " CONCURRENTLY" if self.concurrently else ""
        return f"CREATE INDEX{concurrently} IF NOT EXISTS {self._ident(name)} ON {self._ident(ROW_TABLE)}"

    def _table_predicate(self, table_id: str) -> str:
        return f"WHERE {self._ident(TABLE_ID_COLUMN)} = {self._quote_literal(table_id)}"

    def build_statements(self, table_id: str, column_id: str, column_type: str) -> List[str]:
        """DDL for one column (excluding the pg_trgm extension)."""
        cell = self._cell_text(column_id)
        where = self._table_predicate(table_id)

        if column_type == "text":
            trgm_name, sort_name = index_names_for(table_id, column_id, column_type)
            return [
                f"{self._create_index_prefix(trgm_name)} USING gin (lower({cell}) gin_trgm_ops) {where}",
                f"{self._create_index_prefix(sort_name)} (lower({cell})) {where}",
            ]
        if column_type == "number":
            (num_name,) = index_names_for(table_id, column_id, column_type)
            trimmed = f"trim({cell})"
            pattern = self._quote_literal(NUMERIC_CELL_PATTERN)
            expression = (
                f"CASE WHEN {trimmed} ~ {pattern} "
                f"THEN CAST({trimmed} AS numeric) ELSE NULL END"
            )
            # Non-function expressions need their own parentheses in CREATE INDEX
            return [f"{self._create_index_prefix(num_name)} (({expression})) {where}"]
        return []

    # ----- provisioning -----
    def _ensure_trigram_extension(self) -> None:
        if self._trgm_enabled:
            return
        self._execute("CREATE EXTENSION IF NOT EXISTS pg_trgm")
        self._trgm_enabled = True

    def ensure_column_indexes(self, table_id: str, column_id: str, column_type: str) -> None:
        """Make sure the supporting indexes for one column exist. Never raises."""
        if not is_uuid(table_id) or not is_uuid(column_id):
            return
        key = (table_id, column_id, column_type)
        if key in self._status:
            return

        if self.dialect_name != "postgresql":
            log.debug("Index provisioning skipped on %s for %s", self.dialect_name, key)
            self._status[key] = SKIPPED
            return

        outcome = FAILED
        try:
            statements = self.build_statements(table_id, column_id, column_type)
            if column_type == "text":
                self._ensure_trigram_extension()
            for statement in statements:
                self._execute(statement)
            outcome = CREATED if statements else SKIPPED
        except Exception as e:
            log.warning(
                "Index provisioning failed for table=%s column=%s type=%s: %s",
                table_id,
                column_id,
                column_type,
                e,
            )
        finally:
            self._status[key] = outcome

    def ensure_base_indexes(
        self,
        base_id: str,
        load_columns: Callable[[str], Iterable[ColumnRef]],
    ) -> None:
        """Provision every column of every table in a base, once per base."""
        if not is_uuid(base_id) or base_id in self._prepared_bases:
            return
        self._prepared_bases.add(base_id)
        if self.dialect_name != "postgresql":
            return
        try:
            columns = list(load_columns(base_id))
        except Exception as e:
            # Loading failed, not provisioning: allow a later retry
            self._prepared_bases.discard(base_id)
            log.warning("Could not load columns for base %s: %s", base_id, e)
            return
        for table_id, column_id, column_type in columns:
            self.ensure_column_indexes(table_id, column_id, column_type)


def engine_executor(engine: Engine) -> StatementExecutor:
    """Run each statement on its own AUTOCOMMIT connection.

    CREATE INDEX CONCURRENTLY cannot run inside a transaction block.
    """

    def _execute(statement: str) -> None:
        with engine.connect() as conn:
            conn = conn.execution_options(isolation_level="AUTOCOMMIT")
            conn.exec_driver_sql(statement)

    return _execute


_provisioner: Optional[IndexProvisioner] = None


def get_index_provisioner() -> IndexProvisioner:
    """Process-wide provisioner bound to the application engine."""
    global _provisioner
    if _provisioner is None:
        from gridbase.db.session import engine

        _provisioner = IndexProvisioner(
            engine_executor(engine),
            dialect_name=engine.dialect.name,
            concurrently=settings.INDEX_BUILD_CONCURRENTLY,
            dialect=engine.dialect,
        )
    return _provisioner


def schedule_column_indexes(
    background_tasks: BackgroundTasks,
    columns: Iterable[ColumnRef],
    provisioner: Optional[IndexProvisioner] = None,
) -> int:
    """Queue provisioning to run after the response is sent. Returns tasks queued."""
    if not settings.INDEX_PROVISIONING_ENABLED:
        return 0
    target = provisioner or get_index_provisioner()
    queued = 0
    for table_id, column_id, column_type in columns:
        background_tasks.add_task(target.ensure_column_indexes, table_id, column_id, column_type)
        queued += 1
    return queued


def schedule_base_indexes(
    background_tasks: BackgroundTasks,
    base_id: str,
    load_columns: Callable[[str], Iterable[ColumnRef]],
    provisioner: Optional[IndexProvisioner] = None,
) -> bool:
    if not settings.INDEX_PROVISIONING_ENABLED:
        return False
    target = provisioner or get_index_provisioner()
    background_tasks.add_task(target.ensure_base_indexes, base_id, load_columns)
    return True
