"""
PostgreSQL-backed record store.

Every statement runs in its own transaction on a pooled connection (or a dedicated
connection when a DSN override is given, as tests do). All driver errors, pool
timeouts, and rows that do not fit the `Record` schema are raised as `StoreError`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Generator, List, Optional

import psycopg
from psycopg import sql
from psycopg.rows import dict_row
from pydantic import ValidationError

from prescription_desk.config import get_settings
from prescription_desk.domain.models import NewRecord, Record
from prescription_desk.errors import StoreError
from prescription_desk.infrastructure.abstract import ORDERABLE_COLUMNS, AbstractRecordStore
from prescription_desk.infrastructure.db_factory import (
    PoolManager,
    apply_statement_timeout,
    get_sync_connection,
)
from prescription_desk.utils.logging import get_logger

log = get_logger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS {table} (
    id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
    registration_number BIGINT GENERATED BY DEFAULT AS IDENTITY UNIQUE,
    created_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    updated_at TIMESTAMPTZ NOT NULL DEFAULT now(),
    name TEXT NOT NULL CHECK (length(btrim(name)) > 0),
    age INTEGER NOT NULL CHECK (age BETWEEN 1 AND 150),
    gender TEXT NOT NULL CHECK (gender IN ('male', 'female', 'others')),
    department TEXT NOT NULL,
    type TEXT NOT NULL CHECK (type IN ('ANC', 'General', 'JSSK')),
    room_number TEXT,
    address TEXT,
    aadhar_number TEXT,
    mobile_number TEXT
)
"""

_CREATE_INDEX = "CREATE INDEX IF NOT EXISTS {index} ON {table} (created_at DESC)"


def _table_identifier(table: str) -> sql.Identifier:
    return sql.Identifier("public", table)


def ensure_schema(conn: psycopg.Connection, table: Optional[str] = None) -> None:
    """
    Create the records table and its index if they do not exist (idempotent).

    `registration_number` is an identity column with a UNIQUE constraint: inserts that
    omit it get the next sequence value, so concurrent desks never share a number.
    """
    table = table or get_settings().records_table
    identifier = _table_identifier(table)
    with conn.cursor() as cur:
        cur.execute(sql.SQL(_CREATE_TABLE).format(table=identifier))
        cur.execute(
            sql.SQL(_CREATE_INDEX).format(
                index=sql.Identifier(f"{table}_created_at_idx"), table=identifier
            )
        )
    conn.commit()
    log.info("Schema ensured", extra={"table": table})


class PostgresRecordStore(AbstractRecordStore):
    """
    Record store on a single PostgreSQL table.
    """

    def __init__(
        self,
        table: Optional[str] = None,
        dsn_override: Optional[str] = None,
        statement_timeout_ms: Optional[int] = None,
    ) -> None:
        settings = get_settings()
        self.table = table or settings.records_table
        self.statement_timeout_ms = (
            statement_timeout_ms
            if statement_timeout_ms is not None
            else settings.db_statement_timeout_ms
        )
        self._dsn_override = dsn_override
        self._table = _table_identifier(self.table)

    @contextmanager
    def _connection(self) -> Generator[psycopg.Connection, None, None]:
        if self._dsn_override:
            with get_sync_connection(self._dsn_override) as conn:
                yield conn
        else:
            with PoolManager().sync_connection() as conn:
                yield conn

    @contextmanager
    def _cursor(self, operation: str) -> Generator[psycopg.Cursor, None, None]:
        try:
            with self._connection() as conn:
                with conn.cursor(row_factory=dict_row) as cur:
                    apply_statement_timeout(cur, self.statement_timeout_ms)
                    yield cur
        except psycopg.Error as exc:
            log.error(
                f"[STORE FAILED] {operation}",
                extra={"operation": operation, "table": self.table, "error": str(exc)},
            )
            raise StoreError(f"{operation} failed: {exc}") from exc

    def _to_record(self, row: Dict[str, Any]) -> Record:
        try:
            return Record.model_validate(row)
        except ValidationError as exc:
            raise StoreError(f"Malformed row in {self.table}: {exc}") from exc

    def insert(self, record: NewRecord) -> Record:
        row = record.to_row()
        columns = list(row)
        query = sql.SQL("INSERT INTO {table} ({columns}) VALUES ({values}) RETURNING *").format(
            table=self._table,
            columns=sql.SQL(", ").join(sql.Identifier(column) for column in columns),
            values=sql.SQL(", ").join(sql.Placeholder(column) for column in columns),
        )
        with self._cursor("insert") as cur:
            cur.execute(query, row)
            stored = cur.fetchone()
        if stored is None:
            raise StoreError("insert returned no row")
        result = self._to_record(stored)
        log.info(
            "Record inserted",
            extra={"registration_number": result.registration_number, "record_id": str(result.id)},
        )
        return result

    def list(self, order_by: str = "created_at", descending: bool = True) -> List[Record]:
        if order_by not in ORDERABLE_COLUMNS:
            raise ValueError(f"Cannot order by '{order_by}'. Allowed: {', '.join(ORDERABLE_COLUMNS)}")
        query = sql.SQL("SELECT * FROM {table} ORDER BY {column} {direction}").format(
            table=self._table,
            column=sql.Identifier(order_by),
            direction=sql.SQL("DESC" if descending else "ASC"),
        )
        with self._cursor("list") as cur:
            cur.execute(query)
            rows = cur.fetchall()
        records = [self._to_record(row) for row in rows]
        log.info("Records loaded", extra={"rows": len(records), "order_by": order_by})
        return records

    def max_registration_number(self) -> Optional[int]:
        query = sql.SQL(
            "SELECT registration_number FROM {table} ORDER BY registration_number DESC LIMIT 1"
        ).format(table=self._table)
        with self._cursor("max_registration_number") as cur:
            cur.execute(query)
            row = cur.fetchone()
        return int(row["registration_number"]) if row else None


__all__ = ["PostgresRecordStore", "ensure_schema"]
