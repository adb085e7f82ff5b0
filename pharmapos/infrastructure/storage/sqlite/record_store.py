"""
SQLite implementation of the keyed-record store.

Tables and columns are interpolated into SQL, so both are checked against a
whitelist/identifier pattern before use; values are always bound parameters.
"""

import re
from datetime import date, datetime
from enum import Enum
from typing import Any

import aiosqlite

from pharmapos.config import get_logger
from pharmapos.core.exceptions import DatabaseError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.interfaces.record_store import Range, Record
from pharmapos.infrastructure.storage.sqlite.connection import ConnectionPool, get_pool

logger = get_logger(__name__)

TABLES = frozenset(
    {
        "products",
        "invoices",
        "invoice_items",
        "credit_notes",
        "credit_note_items",
        "sales",
        "sale_items",
        "activity_logs",
        "stock_takes",
    }
)

_IDENTIFIER = re.compile(r"^[a-z_][a-z0-9_]*$")


def _table(name: str) -> str:
    if name not in TABLES:
        raise DatabaseError("validate", f"unknown table '{name}'")
    return name


def _column(name: str) -> str:
    if not _IDENTIFIER.match(name):
        raise DatabaseError("validate", f"invalid column name '{name}'")
    return name


def _to_sql(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def _where(match: Record | None) -> tuple[str, list[Any]]:
    if not match:
        return "", []
    clauses = []
    params: list[Any] = []
    for key, value in match.items():
        if value is None:
            clauses.append(f"{_column(key)} IS NULL")
        elif isinstance(value, Range):
            if value.start is not None:
                clauses.append(f"{_column(key)} >= ?")
                params.append(_to_sql(value.start))
            if value.end is not None:
                clauses.append(f"{_column(key)} < ?")
                params.append(_to_sql(value.end))
        else:
            clauses.append(f"{_column(key)} = ?")
            params.append(_to_sql(value))
    if not clauses:
        return "", params
    return " WHERE " + " AND ".join(clauses), params


class SQLiteRecordStore(IRecordStore):
    """Record store over the aiosqlite connection pool."""

    def __init__(self, pool: ConnectionPool | None = None):
        self._pool = pool

    async def _get_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = await get_pool()
        return self._pool

    async def _insert_row(self, conn: aiosqlite.Connection, table: str, record: Record) -> Record:
        columns = [_column(c) for c in record]
        placeholders = ", ".join("?" for _ in columns)
        cursor = await conn.execute(
            f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders})",
            [_to_sql(v) for v in record.values()],
        )
        row_id = cursor.lastrowid
        cursor = await conn.execute(f"SELECT * FROM {table} WHERE id = ?", (row_id,))
        return dict(await cursor.fetchone())

    async def insert(self, table: str, record: Record) -> Record:
        table = _table(table)
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                row = await self._insert_row(conn, table, record)
        except aiosqlite.Error as e:
            logger.error("record_insert_failed", table=table, error=str(e))
            raise DatabaseError(f"insert into {table}", str(e)) from e

        logger.debug("record_inserted", table=table, id=row["id"])
        return row

    async def insert_many(self, table: str, records: list[Record]) -> list[Record]:
        """Insert all records in one transaction: either every row lands or none."""
        table = _table(table)
        if not records:
            return []
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                rows = [await self._insert_row(conn, table, r) for r in records]
        except aiosqlite.Error as e:
            logger.error("record_batch_insert_failed", table=table, count=len(records), error=str(e))
            raise DatabaseError(f"batch insert into {table}", str(e)) from e

        logger.debug("records_inserted", table=table, count=len(rows))
        return rows

    async def update(self, table: str, match: Record, patch: Record) -> int:
        table = _table(table)
        if not patch:
            return 0
        assignments = ", ".join(f"{_column(k)} = ?" for k in patch)
        where, params = _where(match)
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                cursor = await conn.execute(
                    f"UPDATE {table} SET {assignments}{where}",
                    [_to_sql(v) for v in patch.values()] + params,
                )
                changed = cursor.rowcount
        except aiosqlite.Error as e:
            logger.error("record_update_failed", table=table, error=str(e))
            raise DatabaseError(f"update {table}", str(e)) from e
        return changed

    async def select(
        self,
        table: str,
        match: Record | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Record]:
        table = _table(table)
        where, params = _where(match)
        sql = f"SELECT * FROM {table}{where}"
        if order_by:
            sql += f" ORDER BY {_column(order_by)} {'DESC' if descending else 'ASC'}, id"
        else:
            sql += " ORDER BY id"
        if limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params += [limit, offset]
        elif offset:
            sql += " LIMIT -1 OFFSET ?"
            params.append(offset)

        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute(sql, params)
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            logger.error("record_select_failed", table=table, error=str(e))
            raise DatabaseError(f"select from {table}", str(e)) from e
        return [dict(r) for r in rows]

    async def delete(self, table: str, match: Record) -> int:
        table = _table(table)
        if not match:
            raise DatabaseError(f"delete from {table}", "refusing to delete without a match")
        where, params = _where(match)
        pool = await self._get_pool()
        try:
            async with pool.transaction() as conn:
                cursor = await conn.execute(f"DELETE FROM {table}{where}", params)
                removed = cursor.rowcount
        except aiosqlite.Error as e:
            logger.error("record_delete_failed", table=table, error=str(e))
            raise DatabaseError(f"delete from {table}", str(e)) from e
        return removed

    async def count(self, table: str, match: Record | None = None) -> int:
        table = _table(table)
        where, params = _where(match)
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute(f"SELECT COUNT(*) FROM {table}{where}", params)
                row = await cursor.fetchone()
        except aiosqlite.Error as e:
            raise DatabaseError(f"count {table}", str(e)) from e
        return row[0]


_store: SQLiteRecordStore | None = None


async def get_record_store() -> SQLiteRecordStore:
    """Process-wide record store over the global pool."""
    global _store
    if _store is None:
        _store = SQLiteRecordStore(await get_pool())
    return _store


def reset_record_store() -> None:
    global _store
    _store = None
