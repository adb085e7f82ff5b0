"""Tests for the aiosqlite connection pool."""

from pathlib import Path

import pytest

from pharmapos.infrastructure.storage.sqlite import ConnectionPool


class TestConnectionPool:
    """Tests for ConnectionPool."""

    async def test_initialize_creates_connections(self, temp_db_path: Path):
        """initialize() opens pool_size connections."""
        pool = ConnectionPool(temp_db_path, pool_size=3)
        await pool.initialize()
        try:
            assert pool.available == 3
            assert temp_db_path.exists()
        finally:
            await pool.close()

    async def test_initialize_is_idempotent(self, temp_db_path: Path):
        """A second initialize() does not open more connections."""
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()
        await pool.initialize()
        try:
            assert pool.available == 2
        finally:
            await pool.close()

    async def test_acquire_returns_connection(self, temp_db_path: Path):
        """Borrowed connections go back to the pool."""
        pool = ConnectionPool(temp_db_path, pool_size=2)
        try:
            async with pool.acquire():
                assert pool.available == 1
            assert pool.available == 2
        finally:
            await pool.close()

    async def test_pragmas_applied(self, temp_db_path: Path):
        """Connections run in WAL mode with foreign keys on."""
        pool = ConnectionPool(temp_db_path, pool_size=1)
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute("PRAGMA journal_mode")
                assert (await cursor.fetchone())[0] == "wal"
                cursor = await conn.execute("PRAGMA foreign_keys")
                assert (await cursor.fetchone())[0] == 1
        finally:
            await pool.close()

    async def test_creates_missing_data_directory(self, tmp_path: Path):
        db_path = tmp_path / "nested" / "data" / "pharmapos.db"
        pool = ConnectionPool(db_path, pool_size=1)
        try:
            await pool.initialize()
            assert db_path.parent.is_dir()
        finally:
            await pool.close()

    async def test_rows_accessible_by_column(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        try:
            async with pool.acquire() as conn:
                cursor = await conn.execute("SELECT 7 AS stock, 'B001' AS batch_number")
                row = await cursor.fetchone()
                assert dict(row) == {"stock": 7, "batch_number": "B001"}
        finally:
            await pool.close()

    async def test_transaction_rolls_back_on_error(self, temp_db_path: Path):
        """An exception inside transaction() discards its writes."""
        pool = ConnectionPool(temp_db_path, pool_size=1)
        try:
            async with pool.transaction() as conn:
                await conn.execute("CREATE TABLE t (x INTEGER)")

            with pytest.raises(RuntimeError):
                async with pool.transaction() as conn:
                    await conn.execute("INSERT INTO t VALUES (1)")
                    raise RuntimeError("boom")

            async with pool.acquire() as conn:
                cursor = await conn.execute("SELECT COUNT(*) FROM t")
                assert (await cursor.fetchone())[0] == 0
        finally:
            await pool.close()

    async def test_ping(self, temp_db_path: Path):
        """ping() succeeds on a healthy database."""
        pool = ConnectionPool(temp_db_path, pool_size=1)
        try:
            assert await pool.ping() is True
        finally:
            await pool.close()

    async def test_schema_version_before_migrations(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=1)
        try:
            assert await pool.schema_version() is None
        finally:
            await pool.close()

    async def test_schema_version_after_migrations(self, pool: ConnectionPool):
        assert await pool.schema_version() == "002"

    async def test_close_empties_pool(self, temp_db_path: Path):
        pool = ConnectionPool(temp_db_path, pool_size=2)
        await pool.initialize()
        await pool.close()
        assert pool.available == 0
