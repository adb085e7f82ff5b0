"""Pytest fixtures for SQLite storage tests."""

from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from pharmapos.infrastructure.storage.sqlite import ConnectionPool, SQLiteRecordStore
from pharmapos.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
def temp_db_path(tmp_path: Path) -> Path:
    """Create a temporary database path."""
    return tmp_path / "test.db"


@pytest.fixture
async def initialized_db(temp_db_path: Path) -> Path:
    """Create a temporary database with the full schema applied."""
    await initialize_database(temp_db_path, create_backup_before=False)
    return temp_db_path


@pytest.fixture
async def pool(initialized_db: Path) -> AsyncGenerator[ConnectionPool, None]:
    """Connection pool over the initialized database."""
    pool = ConnectionPool(initialized_db, pool_size=2, busy_timeout=5000)
    await pool.initialize()
    yield pool
    await pool.close()


@pytest.fixture
def store(pool: ConnectionPool) -> SQLiteRecordStore:
    return SQLiteRecordStore(pool)


@pytest.fixture
def product_record() -> dict:
    return {
        "name": "Paracetamol 500mg",
        "category": "Analgesics",
        "batch_number": "B001",
        "expiry_date": "2027-12-31",
        "current_stock": 50,
        "cost_price": 100.0,
        "discounted_cost_price": 90.0,
        "selling_price": 120.0,
        "vat_rate": 16.0,
        "barcode": "BC-PARA0001",
    }
