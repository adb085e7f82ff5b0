"""Fixtures for workflow tests against a real SQLite database."""

import asyncio
from collections.abc import AsyncGenerator
from pathlib import Path

import pytest

from pharmapos.application.use_cases import (
    CheckoutSaleUseCase,
    CommitCreditNoteUseCase,
    CommitInvoiceUseCase,
    DeleteDocumentUseCase,
    ManageProductUseCase,
    RecordStockTakeUseCase,
)
from pharmapos.core.services import ItemDefaults, RefreshBus
from pharmapos.infrastructure.storage.sqlite import ConnectionPool, SQLiteRecordStore
from pharmapos.infrastructure.storage.sqlite.migrations.migrator import initialize_database


@pytest.fixture
async def db_store(tmp_path: Path) -> AsyncGenerator[SQLiteRecordStore, None]:
    """Record store over a freshly migrated database."""
    db_path = tmp_path / "pharmapos.db"
    await initialize_database(db_path, create_backup_before=False)
    pool = ConnectionPool(db_path, pool_size=2, busy_timeout=5000)
    await pool.initialize()
    yield SQLiteRecordStore(pool)
    await pool.close()


@pytest.fixture
def stock_lock() -> asyncio.Lock:
    return asyncio.Lock()


@pytest.fixture
def commit_invoice(db_store, refresh_bus: RefreshBus, stock_lock) -> CommitInvoiceUseCase:
    return CommitInvoiceUseCase(
        store=db_store, refresh_bus=refresh_bus, stock_lock=stock_lock, defaults=ItemDefaults()
    )


@pytest.fixture
def commit_credit_note(db_store, refresh_bus, stock_lock) -> CommitCreditNoteUseCase:
    return CommitCreditNoteUseCase(store=db_store, refresh_bus=refresh_bus, stock_lock=stock_lock)


@pytest.fixture
def checkout(db_store, refresh_bus, stock_lock) -> CheckoutSaleUseCase:
    return CheckoutSaleUseCase(
        store=db_store,
        refresh_bus=refresh_bus,
        stock_lock=stock_lock,
        minimum_margin_percent=33.0,
    )


@pytest.fixture
def manage_product(db_store, refresh_bus, stock_lock) -> ManageProductUseCase:
    return ManageProductUseCase(
        store=db_store, refresh_bus=refresh_bus, stock_lock=stock_lock, defaults=ItemDefaults()
    )


@pytest.fixture
def record_stock_take(db_store, refresh_bus, stock_lock) -> RecordStockTakeUseCase:
    return RecordStockTakeUseCase(store=db_store, refresh_bus=refresh_bus, stock_lock=stock_lock)


@pytest.fixture
def delete_document(db_store, refresh_bus) -> DeleteDocumentUseCase:
    return DeleteDocumentUseCase(store=db_store, refresh_bus=refresh_bus)
