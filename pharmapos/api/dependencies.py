"""
Dependency injection container for FastAPI.

Provides service instances to route handlers.
"""

from functools import lru_cache

from pharmapos.application.services import get_activity, get_refresh_bus, get_store
from pharmapos.application.use_cases import (
    CheckoutSaleUseCase,
    CommitCreditNoteUseCase,
    CommitInvoiceUseCase,
    DeleteDocumentUseCase,
    ImportInvoiceCSVUseCase,
    ManageProductUseCase,
    RecordStockTakeUseCase,
)
from pharmapos.config import Settings, get_settings
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import ActivityLogger, RefreshBus, ReportingService
from pharmapos.infrastructure.storage.sqlite import ConnectionPool, get_pool


@lru_cache
def get_app_settings() -> Settings:
    """Get cached application settings."""
    return get_settings()


# Store dependencies
async def get_record_store() -> IRecordStore:
    """Get record store."""
    return await get_store()


async def get_connection_pool() -> ConnectionPool:
    """Get connection pool."""
    return await get_pool()


# Service dependencies
def get_bus() -> RefreshBus:
    """Get refresh bus."""
    return get_refresh_bus()


async def get_reporting_service() -> ReportingService:
    """Get reporting service."""
    return ReportingService(await get_store())


async def get_activity_logger() -> ActivityLogger:
    """Get activity logger."""
    return await get_activity()


# Use case dependencies
def get_import_invoice_csv_use_case() -> ImportInvoiceCSVUseCase:
    """Get import invoice CSV use case."""
    return ImportInvoiceCSVUseCase()


def get_commit_invoice_use_case() -> CommitInvoiceUseCase:
    """Get commit invoice use case."""
    return CommitInvoiceUseCase()


def get_commit_credit_note_use_case() -> CommitCreditNoteUseCase:
    """Get commit credit note use case."""
    return CommitCreditNoteUseCase()


def get_checkout_sale_use_case() -> CheckoutSaleUseCase:
    """Get checkout sale use case."""
    return CheckoutSaleUseCase()


def get_manage_product_use_case() -> ManageProductUseCase:
    """Get manage product use case."""
    return ManageProductUseCase()


def get_record_stock_take_use_case() -> RecordStockTakeUseCase:
    """Get record stock take use case."""
    return RecordStockTakeUseCase()


def get_delete_document_use_case() -> DeleteDocumentUseCase:
    """Get delete document use case."""
    return DeleteDocumentUseCase()
