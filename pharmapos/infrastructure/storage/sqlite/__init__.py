"""SQLite storage implementation."""

from pharmapos.infrastructure.storage.sqlite.connection import (
    ConnectionPool,
    close_pool,
    get_pool,
)
from pharmapos.infrastructure.storage.sqlite.record_store import (
    SQLiteRecordStore,
    get_record_store,
    reset_record_store,
)

__all__ = [
    "ConnectionPool",
    "close_pool",
    "get_pool",
    "SQLiteRecordStore",
    "get_record_store",
    "reset_record_store",
]
