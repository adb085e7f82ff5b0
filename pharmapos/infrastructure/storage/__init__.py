"""Storage implementations."""

from pharmapos.infrastructure.storage.sqlite import SQLiteRecordStore

__all__ = ["SQLiteRecordStore"]
