"""Core interfaces (abstract base classes)."""

from pharmapos.core.interfaces.record_store import IRecordStore, Range, Record

__all__ = ["IRecordStore", "Range", "Record"]
