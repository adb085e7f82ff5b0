"""Abstract interface for keyed-record persistence."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

Record = dict[str, Any]


@dataclass(frozen=True)
class Range:
    """
    Match value selecting start <= column < end.

    Either bound may be None. Bounds are compared in the column's stored
    form, so timestamps must be naive UTC like the values written.
    """

    start: Any = None
    end: Any = None


class IRecordStore(ABC):
    """
    Interface for an opaque keyed-record store.

    Predicates are equality matches on columns, or a Range for half-open
    intervals. Every call is independently fallible and raises DatabaseError
    on failure.
    """

    @abstractmethod
    async def insert(self, table: str, record: Record) -> Record:
        """Insert one record and return it with its generated id."""
        pass

    @abstractmethod
    async def insert_many(self, table: str, records: list[Record]) -> list[Record]:
        """Insert a batch of records as a single write."""
        pass

    @abstractmethod
    async def update(self, table: str, match: Record, patch: Record) -> int:
        """Apply patch to matching records. Returns the number of rows changed."""
        pass

    @abstractmethod
    async def select(
        self,
        table: str,
        match: Record | None = None,
        order_by: str | None = None,
        descending: bool = False,
        limit: int | None = None,
        offset: int = 0,
    ) -> list[Record]:
        """Select matching records."""
        pass

    @abstractmethod
    async def delete(self, table: str, match: Record) -> int:
        """Delete matching records. Returns the number of rows removed."""
        pass

    async def select_one(self, table: str, match: Record) -> Record | None:
        """Select the first matching record, if any."""
        rows = await self.select(table, match, limit=1)
        return rows[0] if rows else None

    async def count(self, table: str, match: Record | None = None) -> int:
        """Count matching records."""
        return len(await self.select(table, match))
