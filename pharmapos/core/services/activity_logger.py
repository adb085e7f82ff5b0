"""Audit trail writer for completed operations."""

from datetime import datetime

from pharmapos.config import get_logger
from pharmapos.core.entities import ActivityLog, Operator
from pharmapos.core.exceptions import PharmaPOSError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services.refresh import GenerationCache, RefreshBus, RefreshDomain

logger = get_logger(__name__)


class ActivityAction:
    INVOICE_CREATED = "INVOICE_CREATED"
    INVOICE_DELETED = "INVOICE_DELETED"
    CREDIT_NOTE_CREATED = "CREDIT_NOTE_CREATED"
    CREDIT_NOTE_DELETED = "CREDIT_NOTE_DELETED"
    SALE = "SALE"
    ADD_PRODUCT = "ADD_PRODUCT"
    UPDATE_PRODUCT = "UPDATE_PRODUCT"
    STOCK_TAKE = "STOCK_TAKE"


class ActivityLogger:
    """
    Appends entries to activity_logs.

    Logging happens after the primary operation has committed, so a failure
    here is reported as a warning and never fails the caller.
    """

    table = "activity_logs"

    def __init__(self, store: IRecordStore, refresh_bus: RefreshBus | None = None):
        self._store = store
        self._refresh_bus = refresh_bus
        # Every write goes through log(), which bumps the activity generation
        self._total: GenerationCache[int] | None = None
        if refresh_bus is not None:
            self._total = GenerationCache(refresh_bus, RefreshDomain.ACTIVITY, self._count)

    async def log(
        self,
        action: str,
        details: str,
        user: Operator | None = None,
    ) -> ActivityLog | None:
        user = user or Operator()
        entry = ActivityLog(
            user_id=user.user_id,
            user_name=user.user_name,
            action=action,
            details=details,
            created_at=datetime.utcnow(),
        )
        try:
            row = await self._store.insert(
                self.table, entry.model_dump(mode="json", exclude={"id"})
            )
        except PharmaPOSError as e:
            logger.warning("activity_log_failed", action=action, error=e.message)
            return None

        entry.id = row.get("id")
        if self._refresh_bus is not None:
            self._refresh_bus.trigger_refresh(RefreshDomain.ACTIVITY)
        return entry

    async def _count(self) -> int:
        return await self._store.count(self.table)

    async def total(self) -> int:
        """Number of entries, recounted only after a new entry is logged."""
        if self._total is not None:
            return await self._total.get()
        return await self._count()

    async def recent(self, limit: int = 100, offset: int = 0) -> list[ActivityLog]:
        rows = await self._store.select(
            self.table,
            order_by="created_at",
            descending=True,
            limit=limit,
            offset=offset,
        )
        return [ActivityLog.model_validate(r) for r in rows]
