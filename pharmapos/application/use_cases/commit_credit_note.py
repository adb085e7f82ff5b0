"""
Commit Credit Note Use Case.

Records goods returned to a supplier and takes them out of stock. Lines
are processed in order with no compensation: if a later line fails, the
header and the earlier lines stay committed.
"""

import asyncio
import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from pharmapos.application.dto.requests import CreateCreditNoteRequest
from pharmapos.application.dto.responses import AlertResponse, CommitCreditNoteResponse
from pharmapos.config import bind_workflow, get_logger, get_settings
from pharmapos.core.entities import CreditNote, CreditNoteItem, Operator
from pharmapos.core.exceptions import (
    InsufficientStockError,
    ProductNotFoundError,
    ValidationError,
)
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import (
    ActivityAction,
    ActivityLogger,
    RefreshBus,
    RefreshDomain,
    format_kes,
)

logger = get_logger(__name__)

ALERT_TITLE = "Credit Notes"


def _invalid(field: str, message: str, value: Any = None) -> ValidationError:
    error = ValidationError(field, message, value)
    error.title = ALERT_TITLE
    return error


def generate_credit_note_number(prefix: str = "CN") -> str:
    """<prefix>-<epoch milliseconds>."""
    return f"{prefix}-{int(time.time() * 1000)}"


@dataclass
class CommitCreditNoteResult:
    credit_note: CreditNote


class CommitCreditNoteUseCase:
    """
    Commit a credit note.

    Flow:
    1. Validate header and items
    2. Insert header with total = sum of line credits
    3. Per line: check stock covers the return, decrement it, insert the line
    4. Refresh inventory/credit notes and write the activity log
    """

    def __init__(
        self,
        store: IRecordStore | None = None,
        refresh_bus: RefreshBus | None = None,
        stock_lock: asyncio.Lock | None = None,
    ):
        self._store = store
        self._refresh_bus = refresh_bus
        self._stock_lock = stock_lock

    async def _get_store(self) -> IRecordStore:
        if self._store is None:
            from pharmapos.application.services import get_store

            self._store = await get_store()
        return self._store

    def _get_refresh_bus(self) -> RefreshBus:
        if self._refresh_bus is None:
            from pharmapos.application.services import get_refresh_bus

            self._refresh_bus = get_refresh_bus()
        return self._refresh_bus

    def _get_stock_lock(self) -> asyncio.Lock:
        if self._stock_lock is None:
            from pharmapos.application.services import get_stock_lock

            self._stock_lock = get_stock_lock()
        return self._stock_lock

    def build_items(self, request: CreateCreditNoteRequest) -> list[CreditNoteItem]:
        if not request.invoice_number.strip() or not request.supplier.strip():
            raise _invalid("invoice_number", "Please fill in all required fields")
        if not request.items:
            raise _invalid("items", "Please add at least one item to the credit note")

        items = []
        for line in request.items:
            if line.quantity <= 0:
                raise _invalid("quantity", "Quantity must be greater than zero", line.quantity)
            if not line.reason.strip():
                raise _invalid(
                    "reason",
                    "Please fill in all required fields for the item including the reason",
                )
            items.append(
                CreditNoteItem(
                    product_id=line.product_id,
                    product_name=line.product_name,
                    batch_number=line.batch_number,
                    quantity=line.quantity,
                    cost_price=line.cost_price,
                    reason=line.reason.strip(),
                )
            )
        return items

    async def execute(self, request: CreateCreditNoteRequest) -> CommitCreditNoteResult:
        """Execute the commit credit note use case."""
        items = self.build_items(request)
        store = await self._get_store()

        prefix = get_settings().pricing.credit_note_prefix
        total_amount = round(sum(i.total_credit for i in items), 2)
        reason = ", ".join(i.reason for i in items if i.reason) or "Return"
        now = datetime.utcnow()

        credit_note = CreditNote(
            credit_note_number=generate_credit_note_number(prefix),
            invoice_number=request.invoice_number,
            supplier=request.supplier,
            return_date=request.return_date or date.today(),
            total_amount=total_amount,
            reason=reason,
            user_id=request.user_id,
            user_name=request.user_name,
            created_at=now,
        )
        bind_workflow("credit_note_commit", credit_note_number=credit_note.credit_note_number)

        logger.info(
            "credit_note_commit_started",
            credit_note_number=credit_note.credit_note_number,
            supplier=request.supplier,
            items=len(items),
        )

        async with self._get_stock_lock():
            header = await store.insert(
                "credit_notes",
                credit_note.model_dump(mode="json", exclude={"id", "items"}),
            )
            credit_note.id = header["id"]

            for item in items:
                product = await store.select_one("products", {"id": item.product_id})
                if product is None:
                    raise ProductNotFoundError(item.product_id)

                new_stock = product["current_stock"] - item.quantity
                if new_stock < 0:
                    logger.warning(
                        "credit_note_insufficient_stock",
                        credit_note_id=credit_note.id,
                        product_id=item.product_id,
                        available=product["current_stock"],
                        returning=item.quantity,
                    )
                    error = InsufficientStockError(
                        item.product_name, item.quantity, product["current_stock"], "Returning"
                    )
                    error.title = ALERT_TITLE
                    raise error

                await store.update(
                    "products",
                    {"id": item.product_id},
                    {"current_stock": new_stock, "updated_at": datetime.utcnow()},
                )
                row = await store.insert(
                    "credit_note_items",
                    {
                        **item.model_dump(mode="json", exclude={"id", "credit_note_id"}),
                        "credit_note_id": credit_note.id,
                        "created_at": now,
                    },
                )
                credit_note.items.append(CreditNoteItem.model_validate(row))

        bus = self._get_refresh_bus()
        bus.trigger_refresh([RefreshDomain.INVENTORY, RefreshDomain.CREDIT_NOTES])

        await ActivityLogger(store, bus).log(
            ActivityAction.CREDIT_NOTE_CREATED,
            f"Created credit note {credit_note.credit_note_number} for supplier "
            f"{request.supplier} - Total: {format_kes(total_amount)}",
            Operator(user_id=request.user_id, user_name=request.user_name),
        )

        logger.info(
            "credit_note_commit_complete",
            credit_note_id=credit_note.id,
            total_amount=total_amount,
        )
        return CommitCreditNoteResult(credit_note=credit_note)

    def to_response(self, result: CommitCreditNoteResult) -> CommitCreditNoteResponse:
        return CommitCreditNoteResponse(
            credit_note=result.credit_note,
            alert=AlertResponse(
                title=ALERT_TITLE,
                message="Credit note saved successfully!",
                type="success",
            ),
        )
