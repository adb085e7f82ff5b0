"""
Commit Invoice Use Case.

Saves a supplier invoice, receives its stock and updates product pricing.
The writes are not one database transaction: each step is recorded in a
saga with its compensating action, and any failure after the header
exists rolls the completed steps back in reverse order.
"""

import asyncio
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any

from pharmapos.application.dto.requests import CreateInvoiceRequest
from pharmapos.application.dto.responses import AlertResponse, CommitInvoiceResponse
from pharmapos.config import bind_workflow, get_logger, get_settings
from pharmapos.core.entities import Invoice, InvoiceItem, Operator
from pharmapos.core.exceptions import InvoiceRolledBackError, ValidationError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import (
    ActivityAction,
    ActivityLogger,
    CommitState,
    InvoiceItemDraft,
    ItemDefaults,
    RefreshBus,
    RefreshDomain,
    Saga,
    build_invoice_item,
    format_kes,
    get_error_message,
)
from pharmapos.core.services.saga import UndoAction

logger = get_logger(__name__)

ALERT_TITLE = "Invoice Management"


def _invalid(field: str, message: str, value: Any = None) -> ValidationError:
    error = ValidationError(field, message, value)
    error.title = ALERT_TITLE
    return error


@dataclass
class CommitInvoiceResult:
    invoice: Invoice
    products_created: int = 0
    products_updated: int = 0


class CommitInvoiceUseCase:
    """
    Commit a supplier invoice.

    Flow:
    1. Validate header and price every line (no writes on failure)
    2. Insert the invoice header
    3. Per line: add stock to the (name, batch) product or create it
    4. Insert all invoice items in one batch
    5. Refresh inventory/invoices and write the activity log
    """

    def __init__(
        self,
        store: IRecordStore | None = None,
        refresh_bus: RefreshBus | None = None,
        stock_lock: asyncio.Lock | None = None,
        defaults: ItemDefaults | None = None,
    ):
        self._store = store
        self._refresh_bus = refresh_bus
        self._stock_lock = stock_lock
        self._defaults = defaults

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

    def _get_defaults(self) -> ItemDefaults:
        if self._defaults is None:
            from pharmapos.application.services import get_item_defaults

            self._defaults = get_item_defaults()
        return self._defaults

    def price_items(self, request: CreateInvoiceRequest) -> list[InvoiceItem]:
        """Validate the header and price every line."""
        if not request.invoice_number.strip() or not request.supplier.strip():
            raise _invalid("invoice_number", "Please fill in invoice number and supplier")
        if not request.items:
            raise _invalid("items", "Please add at least one item to the invoice")

        defaults = self._get_defaults()
        items = []
        for line in request.items:
            try:
                items.append(build_invoice_item(InvoiceItemDraft(**line.model_dump()), defaults))
            except ValidationError as e:
                e.title = ALERT_TITLE
                raise
        return items

    async def execute(self, request: CreateInvoiceRequest) -> CommitInvoiceResult:
        """Execute the commit invoice use case."""
        bind_workflow("invoice_commit", invoice_number=request.invoice_number)
        items = self.price_items(request)
        total_amount = round(sum(i.total_cost for i in items), 2)

        logger.info(
            "invoice_commit_started",
            invoice_number=request.invoice_number,
            supplier=request.supplier,
            items=len(items),
            total_amount=total_amount,
        )

        async with self._get_stock_lock():
            result = await self._commit(request, items, total_amount)

        self._get_refresh_bus().trigger_refresh([RefreshDomain.INVENTORY, RefreshDomain.INVOICES])

        store = await self._get_store()
        await ActivityLogger(store, self._get_refresh_bus()).log(
            ActivityAction.INVOICE_CREATED,
            f"Created invoice {request.invoice_number} for supplier {request.supplier} - "
            f"Total: {format_kes(total_amount)}, Items: {len(items)}",
            Operator(user_id=request.user_id, user_name=request.user_name),
        )

        logger.info(
            "invoice_commit_complete",
            invoice_id=result.invoice.id,
            products_created=result.products_created,
            products_updated=result.products_updated,
        )
        return result

    async def _commit(
        self,
        request: CreateInvoiceRequest,
        items: list[InvoiceItem],
        total_amount: float,
    ) -> CommitInvoiceResult:
        store = await self._get_store()
        saga = Saga("invoice_commit", invoice_number=request.invoice_number)
        now = datetime.utcnow()
        invoice_date = request.invoice_date or date.today()
        created = updated = 0

        try:
            header = await store.insert(
                "invoices",
                {
                    "invoice_number": request.invoice_number,
                    "supplier": request.supplier,
                    "invoice_date": invoice_date,
                    "total_amount": total_amount,
                    "notes": request.notes,
                    "user_id": request.user_id,
                    "user_name": request.user_name,
                    "created_at": now,
                    "updated_at": now,
                },
            )
            invoice_id = header["id"]
            saga.record(
                "create_header",
                self._delete_header(store, invoice_id),
                CommitState.HEADER_CREATED,
                invoice_id=invoice_id,
            )

            staged: list[dict[str, Any]] = []
            for item in items:
                existing = await store.select_one(
                    "products",
                    {"name": item.product_name, "batch_number": item.batch_number},
                )
                if existing:
                    product_id = existing["id"]
                    original_stock = existing["current_stock"]
                    await store.update(
                        "products",
                        {"id": product_id},
                        {
                            "current_stock": original_stock + item.quantity,
                            **item.pricing_fields(),
                            "updated_at": now,
                        },
                    )
                    updated += 1
                    pricing_overwritten = True
                else:
                    product = await store.insert(
                        "products", self._new_product(request, item, now)
                    )
                    product_id = product["id"]
                    original_stock = 0
                    created += 1
                    pricing_overwritten = False

                saga.record(
                    "upsert_product",
                    self._restore_stock(
                        store, product_id, item.product_name, original_stock, pricing_overwritten
                    ),
                    CommitState.PRODUCT_UPSERTED,
                    product_id=product_id,
                    product_name=item.product_name,
                )

                staged.append(
                    {
                        **item.model_dump(mode="json", exclude={"id", "invoice_id", "product_id"}),
                        "invoice_id": invoice_id,
                        "product_id": product_id,
                        "created_at": now,
                    }
                )
                saga.transition(CommitState.ITEM_STAGED)

            rows = await store.insert_many("invoice_items", staged)
            saga.transition(CommitState.ITEMS_PERSISTED)

        except Exception as e:
            logger.error(
                "invoice_commit_failed",
                invoice_number=request.invoice_number,
                state=saga.state.value,
                error=str(e),
            )
            failures = await saga.rollback()
            raise InvoiceRolledBackError(
                get_error_message(e), cause=str(e), rollback_failures=failures
            ) from e

        saga.transition(CommitState.COMMITTED)

        invoice = Invoice(
            id=invoice_id,
            invoice_number=request.invoice_number,
            supplier=request.supplier,
            invoice_date=invoice_date,
            total_amount=total_amount,
            notes=request.notes,
            user_id=request.user_id,
            user_name=request.user_name,
            items=[InvoiceItem.model_validate(r) for r in rows],
            created_at=now,
            updated_at=now,
        )
        return CommitInvoiceResult(
            invoice=invoice, products_created=created, products_updated=updated
        )

    def _new_product(
        self, request: CreateInvoiceRequest, item: InvoiceItem, now: datetime
    ) -> dict[str, Any]:
        return {
            "name": item.product_name,
            "category": item.category,
            "supplier": request.supplier,
            "batch_number": item.batch_number,
            "expiry_date": item.expiry_date,
            "current_stock": item.quantity,
            "min_stock_level": get_settings().pricing.default_min_stock_level,
            **item.pricing_fields(),
            "barcode": item.barcode,
            "invoice_number": request.invoice_number,
            "created_at": now,
            "updated_at": now,
        }

    @staticmethod
    def _delete_header(store: IRecordStore, invoice_id: int) -> UndoAction:
        async def undo() -> None:
            # Invoice items cascade with the header
            await store.delete("invoices", {"id": invoice_id})

        return undo

    @staticmethod
    def _restore_stock(
        store: IRecordStore,
        product_id: int,
        product_name: str,
        original_stock: int,
        pricing_overwritten: bool,
    ) -> UndoAction:
        async def undo() -> None:
            await store.update(
                "products",
                {"id": product_id},
                {"current_stock": original_stock, "updated_at": datetime.utcnow()},
            )
            if pricing_overwritten:
                logger.warning(
                    "pricing_not_restored",
                    product_id=product_id,
                    product_name=product_name,
                )

        return undo

    def to_response(self, result: CommitInvoiceResult) -> CommitInvoiceResponse:
        """Convert result to API response."""
        return CommitInvoiceResponse(
            invoice=result.invoice,
            products_created=result.products_created,
            products_updated=result.products_updated,
            alert=AlertResponse(
                title=ALERT_TITLE,
                message="Invoice saved successfully! Inventory updated.",
                type="success",
            ),
        )
