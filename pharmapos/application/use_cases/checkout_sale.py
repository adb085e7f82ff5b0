"""
Checkout Sale Use Case.

Re-prices the cart against current product rows, then records the sale
and takes the goods out of stock. Writes run through the same saga as
invoice commits, so a failure deletes the sale and restores stock.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from pharmapos.application.dto.requests import CheckoutRequest
from pharmapos.application.dto.responses import AlertResponse, CheckoutResponse
from pharmapos.config import bind_workflow, get_logger, get_settings
from pharmapos.core.entities import Operator, PricedSaleLine, Product, Sale
from pharmapos.core.exceptions import (
    ProductNotFoundError,
    SaleRolledBackError,
    ValidationError,
)
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import (
    ActivityAction,
    ActivityLogger,
    CommitState,
    RefreshBus,
    RefreshDomain,
    Saga,
    build_sale_line,
    cart_total,
    format_kes,
    get_error_message,
)
from pharmapos.core.services.saga import UndoAction

logger = get_logger(__name__)

ALERT_TITLE = "Point of Sale"


def _invalid(field: str, message: str, value: Any = None) -> ValidationError:
    error = ValidationError(field, message, value)
    error.title = ALERT_TITLE
    return error


@dataclass
class CheckoutResult:
    sale: Sale


class CheckoutSaleUseCase:
    """
    Check out a cart.

    Flow:
    1. Reject empty carts and a missing payment method
    2. Re-read every product and price each line (stock and floor checks)
    3. Insert the sale header with the next receipt number
    4. Per line: decrement stock
    5. Insert all sale items in one batch
    6. Refresh sales/inventory and write the activity log
    """

    def __init__(
        self,
        store: IRecordStore | None = None,
        refresh_bus: RefreshBus | None = None,
        stock_lock: asyncio.Lock | None = None,
        minimum_margin_percent: float | None = None,
    ):
        self._store = store
        self._refresh_bus = refresh_bus
        self._stock_lock = stock_lock
        self._minimum_margin_percent = minimum_margin_percent

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

    def _margin(self) -> float:
        if self._minimum_margin_percent is None:
            return get_settings().pricing.minimum_margin_percent
        return self._minimum_margin_percent

    async def price_cart(
        self, request: CheckoutRequest
    ) -> tuple[list[PricedSaleLine], dict[int, Product]]:
        """Price every line against the current product rows."""
        store = await self._get_store()
        products: dict[int, Product] = {}
        lines: list[PricedSaleLine] = []

        for entry in request.items:
            product = products.get(entry.product_id)
            if product is None:
                row = await store.select_one("products", {"id": entry.product_id})
                if row is None:
                    raise ProductNotFoundError(entry.product_id)
                product = Product.model_validate(row)
                products[entry.product_id] = product

            # Repeated lines for one product share its stock
            reserved = sum(p.quantity for p in lines if p.product_id == entry.product_id)
            available = product.model_copy(
                update={"current_stock": product.current_stock - reserved}
            )
            try:
                lines.append(
                    build_sale_line(
                        available,
                        entry.quantity,
                        entry.unit_price,
                        entry.price_type,
                        self._margin(),
                    )
                )
            except ValidationError as e:
                e.title = ALERT_TITLE
                raise

        return lines, products

    async def execute(self, request: CheckoutRequest) -> CheckoutResult:
        """Execute the checkout use case."""
        if not request.items:
            raise _invalid("items", "Cart is empty")
        if request.payment_method is None:
            raise _invalid("payment_method", "Please select a payment method")
        bind_workflow("sale_checkout", payment_method=request.payment_method.value)

        store = await self._get_store()

        async with self._get_stock_lock():
            lines, products = await self.price_cart(request)
            sale = await self._commit(request, lines, products)

        bus = self._get_refresh_bus()
        bus.trigger_refresh([RefreshDomain.SALES, RefreshDomain.INVENTORY])

        await ActivityLogger(store, bus).log(
            ActivityAction.SALE,
            f"Sale completed: {sale.receipt_number} - {format_kes(sale.total_amount)}",
            Operator(user_id=request.sales_person_id, user_name=request.sales_person_name),
        )

        logger.info(
            "sale_checkout_complete",
            sale_id=sale.id,
            receipt_number=sale.receipt_number,
            total_amount=sale.total_amount,
        )
        return CheckoutResult(sale=sale)

    async def next_receipt_number(self) -> str:
        store = await self._get_store()
        prefix = get_settings().pricing.receipt_prefix
        return f"{prefix}{await store.count('sales') + 1:04d}"

    async def _commit(
        self,
        request: CheckoutRequest,
        lines: list[PricedSaleLine],
        products: dict[int, Product],
    ) -> Sale:
        store = await self._get_store()
        total_amount = cart_total(lines)
        now = datetime.utcnow()
        receipt_number = await self.next_receipt_number()
        saga = Saga("sale_checkout", receipt_number=receipt_number)

        logger.info(
            "sale_checkout_started",
            receipt_number=receipt_number,
            lines=len(lines),
            total_amount=total_amount,
        )

        try:
            header = await store.insert(
                "sales",
                {
                    "receipt_number": receipt_number,
                    "customer_name": request.customer_name,
                    "payment_method": request.payment_method,
                    "total_amount": total_amount,
                    "sales_person_id": request.sales_person_id,
                    "sales_person_name": request.sales_person_name,
                    "created_at": now,
                },
            )
            sale_id = header["id"]
            saga.record(
                "create_header",
                self._delete_header(store, sale_id),
                CommitState.HEADER_CREATED,
                sale_id=sale_id,
            )

            stock = {pid: p.current_stock for pid, p in products.items()}
            staged: list[dict[str, Any]] = []
            for line in lines:
                original_stock = stock[line.product_id]
                stock[line.product_id] = original_stock - line.quantity
                await store.update(
                    "products",
                    {"id": line.product_id},
                    {"current_stock": stock[line.product_id], "updated_at": now},
                )
                saga.record(
                    "decrement_stock",
                    self._restore_stock(store, line.product_id, original_stock),
                    CommitState.PRODUCT_UPSERTED,
                    product_id=line.product_id,
                )

                staged.append(
                    {
                        **line.model_dump(mode="json", exclude={"id", "sale_id"}),
                        "sale_id": sale_id,
                        "created_at": now,
                    }
                )
                saga.transition(CommitState.ITEM_STAGED)

            rows = await store.insert_many("sale_items", staged)
            saga.transition(CommitState.ITEMS_PERSISTED)

        except Exception as e:
            logger.error(
                "sale_checkout_failed",
                receipt_number=receipt_number,
                state=saga.state.value,
                error=str(e),
            )
            failures = await saga.rollback()
            raise SaleRolledBackError(
                get_error_message(e), cause=str(e), rollback_failures=failures
            ) from e

        saga.transition(CommitState.COMMITTED)

        return Sale(
            id=sale_id,
            receipt_number=receipt_number,
            customer_name=request.customer_name,
            payment_method=request.payment_method,
            total_amount=total_amount,
            sales_person_id=request.sales_person_id,
            sales_person_name=request.sales_person_name,
            items=[PricedSaleLine.model_validate(r) for r in rows],
            created_at=now,
        )

    @staticmethod
    def _delete_header(store: IRecordStore, sale_id: int) -> UndoAction:
        async def undo() -> None:
            await store.delete("sales", {"id": sale_id})

        return undo

    @staticmethod
    def _restore_stock(store: IRecordStore, product_id: int, original_stock: int) -> UndoAction:
        async def undo() -> None:
            await store.update(
                "products",
                {"id": product_id},
                {"current_stock": original_stock, "updated_at": datetime.utcnow()},
            )

        return undo

    def to_response(self, result: CheckoutResult) -> CheckoutResponse:
        return CheckoutResponse(
            sale=result.sale,
            alert=AlertResponse(
                title=ALERT_TITLE,
                message=f"Sale completed! Receipt #{result.sale.receipt_number}",
                type="success",
            ),
        )
