"""
Record Stock Take Use Case.

A physical count replaces the product's stock level. The expected level,
the counted level and their difference are kept in stock_takes so shrinkage
can be audited later.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime

from pharmapos.application.dto.requests import StockTakeRequest
from pharmapos.application.dto.responses import (
    AlertResponse,
    ProductResponse,
    StockTakeResponse,
)
from pharmapos.config import bind_workflow, get_logger
from pharmapos.core.entities import Operator, Product, StockTake
from pharmapos.core.exceptions import ProductNotFoundError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import ActivityAction, ActivityLogger, RefreshBus, RefreshDomain

logger = get_logger(__name__)

ALERT_TITLE = "Stock Take"


@dataclass
class StockTakeResult:
    stock_take: StockTake
    product: Product


class RecordStockTakeUseCase:
    """
    Record a stock take.

    Flow:
    1. Under the stock lock, read the product's current stock as expected
    2. Set current_stock to the counted quantity when they differ
    3. Insert the stock take row, matching or not
    4. Refresh inventory and write the activity log
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

    async def execute(self, product_id: int, request: StockTakeRequest) -> StockTakeResult:
        """Execute the stock take use case."""
        bind_workflow("stock_take", product_id=product_id)
        store = await self._get_store()
        now = datetime.utcnow()

        async with self._get_stock_lock():
            row = await store.select_one("products", {"id": product_id})
            if row is None:
                error = ProductNotFoundError(product_id)
                error.title = ALERT_TITLE
                raise error

            expected = row["current_stock"]
            difference = request.actual_stock - expected
            if difference:
                await store.update(
                    "products",
                    {"id": product_id},
                    {"current_stock": request.actual_stock, "updated_at": now},
                )
                row = {**row, "current_stock": request.actual_stock, "updated_at": now}

            stock_take = StockTake(
                product_id=product_id,
                product_name=row["name"],
                expected_stock=expected,
                actual_stock=request.actual_stock,
                difference=difference,
                reason=(request.reason or "").strip() or None,
                user_id=request.user_id,
                user_name=request.user_name,
                created_at=now,
            )
            saved = await store.insert(
                "stock_takes", stock_take.model_dump(mode="json", exclude={"id"})
            )
            stock_take.id = saved["id"]

        log = logger.warning if difference < 0 else logger.info
        log(
            "stock_take_recorded",
            product_id=product_id,
            expected=expected,
            actual=request.actual_stock,
            difference=difference,
        )

        bus = self._get_refresh_bus()
        bus.trigger_refresh([RefreshDomain.INVENTORY])
        await ActivityLogger(store, bus).log(
            ActivityAction.STOCK_TAKE,
            f"Stock take: {stock_take.product_name} - Difference: {difference}",
            Operator(user_id=request.user_id, user_name=request.user_name),
        )

        return StockTakeResult(stock_take=stock_take, product=Product.model_validate(row))

    def to_response(self, result: StockTakeResult) -> StockTakeResponse:
        product = result.product
        difference = result.stock_take.difference
        message = (
            "Stock count matches the system"
            if difference == 0
            else f"Stock adjusted by {difference:+d} to {result.stock_take.actual_stock}"
        )
        return StockTakeResponse(
            stock_take=result.stock_take,
            product=ProductResponse(**product.model_dump(), is_low_stock=product.is_low_stock),
            alert=AlertResponse(title=ALERT_TITLE, message=message, type="success"),
        )
