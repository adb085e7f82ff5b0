"""Read-side reports over persisted sales and inventory."""

from datetime import datetime, timezone

from pharmapos.core.entities import Product
from pharmapos.core.interfaces import IRecordStore, Range
from pharmapos.core.services.pricing import ProfitBreakdown, profit_breakdown


def to_naive_utc(value: datetime | None) -> datetime | None:
    """Timestamps are stored as naive UTC; aware bounds are converted to match."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


class ReportingService:
    """Profit and stock reports."""

    def __init__(self, store: IRecordStore):
        self._store = store

    async def profit_report(
        self,
        start: datetime | None = None,
        end: datetime | None = None,
    ) -> ProfitBreakdown:
        """Profit breakdown over sale items created within [start, end)."""
        start, end = to_naive_utc(start), to_naive_utc(end)
        match = {"created_at": Range(start, end)} if start or end else None
        items = await self._store.select("sale_items", match)

        # Undiscounted cost from the current product row attributes supplier discounts
        products = {p["id"]: p for p in await self._store.select("products")}
        lines = []
        for item in items:
            product = products.get(item.get("product_id"))
            line = dict(item)
            if product and product.get("discounted_cost_price") is not None:
                line["original_cost"] = product.get("cost_price")
            lines.append(line)

        return profit_breakdown(lines)

    async def low_stock(self, threshold: int | None = None) -> list[Product]:
        """
        Products at or below their reorder level, lowest stock first.

        threshold overrides each product's own min_stock_level.
        """
        products = [Product.model_validate(r) for r in await self._store.select("products")]
        if threshold is None:
            low = [p for p in products if p.is_low_stock]
        else:
            low = [p for p in products if p.current_stock <= threshold]
        return sorted(low, key=lambda p: (p.current_stock, p.name))
