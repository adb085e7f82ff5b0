"""
Manage Product Use Case.

Adds and edits products by hand, outside the invoice workflow. Prices go
through the same line pricing as invoice items, so a product entered here
is priced exactly as if it had arrived on an invoice.
"""

import asyncio
from datetime import datetime
from typing import Any

from pharmapos.application.dto.requests import CreateProductRequest, UpdateProductRequest
from pharmapos.application.dto.responses import (
    AlertResponse,
    ProductResponse,
    ProductSavedResponse,
)
from pharmapos.config import get_logger, get_settings
from pharmapos.core.entities import InvoiceItem, Operator, Product
from pharmapos.core.exceptions import ProductNotFoundError, ValidationError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import (
    ActivityAction,
    ActivityLogger,
    InvoiceItemDraft,
    ItemDefaults,
    RefreshBus,
    RefreshDomain,
    build_invoice_item,
)

logger = get_logger(__name__)

ALERT_TITLE = "Inventory"

PRICING_FIELDS = frozenset(
    {
        "cost_price",
        "supplier_discount_percent",
        "vat_rate",
        "selling_price",
        "discounted_selling_price",
    }
)

# Columns an edit may clear; the rest keep their value when sent as null
_CLEARABLE = frozenset({"supplier", "expiry_date", "invoice_number"})


def _invalid(field: str, message: str, value: Any = None) -> ValidationError:
    error = ValidationError(field, message, value)
    error.title = ALERT_TITLE
    return error


class ManageProductUseCase:
    """
    Create and update products.

    Both hold the stock lock so a manual edit cannot interleave with an
    invoice commit touching the same (name, batch) row.
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

    def price(self, **fields: Any) -> InvoiceItem:
        """Price product fields as a one-unit invoice line."""
        try:
            return build_invoice_item(
                InvoiceItemDraft(quantity=1, **fields), self._get_defaults()
            )
        except ValidationError as e:
            e.title = ALERT_TITLE
            raise

    async def _ensure_unique(
        self, store: IRecordStore, name: str, batch_number: str, product_id: int | None = None
    ) -> None:
        existing = await store.select_one(
            "products", {"name": name, "batch_number": batch_number}
        )
        if existing and existing["id"] != product_id:
            raise _invalid(
                "batch_number",
                "A product with this name and batch number already exists",
                batch_number,
            )

    async def create(self, request: CreateProductRequest) -> Product:
        """Insert a new product with its opening stock."""
        item = self.price(
            product_name=request.name,
            category=request.category,
            batch_number=request.batch_number,
            expiry_date=request.expiry_date,
            cost_price=request.cost_price,
            supplier_discount_percent=request.supplier_discount_percent,
            vat_rate=request.vat_rate,
            selling_price=request.selling_price,
            discounted_selling_price=request.discounted_selling_price,
            barcode=request.barcode,
        )
        store = await self._get_store()
        now = datetime.utcnow()
        min_stock = request.min_stock_level
        if min_stock is None:
            min_stock = get_settings().pricing.default_min_stock_level

        async with self._get_stock_lock():
            await self._ensure_unique(store, item.product_name, item.batch_number)
            row = await store.insert(
                "products",
                {
                    "name": item.product_name,
                    "category": item.category,
                    "supplier": request.supplier,
                    "batch_number": item.batch_number,
                    "expiry_date": item.expiry_date,
                    "current_stock": request.current_stock,
                    "min_stock_level": min_stock,
                    **item.pricing_fields(),
                    "barcode": item.barcode,
                    "invoice_number": request.invoice_number,
                    "created_at": now,
                    "updated_at": now,
                },
            )

        product = Product.model_validate(row)
        logger.info(
            "product_created",
            product_id=product.id,
            name=product.name,
            current_stock=product.current_stock,
        )
        await self._after_write(
            ActivityAction.ADD_PRODUCT, f"Added product: {product.name}", request
        )
        return product

    async def update(self, product_id: int, request: UpdateProductRequest) -> Product:
        """
        Apply the fields present in the request.

        Any pricing change re-prices the product from its merged cost,
        discount and VAT. The selling price is recomputed unless one is
        given or the cost inputs are untouched.
        """
        changes = {
            key: value
            for key, value in request.model_dump(
                exclude_unset=True, exclude={"user_id", "user_name"}
            ).items()
            if value is not None or key in _CLEARABLE or key in PRICING_FIELDS
        }
        if not changes:
            raise _invalid("product", "No changes to save")

        store = await self._get_store()

        async with self._get_stock_lock():
            row = await store.select_one("products", {"id": product_id})
            if row is None:
                raise ProductNotFoundError(product_id)
            current = Product.model_validate(row)

            patch = {k: v for k, v in changes.items() if k not in PRICING_FIELDS}
            for key in ("name", "category", "batch_number", "barcode"):
                if key in patch:
                    patch[key] = patch[key].strip()
            if not patch.get("name", current.name):
                raise _invalid("name", "Please fill in product name")

            if PRICING_FIELDS & changes.keys():
                patch.update(self._reprice(current, changes).pricing_fields())

            name = patch.get("name", current.name)
            batch_number = patch.get("batch_number", current.batch_number)
            if (name, batch_number) != (current.name, current.batch_number):
                await self._ensure_unique(store, name, batch_number, product_id)

            patch["updated_at"] = datetime.utcnow()
            await store.update("products", {"id": product_id}, patch)
            row = await store.select_one("products", {"id": product_id})

        product = Product.model_validate(row)
        logger.info("product_updated", product_id=product_id, fields=sorted(changes))
        await self._after_write(
            ActivityAction.UPDATE_PRODUCT, f"Updated product: {product.name}", request
        )
        return product

    def _reprice(self, current: Product, changes: dict[str, Any]) -> InvoiceItem:
        def pick(key: str, fallback: Any) -> Any:
            value = changes.get(key)
            return fallback if value is None else value

        cost_inputs_changed = bool(
            {"cost_price", "supplier_discount_percent", "vat_rate"} & changes.keys()
        )
        if "selling_price" in changes:
            selling_price = changes["selling_price"]
        else:
            selling_price = None if cost_inputs_changed else current.selling_price

        if "discounted_selling_price" in changes:
            discounted = changes["discounted_selling_price"]
        else:
            discounted = current.discounted_selling_price

        return self.price(
            product_name=current.name,
            cost_price=pick("cost_price", current.cost_price),
            supplier_discount_percent=pick(
                "supplier_discount_percent", current.supplier_discount_percent
            ),
            vat_rate=pick("vat_rate", current.vat_rate),
            selling_price=selling_price,
            discounted_selling_price=discounted,
            barcode=current.barcode,
        )

    async def _after_write(
        self, action: str, details: str, request: CreateProductRequest | UpdateProductRequest
    ) -> None:
        bus = self._get_refresh_bus()
        bus.trigger_refresh([RefreshDomain.INVENTORY])
        await ActivityLogger(await self._get_store(), bus).log(
            action,
            details,
            Operator(user_id=request.user_id, user_name=request.user_name),
        )

    def to_response(self, product: Product, created: bool) -> ProductSavedResponse:
        return ProductSavedResponse(
            product=ProductResponse(**product.model_dump(), is_low_stock=product.is_low_stock),
            alert=AlertResponse(
                title=ALERT_TITLE,
                message=(
                    "Product added successfully!" if created else "Product updated successfully!"
                ),
                type="success",
            ),
        )
