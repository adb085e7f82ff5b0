"""Request DTOs for API endpoints.

Pydantic v2 models for API request validation.
These are the ONLY contracts between API and use cases.
"""

from datetime import date

from pydantic import BaseModel, Field

from pharmapos.core.entities import PaymentMethod, PricedSaleLine, PriceType


class OperatorFields(BaseModel):
    """Who is performing the operation."""

    user_id: str | None = Field(default=None, description="Operator user ID")
    user_name: str | None = Field(default=None, description="Operator display name")


class ComputePricingRequest(BaseModel):
    """Derive selling price, VAT and margin from a cost price."""

    cost_price: float = Field(..., description="Supplier cost per unit", examples=[100.0])
    supplier_discount_percent: float = Field(
        default=0.0, ge=0, lt=100, description="Supplier discount off the cost"
    )
    vat_rate: float = Field(default=0.0, ge=0, le=100, description="VAT percentage")


class SaleLineRequest(BaseModel):
    """Price a cart line against the current product row."""

    product_id: int = Field(..., description="Product ID")
    quantity: int = Field(..., gt=0, description="Units to sell")
    unit_price: float = Field(..., gt=0, description="VAT-inclusive price per unit")
    price_type: PriceType = Field(
        default=PriceType.SELLING,
        description="Approved tier the price starts from",
    )


class RescaleSaleLineRequest(BaseModel):
    """Change the quantity of an already priced line."""

    line: PricedSaleLine
    quantity: int = Field(..., gt=0, description="New quantity")


class InvoiceItemRequest(BaseModel):
    """An invoice line as entered by the operator."""

    product_name: str = Field(..., min_length=1, description="Product name")
    category: str | None = Field(default=None, description="Category (default General)")
    batch_number: str = Field(default="", description="Supplier batch number")
    expiry_date: date | None = Field(
        default=None, description="Expiry date (default one year from today)"
    )
    quantity: int = Field(..., description="Units received")
    cost_price: float = Field(..., description="Supplier cost per unit before discount")
    supplier_discount_percent: float = Field(default=0.0, description="Supplier discount %")
    vat_rate: float | None = Field(default=None, description="VAT % (default from settings)")
    selling_price: float | None = Field(
        default=None, description="Manual selling price; must respect the minimum margin"
    )
    discounted_selling_price: float | None = Field(
        default=None, description="Approved promotional price, at most the selling price"
    )
    barcode: str | None = Field(default=None, description="Barcode (synthesized if blank)")


class PreviewInvoiceItemsRequest(BaseModel):
    """Price invoice lines without saving anything."""

    items: list[InvoiceItemRequest] = Field(..., min_length=1)


class CreateInvoiceRequest(OperatorFields):
    """Commit a supplier invoice and receive its stock."""

    invoice_number: str = Field(..., description="Supplier invoice number", examples=["INV-1001"])
    supplier: str = Field(..., description="Supplier name", examples=["Dawa Ltd"])
    invoice_date: date | None = Field(default=None, description="Invoice date (default today)")
    notes: str | None = Field(default=None, description="Free-text notes")
    items: list[InvoiceItemRequest] = Field(default_factory=list, description="Invoice lines")


class CreditNoteItemRequest(BaseModel):
    """A product line returned to the supplier."""

    product_id: int = Field(..., description="Product ID")
    product_name: str = Field(..., description="Product name")
    batch_number: str = Field(default="", description="Batch number")
    quantity: int = Field(..., description="Units returned")
    cost_price: float = Field(..., ge=0, description="Credit per unit")
    reason: str = Field(default="", description="Reason for the return")


class CreateCreditNoteRequest(OperatorFields):
    """Commit a return to supplier."""

    invoice_number: str = Field(..., description="Invoice the goods came in on")
    supplier: str = Field(..., description="Supplier name")
    return_date: date | None = Field(default=None, description="Return date (default today)")
    items: list[CreditNoteItemRequest] = Field(default_factory=list)


class CheckoutRequest(BaseModel):
    """Commit a sale."""

    items: list[SaleLineRequest] = Field(default_factory=list, description="Cart lines")
    payment_method: PaymentMethod | None = Field(default=None, description="How it was paid")
    customer_name: str | None = Field(default=None, description="Customer name")
    sales_person_id: str | None = Field(default=None, description="Cashier user ID")
    sales_person_name: str | None = Field(default=None, description="Cashier display name")


class CreateProductRequest(OperatorFields):
    """Add a product by hand, outside any invoice."""

    name: str = Field(..., min_length=1, description="Product name")
    category: str | None = Field(default=None, description="Category (default General)")
    supplier: str | None = Field(default=None, description="Supplier name")
    batch_number: str = Field(default="", description="Batch number")
    expiry_date: date | None = Field(
        default=None, description="Expiry date (default one year from today)"
    )
    current_stock: int = Field(default=0, ge=0, description="Opening stock")
    min_stock_level: int | None = Field(default=None, ge=0, description="Reorder level")
    cost_price: float = Field(..., gt=0, description="Supplier cost per unit before discount")
    supplier_discount_percent: float = Field(default=0.0, description="Supplier discount %")
    vat_rate: float | None = Field(default=None, description="VAT % (default from settings)")
    selling_price: float | None = Field(
        default=None, description="Manual selling price; must respect the minimum margin"
    )
    discounted_selling_price: float | None = Field(
        default=None, description="Approved promotional price, at most the selling price"
    )
    barcode: str | None = Field(default=None, description="Barcode (synthesized if blank)")
    invoice_number: str | None = Field(default=None, description="Invoice it came in on")


class UpdateProductRequest(OperatorFields):
    """
    Edit product details. Omitted fields are left unchanged.

    Stock is not editable here; counted corrections go through a stock take.
    """

    name: str | None = Field(default=None, min_length=1)
    category: str | None = None
    supplier: str | None = None
    batch_number: str | None = None
    expiry_date: date | None = None
    min_stock_level: int | None = Field(default=None, ge=0)
    cost_price: float | None = Field(default=None, gt=0)
    supplier_discount_percent: float | None = None
    vat_rate: float | None = None
    selling_price: float | None = None
    discounted_selling_price: float | None = None
    barcode: str | None = None
    invoice_number: str | None = None


class StockTakeRequest(OperatorFields):
    """Record a physical count for one product."""

    actual_stock: int = Field(..., ge=0, description="Units counted on the shelf")
    reason: str | None = Field(default=None, description="Why the count differs")
