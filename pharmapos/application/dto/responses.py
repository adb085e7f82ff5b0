"""Response DTOs for API endpoints.

Pydantic v2 models for API response serialization.
These are the ONLY contracts between use cases and API layer.
"""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from pharmapos.core.entities import (
    ActivityLog,
    CreditNote,
    Invoice,
    InvoiceItem,
    PricedSaleLine,
    Sale,
    StockTake,
)


class AlertResponse(BaseModel):
    """Operator-facing outcome of a terminal operation."""

    title: str = Field(..., description="Alert title, usually the screen name")
    message: str = Field(..., description="Human-readable outcome")
    type: Literal["success", "error", "warning", "info"] = "success"


class PaginatedResponse(BaseModel):
    """Base for paginated responses."""

    total: int
    limit: int
    offset: int
    has_more: bool


# --- Pricing ---


class PricingResponse(BaseModel):
    discounted_cost_price: float
    selling_price_before_vat: float
    selling_price: float
    vat: float
    gross_profit_margin: float
    computed: bool = Field(..., description="False when the cost price was not positive")


class SaleLineResponse(BaseModel):
    line: PricedSaleLine
    minimum_selling_price: float = Field(..., description="Ex-VAT floor for overrides")


# --- Products ---


class ProductResponse(BaseModel):
    id: int
    name: str
    category: str
    supplier: str | None = None
    batch_number: str
    expiry_date: date | None = None
    current_stock: int
    min_stock_level: int
    cost_price: float
    discounted_cost_price: float | None = None
    selling_price: float
    discounted_selling_price: float | None = None
    supplier_discount_percent: float
    vat_rate: float
    has_vat: bool
    is_low_stock: bool
    barcode: str
    invoice_number: str | None = None
    updated_at: datetime | None = None


class ProductListResponse(PaginatedResponse):
    products: list[ProductResponse]


class ProductSavedResponse(BaseModel):
    product: ProductResponse
    alert: AlertResponse


class StockTakeResponse(BaseModel):
    stock_take: StockTake
    product: ProductResponse
    alert: AlertResponse


# --- Invoices ---


class SkippedRowResponse(BaseModel):
    row: int
    reason: str


class InvoicePreviewResponse(BaseModel):
    """Priced lines ready to be committed. Nothing is saved."""

    items: list[InvoiceItem]
    total_amount: float
    invoice_number: str | None = None
    supplier: str | None = None
    invoice_date: date | None = None
    skipped_rows: list[SkippedRowResponse] = Field(default_factory=list)
    alert: AlertResponse


class CommitInvoiceResponse(BaseModel):
    invoice: Invoice
    products_created: int
    products_updated: int
    alert: AlertResponse


class InvoiceListResponse(PaginatedResponse):
    invoices: list[Invoice]


# --- Credit notes ---


class CommitCreditNoteResponse(BaseModel):
    credit_note: CreditNote
    alert: AlertResponse


class CreditNoteListResponse(PaginatedResponse):
    credit_notes: list[CreditNote]


# --- Sales ---


class CheckoutResponse(BaseModel):
    sale: Sale
    alert: AlertResponse


class SaleListResponse(PaginatedResponse):
    sales: list[Sale]


# --- Activity and reports ---


class ActivityLogListResponse(PaginatedResponse):
    logs: list[ActivityLog]


class ProfitReportResponse(BaseModel):
    total_revenue: float
    total_profit: float
    discount_driven_profit: float
    rounding_driven_profit: float
    base_profit: float
    average_margin: float
    start: datetime | None = None
    end: datetime | None = None


class RefreshResponse(BaseModel):
    generations: dict[str, int]


class DeletedResponse(BaseModel):
    """Outcome of deleting a document. Stock is never reversed."""

    id: int
    alert: AlertResponse


# --- Health and errors ---


class ComponentHealthResponse(BaseModel):
    status: str
    latency_ms: float | None = None
    schema_version: str | None = None
    error: str | None = None


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    environment: str
    uptime_seconds: float
    database: ComponentHealthResponse | None = None


class ErrorResponse(BaseModel):
    """Standardized error response DTO.

    Every error response includes:
    - error_code: machine-readable code (e.g. INVOICE_ROLLED_BACK)
    - message: human-readable description
    - hint: suggested recovery action
    - path: request path that triggered the error
    - alert: what the operator should be shown
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error description")
    hint: str | None = Field(default=None, description="Suggested recovery action")
    detail: str | None = Field(default=None, description="Additional details")
    path: str | None = Field(default=None, description="Request path")
    timestamp: datetime = Field(default_factory=datetime.now)
    alert: AlertResponse | None = None
