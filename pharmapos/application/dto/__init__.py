"""Data Transfer Objects for API layer.

Request DTOs: Validate and parse incoming API requests.
Response DTOs: Structure and serialize API responses.

These are the ONLY contracts between API handlers and use cases.
"""

from pharmapos.application.dto.requests import (
    CheckoutRequest,
    ComputePricingRequest,
    CreateCreditNoteRequest,
    CreateInvoiceRequest,
    CreateProductRequest,
    CreditNoteItemRequest,
    InvoiceItemRequest,
    PreviewInvoiceItemsRequest,
    RescaleSaleLineRequest,
    SaleLineRequest,
    StockTakeRequest,
    UpdateProductRequest,
)
from pharmapos.application.dto.responses import (
    ActivityLogListResponse,
    AlertResponse,
    CheckoutResponse,
    CommitCreditNoteResponse,
    CommitInvoiceResponse,
    CreditNoteListResponse,
    DeletedResponse,
    ErrorResponse,
    HealthResponse,
    InvoiceListResponse,
    InvoicePreviewResponse,
    PricingResponse,
    ProductListResponse,
    ProductResponse,
    ProductSavedResponse,
    ProfitReportResponse,
    RefreshResponse,
    SaleLineResponse,
    SaleListResponse,
    StockTakeResponse,
)

__all__ = [
    # Requests
    "CheckoutRequest",
    "ComputePricingRequest",
    "CreateCreditNoteRequest",
    "CreateInvoiceRequest",
    "CreateProductRequest",
    "CreditNoteItemRequest",
    "InvoiceItemRequest",
    "PreviewInvoiceItemsRequest",
    "RescaleSaleLineRequest",
    "SaleLineRequest",
    "StockTakeRequest",
    "UpdateProductRequest",
    # Responses
    "ActivityLogListResponse",
    "AlertResponse",
    "CheckoutResponse",
    "CommitCreditNoteResponse",
    "CommitInvoiceResponse",
    "CreditNoteListResponse",
    "DeletedResponse",
    "ErrorResponse",
    "HealthResponse",
    "InvoiceListResponse",
    "InvoicePreviewResponse",
    "PricingResponse",
    "ProductListResponse",
    "ProductResponse",
    "ProductSavedResponse",
    "ProfitReportResponse",
    "RefreshResponse",
    "SaleLineResponse",
    "SaleListResponse",
    "StockTakeResponse",
]
