"""Core domain services."""

from pharmapos.core.services.activity_logger import ActivityAction, ActivityLogger
from pharmapos.core.services.cart_pricing import (
    build_sale_line,
    cart_total,
    rescale_sale_line,
)
from pharmapos.core.services.error_messages import get_error_message
from pharmapos.core.services.invoice_csv import (
    InvoiceItemDraft,
    ItemDefaults,
    ParsedInvoiceCSV,
    build_invoice_item,
    parse_invoice_csv,
)
from pharmapos.core.services.pricing import (
    MARKUP_MULTIPLIER,
    PricingResult,
    ProfitBreakdown,
    compute_pricing,
    format_kes,
    gross_profit_margin,
    minimum_selling_price,
    profit_breakdown,
    round_up_to_5_or_10,
    validate_discounted_price,
)
from pharmapos.core.services.refresh import GenerationCache, RefreshBus, RefreshDomain
from pharmapos.core.services.reporting import ReportingService
from pharmapos.core.services.saga import CommitState, Saga

__all__ = [
    # Pricing
    "MARKUP_MULTIPLIER",
    "PricingResult",
    "ProfitBreakdown",
    "compute_pricing",
    "format_kes",
    "gross_profit_margin",
    "minimum_selling_price",
    "profit_breakdown",
    "round_up_to_5_or_10",
    "validate_discounted_price",
    # Cart
    "build_sale_line",
    "cart_total",
    "rescale_sale_line",
    # Invoice lines
    "InvoiceItemDraft",
    "ItemDefaults",
    "ParsedInvoiceCSV",
    "build_invoice_item",
    "parse_invoice_csv",
    # Commit
    "CommitState",
    "Saga",
    # Refresh
    "GenerationCache",
    "RefreshBus",
    "RefreshDomain",
    # Activity and reports
    "ActivityAction",
    "ActivityLogger",
    "ReportingService",
    "get_error_message",
]
