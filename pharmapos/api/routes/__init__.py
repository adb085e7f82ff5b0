"""API routes."""

from pharmapos.api.routes.activity import router as activity_router
from pharmapos.api.routes.credit_notes import router as credit_notes_router
from pharmapos.api.routes.health import router as health_router
from pharmapos.api.routes.invoices import router as invoices_router
from pharmapos.api.routes.pricing import router as pricing_router
from pharmapos.api.routes.products import router as products_router
from pharmapos.api.routes.refresh import router as refresh_router
from pharmapos.api.routes.reports import router as reports_router
from pharmapos.api.routes.sales import router as sales_router

__all__ = [
    "activity_router",
    "credit_notes_router",
    "health_router",
    "invoices_router",
    "pricing_router",
    "products_router",
    "refresh_router",
    "reports_router",
    "sales_router",
]
