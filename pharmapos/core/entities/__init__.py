"""Core domain entities."""

from pharmapos.core.entities.activity import ActivityLog, Operator
from pharmapos.core.entities.credit_note import CreditNote, CreditNoteItem
from pharmapos.core.entities.invoice import Invoice, InvoiceItem
from pharmapos.core.entities.product import Product
from pharmapos.core.entities.sale import (
    PaymentMethod,
    PricedSaleLine,
    PriceType,
    Sale,
)
from pharmapos.core.entities.stock_take import StockTake

__all__ = [
    # Inventory
    "Product",
    # Invoice entities
    "Invoice",
    "InvoiceItem",
    # Credit note entities
    "CreditNote",
    "CreditNoteItem",
    # Sale entities
    "PricedSaleLine",
    "PriceType",
    "PaymentMethod",
    "Sale",
    # Stock takes
    "StockTake",
    # Activity
    "ActivityLog",
    "Operator",
]
