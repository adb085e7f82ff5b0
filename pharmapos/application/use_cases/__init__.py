"""Application use cases."""

from pharmapos.application.use_cases.checkout_sale import CheckoutResult, CheckoutSaleUseCase
from pharmapos.application.use_cases.commit_credit_note import (
    CommitCreditNoteResult,
    CommitCreditNoteUseCase,
)
from pharmapos.application.use_cases.commit_invoice import (
    CommitInvoiceResult,
    CommitInvoiceUseCase,
)
from pharmapos.application.use_cases.delete_document import DeleteDocumentUseCase
from pharmapos.application.use_cases.import_invoice_csv import ImportInvoiceCSVUseCase
from pharmapos.application.use_cases.manage_product import ManageProductUseCase
from pharmapos.application.use_cases.record_stock_take import (
    RecordStockTakeUseCase,
    StockTakeResult,
)

__all__ = [
    "CommitInvoiceUseCase",
    "CommitInvoiceResult",
    "CommitCreditNoteUseCase",
    "CommitCreditNoteResult",
    "CheckoutSaleUseCase",
    "CheckoutResult",
    "ImportInvoiceCSVUseCase",
    "ManageProductUseCase",
    "RecordStockTakeUseCase",
    "StockTakeResult",
    "DeleteDocumentUseCase",
]
