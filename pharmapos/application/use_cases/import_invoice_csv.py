"""
Import Invoice CSV Use Case.

Parses a supplier CSV (or a list of hand-entered lines) into priced
invoice items for review. Nothing is written; the operator commits the
previewed lines through CommitInvoiceUseCase.
"""

from pathlib import Path

from pharmapos.application.dto.requests import PreviewInvoiceItemsRequest
from pharmapos.application.dto.responses import (
    AlertResponse,
    InvoicePreviewResponse,
    SkippedRowResponse,
)
from pharmapos.config import get_logger, get_settings
from pharmapos.core.exceptions import (
    FileTooLargeError,
    UnsupportedFileTypeError,
    ValidationError,
)
from pharmapos.core.services import (
    InvoiceItemDraft,
    ItemDefaults,
    ParsedInvoiceCSV,
    build_invoice_item,
    parse_invoice_csv,
)

logger = get_logger(__name__)

ALERT_TITLE = "Invoice Management"


class ImportInvoiceCSVUseCase:
    """Preview invoice lines from a CSV upload or manual entry."""

    def __init__(self, defaults: ItemDefaults | None = None):
        self._defaults = defaults

    def _get_defaults(self) -> ItemDefaults:
        if self._defaults is None:
            from pharmapos.application.services import get_item_defaults

            self._defaults = get_item_defaults()
        return self._defaults

    def validate_upload(self, filename: str, size: int) -> None:
        api = get_settings().api
        extension = Path(filename).suffix.lower()
        if extension not in api.allowed_extensions:
            raise UnsupportedFileTypeError(filename, extension, api.allowed_extensions)
        if size > api.max_upload_size:
            raise FileTooLargeError(filename, size, api.max_upload_size)

    def execute(self, filename: str, content: bytes) -> ParsedInvoiceCSV:
        """Parse an uploaded CSV file."""
        logger.info("invoice_csv_import_started", filename=filename, size=len(content))
        self.validate_upload(filename, len(content))
        return parse_invoice_csv(content, self._get_defaults())

    def preview(self, request: PreviewInvoiceItemsRequest) -> ParsedInvoiceCSV:
        """Price manually entered lines."""
        defaults = self._get_defaults()
        result = ParsedInvoiceCSV()
        for line in request.items:
            try:
                result.items.append(
                    build_invoice_item(InvoiceItemDraft(**line.model_dump()), defaults)
                )
            except ValidationError as e:
                e.title = ALERT_TITLE
                raise
        return result

    def to_response(self, result: ParsedInvoiceCSV, from_csv: bool = True) -> InvoicePreviewResponse:
        """Convert result to API response."""
        metadata = []
        if result.invoice_number:
            metadata.append(f"Invoice #{result.invoice_number}")
        if result.supplier:
            metadata.append(f"Supplier: {result.supplier}")
        if result.invoice_date:
            metadata.append(f"Date: {result.invoice_date.isoformat()}")

        if metadata:
            message = f"Imported {len(result.items)} items. Auto-filled: {', '.join(metadata)}"
        elif from_csv:
            message = f"Imported {len(result.items)} items from CSV"
        else:
            message = f"Priced {len(result.items)} items"
        if result.skipped_rows:
            message += f" ({len(result.skipped_rows)} rows skipped)"

        return InvoicePreviewResponse(
            items=result.items,
            total_amount=result.total_amount,
            invoice_number=result.invoice_number,
            supplier=result.supplier,
            invoice_date=result.invoice_date,
            skipped_rows=[
                SkippedRowResponse(row=s.row, reason=s.reason) for s in result.skipped_rows
            ],
            alert=AlertResponse(
                title=ALERT_TITLE,
                message=message,
                type="warning" if result.skipped_rows else "success",
            ),
        )
