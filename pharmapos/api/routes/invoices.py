"""
Supplier invoice endpoints.

Lines are previewed (typed in or imported from CSV) and then committed in
one request. Previews never write.
"""

from fastapi import APIRouter, Depends, File, Query, UploadFile, status

from pharmapos.api.dependencies import (
    get_commit_invoice_use_case,
    get_delete_document_use_case,
    get_import_invoice_csv_use_case,
    get_record_store,
)
from pharmapos.application.dto.requests import CreateInvoiceRequest, PreviewInvoiceItemsRequest
from pharmapos.application.dto.responses import (
    CommitInvoiceResponse,
    DeletedResponse,
    ErrorResponse,
    InvoiceListResponse,
    InvoicePreviewResponse,
)
from pharmapos.application.use_cases import (
    CommitInvoiceUseCase,
    DeleteDocumentUseCase,
    ImportInvoiceCSVUseCase,
)
from pharmapos.core.entities import Invoice, Operator
from pharmapos.core.exceptions import InvoiceNotFoundError
from pharmapos.core.interfaces import IRecordStore

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.post(
    "/items/preview",
    response_model=InvoicePreviewResponse,
    responses={400: {"model": ErrorResponse}},
)
async def preview_items(
    request: PreviewInvoiceItemsRequest,
    use_case: ImportInvoiceCSVUseCase = Depends(get_import_invoice_csv_use_case),
) -> InvoicePreviewResponse:
    """Price manually entered invoice lines."""
    result = use_case.preview(request)
    return use_case.to_response(result, from_csv=False)


@router.post(
    "/import-csv",
    response_model=InvoicePreviewResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Unreadable CSV or wrong file type"},
        413: {"model": ErrorResponse, "description": "File too large"},
    },
)
async def import_csv(
    file: UploadFile = File(...),
    use_case: ImportInvoiceCSVUseCase = Depends(get_import_invoice_csv_use_case),
) -> InvoicePreviewResponse:
    """
    Import invoice lines from a supplier CSV.

    Header fields (invoice number, supplier, date) are read from the first
    data row when present.
    """
    content = await file.read()
    result = use_case.execute(file.filename or "", content)
    return use_case.to_response(result)


@router.post(
    "",
    response_model=CommitInvoiceResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Invalid header or line"},
        500: {"model": ErrorResponse, "description": "Commit failed and was rolled back"},
    },
)
async def create_invoice(
    request: CreateInvoiceRequest,
    use_case: CommitInvoiceUseCase = Depends(get_commit_invoice_use_case),
) -> CommitInvoiceResponse:
    """Commit an invoice, receive its stock and update product pricing."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=InvoiceListResponse)
async def list_invoices(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    supplier: str | None = None,
    store: IRecordStore = Depends(get_record_store),
) -> InvoiceListResponse:
    """List invoice headers, newest first."""
    match = {"supplier": supplier} if supplier else None
    total = await store.count("invoices", match)
    rows = await store.select(
        "invoices", match, order_by="created_at", descending=True, limit=limit, offset=offset
    )
    return InvoiceListResponse(
        invoices=[Invoice.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(rows) < total,
    )


@router.get(
    "/{invoice_id}",
    response_model=Invoice,
    responses={404: {"model": ErrorResponse}},
)
async def get_invoice(
    invoice_id: int,
    store: IRecordStore = Depends(get_record_store),
) -> Invoice:
    """Get an invoice with its lines."""
    row = await store.select_one("invoices", {"id": invoice_id})
    if row is None:
        raise InvoiceNotFoundError(invoice_id)
    items = await store.select("invoice_items", {"invoice_id": invoice_id})
    return Invoice.model_validate({**row, "items": items})


@router.delete(
    "/{invoice_id}",
    response_model=DeletedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_invoice(
    invoice_id: int,
    user_id: str | None = None,
    user_name: str | None = None,
    use_case: DeleteDocumentUseCase = Depends(get_delete_document_use_case),
) -> DeletedResponse:
    """Delete an invoice and its lines. Received stock is NOT reversed."""
    await use_case.delete_invoice(invoice_id, Operator(user_id=user_id, user_name=user_name))
    return use_case.to_response(invoice_id)
