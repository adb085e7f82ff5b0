"""Credit note (return to supplier) endpoints."""

from fastapi import APIRouter, Depends, Query, status

from pharmapos.api.dependencies import (
    get_commit_credit_note_use_case,
    get_delete_document_use_case,
    get_record_store,
)
from pharmapos.application.dto.requests import CreateCreditNoteRequest
from pharmapos.application.dto.responses import (
    CommitCreditNoteResponse,
    CreditNoteListResponse,
    DeletedResponse,
    ErrorResponse,
)
from pharmapos.application.use_cases import CommitCreditNoteUseCase, DeleteDocumentUseCase
from pharmapos.core.entities import CreditNote, Operator
from pharmapos.core.exceptions import CreditNoteNotFoundError
from pharmapos.core.interfaces import IRecordStore

router = APIRouter(prefix="/api/credit-notes", tags=["credit-notes"])


@router.post(
    "",
    response_model=CommitCreditNoteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def create_credit_note(
    request: CreateCreditNoteRequest,
    use_case: CommitCreditNoteUseCase = Depends(get_commit_credit_note_use_case),
) -> CommitCreditNoteResponse:
    """Record a return to supplier and take the goods out of stock."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=CreditNoteListResponse)
async def list_credit_notes(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IRecordStore = Depends(get_record_store),
) -> CreditNoteListResponse:
    """List credit notes, newest first."""
    total = await store.count("credit_notes")
    rows = await store.select(
        "credit_notes", order_by="created_at", descending=True, limit=limit, offset=offset
    )
    return CreditNoteListResponse(
        credit_notes=[CreditNote.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(rows) < total,
    )


@router.get(
    "/{credit_note_id}",
    response_model=CreditNote,
    responses={404: {"model": ErrorResponse}},
)
async def get_credit_note(
    credit_note_id: int,
    store: IRecordStore = Depends(get_record_store),
) -> CreditNote:
    """Get a credit note with its lines."""
    row = await store.select_one("credit_notes", {"id": credit_note_id})
    if row is None:
        raise CreditNoteNotFoundError(credit_note_id)
    items = await store.select("credit_note_items", {"credit_note_id": credit_note_id})
    return CreditNote.model_validate({**row, "items": items})


@router.delete(
    "/{credit_note_id}",
    response_model=DeletedResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_credit_note(
    credit_note_id: int,
    user_id: str | None = None,
    user_name: str | None = None,
    use_case: DeleteDocumentUseCase = Depends(get_delete_document_use_case),
) -> DeletedResponse:
    """Delete a credit note and its lines. Returned stock is NOT restored."""
    await use_case.delete_credit_note(
        credit_note_id, Operator(user_id=user_id, user_name=user_name)
    )
    return use_case.to_response(credit_note_id, credit_note=True)
