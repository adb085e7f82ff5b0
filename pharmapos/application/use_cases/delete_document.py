"""
Delete Document Use Case.

Removes an invoice or a credit note together with its lines. Stock that
the document moved is left as it is; only the paper trail goes.
"""

from dataclasses import dataclass

from pharmapos.application.dto.responses import AlertResponse, DeletedResponse
from pharmapos.config import get_logger
from pharmapos.core.entities import Operator
from pharmapos.core.exceptions import CreditNoteNotFoundError, InvoiceNotFoundError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import ActivityAction, ActivityLogger, RefreshBus, RefreshDomain

logger = get_logger(__name__)


@dataclass(frozen=True)
class _DocumentKind:
    table: str
    number_field: str
    label: str
    action: str
    domain: RefreshDomain
    title: str
    event: str


INVOICE = _DocumentKind(
    table="invoices",
    number_field="invoice_number",
    label="invoice",
    action=ActivityAction.INVOICE_DELETED,
    domain=RefreshDomain.INVOICES,
    title="Invoice Management",
    event="invoice_deleted",
)

CREDIT_NOTE = _DocumentKind(
    table="credit_notes",
    number_field="credit_note_number",
    label="credit note",
    action=ActivityAction.CREDIT_NOTE_DELETED,
    domain=RefreshDomain.CREDIT_NOTES,
    title="Credit Notes",
    event="credit_note_deleted",
)


class DeleteDocumentUseCase:
    """Delete invoices and credit notes without reversing inventory."""

    def __init__(
        self,
        store: IRecordStore | None = None,
        refresh_bus: RefreshBus | None = None,
    ):
        self._store = store
        self._refresh_bus = refresh_bus

    async def _get_store(self) -> IRecordStore:
        if self._store is None:
            from pharmapos.application.services import get_store

            self._store = await get_store()
        return self._store

    def _get_refresh_bus(self) -> RefreshBus:
        if self._refresh_bus is None:
            from pharmapos.application.services import get_refresh_bus

            self._refresh_bus = get_refresh_bus()
        return self._refresh_bus

    async def delete_invoice(self, invoice_id: int, operator: Operator | None = None) -> int:
        row = await self._delete(INVOICE, invoice_id, operator)
        if row is None:
            raise InvoiceNotFoundError(invoice_id)
        return invoice_id

    async def delete_credit_note(
        self, credit_note_id: int, operator: Operator | None = None
    ) -> int:
        row = await self._delete(CREDIT_NOTE, credit_note_id, operator)
        if row is None:
            raise CreditNoteNotFoundError(credit_note_id)
        return credit_note_id

    async def _delete(
        self, kind: _DocumentKind, document_id: int, operator: Operator | None
    ) -> dict | None:
        store = await self._get_store()
        row = await store.select_one(kind.table, {"id": document_id})
        if row is None:
            return None

        # Lines cascade with the header
        await store.delete(kind.table, {"id": document_id})
        logger.info(
            kind.event,
            id=document_id,
            number=row.get(kind.number_field),
            stock_reversed=False,
        )

        bus = self._get_refresh_bus()
        bus.trigger_refresh([kind.domain])
        await ActivityLogger(store, bus).log(
            kind.action,
            f"Deleted {kind.label} {row.get(kind.number_field) or document_id} - "
            f"Supplier: {row.get('supplier') or 'Unknown'}",
            operator,
        )
        return row

    def to_response(self, document_id: int, credit_note: bool = False) -> DeletedResponse:
        kind = CREDIT_NOTE if credit_note else INVOICE
        return DeletedResponse(
            id=document_id,
            alert=AlertResponse(
                title=kind.title,
                message=f"{kind.label.capitalize()} deleted successfully",
                type="success",
            ),
        )
