"""API tests for deleting invoices and credit notes."""

import pytest
from httpx import ASGITransport, AsyncClient

from pharmapos.api.dependencies import get_delete_document_use_case
from pharmapos.api.main import app
from pharmapos.application.use_cases import DeleteDocumentUseCase


@pytest.fixture
async def delete_client(mock_store, refresh_bus):
    mock_store.insert.side_effect = lambda table, record: {"id": 1, **record}
    use_case = DeleteDocumentUseCase(store=mock_store, refresh_bus=refresh_bus)
    app.dependency_overrides[get_delete_document_use_case] = lambda: use_case
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_delete_document_use_case, None)


class TestDeleteDocumentsAPI:
    async def test_delete_invoice(self, delete_client: AsyncClient, mock_store):
        mock_store.select_one.return_value = {
            "id": 5,
            "invoice_number": "INV-1001",
            "supplier": "Dawa Ltd",
        }

        response = await delete_client.delete("/api/invoices/5?user_name=Jane")

        assert response.status_code == 200
        assert response.json() == {
            "id": 5,
            "alert": {
                "title": "Invoice Management",
                "message": "Invoice deleted successfully",
                "type": "success",
            },
        }
        entry = next(
            c.args[1] for c in mock_store.insert.call_args_list if c.args[0] == "activity_logs"
        )
        assert entry["user_name"] == "Jane"

    async def test_delete_missing_invoice(self, delete_client: AsyncClient):
        response = await delete_client.delete("/api/invoices/9")

        assert response.status_code == 404
        assert response.json()["error_code"] == "INVOICE_NOT_FOUND"

    async def test_delete_credit_note(self, delete_client: AsyncClient, mock_store):
        mock_store.select_one.return_value = {
            "id": 3,
            "credit_note_number": "CN-1760000000000",
            "supplier": "Dawa Ltd",
        }

        response = await delete_client.delete("/api/credit-notes/3")

        assert response.status_code == 200
        assert response.json()["alert"]["message"] == "Credit note deleted successfully"
        mock_store.delete.assert_awaited_once_with("credit_notes", {"id": 3})

    async def test_delete_missing_credit_note(self, delete_client: AsyncClient):
        response = await delete_client.delete("/api/credit-notes/9")

        assert response.status_code == 404
        assert response.json()["alert"]["title"] == "Credit Notes"
