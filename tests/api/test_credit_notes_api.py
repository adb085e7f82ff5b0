"""API tests for credit note endpoints."""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from pharmapos.api.dependencies import get_commit_credit_note_use_case, get_record_store
from pharmapos.api.main import app
from pharmapos.application.use_cases import CommitCreditNoteUseCase

BODY = {
    "invoice_number": "INV-1001",
    "supplier": "Dawa Ltd",
    "items": [
        {
            "product_id": 1,
            "product_name": "ORS Sachet",
            "quantity": 2,
            "cost_price": 50,
            "reason": "Damaged",
        }
    ],
}


@pytest.fixture
async def credit_notes_client(mock_store, refresh_bus):
    mock_store.insert.side_effect = lambda table, record: {"id": 3, **record}
    mock_store.select_one.return_value = {"id": 1, "current_stock": 5}
    use_case = CommitCreditNoteUseCase(
        store=mock_store, refresh_bus=refresh_bus, stock_lock=asyncio.Lock()
    )
    app.dependency_overrides[get_record_store] = lambda: mock_store
    app.dependency_overrides[get_commit_credit_note_use_case] = lambda: use_case
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_record_store, None)
    app.dependency_overrides.pop(get_commit_credit_note_use_case, None)


class TestCreditNotesAPI:
    async def test_create(self, credit_notes_client: AsyncClient):
        response = await credit_notes_client.post("/api/credit-notes", json=BODY)

        assert response.status_code == 201
        data = response.json()
        assert data["credit_note"]["total_amount"] == 100.0
        assert data["credit_note"]["credit_note_number"].startswith("CN-")
        assert data["alert"]["message"] == "Credit note saved successfully!"

    async def test_return_exceeds_stock(self, credit_notes_client: AsyncClient):
        body = {**BODY, "items": [{**BODY["items"][0], "quantity": 6}]}

        response = await credit_notes_client.post("/api/credit-notes", json=body)

        assert response.status_code == 400
        assert response.json()["alert"] == {
            "title": "Credit Notes",
            "message": "Insufficient stock for ORS Sachet. Available: 5, Returning: 6",
            "type": "error",
        }

    async def test_reason_required(self, credit_notes_client: AsyncClient):
        body = {**BODY, "items": [{**BODY["items"][0], "reason": ""}]}

        response = await credit_notes_client.post("/api/credit-notes", json=body)

        assert response.status_code == 400
        assert response.json()["alert"]["title"] == "Credit Notes"

    async def test_get_with_items(self, credit_notes_client: AsyncClient, mock_store):
        mock_store.select_one.return_value = {
            "id": 3,
            "credit_note_number": "CN-1760000000000",
            "invoice_number": "INV-1001",
            "supplier": "Dawa Ltd",
            "return_date": "2026-10-01",
            "total_amount": 100.0,
            "reason": "Damaged",
        }
        mock_store.select.return_value = [
            {
                "id": 1,
                "credit_note_id": 3,
                "product_id": 1,
                "product_name": "ORS Sachet",
                "quantity": 2,
                "cost_price": 50.0,
                "total_credit": 100.0,
                "reason": "Damaged",
            }
        ]

        response = await credit_notes_client.get("/api/credit-notes/3")

        assert response.status_code == 200
        assert response.json()["items"][0]["total_credit"] == 100.0

    async def test_get_missing(self, credit_notes_client: AsyncClient, mock_store):
        mock_store.select_one.return_value = None

        response = await credit_notes_client.get("/api/credit-notes/9")

        assert response.status_code == 404
        assert response.json()["error_code"] == "CREDIT_NOTE_NOT_FOUND"
