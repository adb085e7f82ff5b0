"""API tests for point-of-sale endpoints."""

import asyncio

import pytest
from httpx import ASGITransport, AsyncClient

from pharmapos.api.dependencies import get_checkout_sale_use_case, get_record_store
from pharmapos.api.main import app
from pharmapos.application.use_cases import CheckoutSaleUseCase
from pharmapos.core.exceptions import DatabaseError

CART = {
    "items": [{"product_id": 1, "quantity": 2, "unit_price": 140, "price_type": "SELLING"}],
    "payment_method": "cash",
    "sales_person_name": "Jane",
}


@pytest.fixture
def checkout_use_case(mock_store, refresh_bus, sample_product):
    mock_store.select_one.side_effect = lambda table, match: (
        sample_product.model_dump() if match["id"] == 1 else None
    )
    mock_store.insert.side_effect = lambda table, record: {"id": 7, **record}
    mock_store.insert_many.side_effect = lambda table, records: [
        {"id": i + 1, **r} for i, r in enumerate(records)
    ]
    return CheckoutSaleUseCase(
        store=mock_store,
        refresh_bus=refresh_bus,
        stock_lock=asyncio.Lock(),
        minimum_margin_percent=33.0,
    )


@pytest.fixture
async def sales_client(mock_store, checkout_use_case):
    app.dependency_overrides[get_record_store] = lambda: mock_store
    app.dependency_overrides[get_checkout_sale_use_case] = lambda: checkout_use_case
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_record_store, None)
    app.dependency_overrides.pop(get_checkout_sale_use_case, None)


class TestCheckoutAPI:
    async def test_checkout(self, sales_client: AsyncClient):
        response = await sales_client.post("/api/sales/checkout", json=CART)

        assert response.status_code == 201
        data = response.json()
        assert data["sale"]["receipt_number"] == "WSB0001"
        assert data["sale"]["total_amount"] == 280.0
        assert data["sale"]["payment_method"] == "cash"
        assert data["alert"] == {
            "title": "Point of Sale",
            "message": "Sale completed! Receipt #WSB0001",
            "type": "success",
        }

    async def test_empty_cart(self, sales_client: AsyncClient):
        response = await sales_client.post(
            "/api/sales/checkout", json={"items": [], "payment_method": "cash"}
        )

        assert response.status_code == 400
        assert response.json()["alert"]["message"] == "Cart is empty"
        assert response.json()["alert"]["title"] == "Point of Sale"

    async def test_missing_payment_method(self, sales_client: AsyncClient):
        response = await sales_client.post(
            "/api/sales/checkout", json={"items": CART["items"]}
        )

        assert response.status_code == 400
        assert response.json()["alert"]["message"] == "Please select a payment method"

    async def test_insufficient_stock(self, sales_client: AsyncClient):
        body = {**CART, "items": [{"product_id": 1, "quantity": 51, "unit_price": 140}]}

        response = await sales_client.post("/api/sales/checkout", json=body)

        assert response.status_code == 400
        assert response.json()["error_code"] == "INSUFFICIENT_STOCK"

    async def test_rolled_back(self, sales_client: AsyncClient, mock_store):
        mock_store.insert_many.side_effect = DatabaseError(
            "batch insert into sale_items", "database is locked"
        )

        response = await sales_client.post("/api/sales/checkout", json=CART)

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "SALE_ROLLED_BACK"
        assert data["alert"]["message"].startswith(
            "Error processing sale. Changes have been rolled back."
        )

    async def test_unknown_payment_method(self, sales_client: AsyncClient):
        response = await sales_client.post(
            "/api/sales/checkout", json={**CART, "payment_method": "cheque"}
        )
        assert response.status_code == 422


class TestSalesQueries:
    async def test_list(self, sales_client: AsyncClient, mock_store):
        mock_store.select.return_value = [
            {"id": 7, "receipt_number": "WSB0001", "payment_method": "mpesa", "total_amount": 280.0}
        ]
        mock_store.count.return_value = 1

        response = await sales_client.get("/api/sales")

        assert response.status_code == 200
        assert response.json()["sales"][0]["receipt_number"] == "WSB0001"
        assert response.json()["total"] == 1

    async def test_get_missing(self, sales_client: AsyncClient):
        response = await sales_client.get("/api/sales/3")

        assert response.status_code == 404
        assert response.json()["error_code"] == "SALE_NOT_FOUND"
