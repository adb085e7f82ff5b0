"""API tests for pricing calculator endpoints."""

import pytest
from httpx import ASGITransport, AsyncClient

from pharmapos.api.dependencies import get_record_store
from pharmapos.api.main import app


@pytest.fixture
async def pricing_client(mock_store, sample_product):
    mock_store.select_one.side_effect = lambda table, match: (
        sample_product.model_dump() if match["id"] == 1 else None
    )
    app.dependency_overrides[get_record_store] = lambda: mock_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_record_store, None)


class TestComputePricing:
    async def test_compute(self, pricing_client: AsyncClient):
        response = await pricing_client.post(
            "/api/pricing/compute",
            json={"cost_price": 100, "supplier_discount_percent": 10, "vat_rate": 16},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["discounted_cost_price"] == 90.0
        assert data["selling_price"] == 120.0
        assert data["vat"] == 19.2
        assert data["computed"] is True

    async def test_zero_cost_not_computed(self, pricing_client: AsyncClient):
        response = await pricing_client.post("/api/pricing/compute", json={"cost_price": 0})

        assert response.status_code == 200
        assert response.json()["computed"] is False
        assert response.json()["selling_price"] == 0.0

    async def test_discount_out_of_range(self, pricing_client: AsyncClient):
        response = await pricing_client.post(
            "/api/pricing/compute", json={"cost_price": 100, "supplier_discount_percent": 100}
        )
        assert response.status_code == 422


class TestSaleLine:
    async def test_price_line(self, pricing_client: AsyncClient):
        response = await pricing_client.post(
            "/api/pricing/sale-line",
            json={"product_id": 1, "quantity": 2, "unit_price": 140, "price_type": "SELLING"},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["line"]["total_price"] == 280.0
        assert data["line"]["selling_price_ex_vat"] == 120.69
        assert data["minimum_selling_price"] == 119.7

    async def test_below_floor(self, pricing_client: AsyncClient):
        response = await pricing_client.post(
            "/api/pricing/sale-line",
            json={"product_id": 1, "quantity": 1, "unit_price": 125},
        )

        assert response.status_code == 400
        data = response.json()
        assert data["error_code"] == "PRICE_BELOW_FLOOR"
        assert data["alert"]["title"] == "Point of Sale"
        assert "cannot be less than minimum selling price" in data["alert"]["message"]

    async def test_unknown_product(self, pricing_client: AsyncClient):
        response = await pricing_client.post(
            "/api/pricing/sale-line",
            json={"product_id": 99, "quantity": 1, "unit_price": 140},
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "PRODUCT_NOT_FOUND"
        assert response.json()["alert"]["type"] == "error"

    async def test_rescale(self, pricing_client: AsyncClient):
        priced = await pricing_client.post(
            "/api/pricing/sale-line",
            json={"product_id": 1, "quantity": 2, "unit_price": 140},
        )

        response = await pricing_client.post(
            "/api/pricing/sale-line/rescale",
            json={"line": priced.json()["line"], "quantity": 3},
        )

        assert response.status_code == 200
        assert response.json()["quantity"] == 3
        assert response.json()["total_price"] == 420.0

    async def test_rescale_beyond_stock(self, pricing_client: AsyncClient):
        priced = await pricing_client.post(
            "/api/pricing/sale-line",
            json={"product_id": 1, "quantity": 2, "unit_price": 140},
        )

        response = await pricing_client.post(
            "/api/pricing/sale-line/rescale",
            json={"line": priced.json()["line"], "quantity": 51},
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INSUFFICIENT_STOCK"
