"""API tests for the standardized error format."""

import pytest
from httpx import ASGITransport, AsyncClient

from pharmapos.api.dependencies import get_record_store
from pharmapos.api.main import app
from pharmapos.api.middleware.error_handler import EXCEPTION_STATUS_MAP
from pharmapos.core.exceptions import PharmaPOSError


@pytest.fixture
async def error_client(mock_store):
    app.dependency_overrides[get_record_store] = lambda: mock_store
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.pop(get_record_store, None)


class TestErrorFormat:
    async def test_request_validation(self, error_client: AsyncClient):
        response = await error_client.post(
            "/api/sales/checkout", json={"items": [{"product_id": "abc"}]}
        )

        assert response.status_code == 422
        data = response.json()
        assert data["error_code"] == "VALIDATION_ERROR"
        assert "items" in data["detail"]
        assert data["alert"]["message"] == "Please fill in all required fields."

    async def test_unknown_route(self, error_client: AsyncClient):
        response = await error_client.get("/api/does-not-exist")

        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"
        assert response.json()["path"] == "/api/does-not-exist"

    async def test_domain_error_has_hint(self, error_client: AsyncClient):
        response = await error_client.get("/api/products/99")

        data = response.json()
        assert data["hint"].startswith("Check the product ID")
        assert "timestamp" in data

    async def test_unexpected_error(self, error_client: AsyncClient, mock_store):
        mock_store.count.side_effect = RuntimeError("boom")

        response = await error_client.get("/api/products")

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "RuntimeError"
        assert data["alert"]["title"] == "PharmaPOS"


class TestRequestLogging:
    async def test_request_id_header(self, error_client: AsyncClient):
        response = await error_client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 8
        assert response.headers["X-Response-Time"].endswith("ms")

    async def test_error_response_carries_request_id(self, error_client: AsyncClient):
        response = await error_client.get("/api/products/99")
        assert "X-Request-ID" in response.headers


def _all_subclasses(cls):
    for sub in cls.__subclasses__():
        yield sub
        yield from _all_subclasses(sub)


class TestStatusMap:
    def test_every_domain_error_maps_to_a_status(self):
        """Every domain error has an explicit status mapping."""
        for cls in _all_subclasses(PharmaPOSError):
            assert any(issubclass(cls, mapped) for mapped in EXCEPTION_STATUS_MAP), cls.__name__
