"""API tests for refresh signals, activity logs and reports."""

from datetime import datetime

import pytest
from httpx import ASGITransport, AsyncClient

from pharmapos.api.dependencies import (
    get_activity_logger,
    get_bus,
    get_record_store,
    get_reporting_service,
)
from pharmapos.api.main import app
from pharmapos.core.interfaces import Range
from pharmapos.core.services import ActivityLogger, ReportingService


@pytest.fixture
async def client(mock_store, refresh_bus):
    app.dependency_overrides[get_bus] = lambda: refresh_bus
    app.dependency_overrides[get_record_store] = lambda: mock_store
    app.dependency_overrides[get_activity_logger] = lambda: ActivityLogger(mock_store, refresh_bus)
    app.dependency_overrides[get_reporting_service] = lambda: ReportingService(mock_store)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    for dependency in (get_bus, get_record_store, get_activity_logger, get_reporting_service):
        app.dependency_overrides.pop(dependency, None)


class TestRefreshAPI:
    async def test_generations_start_at_zero(self, client: AsyncClient):
        response = await client.get("/api/refresh")

        assert response.status_code == 200
        assert set(response.json()["generations"].values()) == {0}

    async def test_trigger_domain(self, client: AsyncClient):
        response = await client.post("/api/refresh", json=["sales"])

        generations = response.json()["generations"]
        assert generations["sales"] == 1
        assert generations["all"] == 1
        assert generations["inventory"] == 0

    async def test_trigger_everything(self, client: AsyncClient):
        response = await client.post("/api/refresh")
        assert set(response.json()["generations"].values()) == {1}

    async def test_unknown_domain(self, client: AsyncClient):
        response = await client.post("/api/refresh", json=["payroll"])
        assert response.status_code == 422


class TestActivityAPI:
    async def test_recent_logs(self, client: AsyncClient, mock_store):
        mock_store.select.return_value = [
            {
                "id": 2,
                "user_name": "Jane",
                "action": "SALE",
                "details": "Sale completed: WSB0001 - KES 280.00",
                "created_at": "2026-10-01T10:00:00",
            }
        ]
        mock_store.count.return_value = 2

        response = await client.get("/api/activity-logs?limit=1")

        data = response.json()
        assert data["logs"][0]["action"] == "SALE"
        assert data["has_more"] is True
        assert mock_store.select.await_args.kwargs["descending"] is True


class TestReportsAPI:
    async def test_profit_report(self, client: AsyncClient, mock_store):
        async def select(table, *args, **kwargs):
            if table == "sale_items":
                return [
                    {
                        "product_id": 1,
                        "quantity": 2,
                        "profit": 40.0,
                        "selling_price_ex_vat": 110.0,
                        "rounding_extra": 0.0,
                        "actual_cost_at_sale": 90.0,
                        "created_at": "2026-10-01T10:00:00",
                    }
                ]
            return [{"id": 1, "cost_price": 100.0, "discounted_cost_price": 90.0}]

        mock_store.select.side_effect = select

        response = await client.get("/api/reports/profit")

        assert response.status_code == 200
        data = response.json()
        assert data["total_revenue"] == 220.0
        assert data["total_profit"] == 40.0
        assert data["discount_driven_profit"] == 26.6
        assert data["base_profit"] == 13.4

    async def test_profit_report_range_filters_in_store(self, client: AsyncClient, mock_store):
        response = await client.get(
            "/api/reports/profit",
            params={"start": "2026-10-01T00:00:00", "end": "2026-11-01T00:00:00"},
        )

        assert response.status_code == 200
        assert response.json()["total_profit"] == 0.0
        table, match = mock_store.select.await_args_list[0].args
        assert table == "sale_items"
        assert match == {"created_at": Range(datetime(2026, 10, 1), datetime(2026, 11, 1))}

    async def test_profit_report_utc_bounds(self, client: AsyncClient, mock_store):
        response = await client.get(
            "/api/reports/profit",
            params={"start": "2026-01-01T00:00:00Z", "end": "2026-01-01T03:00:00+03:00"},
        )

        assert response.status_code == 200
        assert response.json()["start"].startswith("2026-01-01T00:00:00")
        _, match = mock_store.select.await_args_list[0].args
        # Stored timestamps are naive UTC
        assert match["created_at"] == Range(datetime(2026, 1, 1), datetime(2026, 1, 1))
