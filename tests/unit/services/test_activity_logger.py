"""Tests for the activity log writer."""

from pharmapos.core.entities import Operator
from pharmapos.core.exceptions import DatabaseError
from pharmapos.core.services.activity_logger import ActivityAction, ActivityLogger


class TestActivityLogger:
    async def test_writes_entry(self, mock_store, refresh_bus):
        mock_store.insert.return_value = {"id": 9}
        activity = ActivityLogger(mock_store, refresh_bus)

        entry = await activity.log(
            ActivityAction.SALE,
            "Sale completed: WSB0001 - KES 140.00",
            Operator(user_id="u1", user_name="Jane"),
        )

        assert entry.id == 9
        table, record = mock_store.insert.call_args[0]
        assert table == "activity_logs"
        assert record["action"] == "SALE"
        assert record["user_name"] == "Jane"
        assert record["details"] == "Sale completed: WSB0001 - KES 140.00"
        assert refresh_bus.generation("activity") == 1

    async def test_anonymous_operator(self, mock_store):
        mock_store.insert.return_value = {"id": 1}
        entry = await ActivityLogger(mock_store).log(ActivityAction.SALE, "x")
        assert entry.user_id is None

    async def test_store_failure_is_swallowed(self, mock_store, refresh_bus):
        mock_store.insert.side_effect = DatabaseError("insert into activity_logs", "disk I/O error")
        activity = ActivityLogger(mock_store, refresh_bus)

        assert await activity.log(ActivityAction.INVOICE_CREATED, "x") is None
        assert refresh_bus.generation("activity") == 0

    async def test_recent(self, mock_store):
        mock_store.select.return_value = [
            {"id": 2, "action": "SALE", "details": "b", "created_at": "2026-10-02T00:00:00"},
            {"id": 1, "action": "SALE", "details": "a", "created_at": "2026-10-01T00:00:00"},
        ]
        logs = await ActivityLogger(mock_store).recent(limit=2)

        assert [entry.id for entry in logs] == [2, 1]
        kwargs = mock_store.select.call_args.kwargs
        assert kwargs["order_by"] == "created_at"
        assert kwargs["descending"] is True
        assert kwargs["limit"] == 2

    async def test_total_recounted_after_new_entry(self, mock_store, refresh_bus):
        mock_store.count.return_value = 4
        mock_store.insert.return_value = {"id": 5}
        activity = ActivityLogger(mock_store, refresh_bus)

        assert await activity.total() == 4
        assert await activity.total() == 4
        assert mock_store.count.await_count == 1

        mock_store.count.return_value = 5
        await activity.log(ActivityAction.SALE, "Sale completed: WSB0005 - KES 70.00")

        assert await activity.total() == 5
        assert mock_store.count.await_count == 2

    async def test_total_without_bus_always_counts(self, mock_store):
        mock_store.count.return_value = 3
        activity = ActivityLogger(mock_store)

        await activity.total()
        await activity.total()
        assert mock_store.count.await_count == 2
