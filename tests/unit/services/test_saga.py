"""Tests for the commit state machine and compensating rollback."""

import pytest

from pharmapos.core.exceptions import InvalidTransitionError
from pharmapos.core.services.saga import ALLOWED_TRANSITIONS, CommitState, Saga


def _undo(calls: list[str], name: str, fail: bool = False):
    async def undo() -> None:
        calls.append(name)
        if fail:
            raise RuntimeError(f"{name} failed")

    return undo


class TestTransitions:
    def test_happy_path(self):
        saga = Saga("test")
        for state in (
            CommitState.HEADER_CREATED,
            CommitState.PRODUCT_UPSERTED,
            CommitState.ITEM_STAGED,
            CommitState.PRODUCT_UPSERTED,
            CommitState.ITEM_STAGED,
            CommitState.ITEMS_PERSISTED,
            CommitState.COMMITTED,
        ):
            saga.transition(state)
        assert saga.state == CommitState.COMMITTED
        assert saga.is_terminal

    def test_cannot_skip_header(self):
        saga = Saga("test")
        with pytest.raises(InvalidTransitionError):
            saga.transition(CommitState.PRODUCT_UPSERTED)
        assert saga.state == CommitState.STARTED

    def test_cannot_roll_back_before_header(self):
        assert not Saga("test").can_transition(CommitState.ROLLING_BACK)

    def test_committed_is_terminal(self):
        assert ALLOWED_TRANSITIONS[CommitState.COMMITTED] == frozenset()
        assert ALLOWED_TRANSITIONS[CommitState.ROLLED_BACK] == frozenset()

    @pytest.mark.parametrize(
        "state",
        [
            CommitState.HEADER_CREATED,
            CommitState.PRODUCT_UPSERTED,
            CommitState.ITEM_STAGED,
            CommitState.ITEMS_PERSISTED,
        ],
    )
    def test_rollback_reachable_after_header(self, state):
        assert CommitState.ROLLING_BACK in ALLOWED_TRANSITIONS[state]


class TestRecord:
    def test_record_advances_state(self):
        saga = Saga("test")
        step = saga.record("create_header", None, CommitState.HEADER_CREATED, invoice_id=7)
        assert saga.state == CommitState.HEADER_CREATED
        assert step.details == {"invoice_id": 7}
        assert saga.steps == [step]

    async def test_run_step_records_undo_from_result(self):
        saga = Saga("test")
        calls: list[str] = []

        async def action() -> int:
            return 42

        result = await saga.run_step(
            "create_header",
            action,
            undo=lambda header_id: _undo(calls, f"delete {header_id}"),
            state=CommitState.HEADER_CREATED,
        )
        assert result == 42

        await saga.rollback()
        assert calls == ["delete 42"]

    async def test_run_step_records_nothing_on_failure(self):
        saga = Saga("test")

        async def action() -> int:
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError):
            await saga.run_step("create_header", action, state=CommitState.HEADER_CREATED)
        assert saga.steps == []
        assert saga.state == CommitState.STARTED


class TestRollback:
    async def test_undoes_in_reverse_order(self):
        saga = Saga("test")
        calls: list[str] = []
        saga.record("header", _undo(calls, "header"), CommitState.HEADER_CREATED)
        saga.record("product_a", _undo(calls, "product_a"), CommitState.PRODUCT_UPSERTED)
        saga.transition(CommitState.ITEM_STAGED)
        saga.record("product_b", _undo(calls, "product_b"), CommitState.PRODUCT_UPSERTED)

        failures = await saga.rollback()

        assert calls == ["product_b", "product_a", "header"]
        assert failures == []
        assert saga.state == CommitState.ROLLED_BACK

    async def test_failing_undo_does_not_stop_the_rest(self):
        saga = Saga("test")
        calls: list[str] = []
        saga.record("header", _undo(calls, "header"), CommitState.HEADER_CREATED)
        saga.record(
            "product", _undo(calls, "product", fail=True), CommitState.PRODUCT_UPSERTED
        )

        failures = await saga.rollback()

        assert calls == ["product", "header"]
        assert failures == ["product: product failed"]
        assert saga.rollback_failures == failures
        assert saga.state == CommitState.ROLLED_BACK

    async def test_nothing_to_undo_before_header(self):
        saga = Saga("test")
        assert await saga.rollback() == []
        assert saga.state == CommitState.STARTED

    async def test_steps_without_undo_are_skipped(self):
        saga = Saga("test")
        calls: list[str] = []
        saga.record("header", _undo(calls, "header"), CommitState.HEADER_CREATED)
        saga.record("note", None)
        await saga.rollback()
        assert calls == ["header"]
