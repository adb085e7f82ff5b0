"""
Commit state machine with compensating rollback.

A multi-step commit (invoice, sale) runs as a saga: every completed step
records the undo action that reverses it. On failure the recorded undo
actions run in reverse order. Each undo runs on its own; a failing undo is
logged and collected, never raised, so the remaining undos still run.

State machine:
    STARTED -> HEADER_CREATED -> (PRODUCT_UPSERTED -> ITEM_STAGED)*
            -> ITEMS_PERSISTED -> COMMITTED
    any state after HEADER_CREATED -> ROLLING_BACK -> ROLLED_BACK
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypeVar

from pharmapos.config import get_logger
from pharmapos.core.exceptions import InvalidTransitionError

logger = get_logger(__name__)

T = TypeVar("T")

UndoAction = Callable[[], Awaitable[Any]]


class CommitState(str, Enum):
    """Where a commit currently is."""

    STARTED = "STARTED"
    HEADER_CREATED = "HEADER_CREATED"
    PRODUCT_UPSERTED = "PRODUCT_UPSERTED"
    ITEM_STAGED = "ITEM_STAGED"
    ITEMS_PERSISTED = "ITEMS_PERSISTED"
    COMMITTED = "COMMITTED"
    ROLLING_BACK = "ROLLING_BACK"
    ROLLED_BACK = "ROLLED_BACK"


ALLOWED_TRANSITIONS: dict[CommitState, frozenset[CommitState]] = {
    CommitState.STARTED: frozenset({CommitState.HEADER_CREATED}),
    CommitState.HEADER_CREATED: frozenset(
        {CommitState.PRODUCT_UPSERTED, CommitState.ROLLING_BACK}
    ),
    CommitState.PRODUCT_UPSERTED: frozenset(
        {CommitState.ITEM_STAGED, CommitState.ROLLING_BACK}
    ),
    CommitState.ITEM_STAGED: frozenset(
        {
            CommitState.PRODUCT_UPSERTED,
            CommitState.ITEMS_PERSISTED,
            CommitState.ROLLING_BACK,
        }
    ),
    CommitState.ITEMS_PERSISTED: frozenset(
        {CommitState.COMMITTED, CommitState.ROLLING_BACK}
    ),
    CommitState.COMMITTED: frozenset(),
    CommitState.ROLLING_BACK: frozenset({CommitState.ROLLED_BACK}),
    CommitState.ROLLED_BACK: frozenset(),
}


@dataclass
class CompletedStep:
    """A step that changed state, with the action that reverses it."""

    name: str
    undo: UndoAction | None = None
    details: dict[str, Any] = field(default_factory=dict)


class Saga:
    """Tracks commit state and the undo log for one commit."""

    def __init__(self, name: str, **context: Any):
        self.name = name
        self.state = CommitState.STARTED
        self.steps: list[CompletedStep] = []
        self.rollback_failures: list[str] = []
        self._log = logger.bind(saga=name, **context)

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self.state]

    def can_transition(self, target: CommitState) -> bool:
        return target in ALLOWED_TRANSITIONS[self.state]

    def transition(self, target: CommitState) -> None:
        """Move to target state or raise InvalidTransitionError."""
        if not self.can_transition(target):
            raise InvalidTransitionError(self.state.value, target.value)
        self._log.debug("saga_transition", from_state=self.state.value, to_state=target.value)
        self.state = target

    def record(
        self,
        name: str,
        undo: UndoAction | None = None,
        state: CommitState | None = None,
        **details: Any,
    ) -> CompletedStep:
        """Record a completed step and optionally advance the state."""
        if state is not None:
            self.transition(state)
        step = CompletedStep(name=name, undo=undo, details=details)
        self.steps.append(step)
        return step

    async def run_step(
        self,
        name: str,
        action: Callable[[], Awaitable[T]],
        undo: Callable[[T], UndoAction] | None = None,
        state: CommitState | None = None,
        **details: Any,
    ) -> T:
        """
        Await an action and record it as completed.

        undo receives the action's result and returns the compensating
        action. Nothing is recorded if the action raises.
        """
        result = await action()
        self.record(name, undo(result) if undo else None, state, **details)
        return result

    async def rollback(self) -> list[str]:
        """
        Run recorded undo actions newest first.

        Returns a description of every undo that failed. Before the header
        exists there is nothing to undo and the saga stays STARTED.
        """
        if self.state == CommitState.STARTED:
            return []

        self.transition(CommitState.ROLLING_BACK)
        self._log.warning("saga_rollback_started", steps=len(self.steps))

        for step in reversed(self.steps):
            if step.undo is None:
                continue
            try:
                await step.undo()
            except Exception as e:
                self._log.error(
                    "rollback_step_failed",
                    step=step.name,
                    error=str(e),
                    **step.details,
                )
                self.rollback_failures.append(f"{step.name}: {e}")

        self.transition(CommitState.ROLLED_BACK)
        self._log.info(
            "saga_rolled_back",
            steps=len(self.steps),
            failures=len(self.rollback_failures),
        )
        return list(self.rollback_failures)
