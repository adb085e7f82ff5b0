"""
Data refresh signalling.

Every data domain carries a generation counter that only ever increases.
Committing workflows bump the domains they touched; readers either subscribe
for a callback or cache results keyed on the generation they were loaded at.
"""

from collections.abc import Awaitable, Callable, Iterable
from enum import Enum
from typing import Any, Generic, TypeVar

from pharmapos.config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")

RefreshListener = Callable[["RefreshDomain", int], None]


class RefreshDomain(str, Enum):
    SALES = "sales"
    INVENTORY = "inventory"
    INVOICES = "invoices"
    CREDIT_NOTES = "credit_notes"
    ACTIVITY = "activity"
    ALL = "all"


class RefreshBus:
    """Per-domain generation counters with subscriber notification."""

    def __init__(self):
        self._generations: dict[RefreshDomain, int] = {d: 0 for d in RefreshDomain}
        self._listeners: dict[RefreshDomain, list[RefreshListener]] = {
            d: [] for d in RefreshDomain
        }

    def generation(self, domain: RefreshDomain | str) -> int:
        return self._generations[RefreshDomain(domain)]

    def generations(self) -> dict[str, int]:
        return {d.value: g for d, g in self._generations.items()}

    def subscribe(
        self, domain: RefreshDomain | str, listener: RefreshListener
    ) -> Callable[[], None]:
        """Register a listener; returns a function that unsubscribes it."""
        key = RefreshDomain(domain)
        self._listeners[key].append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners[key]:
                self._listeners[key].remove(listener)

        return unsubscribe

    def trigger_refresh(
        self, domains: RefreshDomain | str | Iterable[RefreshDomain | str]
    ) -> dict[str, int]:
        """
        Bump the named domains plus ALL, then notify their listeners.

        Naming ALL bumps every domain. A listener that raises is logged
        and skipped. Returns the new generations.
        """
        if isinstance(domains, (str, RefreshDomain)):
            domains = [domains]
        targets = {RefreshDomain(d) for d in domains}
        if RefreshDomain.ALL in targets:
            targets = set(RefreshDomain)
        targets.add(RefreshDomain.ALL)

        for domain in RefreshDomain:
            if domain in targets:
                self._generations[domain] += 1

        for domain in RefreshDomain:
            if domain not in targets:
                continue
            for listener in list(self._listeners[domain]):
                try:
                    listener(domain, self._generations[domain])
                except Exception as e:
                    logger.warning(
                        "refresh_listener_failed",
                        domain=domain.value,
                        error=str(e),
                    )

        logger.debug(
            "refresh_triggered",
            domains=sorted(d.value for d in targets),
        )
        return self.generations()


class GenerationCache(Generic[T]):
    """
    Caches one loader result per domain generation.

    The loader only re-runs after the domain has been refreshed.
    """

    def __init__(
        self,
        bus: RefreshBus,
        domain: RefreshDomain | str,
        loader: Callable[[], Awaitable[T]],
    ):
        self._bus = bus
        self._domain = RefreshDomain(domain)
        self._loader = loader
        self._generation: int | None = None
        self._value: Any = None

    @property
    def is_stale(self) -> bool:
        return self._generation != self._bus.generation(self._domain)

    async def get(self) -> T:
        generation = self._bus.generation(self._domain)
        if self._generation != generation:
            self._value = await self._loader()
            self._generation = generation
        return self._value

    def invalidate(self) -> None:
        self._generation = None
