"""Tests for refresh signalling."""

from pharmapos.core.services.refresh import GenerationCache, RefreshBus, RefreshDomain


class TestRefreshBus:
    def test_starts_at_zero(self):
        bus = RefreshBus()
        assert all(g == 0 for g in bus.generations().values())

    def test_bumps_named_domain_and_all(self):
        bus = RefreshBus()
        generations = bus.trigger_refresh([RefreshDomain.INVENTORY, RefreshDomain.INVOICES])

        assert generations["inventory"] == 1
        assert generations["invoices"] == 1
        assert generations["all"] == 1
        assert generations["sales"] == 0

    def test_all_bumps_every_domain(self):
        bus = RefreshBus()
        bus.trigger_refresh(RefreshDomain.ALL)
        assert all(g == 1 for g in bus.generations().values())

    def test_accepts_string_domain(self):
        bus = RefreshBus()
        bus.trigger_refresh("sales")
        assert bus.generation(RefreshDomain.SALES) == 1

    def test_generations_only_increase(self):
        bus = RefreshBus()
        seen = []
        for _ in range(3):
            bus.trigger_refresh(RefreshDomain.SALES)
            seen.append(bus.generation("sales"))
        assert seen == [1, 2, 3]

    def test_listeners_notified(self):
        bus = RefreshBus()
        events = []
        bus.subscribe(RefreshDomain.INVENTORY, lambda d, g: events.append((d, g)))
        bus.subscribe(RefreshDomain.ALL, lambda d, g: events.append((d, g)))

        bus.trigger_refresh(RefreshDomain.INVENTORY)

        assert (RefreshDomain.INVENTORY, 1) in events
        assert (RefreshDomain.ALL, 1) in events

    def test_unsubscribe(self):
        bus = RefreshBus()
        events = []
        unsubscribe = bus.subscribe("sales", lambda d, g: events.append(g))
        unsubscribe()
        bus.trigger_refresh("sales")
        assert events == []

    def test_failing_listener_does_not_block_others(self):
        bus = RefreshBus()
        events = []

        def broken(domain, generation):
            raise RuntimeError("listener broke")

        bus.subscribe("sales", broken)
        bus.subscribe("sales", lambda d, g: events.append(g))

        bus.trigger_refresh("sales")
        assert events == [1]


class TestGenerationCache:
    async def test_reloads_only_after_refresh(self):
        bus = RefreshBus()
        loads = []

        async def loader():
            loads.append(1)
            return len(loads)

        cache = GenerationCache(bus, RefreshDomain.INVENTORY, loader)

        assert await cache.get() == 1
        assert await cache.get() == 1
        assert not cache.is_stale

        bus.trigger_refresh(RefreshDomain.INVENTORY)
        assert cache.is_stale
        assert await cache.get() == 2

    async def test_unrelated_domain_does_not_invalidate(self):
        bus = RefreshBus()

        async def loader():
            return "rows"

        cache = GenerationCache(bus, RefreshDomain.INVENTORY, loader)
        await cache.get()
        bus.trigger_refresh(RefreshDomain.SALES)
        assert not cache.is_stale

    async def test_invalidate(self):
        bus = RefreshBus()
        calls = []

        async def loader():
            calls.append(1)
            return None

        cache = GenerationCache(bus, "sales", loader)
        await cache.get()
        cache.invalidate()
        await cache.get()
        assert len(calls) == 2
