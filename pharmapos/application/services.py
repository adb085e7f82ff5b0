"""
Service factory functions for dependency injection.

Wires infrastructure implementations to core services. Use cases and API
dependencies import from here.
"""

import asyncio
from typing import TYPE_CHECKING

from pharmapos.config import get_settings
from pharmapos.core.services import ActivityLogger, ItemDefaults, RefreshBus

if TYPE_CHECKING:
    from pharmapos.core.interfaces import IRecordStore


# Singleton service instances
_refresh_bus: RefreshBus | None = None
_stock_lock: asyncio.Lock | None = None
_activity: ActivityLogger | None = None


def get_refresh_bus() -> RefreshBus:
    """Process-wide refresh bus."""
    global _refresh_bus
    if _refresh_bus is None:
        _refresh_bus = RefreshBus()
    return _refresh_bus


def get_stock_lock() -> asyncio.Lock:
    """
    Lock serializing stock-mutating workflows within this process.

    Invoice, credit note and sale commits all hold it for their whole
    read-modify-write sequence. Writers in other processes are not covered.
    """
    global _stock_lock
    if _stock_lock is None:
        _stock_lock = asyncio.Lock()
    return _stock_lock


async def get_store() -> "IRecordStore":
    # Lazy import infrastructure to avoid circular imports
    from pharmapos.infrastructure.storage.sqlite import get_record_store

    return await get_record_store()


async def get_activity() -> ActivityLogger:
    """Process-wide activity logger sharing the refresh bus."""
    global _activity
    if _activity is None:
        _activity = ActivityLogger(await get_store(), get_refresh_bus())
    return _activity


def get_item_defaults() -> ItemDefaults:
    """Invoice line defaults from pricing settings."""
    pricing = get_settings().pricing
    return ItemDefaults(
        vat_rate=pricing.default_vat_rate,
        minimum_margin_percent=pricing.minimum_margin_percent,
        default_expiry_days=pricing.default_expiry_days,
    )


def reset_services() -> None:
    """Reset all singleton services (for testing)."""
    global _refresh_bus, _stock_lock, _activity
    _refresh_bus = None
    _stock_lock = None
    _activity = None
