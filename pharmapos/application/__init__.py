"""
Application layer - use cases, DTOs, and service factories.

Use cases coordinate core services and the record store; API handlers
call use cases and never touch core services directly for writes.
"""

from pharmapos.application.services import (
    get_item_defaults,
    get_refresh_bus,
    get_stock_lock,
    get_store,
    reset_services,
)

__all__ = [
    "get_item_defaults",
    "get_refresh_bus",
    "get_stock_lock",
    "get_store",
    "reset_services",
]
