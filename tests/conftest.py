"""Pytest configuration and fixtures."""

import os
import tempfile
from collections.abc import Generator
from datetime import date
from unittest.mock import AsyncMock

import pytest

# Settings are read at import time by the app factory; keep data out of the repo
os.environ.setdefault("STORAGE_DATA_DIR", tempfile.mkdtemp(prefix="pharmapos-test-"))

from pharmapos.application.services import reset_services  # noqa: E402
from pharmapos.config import reset_settings  # noqa: E402
from pharmapos.core.entities import Product  # noqa: E402
from pharmapos.core.interfaces import IRecordStore  # noqa: E402
from pharmapos.core.services import RefreshBus  # noqa: E402


@pytest.fixture(autouse=True)
def _reset_singletons() -> Generator[None, None, None]:
    yield
    reset_services()


@pytest.fixture
def isolated_settings(tmp_path, monkeypatch) -> Generator[None, None, None]:
    """Point storage at a fresh temp directory for the duration of a test."""
    monkeypatch.setenv("STORAGE_DATA_DIR", str(tmp_path))
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def mock_store() -> AsyncMock:
    """Record store double returning empty results."""
    store = AsyncMock(spec=IRecordStore)
    store.select.return_value = []
    store.select_one.return_value = None
    store.count.return_value = 0
    store.update.return_value = 1
    store.delete.return_value = 1
    return store


@pytest.fixture
def refresh_bus() -> RefreshBus:
    return RefreshBus()


@pytest.fixture
def sample_product() -> Product:
    """Paracetamol bought at 100 less 10%, selling at 120 + 16% VAT."""
    return Product(
        id=1,
        name="Paracetamol 500mg",
        category="Analgesics",
        supplier="Dawa Ltd",
        batch_number="B001",
        expiry_date=date(2027, 12, 31),
        current_stock=50,
        min_stock_level=10,
        cost_price=100.0,
        discounted_cost_price=90.0,
        selling_price=120.0,
        discounted_selling_price=110.0,
        supplier_discount_percent=10.0,
        vat_rate=16.0,
        barcode="BC-PARA0001",
    )


@pytest.fixture
def zero_rated_product() -> Product:
    """VAT-exempt product costing 50."""
    return Product(
        id=2,
        name="ORS Sachet",
        category="General",
        batch_number="ORS1",
        current_stock=5,
        cost_price=50.0,
        selling_price=70.0,
        vat_rate=0.0,
        barcode="BC-ORS00001",
    )
