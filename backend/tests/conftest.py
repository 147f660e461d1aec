"""
Pytest configuration and fixtures for blockcanvas API tests.

Every test gets a fresh in-memory layout store and the static generator;
no database or generator service is needed.
"""

from __future__ import annotations

import httpx
import pytest
import pytest_asyncio

from backend import config
from backend.main import app
from backend.services import kernel
from blockcanvas.kernel.assembly import MemoryStorage


@pytest.fixture(autouse=True)
def memory_storage(monkeypatch):
    """Fresh in-memory storage per test."""
    monkeypatch.setattr(config.settings, "GENERATOR_URL", "")
    storage = MemoryStorage()
    kernel.configure(storage)
    yield storage
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def async_client():
    """Async HTTP client against the ASGI app."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client
