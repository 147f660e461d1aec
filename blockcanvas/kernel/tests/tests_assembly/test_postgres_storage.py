"""
Tests for PostgresStorage adapter.

Requires a running Postgres instance; skipped when DATABASE_URL is not set.
"""

import os
import uuid

import asyncpg
import pytest

from blockcanvas.kernel.assembly import LayoutAssembly
from blockcanvas.kernel.postgres_storage import PostgresStorage
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import Position


@pytest.fixture
async def db_pool():
    """Create a connection pool for tests."""
    database_url = os.getenv("DATABASE_URL")
    if not database_url:
        pytest.skip("DATABASE_URL not set")

    pool = await asyncpg.create_pool(database_url)
    yield pool
    await pool.close()


@pytest.fixture
async def storage(db_pool):
    storage = PostgresStorage(db_pool)
    await storage.ensure_schema()
    return storage


class TestPostgresStorage:
    async def test_put_and_get(self, storage):
        canvas_id = str(uuid.uuid4())
        await storage.put(canvas_id, '{"canvasId": "x"}')
        assert await storage.get(canvas_id) == '{"canvasId": "x"}'
        await storage.delete(canvas_id)

    async def test_get_nonexistent(self, storage):
        assert await storage.get(str(uuid.uuid4())) is None

    async def test_put_overwrites(self, storage):
        canvas_id = str(uuid.uuid4())
        await storage.put(canvas_id, "one")
        await storage.put(canvas_id, "two")
        assert await storage.get(canvas_id) == "two"
        await storage.delete(canvas_id)

    async def test_delete(self, storage):
        canvas_id = str(uuid.uuid4())
        await storage.put(canvas_id, "doc")
        await storage.delete(canvas_id)
        assert await storage.get(canvas_id) is None


class TestPostgresAssembly:
    async def test_round_trip(self, storage):
        canvas_id = str(uuid.uuid4())
        assembly = LayoutAssembly(storage, clock=lambda: 7)

        source = InstanceStore(canvas_id)
        source.add("hero", {"heading": "Stored"}, Position(top="5px", left="6px"))
        await assembly.save(source)

        target = InstanceStore(canvas_id)
        await assembly.load_into(target, canvas_id)
        assert target.instances() == source.instances()

        await assembly.delete(canvas_id)
