"""
blockcanvas Assembly -- Persistence boundary tests

Verifies:
  - Save then load reproduces the store exactly (ids, types, properties, positions)
  - The persisted document uses the wire keys instances / canvasId / savedAt
  - Load replaces the store wholesale; failures leave it untouched
  - Timeouts and storage errors surface as PersistenceError, with no retry
  - Saves on one canvas are serialized, and a superseded queued save is dropped
"""

import asyncio
import itertools
import json

import pytest

from blockcanvas.kernel.assembly import LayoutAssembly, MemoryStorage, serialize_layout
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import Layout, NotFound, PersistenceError, Position


# ============================================================================
# Fixtures
# ============================================================================


class SlowStorage(MemoryStorage):
    def __init__(self, delay: float):
        super().__init__()
        self.delay = delay

    async def put(self, canvas_id, document):
        await asyncio.sleep(self.delay)
        await super().put(canvas_id, document)

    async def get(self, canvas_id):
        await asyncio.sleep(self.delay)
        return await super().get(canvas_id)


class FailingStorage(MemoryStorage):
    def __init__(self):
        super().__init__()
        self.attempts = 0

    async def put(self, canvas_id, document):
        self.attempts += 1
        raise ConnectionError("storage unavailable")


class GatedStorage(MemoryStorage):
    """put() blocks until the gate opens."""

    def __init__(self):
        super().__init__()
        self.gate = asyncio.Event()

    async def put(self, canvas_id, document):
        await self.gate.wait()
        await super().put(canvas_id, document)


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def assembly(storage):
    return LayoutAssembly(storage, clock=lambda: 1_700_000_000_000)


def populated(registry, canvas_id="home"):
    store = InstanceStore(canvas_id)
    store.add("header", registry.get("header").defaults())
    store.add("hero", {"heading": "Hi"}, Position(top="120px", left="40px"))
    store.add("grid", {"columns": 4}, Position(width="50%"))
    return store


# ============================================================================
# Round trip
# ============================================================================


class TestRoundTrip:
    async def test_save_then_load_reproduces_store(self, assembly, registry):
        source = populated(registry)
        result = await assembly.save(source)
        assert result.saved
        assert result.saved_at == 1_700_000_000_000

        target = InstanceStore("home")
        layout = await assembly.load_into(target, "home")

        assert target.instances() == source.instances()
        assert layout.saved_at == 1_700_000_000_000

    async def test_wire_document(self, assembly, storage, registry):
        await assembly.save(populated(registry))
        doc = json.loads(storage.documents["home"])

        assert set(doc) == {"instances", "canvasId", "savedAt"}
        assert doc["canvasId"] == "home"
        assert doc["savedAt"] == 1_700_000_000_000
        header, hero, grid = doc["instances"]
        assert set(header) == {"id", "type", "properties", "position"}
        assert header["position"] == {"top": "auto", "left": "auto", "width": "auto", "height": "auto"}
        assert hero["position"] == {"top": "120px", "left": "40px", "width": "auto", "height": "auto"}
        assert grid["properties"] == {"columns": 4}

    async def test_numeric_positions_read_as_pixels(self, assembly, storage):
        storage.documents["legacy"] = json.dumps({
            "canvasId": "legacy",
            "savedAt": 5,
            "instances": [
                {"id": "a", "type": "hero", "properties": {}, "position": {"top": 10, "left": "auto"}},
            ],
        })
        layout = await assembly.load("legacy")
        assert layout.instances[0].position == Position(top="10px")

    async def test_save_layout_object(self, assembly, storage):
        await assembly.save(Layout(canvas_id="empty"))
        assert json.loads(storage.documents["empty"])["instances"] == []

    async def test_serialization_is_stable(self, registry):
        a = populated(registry).to_layout(1)
        b = populated(registry).to_layout(1)
        assert serialize_layout(a) == serialize_layout(b)


# ============================================================================
# Load
# ============================================================================


class TestLoad:
    async def test_missing_layout(self, assembly):
        with pytest.raises(NotFound):
            await assembly.load("nowhere")

    async def test_load_replaces_store(self, assembly, registry):
        await assembly.save(populated(registry))
        target = InstanceStore("home")
        target.add("footer")
        target.add("footer")
        target.add("footer")
        target.add("footer")

        await assembly.load_into(target, "home")

        assert [i.type for i in target.instances()] == ["header", "hero", "grid"]

    async def test_malformed_document_leaves_store_untouched(self, assembly, storage):
        storage.documents["bad"] = "{not json"
        target = InstanceStore("bad")
        target.add("hero")

        with pytest.raises(PersistenceError):
            await assembly.load_into(target, "bad")
        assert target.ids() == ["block-1"]

    async def test_duplicate_ids_rejected(self, assembly, storage):
        storage.documents["dup"] = json.dumps({
            "canvasId": "dup",
            "savedAt": 0,
            "instances": [{"id": "a", "type": "hero"}, {"id": "a", "type": "grid"}],
        })
        target = InstanceStore("dup")
        with pytest.raises(PersistenceError):
            await assembly.load_into(target, "dup")
        assert len(target) == 0


# ============================================================================
# Failures
# ============================================================================


class TestFailures:
    async def test_save_timeout(self, registry):
        assembly = LayoutAssembly(SlowStorage(delay=1.0), timeout=0.01)
        store = populated(registry)
        before = store.instances()

        with pytest.raises(PersistenceError) as exc:
            await assembly.save(store)

        assert exc.value.timed_out
        assert store.instances() == before

    async def test_load_timeout_leaves_store(self, registry):
        storage = SlowStorage(delay=1.0)
        storage.documents["home"] = "{}"
        assembly = LayoutAssembly(storage, timeout=0.01)
        target = InstanceStore("home")
        target.add("hero")

        with pytest.raises(PersistenceError):
            await assembly.load_into(target, "home")
        assert target.ids() == ["block-1"]

    async def test_storage_error_not_retried(self, registry):
        storage = FailingStorage()
        assembly = LayoutAssembly(storage)

        with pytest.raises(PersistenceError) as exc:
            await assembly.save(populated(registry))

        assert storage.attempts == 1
        assert not exc.value.timed_out
        assert isinstance(exc.value.__cause__, ConnectionError)

    async def test_delete(self, assembly, storage, registry):
        await assembly.save(populated(registry))
        await assembly.delete("home")
        with pytest.raises(NotFound):
            await assembly.load("home")


# ============================================================================
# Concurrency
# ============================================================================


class TestConcurrency:
    async def test_last_submit_wins(self, registry):
        storage = GatedStorage()
        assembly = LayoutAssembly(storage, clock=itertools.count(1000).__next__)
        store = InstanceStore("home")
        store.add("header")

        first = asyncio.create_task(assembly.save(store))
        await asyncio.sleep(0)
        store.add("text")
        queued = asyncio.create_task(assembly.save(store))
        await asyncio.sleep(0)
        store.add("footer")
        latest = asyncio.create_task(assembly.save(store))
        await asyncio.sleep(0)

        storage.gate.set()
        a, b, c = await asyncio.gather(first, queued, latest)

        assert a.saved and not a.superseded
        assert b.superseded and not b.saved
        assert c.saved
        assert storage.writes == 2

        doc = json.loads(storage.documents["home"])
        assert [i["type"] for i in doc["instances"]] == ["header", "text", "footer"]
        assert doc["savedAt"] == c.saved_at

    async def test_sequential_saves_all_write(self, assembly, storage, registry):
        store = populated(registry)
        await assembly.save(store)
        await assembly.save(store)
        assert storage.writes == 2

    async def test_canvases_do_not_block_each_other(self, registry):
        storage = MemoryStorage()
        assembly = LayoutAssembly(storage)
        results = await asyncio.gather(
            assembly.save(populated(registry, "one")),
            assembly.save(populated(registry, "two")),
        )
        assert all(r.saved for r in results)
        assert set(storage.documents) == {"one", "two"}
