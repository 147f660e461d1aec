"""
blockcanvas Kernel — Assembly Layer

Sits between the pure kernel (store, compiler) and the outside world
(layout storage). Coordinates loading and saving a canvas's Layout document.

Operations: load, load_into, save, delete

This is where IO happens. Everything it calls into is synchronous and pure.

Saves on one canvas are serialized by a per-canvas lock. Policy is
last-submit-wins: a save still waiting for the lock when a newer save is
submitted is dropped without writing. Every storage call is bounded by a
timeout; a timeout raises PersistenceError and is not retried.
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import InvalidLayout, Layout, NotFound, PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 10.0


def now_ms() -> int:
    """Milliseconds since epoch. The default `savedAt` clock."""
    return int(time.time() * 1000)


# ---------------------------------------------------------------------------
# Storage protocol
# ---------------------------------------------------------------------------


class LayoutStorage:
    """
    Abstract storage interface.
    Implement with Postgres for production, or in-memory for tests.
    """

    async def get(self, canvas_id: str) -> str | None:
        """Fetch the serialized layout for a canvas. Returns None if not found."""
        raise NotImplementedError

    async def put(self, canvas_id: str, document: str) -> None:
        """Write the serialized layout for a canvas, replacing any previous one."""
        raise NotImplementedError

    async def delete(self, canvas_id: str) -> None:
        """Delete a canvas's layout. Unknown ids are a no-op."""
        raise NotImplementedError


class MemoryStorage(LayoutStorage):
    """In-memory storage for testing."""

    def __init__(self) -> None:
        self.documents: dict[str, str] = {}
        self.writes = 0

    async def get(self, canvas_id: str) -> str | None:
        return self.documents.get(canvas_id)

    async def put(self, canvas_id: str, document: str) -> None:
        self.documents[canvas_id] = document
        self.writes += 1

    async def delete(self, canvas_id: str) -> None:
        self.documents.pop(canvas_id, None)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def serialize_layout(layout: Layout) -> str:
    """Layout → JSON document. Sorted keys, so equal layouts serialize identically."""
    return json.dumps(layout.to_dict(), sort_keys=True, ensure_ascii=False)


def parse_layout(canvas_id: str, document: str) -> Layout:
    try:
        data = json.loads(document)
        return Layout.from_dict(data)
    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
        raise PersistenceError(canvas_id, f"malformed layout document: {e}") from e


@dataclass
class SaveResult:
    """Outcome of a save. `superseded` saves were dropped in favour of a newer one."""

    canvas_id: str
    saved: bool
    saved_at: int = 0
    superseded: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "canvasId": self.canvas_id,
            "saved": self.saved,
            "savedAt": self.saved_at,
            "superseded": self.superseded,
        }


# ---------------------------------------------------------------------------
# Assembly class
# ---------------------------------------------------------------------------


class LayoutAssembly:
    """
    Manages persistence of canvas layouts.
    Coordinates instance store + storage.
    """

    def __init__(
        self,
        storage: LayoutStorage,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        clock: Callable[[], int] = now_ms,
    ):
        self._storage = storage
        self._timeout = timeout
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}
        self._submitted: dict[str, int] = {}

    def _get_lock(self, canvas_id: str) -> asyncio.Lock:
        """Per-canvas asyncio lock for save serialization."""
        if canvas_id not in self._locks:
            self._locks[canvas_id] = asyncio.Lock()
        return self._locks[canvas_id]

    async def _bounded(self, canvas_id: str, op: str, call: Awaitable[T]) -> T:
        """Run one storage call under the timeout, mapping failures to PersistenceError."""
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as e:
            logger.warning("assembly: %s %s timed out after %ss", op, canvas_id, self._timeout)
            raise PersistenceError(
                canvas_id, f"{op} timed out after {self._timeout}s", timed_out=True
            ) from e
        except PersistenceError:
            raise
        except Exception as e:
            logger.error("assembly: %s %s failed: %s", op, canvas_id, e)
            raise PersistenceError(canvas_id, f"{op} failed: {e}") from e

    # -- load --

    async def load(self, canvas_id: str) -> Layout:
        """
        Read a layout from storage.
        Raises NotFound when the canvas has never been saved.
        """
        document = await self._bounded(canvas_id, "load", self._storage.get(canvas_id))
        if document is None:
            raise NotFound("layout", canvas_id)
        return parse_layout(canvas_id, document)

    async def load_into(self, store: InstanceStore, canvas_id: str) -> Layout:
        """
        Load and replace the store's contents wholesale.
        On any failure the store is left exactly as it was.
        """
        layout = await self.load(canvas_id)
        try:
            store.load(layout)
        except InvalidLayout as e:
            raise PersistenceError(canvas_id, str(e)) from e
        return layout

    # -- save --

    async def save(self, source: InstanceStore | Layout) -> SaveResult:
        """
        Snapshot and write a layout. `savedAt` is stamped at submit time.

        If another save for the same canvas is submitted while this one is
        waiting for the lock, this one is dropped (superseded) and never
        reaches storage.
        """
        saved_at = self._clock()
        if isinstance(source, InstanceStore):
            layout = source.to_layout(saved_at)
        else:
            layout = Layout(
                canvas_id=source.canvas_id,
                instances=list(source.instances),
                saved_at=saved_at,
            )
        canvas_id = layout.canvas_id
        document = serialize_layout(layout)

        ticket = self._submitted.get(canvas_id, 0) + 1
        self._submitted[canvas_id] = ticket

        async with self._get_lock(canvas_id):
            if self._submitted[canvas_id] != ticket:
                logger.info("assembly: save %s superseded by a newer submit", canvas_id)
                return SaveResult(canvas_id=canvas_id, saved=False, saved_at=saved_at, superseded=True)
            await self._bounded(canvas_id, "save", self._storage.put(canvas_id, document))

        return SaveResult(canvas_id=canvas_id, saved=True, saved_at=saved_at)

    # -- delete --

    async def delete(self, canvas_id: str) -> None:
        async with self._get_lock(canvas_id):
            await self._bounded(canvas_id, "delete", self._storage.delete(canvas_id))
