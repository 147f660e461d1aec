"""
blockcanvas Kernel — Block Instance Store

The single owner of the ordered list of block instances on one canvas.
Views are projections of the store; they never hold instance state themselves.

All mutations are synchronous. Each one notifies subscribers once, after the
change is complete, so a listener never observes a partial update.
Public accessors hand out copies; the live instances never leave the store.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterator
from typing import Any

from blockcanvas.kernel.types import BlockInstance, InvalidLayout, Layout, NotFound, Position

# listener(event, instance_id) — event is "add", "remove", "move", "update", or "load"
StoreListener = Callable[[str, str | None], None]


class InstanceStore:
    """Ordered block instances for one canvas, plus id issuance."""

    def __init__(self, canvas_id: str = "canvas"):
        self.canvas_id = canvas_id
        self._instances: list[BlockInstance] = []
        self._counter = 0
        self._issued: set[str] = set()
        self._listeners: list[StoreListener] = []

    # -- ids --

    def _next_id(self) -> str:
        """Monotonic ids. Never reissues an id seen in this session, loaded ones included."""
        while True:
            self._counter += 1
            candidate = f"block-{self._counter}"
            if candidate not in self._issued:
                self._issued.add(candidate)
                return candidate

    # -- subscriptions --

    def subscribe(self, listener: StoreListener) -> Callable[[], None]:
        """Register a change listener. Returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: str, instance_id: str | None) -> None:
        for listener in list(self._listeners):
            listener(event, instance_id)

    # -- reads --

    def _require(self, instance_id: str) -> BlockInstance:
        for instance in self._instances:
            if instance.id == instance_id:
                return instance
        raise NotFound("block instance", instance_id)

    def get(self, instance_id: str) -> BlockInstance:
        return copy.deepcopy(self._require(instance_id))

    def __contains__(self, instance_id: object) -> bool:
        return any(i.id == instance_id for i in self._instances)

    def instances(self) -> list[BlockInstance]:
        return copy.deepcopy(self._instances)

    def ids(self) -> list[str]:
        return [i.id for i in self._instances]

    def __iter__(self) -> Iterator[BlockInstance]:
        return iter(self.instances())

    def __len__(self) -> int:
        return len(self._instances)

    # -- mutations --

    def add(
        self,
        type_key: str,
        properties: dict[str, Any] | None = None,
        position: Position | None = None,
    ) -> BlockInstance:
        """Append a new instance with a freshly issued id."""
        instance = BlockInstance(
            id=self._next_id(),
            type=type_key,
            properties=copy.deepcopy(properties or {}),
            position=copy.copy(position) if position is not None else Position(),
        )
        self._instances.append(instance)
        self._notify("add", instance.id)
        return copy.deepcopy(instance)

    def remove(self, instance_id: str) -> bool:
        """Remove by id. Idempotent: an unknown id is a no-op that returns False."""
        for idx, instance in enumerate(self._instances):
            if instance.id == instance_id:
                del self._instances[idx]
                self._notify("remove", instance_id)
                return True
        return False

    def set_position(self, instance_id: str, position: Position) -> None:
        instance = self._require(instance_id)
        instance.position = copy.copy(position)
        self._notify("move", instance_id)

    def update_properties(self, instance_id: str, changes: dict[str, Any]) -> None:
        """
        Merge `changes` into the instance's properties.
        The new mapping is built first and swapped in with one assignment.
        """
        instance = self._require(instance_id)
        merged = dict(instance.properties)
        merged.update(copy.deepcopy(changes))
        instance.properties = merged
        self._notify("update", instance_id)

    def clear(self) -> None:
        self._instances = []
        self._notify("load", None)

    # -- layout --

    def to_layout(self, saved_at: int = 0) -> Layout:
        """Detached snapshot of the whole canvas."""
        return Layout(
            canvas_id=self.canvas_id,
            instances=copy.deepcopy(self._instances),
            saved_at=saved_at,
        )

    def load(self, layout: Layout) -> None:
        """Replace the whole store with `layout`. Never merges."""
        seen: set[str] = set()
        for instance in layout.instances:
            if instance.id in seen:
                raise InvalidLayout(f"Duplicate block instance id in layout: {instance.id}")
            seen.add(instance.id)

        self.canvas_id = layout.canvas_id
        self._instances = copy.deepcopy(layout.instances)
        self._issued.update(seen)
        self._notify("load", None)
