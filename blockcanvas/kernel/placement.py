"""
blockcanvas Kernel — Drag/Drop & Placement Engine

Turns pointer gestures into store mutations. One gesture at a time:

  idle ──start──▶ dragging ──move──▶ hover_valid ⇄ hover_invalid
    ▲                                    │
    └────── release (commit/reject) ─────┘      cancel: any state → idle

Palette drags carry a block type and create an instance on commit.
Move drags carry an instance id and only change that instance's position,
using the pointer delta from gesture start so the block never jumps to
the cursor.

Hover states are visual feedback only. Nothing touches the store until a
release inside the canvas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from blockcanvas.kernel.editor import PropertyEditor
from blockcanvas.kernel.registry import ComponentRegistry
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import NotFound, Point, Position, Rect, parse_px, px

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# States
# ---------------------------------------------------------------------------

IDLE = "idle"
DRAGGING = "dragging"
HOVER_VALID = "hover_valid"
HOVER_INVALID = "hover_invalid"

SOURCE_PALETTE = "palette"
SOURCE_INSTANCE = "instance"


@dataclass
class DragGesture:
    """The payload of the drag in progress."""

    source: str  # SOURCE_PALETTE or SOURCE_INSTANCE
    start: Point
    pointer: Point
    type: str | None = None
    instance_id: str | None = None
    origin: Point | None = None  # instance top-left relative to the canvas, move drags only


@dataclass
class PlacementResult:
    """Outcome of a release."""

    committed: bool
    instance_id: str | None = None
    reason: str | None = None


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class PlacementEngine:
    """
    Drag state machine for one canvas.

    `canvas` is the drop surface in viewport coordinates. `viewport`, when
    given, bounds the pointer: leaving it cancels the gesture. `modal` is the
    property editor sharing this canvas; while it is open, new drags are
    ignored and a drag already in flight is cancelled without committing.
    """

    def __init__(
        self,
        store: InstanceStore,
        registry: ComponentRegistry,
        canvas: Rect,
        *,
        viewport: Rect | None = None,
        modal: PropertyEditor | None = None,
    ):
        self._store = store
        self._registry = registry
        self.canvas = canvas
        self.viewport = viewport
        self._modal = modal
        self._state = IDLE
        self._gesture: DragGesture | None = None

    @property
    def state(self) -> str:
        return self._state

    @property
    def gesture(self) -> DragGesture | None:
        return self._gesture

    @property
    def highlight(self) -> str | None:
        """Drop-zone highlight for the canvas view."""
        if self._state == HOVER_VALID:
            return "active"
        if self._state == HOVER_INVALID:
            return "invalid"
        return None

    def _transition(self, new_state: str) -> None:
        if new_state != self._state:
            logger.debug("placement: %s -> %s", self._state, new_state)
        self._state = new_state

    def _editor_open(self) -> bool:
        return self._modal is not None and self._modal.is_open

    def _can_start(self) -> bool:
        if self._state != IDLE:
            logger.debug("placement: ignoring gesture start while %s", self._state)
            return False
        if self._editor_open():
            logger.debug("placement: ignoring gesture start while editor is open")
            return False
        return True

    # -- gesture start --

    def start_palette_drag(self, type_key: str, pointer: Point) -> bool:
        """Begin dragging a new block from the palette. False if the gesture was ignored."""
        if not self._can_start():
            return False
        self._registry.get(type_key)  # NotFound for an unknown palette item
        self._gesture = DragGesture(
            source=SOURCE_PALETTE,
            start=pointer,
            pointer=pointer,
            type=type_key,
        )
        self._transition(DRAGGING)
        return True

    def start_move(self, instance_id: str, pointer: Point, origin: Point | None = None) -> bool:
        """
        Begin dragging an existing instance by its move handle.

        `origin` is the instance's current top-left relative to the canvas, as
        rendered. When omitted, it is read from the stored pixel offsets. An
        instance still in normal flow, or whose offset is not a pixel length
        (e.g. "50%"), starts from the canvas origin on that axis, so pass
        `origin` to keep such a block from jumping.
        """
        if not self._can_start():
            return False
        instance = self._store.get(instance_id)
        if origin is None:
            pos = instance.position
            left, top = parse_px(pos.left), parse_px(pos.top)
            if (pos.left is not None and left is None) or (pos.top is not None and top is None):
                logger.info(
                    "placement: %s has non-pixel offsets (top=%s, left=%s), moving from canvas origin",
                    instance_id,
                    pos.top,
                    pos.left,
                )
            origin = Point(left or 0.0, top or 0.0)
        self._gesture = DragGesture(
            source=SOURCE_INSTANCE,
            start=pointer,
            pointer=pointer,
            instance_id=instance_id,
            origin=origin,
        )
        self._transition(DRAGGING)
        return True

    # -- gesture progress --

    def pointer_move(self, pointer: Point) -> str:
        """Update hover feedback. Leaving the viewport cancels the gesture."""
        if self._gesture is None:
            return self._state
        if self._editor_open():
            logger.debug("placement: editor opened mid-gesture, cancelling")
            self.cancel()
            return self._state
        if self.viewport is not None and not self.viewport.contains(pointer):
            self.cancel()
            return self._state
        self._gesture.pointer = pointer
        self._transition(HOVER_VALID if self.canvas.contains(pointer) else HOVER_INVALID)
        return self._state

    def cancel(self) -> None:
        """Abort the gesture from any state. Never mutates the store."""
        if self._gesture is not None:
            logger.debug("placement: gesture cancelled")
        self._gesture = None
        self._transition(IDLE)

    # -- gesture end --

    def release(self, pointer: Point) -> PlacementResult:
        """
        Drop at `pointer`. Commits only inside the canvas; anywhere else the
        drop is rejected and the store is left untouched. Always ends idle.
        """
        gesture = self._gesture
        if gesture is None:
            return PlacementResult(committed=False, reason="no active drag")

        if self._editor_open():
            self.cancel()
            return PlacementResult(committed=False, instance_id=gesture.instance_id, reason="editor open")

        self.pointer_move(pointer)
        if self._gesture is None:
            return PlacementResult(committed=False, reason="cancelled")

        try:
            if self._state != HOVER_VALID:
                logger.info("placement: drop outside canvas rejected at (%s, %s)", pointer.x, pointer.y)
                return PlacementResult(
                    committed=False,
                    instance_id=gesture.instance_id,
                    reason="outside canvas",
                )
            if gesture.source == SOURCE_PALETTE:
                return self._commit_palette(gesture, pointer)
            return self._commit_move(gesture, pointer)
        finally:
            self._gesture = None
            self._transition(IDLE)

    def _commit_palette(self, gesture: DragGesture, pointer: Point) -> PlacementResult:
        assert gesture.type is not None
        block_type = self._registry.get(gesture.type)
        position = Position(
            top=px(pointer.y - self.canvas.y),
            left=px(pointer.x - self.canvas.x),
        )
        instance = self._store.add(block_type.type, block_type.defaults(), position)
        logger.debug("placement: created %s (%s)", instance.id, block_type.type)
        return PlacementResult(committed=True, instance_id=instance.id)

    def _commit_move(self, gesture: DragGesture, pointer: Point) -> PlacementResult:
        assert gesture.instance_id is not None and gesture.origin is not None
        try:
            current = self._store.get(gesture.instance_id)
        except NotFound:
            return PlacementResult(
                committed=False,
                instance_id=gesture.instance_id,
                reason="instance removed",
            )
        dx = pointer.x - gesture.start.x
        dy = pointer.y - gesture.start.y
        position = Position(
            top=px(gesture.origin.y + dy),
            left=px(gesture.origin.x + dx),
            width=current.position.width,
            height=current.position.height,
        )
        self._store.set_position(gesture.instance_id, position)
        return PlacementResult(committed=True, instance_id=gesture.instance_id)

    # -- deletion --

    def delete(self, instance_id: str) -> bool:
        """Direct store removal, outside the drag state machine. Idempotent."""
        return self._store.remove(instance_id)
