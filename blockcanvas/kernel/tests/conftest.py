"""
Kernel test configuration.

Shared fixtures: the standard registry, an empty store, and an editor and
placement engine wired to it the way EditorSession wires them.

Canvas geometry used throughout: the canvas sits at (100, 50) in the viewport
and is 800 × 600; the viewport is 1400 × 1000.
"""

import pytest

from blockcanvas.kernel.catalog import default_registry
from blockcanvas.kernel.editor import PropertyEditor
from blockcanvas.kernel.placement import PlacementEngine
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import Rect

CANVAS = Rect(x=100, y=50, width=800, height=600)
VIEWPORT = Rect(x=0, y=0, width=1400, height=1000)


@pytest.fixture
def registry():
    return default_registry()


@pytest.fixture
def store():
    return InstanceStore("canvas-test")


@pytest.fixture
def editor(store, registry):
    return PropertyEditor(store, registry)


@pytest.fixture
def engine(store, registry, editor):
    return PlacementEngine(store, registry, CANVAS, viewport=VIEWPORT, modal=editor)
