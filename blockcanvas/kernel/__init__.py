"""
blockcanvas Kernel — the editor core.

Five components:
  registry   — block types available on the palette
  store      — the ordered block instances on one canvas
  placement  — drag/drop state machine (palette drops, moves)
  editor     — schema-driven property forms and validation
  compiler   — (registry, instances) → markup, stylesheet, script  (pure, deterministic)

Boundary:
  assembly   — async load/save of Layout documents against a LayoutStorage
  generator  — prompt → starter blocks
  export     — static file bundle + sinks
"""

from blockcanvas.kernel.assembly import LayoutAssembly, MemoryStorage
from blockcanvas.kernel.catalog import default_registry
from blockcanvas.kernel.compiler import CompiledDocument, compile_instance, compile_layout
from blockcanvas.kernel.editor import PropertyEditor
from blockcanvas.kernel.placement import PlacementEngine
from blockcanvas.kernel.registry import ComponentRegistry
from blockcanvas.kernel.session import EditorSession, LivePreview
from blockcanvas.kernel.store import InstanceStore

__all__ = [
    "ComponentRegistry",
    "default_registry",
    "InstanceStore",
    "PlacementEngine",
    "PropertyEditor",
    "compile_layout",
    "compile_instance",
    "CompiledDocument",
    "LayoutAssembly",
    "MemoryStorage",
    "EditorSession",
    "LivePreview",
]
