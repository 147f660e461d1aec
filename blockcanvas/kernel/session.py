"""
blockcanvas Kernel — Editor Session

Wires one canvas: a store, its property editor, and a placement engine that
treats the editor as modal. Several sessions can coexist; they share nothing
but the registry.

LivePreview keeps a compiled document in step with a store by recompiling on
every change notification.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from blockcanvas.kernel.assembly import LayoutAssembly, SaveResult
from blockcanvas.kernel.catalog import default_registry
from blockcanvas.kernel.compiler import CompiledDocument, compile_layout
from blockcanvas.kernel.editor import PropertyEditor
from blockcanvas.kernel.export import ExportBundle, ExportSink, export_document
from blockcanvas.kernel.generator import IngestResult, StructureGenerator, generate_into
from blockcanvas.kernel.placement import PlacementEngine
from blockcanvas.kernel.registry import ComponentRegistry
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import CompileOptions, Layout, Rect

logger = logging.getLogger(__name__)

DEFAULT_CANVAS = Rect(x=0, y=0, width=1200, height=800)


class LivePreview:
    """Recompiles the layout after every store mutation."""

    def __init__(
        self,
        store: InstanceStore,
        registry: ComponentRegistry,
        options: CompileOptions | None = None,
    ):
        self._store = store
        self._registry = registry
        self.options = options or CompileOptions(canvas_id=store.canvas_id)
        self.renders = 0
        self.document: CompiledDocument = self._compile()
        self._unsubscribe: Callable[[], None] | None = store.subscribe(self._on_change)

    def _compile(self) -> CompiledDocument:
        return compile_layout(self._registry, self._store.instances(), self.options)

    def _on_change(self, event: str, instance_id: str | None) -> None:
        self.document = self._compile()
        self.renders += 1

    def refresh(self) -> CompiledDocument:
        self.document = self._compile()
        return self.document

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None


class EditorSession:
    def __init__(
        self,
        registry: ComponentRegistry | None = None,
        *,
        canvas_id: str = "canvas",
        canvas: Rect = DEFAULT_CANVAS,
        viewport: Rect | None = None,
    ):
        self.registry = registry or default_registry()
        self.store = InstanceStore(canvas_id)
        self.editor = PropertyEditor(self.store, self.registry)
        self.placement = PlacementEngine(
            self.store,
            self.registry,
            canvas,
            viewport=viewport,
            modal=self.editor,
        )

    @property
    def canvas_id(self) -> str:
        return self.store.canvas_id

    def options(self, **overrides) -> CompileOptions:
        overrides.setdefault("canvas_id", self.canvas_id)
        return CompileOptions(**overrides)

    def compile(self, options: CompileOptions | None = None) -> CompiledDocument:
        return compile_layout(self.registry, self.store.instances(), options or self.options())

    def preview(self, options: CompileOptions | None = None) -> LivePreview:
        return LivePreview(self.store, self.registry, options or self.options())

    def export(self, sink: ExportSink, options: CompileOptions | None = None) -> ExportBundle:
        return export_document(self.compile(options), sink)

    # -- persistence --

    async def save(self, assembly: LayoutAssembly) -> SaveResult:
        return await assembly.save(self.store)

    async def load(self, assembly: LayoutAssembly, canvas_id: str | None = None) -> Layout:
        """Replace the canvas with the stored layout. A successful load discards any open edit or drag."""
        layout = await assembly.load_into(self.store, canvas_id or self.canvas_id)
        self.editor.close()
        self.placement.cancel()
        return layout

    # -- generation --

    async def generate(
        self,
        generator: StructureGenerator,
        prompt: str,
        preset: str = "light",
        *,
        timeout: float = 30.0,
    ) -> IngestResult:
        result = await generate_into(generator, self.store, self.registry, prompt, preset, timeout=timeout)
        logger.info(
            "session: generated %d block(s) for %s, skipped %d",
            len(result.added),
            self.canvas_id,
            len(result.skipped),
        )
        return result
