"""
Kernel wiring for the HTTP service.

One registry, one layout assembly, one structure generator per process.
Route handlers reach them through the get_* dependencies, so tests can swap
them with app.dependency_overrides.
"""

from __future__ import annotations

import logging

from backend import config
from blockcanvas.kernel.assembly import LayoutAssembly, LayoutStorage, MemoryStorage
from blockcanvas.kernel.catalog import default_registry
from blockcanvas.kernel.generator import (
    HttpStructureGenerator,
    StaticStructureGenerator,
    StructureGenerator,
)
from blockcanvas.kernel.registry import ComponentRegistry

logger = logging.getLogger(__name__)

registry: ComponentRegistry = default_registry()
_assembly: LayoutAssembly | None = None


def configure(storage: LayoutStorage) -> LayoutAssembly:
    """Bind the process-wide assembly to `storage`."""
    global _assembly
    _assembly = LayoutAssembly(storage, timeout=config.settings.PERSISTENCE_TIMEOUT_SECONDS)
    logger.info("kernel: layout storage is %s", type(storage).__name__)
    return _assembly


def get_registry() -> ComponentRegistry:
    return registry


def get_assembly() -> LayoutAssembly:
    """The configured assembly; in-memory storage until configure() is called."""
    if _assembly is None:
        return configure(MemoryStorage())
    return _assembly


def get_generator() -> StructureGenerator:
    if config.settings.GENERATOR_URL:
        return HttpStructureGenerator(
            config.settings.GENERATOR_URL,
            api_key=config.settings.GENERATOR_API_KEY,
            timeout=config.settings.GENERATOR_TIMEOUT_SECONDS,
        )
    return StaticStructureGenerator()
