"""
blockcanvas Kernel — Component Registry

Catalog of block types available on the palette.
Insertion-ordered. Re-registering a type overwrites it in place (last write wins),
which is how live schema edits are picked up during development.
"""

from __future__ import annotations

import dataclasses
import logging
import re
from collections.abc import Iterable
from typing import Any

from blockcanvas.kernel.transforms import provided_slots
from blockcanvas.kernel.types import (
    PROPERTY_KINDS,
    BlockType,
    InvalidSchema,
    NotFound,
    PropertySpec,
)

logger = logging.getLogger(__name__)

# Slots filled by the compiler itself rather than by a property
CONTEXT_SLOTS: set[str] = {"block_id", "year"}

# {{name}}, {{{name}}}, {{&name}}, {{#name}}, {{^name}}, {{/name}}
_TAG_PATTERN = re.compile(r"\{\{\{?\s*([#^/&!>]?)\s*([\w.\-]+)\s*\}?\}\}")


def template_slots(template: str) -> list[str]:
    """
    Top-level slot names referenced by a mustache template, in order.
    Names inside a section belong to the section's items and are not returned.
    """
    slots: list[str] = []
    depth = 0
    for sigil, name in _TAG_PATTERN.findall(template):
        if sigil in ("!", ">"):
            continue
        if sigil == "/":
            depth = max(depth - 1, 0)
            continue
        if depth == 0 and name not in slots:
            slots.append(name)
        if sigil in ("#", "^"):
            depth += 1
    return slots


class ComponentRegistry:
    """Holds every registered BlockType, keyed by `type`."""

    def __init__(self) -> None:
        self._types: dict[str, BlockType] = {}

    # -- register --

    def register(self, block_type: BlockType | dict[str, Any]) -> BlockType:
        """
        Validate and add a block type. Returns the stored (normalized) BlockType.

        Raises InvalidSchema when type, name, or markup_template is missing, or
        when the template references a slot no property can fill.
        Unknown property kinds fall back to "text" with a warning.
        """
        if isinstance(block_type, dict):
            block_type = BlockType.from_dict(block_type)

        missing = [
            name
            for name in ("type", "name", "markup_template")
            if not getattr(block_type, name)
        ]
        if missing:
            raise InvalidSchema(
                f"Block type {block_type.type or '?'!r} missing required field(s): {', '.join(missing)}"
            )

        schema: dict[str, PropertySpec] = {}
        for key, spec in block_type.property_schema.items():
            if spec.kind not in PROPERTY_KINDS:
                logger.warning(
                    "registry: %s.%s has unknown kind %r, falling back to text",
                    block_type.type,
                    key,
                    spec.kind,
                )
                spec = dataclasses.replace(spec, kind="text")
            schema[key] = spec

        fillable = provided_slots(set(schema)) | CONTEXT_SLOTS
        unknown = [s for s in template_slots(block_type.markup_template) if s not in fillable]
        if unknown:
            raise InvalidSchema(
                f"Block type {block_type.type!r} template references unknown slot(s): {', '.join(unknown)}"
            )

        stored = dataclasses.replace(block_type, property_schema=schema)
        if stored.type in self._types:
            logger.info("registry: overwriting block type %s", stored.type)
        self._types[stored.type] = stored
        return stored

    def register_many(self, definitions: Iterable[BlockType | dict[str, Any]]) -> None:
        for definition in definitions:
            self.register(definition)

    # -- lookup --

    def get(self, type_key: str) -> BlockType:
        block_type = self._types.get(type_key)
        if block_type is None:
            raise NotFound("block type", type_key)
        return block_type

    def find(self, type_key: str) -> BlockType | None:
        """Non-raising lookup used by the compiler."""
        return self._types.get(type_key)

    def list(self) -> list[BlockType]:
        return list(self._types.values())

    def palette(self) -> list[dict[str, Any]]:
        """Palette entries in registry order."""
        return [
            {"type": t.type, "name": t.name, "icon": t.icon, "category": t.category}
            for t in self._types.values()
        ]

    def __contains__(self, type_key: object) -> bool:
        return type_key in self._types

    def __len__(self) -> int:
        return len(self._types)
