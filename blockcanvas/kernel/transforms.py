"""
blockcanvas Kernel — Property Transforms

Dispatch table: semantic property name → transform.
The compiler looks each property up here; a property with no entry is kept
as a data-* attribute on the block wrapper and has no visual effect.

A transform writes into a BlockContext:
  slots           — mustache context for the block's markup template
  styles          — inline CSS on the block wrapper (insertion-ordered)
  element_styles  — inline CSS for inner elements, exposed as string slots
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from blockcanvas.kernel.types import PropertySpec, is_truthy

# ---------------------------------------------------------------------------
# Context
# ---------------------------------------------------------------------------


@dataclass
class BlockContext:
    """Mutable per-instance compile state handed to each transform."""

    slots: dict[str, Any] = field(default_factory=dict)
    styles: dict[str, str] = field(default_factory=dict)
    element_styles: dict[str, dict[str, str]] = field(default_factory=dict)

    def element(self, slot: str) -> dict[str, str]:
        return self.element_styles.setdefault(slot, {})

    def resolve_element_styles(self) -> None:
        """Flatten element_styles into string slots (`a: b; c: d`)."""
        for slot, decls in self.element_styles.items():
            self.slots[slot] = style_string(decls)


@dataclass(frozen=True)
class PropertyTransform:
    """
    One dispatch entry.
    `provides` lists derived slot names the transform writes, so templates may
    reference them even though they are not schema properties.
    """

    key: str
    apply: Callable[[Any, PropertySpec, BlockContext], None]
    provides: tuple[str, ...] = ()


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def style_string(decls: dict[str, str]) -> str:
    return "; ".join(f"{prop}: {value}" for prop, value in decls.items())


def _length(value: Any, spec: PropertySpec) -> str:
    unit = spec.unit or "px"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return f"{value}{unit}"


def _text_slot(key: str) -> PropertyTransform:
    def apply(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
        ctx.slots[key] = "" if value is None else str(value)

    return PropertyTransform(key=key, apply=apply, provides=(key,))


# ---------------------------------------------------------------------------
# Transforms
# ---------------------------------------------------------------------------


def _background_color(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    if value:
        ctx.styles["background-color"] = str(value)


def _text_color(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    if value:
        ctx.styles["color"] = str(value)


def _background_image(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    if value:
        ctx.styles["background-image"] = f"url({value})"
        ctx.styles["background-size"] = "cover"
        ctx.styles["background-position"] = "center"


def _column_count(value: Any, spec: PropertySpec) -> int:
    """Whole column count within the schema's [min, max], at least 1."""
    try:
        number = float(value)
    except (TypeError, ValueError, OverflowError):
        number = float("nan")
    if not math.isfinite(number):
        try:
            number = float(spec.default if spec.default is not None else 1)
        except (TypeError, ValueError, OverflowError):
            number = 1.0
        if not math.isfinite(number):
            number = 1.0
    lower = spec.min if spec.min is not None else 1
    number = max(number, lower, 1)
    if spec.max is not None:
        number = min(number, spec.max)
    return int(number)


def _columns(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    count = _column_count(value, spec)
    ctx.slots["column_items"] = [
        {"index": i, "label": f"Column {i}"} for i in range(1, count + 1)
    ]
    ctx.element("grid_style")["grid-template-columns"] = f"repeat({count}, 1fr)"


def _column_gap(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    ctx.element("grid_style")["column-gap"] = _length(value, spec)


def _row_gap(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    ctx.element("grid_style")["row-gap"] = _length(value, spec)


def _fixed(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    # Sticky overrides absolute placement; otherwise leave normal flow alone
    if is_truthy(value):
        ctx.styles["position"] = "sticky"
        ctx.styles["top"] = "0"
        ctx.styles["z-index"] = "100"


def _padding(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    ctx.styles["padding"] = _length(value, spec)


def _text_align(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    if value:
        ctx.styles["text-align"] = str(value)


def _button_link(value: Any, spec: PropertySpec, ctx: BlockContext) -> None:
    ctx.slots["buttonLink"] = str(value) if value else "#"


# ---------------------------------------------------------------------------
# Dispatch table
# ---------------------------------------------------------------------------

PROPERTY_TRANSFORMS: dict[str, PropertyTransform] = {
    "backgroundColor": PropertyTransform("backgroundColor", _background_color),
    "textColor": PropertyTransform("textColor", _text_color),
    "backgroundImage": PropertyTransform("backgroundImage", _background_image),
    "heading": _text_slot("heading"),
    "subheading": _text_slot("subheading"),
    "buttonText": _text_slot("buttonText"),
    "logoText": _text_slot("logoText"),
    "text": _text_slot("text"),
    "imageUrl": _text_slot("imageUrl"),
    "altText": _text_slot("altText"),
    "copyright": _text_slot("copyright"),
    "buttonLink": PropertyTransform("buttonLink", _button_link, provides=("buttonLink",)),
    "columns": PropertyTransform("columns", _columns, provides=("column_items", "grid_style")),
    "columnGap": PropertyTransform("columnGap", _column_gap, provides=("grid_style",)),
    "rowGap": PropertyTransform("rowGap", _row_gap, provides=("grid_style",)),
    "fixed": PropertyTransform("fixed", _fixed),
    "padding": PropertyTransform("padding", _padding),
    "textAlign": PropertyTransform("textAlign", _text_align),
}


def register_transform(transform: PropertyTransform) -> None:
    """Add or replace a dispatch entry. Takes effect for every later compile."""
    PROPERTY_TRANSFORMS[transform.key] = transform


def get_transform(key: str) -> PropertyTransform | None:
    return PROPERTY_TRANSFORMS.get(key)


def provided_slots(property_keys: list[str] | set[str]) -> set[str]:
    """Template slots a set of schema properties can fill through their transforms."""
    slots: set[str] = set()
    for key in property_keys:
        transform = PROPERTY_TRANSFORMS.get(key)
        if transform is not None:
            slots.update(transform.provides)
    return slots
