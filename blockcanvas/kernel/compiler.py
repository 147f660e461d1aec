"""
blockcanvas Kernel — Style/Markup Compiler

Pure function: (registry, instances, options) → CompiledDocument
No IO. No clock. Deterministic: same input → same output, always.

Per instance:
  1. Resolve the block type. Unknown type → skipped, CompileWarning.
  2. Resolve properties (schema defaults, then instance values) and run each
     through the dispatch table in transforms.py. A property with no entry
     becomes a data-* attribute on the wrapper.
  3. Render the markup template with chevron into named slots.
  4. Wrap in a positioned container: absolute with offsets when placed,
     normal flow at full width otherwise.

Stylesheet: preset variables + BASE_CSS + one rule block per distinct used
type, in first-appearance order.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from html import escape as _html_escape
from typing import Any

import chevron

from blockcanvas.kernel.presets import DEFAULT_PRESET, PRESETS, get_preset
from blockcanvas.kernel.registry import ComponentRegistry, template_slots
from blockcanvas.kernel.transforms import BlockContext, get_transform, style_string
from blockcanvas.kernel.types import (
    BlockInstance,
    BlockType,
    CompileOptions,
    CompileWarning,
    PropertySpec,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result types
# ---------------------------------------------------------------------------


@dataclass
class CompiledBlock:
    """One rendered block: wrapper markup plus its type's rule block."""

    instance_id: str
    type: str
    markup: str
    styles: str = ""


@dataclass
class CompiledDocument:
    """
    The three export artifacts.
    `markup` is index.html and links styles.css and script.js; `body` is the
    canvas content alone.
    """

    markup: str
    stylesheet: str
    script: str
    body: str = ""
    title: str = ""
    lang: str = "en"
    warnings: list[CompileWarning] = field(default_factory=list)

    def standalone(self) -> str:
        """One self-contained document: stylesheet inlined in <head>, script at end of <body>."""
        return _document(
            self.title,
            self.lang,
            self.body,
            head=["  <style>", self.stylesheet, "  </style>"],
            tail=["  <script>", self.script, "  </script>"],
        )


# ---------------------------------------------------------------------------
# Static assets
# ---------------------------------------------------------------------------

BASE_CSS = """
*, *::before, *::after { box-sizing: border-box; margin: 0; padding: 0; }
body {
  font-family: var(--font-body);
  background: var(--color-background);
  color: var(--color-text);
  line-height: 1.6;
}
h1, h2, h3 {
  font-family: var(--font-heading);
  line-height: 1.2;
}
.wb-canvas {
  position: relative;
  width: 100%;
  min-height: 100vh;
}
.wb-block { width: 100%; }
.wb-button {
  padding: 0.75rem 1.5rem;
  background-color: var(--color-primary);
  color: #ffffff;
  border: none;
  border-radius: var(--radius);
  font-size: 1rem;
  cursor: pointer;
}
.wb-empty { color: #888; font-style: italic; padding: var(--spacing); }
""".strip()

BOOTSTRAP_JS = """
document.addEventListener('DOMContentLoaded', function () {
  var blocks = document.querySelectorAll('.wb-block');
  blocks.forEach(function (block) {
    block.classList.add('wb-block--ready');
  });

  document.querySelectorAll('a[href^="#"]').forEach(function (link) {
    link.addEventListener('click', function (event) {
      var id = link.getAttribute('href').slice(1);
      var target = id ? document.getElementById(id) : null;
      if (target) {
        event.preventDefault();
        target.scrollIntoView({ behavior: 'smooth' });
      }
    });
  });

  document.querySelectorAll('.wb-header .wb-nav').forEach(function (nav) {
    var toggle = nav.parentElement.querySelector('.wb-nav-toggle');
    if (toggle) {
      toggle.addEventListener('click', function () {
        nav.classList.toggle('wb-nav--open');
      });
    }
  });
});
""".strip()


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def compile_layout(
    registry: ComponentRegistry,
    instances: list[BlockInstance],
    options: CompileOptions | None = None,
) -> CompiledDocument:
    """
    Compile every instance, in store order, into the export artifacts.
    Never raises for a single bad block; problems come back as warnings.
    """
    opts = options or CompileOptions()
    warnings: list[CompileWarning] = []

    blocks: list[CompiledBlock] = []
    for instance in instances:
        block = _compile_one(registry, instance, opts, warnings)
        if block is not None:
            blocks.append(block)

    stylesheet = _stylesheet(blocks, opts, warnings)

    if blocks:
        body = "\n".join(b.markup for b in blocks)
    else:
        body = '<p class="wb-empty">This page is empty.</p>'

    markup = _document(
        opts.title,
        opts.lang,
        body,
        head=['  <link rel="stylesheet" href="styles.css">'],
        tail=['  <script src="script.js"></script>'],
        canvas_id=opts.canvas_id,
    )

    for w in warnings:
        logger.warning("compiler: %s %s", w.code, w.message)

    return CompiledDocument(
        markup=markup,
        stylesheet=stylesheet,
        script=BOOTSTRAP_JS,
        body=_canvas(body, opts.canvas_id),
        title=opts.title,
        lang=opts.lang,
        warnings=warnings,
    )


def compile_instance(
    registry: ComponentRegistry,
    instance: BlockInstance,
    options: CompileOptions | None = None,
) -> tuple[CompiledBlock | None, list[CompileWarning]]:
    """
    Compile a single block fragment, for previewing one block.
    Returns (None, warnings) when the block cannot be rendered.
    """
    warnings: list[CompileWarning] = []
    block = _compile_one(registry, instance, options or CompileOptions(), warnings)
    return block, warnings


# ---------------------------------------------------------------------------
# Per-block compile
# ---------------------------------------------------------------------------


def _compile_one(
    registry: ComponentRegistry,
    instance: BlockInstance,
    opts: CompileOptions,
    warnings: list[CompileWarning],
) -> CompiledBlock | None:
    block_type = registry.find(instance.type)
    if block_type is None:
        warnings.append(
            CompileWarning(
                code="UNKNOWN_TYPE",
                message=f"Block {instance.id} has unknown type '{instance.type}', skipped",
                instance_id=instance.id,
            )
        )
        return None

    ctx = BlockContext()
    for slot in template_slots(block_type.markup_template):
        ctx.slots[slot] = ""
    ctx.slots["block_id"] = instance.id
    ctx.slots["year"] = "" if opts.year is None else str(opts.year)

    ctx.styles.update(_position_styles(instance))

    data_attrs: dict[str, str] = {}
    for key, value in _resolve_properties(block_type, instance).items():
        transform = get_transform(key)
        if transform is None:
            name = _data_attr_name(key)
            if name is None:
                warnings.append(
                    CompileWarning(
                        code="INVALID_PROPERTY",
                        message=f"Block {instance.id} property {key!r} is not a valid attribute name, dropped",
                        instance_id=instance.id,
                    )
                )
                continue
            data_attrs[name] = _attr_value(value)
            continue
        spec = block_type.property_schema.get(key) or PropertySpec(kind="text")
        try:
            transform.apply(value, spec, ctx)
        except Exception as e:
            warnings.append(
                CompileWarning(
                    code="TRANSFORM_ERROR",
                    message=f"Block {instance.id} ({block_type.type}) property {key!r} failed: {e}",
                    instance_id=instance.id,
                )
            )
            return None

    ctx.resolve_element_styles()

    try:
        inner = chevron.render(block_type.markup_template, ctx.slots)
    except chevron.ChevronError as e:
        warnings.append(
            CompileWarning(
                code="TEMPLATE_ERROR",
                message=f"Block {instance.id} ({block_type.type}) failed to render: {e}",
                instance_id=instance.id,
            )
        )
        return None

    return CompiledBlock(
        instance_id=instance.id,
        type=block_type.type,
        markup=_wrap(instance, block_type, inner, ctx.styles, data_attrs),
        styles=block_type.styles,
    )


def _resolve_properties(block_type: BlockType, instance: BlockInstance) -> dict[str, Any]:
    """Schema defaults overlaid with instance values. Schema order first, extras after."""
    resolved = block_type.defaults()
    for key, value in instance.properties.items():
        resolved[key] = value
    return resolved


def _position_styles(instance: BlockInstance) -> dict[str, str]:
    pos = instance.position
    styles: dict[str, str] = {}
    if pos.is_absolute:
        styles["position"] = "absolute"
        if pos.top is not None:
            styles["top"] = pos.top
        if pos.left is not None:
            styles["left"] = pos.left
    else:
        styles["position"] = "relative"
        styles["width"] = "100%"
    if pos.width is not None:
        styles["width"] = pos.width
    if pos.height is not None:
        styles["height"] = pos.height
    return styles


def _wrap(
    instance: BlockInstance,
    block_type: BlockType,
    inner: str,
    styles: dict[str, str],
    data_attrs: dict[str, str],
) -> str:
    attrs = [
        f'class="wb-block wb-block--{escape(block_type.type)}"',
        f'data-block-id="{escape(instance.id)}"',
        f'data-block-type="{escape(block_type.type)}"',
    ]
    for name, value in data_attrs.items():
        attrs.append(f'data-{name}="{escape(value)}"')
    attrs.append(f'style="{escape(style_string(styles))}"')
    return f"<div {' '.join(attrs)}>\n{inner}\n</div>"


# ---------------------------------------------------------------------------
# Stylesheet
# ---------------------------------------------------------------------------


def _stylesheet(
    blocks: list[CompiledBlock],
    opts: CompileOptions,
    warnings: list[CompileWarning],
) -> str:
    preset = get_preset(opts.preset)
    if preset is None:
        warnings.append(
            CompileWarning(
                code="UNKNOWN_PRESET",
                message=f"Unknown style preset '{opts.preset}', using '{DEFAULT_PRESET}'",
            )
        )
        preset = PRESETS[DEFAULT_PRESET]

    parts = [preset.css_variables(), BASE_CSS]
    seen: set[str] = set()
    for block in blocks:
        if block.type in seen:
            continue
        seen.add(block.type)
        parts.append(f"/* block: {block.type} */")
        if block.styles:
            parts.append(block.styles)
    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Document
# ---------------------------------------------------------------------------


def _canvas(body: str, canvas_id: str = "canvas") -> str:
    return "\n".join([f'  <main class="wb-canvas" id="{escape(canvas_id)}">', body, "  </main>"])


def _document(
    title: str,
    lang: str,
    body: str,
    *,
    head: list[str],
    tail: list[str],
    canvas_id: str | None = None,
) -> str:
    parts: list[str] = []

    parts.append("<!DOCTYPE html>")
    parts.append(f'<html lang="{escape(lang)}">')
    parts.append("<head>")
    parts.append('  <meta charset="utf-8">')
    parts.append('  <meta name="viewport" content="width=device-width, initial-scale=1">')
    parts.append(f"  <title>{escape(title)}</title>")
    parts.extend(head)
    parts.append("</head>")
    parts.append("<body>")
    parts.append(body if canvas_id is None else _canvas(body, canvas_id))
    parts.extend(tail)
    parts.append("</body>")
    parts.append("</html>")

    return "\n".join(parts)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def escape(text: str) -> str:
    return _html_escape(str(text), quote=True)


def _kebab(key: str) -> str:
    """buttonLink → button-link"""
    return re.sub(r"([A-Z])", r"-\1", key).lower()


DATA_ATTR_PATTERN = re.compile(r"^[a-z0-9][a-z0-9-]*$")


def _data_attr_name(key: str) -> str | None:
    """Property key → data-* suffix, or None when it is not a safe attribute name."""
    name = _kebab(key)
    return name if DATA_ATTR_PATTERN.match(name) else None


def _attr_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return ""
    return str(value)
