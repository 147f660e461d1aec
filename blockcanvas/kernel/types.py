"""
blockcanvas Kernel — Shared Types

Data classes used across registry, store, placement, editor, compiler, and assembly.
These are the contracts that bind the kernel together.

Wire format notes:
- Layout documents use camelCase keys (`canvasId`, `savedAt`) and the "auto"
  sentinel for unset position fields.
- In memory, an unset position field is None. See Position for the rule.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any

# ---------------------------------------------------------------------------
# Property kinds
# ---------------------------------------------------------------------------

PROPERTY_KINDS: set[str] = {
    "color",
    "text",
    "textarea",
    "number",
    "range",
    "boolean",
    "image",
    "select",
}

NUMERIC_KINDS: set[str] = {"number", "range"}

# Wire sentinel for an unset position field
AUTO = "auto"

PX_PATTERN = re.compile(r"^(-?\d+(?:\.\d+)?)px$")


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class BlockCanvasError(Exception):
    """Base class for every kernel error."""

    pass


class InvalidSchema(BlockCanvasError):
    """Block type definition is missing required fields or references unknown slots."""

    pass


class NotFound(BlockCanvasError):
    """Block type or block instance could not be resolved."""

    def __init__(self, kind: str, key: str):
        super().__init__(f"{kind} not found: {key}")
        self.kind = kind
        self.key = key


class ValidationError(BlockCanvasError):
    """A submitted property value was rejected. The prior value is kept."""

    def __init__(self, key: str, value: Any, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key
        self.value = value
        self.message = message


class InvalidLayout(BlockCanvasError):
    """A layout document is structurally unusable (e.g. duplicate instance ids)."""

    pass


class PersistenceError(BlockCanvasError):
    """Save or load against the external store failed (includes timeouts)."""

    def __init__(self, canvas_id: str, message: str, *, timed_out: bool = False):
        super().__init__(f"{canvas_id}: {message}")
        self.canvas_id = canvas_id
        self.timed_out = timed_out


class GeneratorError(BlockCanvasError):
    """The external structure generator failed or timed out."""

    pass


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PropertySpec:
    """One entry of a block type's property schema."""

    kind: str
    default: Any = ""
    min: float | None = None
    max: float | None = None
    step: float | None = None
    options: tuple[Any, ...] | None = None
    unit: str | None = None

    def constraints(self) -> dict[str, Any]:
        """Non-empty constraints only, in a stable key order."""
        out: dict[str, Any] = {}
        for name in ("min", "max", "step", "unit"):
            value = getattr(self, name)
            if value is not None:
                out[name] = value
        if self.options is not None:
            out["options"] = list(self.options)
        return out

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "default": self.default, **self.constraints()}

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> PropertySpec:
        # Declarative definitions may use "type" for the kind
        kind = d.get("kind", d.get("type", "text"))
        options = d.get("options")
        return cls(
            kind=kind,
            default=d.get("default", ""),
            min=d.get("min"),
            max=d.get("max"),
            step=d.get("step"),
            options=tuple(options) if options is not None else None,
            unit=d.get("unit"),
        )


@dataclass(frozen=True)
class BlockType:
    """
    A registered block definition: mustache markup template + property schema.
    Immutable once registered.
    """

    type: str
    name: str
    markup_template: str
    property_schema: dict[str, PropertySpec] = field(default_factory=dict)
    styles: str = ""  # type-level CSS, emitted once per used type
    icon: str | None = None
    category: str = "basic"

    def defaults(self) -> dict[str, Any]:
        return {key: spec.default for key, spec in self.property_schema.items()}

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type,
            "name": self.name,
            "markup_template": self.markup_template,
            "properties": {k: v.to_dict() for k, v in self.property_schema.items()},
            "styles": self.styles,
            "icon": self.icon,
            "category": self.category,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BlockType:
        """Accepts both `markup_template` and the declarative `html` key."""
        props = d.get("properties") or {}
        return cls(
            type=d.get("type", ""),
            name=d.get("name", ""),
            markup_template=d.get("markup_template", d.get("html", "")),
            property_schema={k: PropertySpec.from_dict(v) for k, v in props.items()},
            styles=d.get("styles", ""),
            icon=d.get("icon"),
            category=d.get("category", "basic"),
        )


@dataclass
class Position:
    """
    Instance placement relative to the canvas.

    Each field is a CSS length string or None ("auto").
    Rule: the instance is absolutely positioned iff top or left is set.
    width and height apply on their own whenever set.
    """

    top: str | None = None
    left: str | None = None
    width: str | None = None
    height: str | None = None

    @property
    def is_absolute(self) -> bool:
        return self.top is not None or self.left is not None

    def to_dict(self) -> dict[str, str]:
        return {
            "top": self.top or AUTO,
            "left": self.left or AUTO,
            "width": self.width or AUTO,
            "height": self.height or AUTO,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any] | None) -> Position:
        d = d or {}
        return cls(
            top=normalize_length(d.get("top")),
            left=normalize_length(d.get("left")),
            width=normalize_length(d.get("width")),
            height=normalize_length(d.get("height")),
        )


@dataclass
class BlockInstance:
    """One placed, configured occurrence of a block type on the canvas."""

    id: str
    type: str
    properties: dict[str, Any] = field(default_factory=dict)
    position: Position = field(default_factory=Position)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type,
            "properties": dict(self.properties),
            "position": self.position.to_dict(),
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> BlockInstance:
        return cls(
            id=str(d["id"]),
            type=d["type"],
            properties=dict(d.get("properties") or {}),
            position=Position.from_dict(d.get("position")),
        )


@dataclass
class Layout:
    """The persisted unit: every instance on one canvas."""

    canvas_id: str
    instances: list[BlockInstance] = field(default_factory=list)
    saved_at: int = 0  # milliseconds since epoch

    def to_dict(self) -> dict[str, Any]:
        return {
            "instances": [i.to_dict() for i in self.instances],
            "canvasId": self.canvas_id,
            "savedAt": self.saved_at,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Layout:
        return cls(
            canvas_id=d["canvasId"],
            instances=[BlockInstance.from_dict(i) for i in d.get("instances", [])],
            saved_at=int(d.get("savedAt", 0)),
        )


@dataclass(frozen=True)
class Point:
    """Pointer coordinates in viewport space."""

    x: float
    y: float


@dataclass(frozen=True)
class Rect:
    """An axis-aligned box in viewport space (canvas bounds, viewport bounds)."""

    x: float
    y: float
    width: float
    height: float

    def contains(self, p: Point) -> bool:
        return self.x <= p.x <= self.x + self.width and self.y <= p.y <= self.y + self.height


@dataclass
class StarterBlock:
    """What the structure generator returns: no id, no position."""

    type: str
    properties: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> StarterBlock:
        return cls(type=d["type"], properties=dict(d.get("properties") or {}))


@dataclass
class CompileWarning:
    """A non-fatal issue encountered while compiling. Never aborts the document."""

    code: str
    message: str
    instance_id: str | None = None


@dataclass
class CompileOptions:
    """Caller-supplied compile inputs. The compiler never samples clock or randomness."""

    canvas_id: str = "canvas"
    title: str = "My Website"
    lang: str = "en"
    year: int | None = None
    preset: str = "light"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def normalize_length(value: Any) -> str | None:
    """
    Canonicalize a wire position value.

      None / "" / "auto" → None
      120 / 120.0        → "120px"
      "120px" / "50%"    → kept as-is
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int | float):
        return px(value)
    text = str(value).strip()
    if not text or text == AUTO:
        return None
    return text


def px(value: float) -> str:
    """Format a pixel length without a trailing `.0`."""
    if float(value).is_integer():
        return f"{int(value)}px"
    return f"{round(value, 2)}px"


def parse_px(value: str | None) -> float | None:
    """Pixel length string → float. None for auto or non-pixel units."""
    if value is None:
        return None
    m = PX_PATTERN.match(value)
    return float(m.group(1)) if m else None


FALSY_FORM_VALUES: set[str] = {"", "false", "0", "off", "no", "none", "null"}


def is_truthy(value: Any) -> bool:
    """
    Form representation → bool.
    Checkbox states, "true"/"on"/"1"/"yes" and non-zero numbers are True.
    """
    if isinstance(value, str):
        return value.strip().lower() not in FALSY_FORM_VALUES
    return bool(value)
