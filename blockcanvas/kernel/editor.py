"""
blockcanvas Kernel — Property Editor

Schema-driven editing of one block instance at a time.

open()   → form descriptor built from the block type's property schema
stage()  → record an in-progress edit (form state, not yet in the store)
submit() → validate per property kind, write accepted values in one store update
close()  → discard in-progress edits, store untouched

The editor is modal: while it is open, the placement engine on the same
canvas ignores drag gestures.

Validation rules:
  number / range                  coerced to a number, clamped to [min, max]
  boolean                         any truthy form representation → True
  color / text / textarea / image accepted as-is
  select                          must be one of `options`, else rejected
A rejected field keeps its prior value and is reported as a ValidationError.
It does not block the other fields.
"""

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from typing import Any

from blockcanvas.kernel.registry import ComponentRegistry
from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import (
    NUMERIC_KINDS,
    NotFound,
    PropertySpec,
    ValidationError,
    is_truthy,
)

logger = logging.getLogger(__name__)


@dataclass
class FormField:
    """One row of the generated editing form."""

    key: str
    kind: str
    label: str
    current_value: Any
    constraints: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "kind": self.kind,
            "label": self.label,
            "currentValue": self.current_value,
            "constraints": self.constraints,
        }


@dataclass
class SubmitResult:
    """What a submit wrote, and what it refused."""

    instance_id: str
    applied: dict[str, Any] = field(default_factory=dict)
    errors: list[ValidationError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def camel_to_title(key: str) -> str:
    """backgroundColor → Background Color"""
    spaced = re.sub(r"([A-Z])", r" \1", key).strip()
    return spaced[:1].upper() + spaced[1:]


def _coerce_number(key: str, spec: PropertySpec, raw: Any) -> int | float:
    if isinstance(raw, bool):
        raise ValidationError(key, raw, "expected a number")
    try:
        number = float(raw.strip()) if isinstance(raw, str) else float(raw)
    except (TypeError, ValueError):
        raise ValidationError(key, raw, "expected a number") from None
    if math.isnan(number) or math.isinf(number):
        raise ValidationError(key, raw, "expected a finite number")

    if spec.min is not None:
        number = max(number, float(spec.min))
    if spec.max is not None:
        number = min(number, float(spec.max))

    integral_step = spec.step is None or float(spec.step).is_integer()
    if number.is_integer() and integral_step:
        return int(number)
    return number


def _coerce_select(key: str, spec: PropertySpec, raw: Any) -> Any:
    options = spec.options or ()
    if raw in options:
        return raw
    # Form posts send strings; match declared non-string options by text
    for option in options:
        if str(option) == str(raw):
            return option
    allowed = ", ".join(str(o) for o in options)
    raise ValidationError(key, raw, f"must be one of: {allowed}")


def coerce_value(key: str, spec: PropertySpec, raw: Any) -> Any:
    """Validate one submitted form value against its schema entry."""
    if spec.kind in NUMERIC_KINDS:
        return _coerce_number(key, spec, raw)
    if spec.kind == "boolean":
        return is_truthy(raw)
    if spec.kind == "select":
        return _coerce_select(key, spec, raw)
    # color, text, textarea, image: garbage in, garbage out
    return raw


# ---------------------------------------------------------------------------
# Editor
# ---------------------------------------------------------------------------


class PropertyEditor:
    """Edits one instance at a time; holds the current edit target and draft."""

    def __init__(self, store: InstanceStore, registry: ComponentRegistry):
        self._store = store
        self._registry = registry
        self._target: str | None = None
        self._draft: dict[str, Any] = {}

    @property
    def is_open(self) -> bool:
        return self._target is not None

    @property
    def target(self) -> str | None:
        return self._target

    @property
    def draft(self) -> dict[str, Any]:
        return dict(self._draft)

    def _schema_for(self, instance_id: str) -> tuple[dict[str, Any], dict[str, PropertySpec]]:
        instance = self._store.get(instance_id)
        block_type = self._registry.get(instance.type)
        return instance.properties, block_type.property_schema

    # -- open / close --

    def open(self, instance_id: str) -> list[FormField]:
        """Start editing `instance_id`. Replaces any previous target and discards its draft."""
        self._schema_for(instance_id)  # NotFound before any state changes
        self._target = instance_id
        self._draft = {}
        return self.form()

    def form(self) -> list[FormField]:
        """The form descriptor for the open instance, drafts included."""
        if self._target is None:
            return []
        properties, schema = self._schema_for(self._target)
        fields: list[FormField] = []
        for key, spec in schema.items():
            if key in self._draft:
                current = self._draft[key]
            else:
                current = properties.get(key, spec.default)
            fields.append(
                FormField(
                    key=key,
                    kind=spec.kind,
                    label=camel_to_title(key),
                    current_value=current,
                    constraints=spec.constraints(),
                )
            )
        return fields

    def stage(self, key: str, value: Any) -> None:
        """Record an in-progress edit for the open instance."""
        if self._target is None:
            raise NotFound("open editor", key)
        _, schema = self._schema_for(self._target)
        if key not in schema:
            raise NotFound("property", key)
        self._draft[key] = value

    def close(self) -> None:
        """Discard in-progress edits. The store is never touched."""
        self._target = None
        self._draft = {}

    # -- submit --

    def submit(self, instance_id: str, form_values: dict[str, Any] | None = None) -> SubmitResult:
        """
        Validate and write. Staged drafts for `instance_id` are merged under
        `form_values`. Accepted values land in one store update; rejected ones
        are reported and keep their prior value.

        A clean submit closes the editor. A submit with errors leaves it open
        with only the failing fields still drafted.
        """
        properties, schema = self._schema_for(instance_id)
        editing = self._target == instance_id

        values: dict[str, Any] = dict(self._draft) if editing else {}
        values.update(form_values or {})

        result = SubmitResult(instance_id=instance_id)
        for key, raw in values.items():
            spec = schema.get(key)
            if spec is None:
                result.errors.append(ValidationError(key, raw, "unknown property"))
                continue
            try:
                result.applied[key] = coerce_value(key, spec, raw)
            except ValidationError as e:
                result.errors.append(e)

        for error in result.errors:
            logger.info(
                "editor: %s.%s rejected (%s), keeping %r",
                instance_id,
                error.key,
                error.message,
                properties.get(error.key),
            )

        if result.applied:
            self._store.update_properties(instance_id, result.applied)

        if editing:
            if result.ok:
                self.close()
            else:
                failed = {e.key for e in result.errors}
                self._draft = {k: v for k, v in values.items() if k in failed and k in schema}

        return result
