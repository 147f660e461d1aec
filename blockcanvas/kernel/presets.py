"""
blockcanvas Kernel — Style Presets

Page-wide "vibe" presets: colour, font, spacing and corner tables.
The compiler emits the chosen preset as :root custom properties ahead of
the base stylesheet, so block CSS can read `var(--color-primary)` and friends.
"""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_PRESET = "light"

SPACING_SCALE: dict[str, str] = {
    "compact": "0.75rem",
    "normal": "1rem",
    "spacious": "1.5rem",
}

RADIUS_SCALE: dict[str, str] = {
    "none": "0",
    "small": "2px",
    "medium": "4px",
    "large": "12px",
}


@dataclass(frozen=True)
class StylePreset:
    key: str
    label: str
    colors: dict[str, str] = field(default_factory=dict)
    heading_font: str = "sans-serif"
    body_font: str = "sans-serif"
    spacing: str = "normal"
    border_radius: str = "medium"

    def css_variables(self) -> str:
        """The preset as a `:root { ... }` rule block."""
        lines = [":root {"]
        for name, value in self.colors.items():
            lines.append(f"  --color-{name}: {value};")
        lines.append(f"  --font-heading: '{self.heading_font}', sans-serif;")
        lines.append(f"  --font-body: '{self.body_font}', sans-serif;")
        lines.append(f"  --spacing: {SPACING_SCALE.get(self.spacing, SPACING_SCALE['normal'])};")
        lines.append(f"  --radius: {RADIUS_SCALE.get(self.border_radius, RADIUS_SCALE['medium'])};")
        lines.append("}")
        return "\n".join(lines)

    def to_dict(self) -> dict[str, object]:
        return {
            "key": self.key,
            "label": self.label,
            "colors": dict(self.colors),
            "fonts": {"heading": self.heading_font, "body": self.body_font},
            "spacing": self.spacing,
            "borderRadius": self.border_radius,
        }


PRESETS: dict[str, StylePreset] = {
    "light": StylePreset(
        key="light",
        label="Light & Clean",
        colors={
            "primary": "#3b82f6",
            "secondary": "#6b7280",
            "accent": "#f59e0b",
            "background": "#ffffff",
            "text": "#1f2937",
        },
        heading_font="Montserrat",
        body_font="Roboto",
        spacing="normal",
        border_radius="medium",
    ),
    "dark": StylePreset(
        key="dark",
        label="Dark & Modern",
        colors={
            "primary": "#6d28d9",
            "secondary": "#4f46e5",
            "accent": "#ec4899",
            "background": "#18181b",
            "text": "#f4f4f5",
        },
        heading_font="Orbitron",
        body_font="Inter",
        spacing="compact",
        border_radius="small",
    ),
    "minimal": StylePreset(
        key="minimal",
        label="Minimal",
        colors={
            "primary": "#000000",
            "secondary": "#404040",
            "accent": "#d4d4d4",
            "background": "#ffffff",
            "text": "#171717",
        },
        heading_font="Inter",
        body_font="Inter",
        spacing="spacious",
        border_radius="none",
    ),
    "bold": StylePreset(
        key="bold",
        label="Bold & Vibrant",
        colors={
            "primary": "#ef4444",
            "secondary": "#f97316",
            "accent": "#f59e0b",
            "background": "#fef2f2",
            "text": "#0f172a",
        },
        heading_font="Poppins",
        body_font="Roboto",
        spacing="normal",
        border_radius="large",
    ),
    "retro": StylePreset(
        key="retro",
        label="Retro",
        colors={
            "primary": "#8b5cf6",
            "secondary": "#ec4899",
            "accent": "#f59e0b",
            "background": "#fdf4ff",
            "text": "#581c87",
        },
        heading_font="VT323",
        body_font="Space Mono",
        spacing="compact",
        border_radius="medium",
    ),
    "techno": StylePreset(
        key="techno",
        label="Techno & Futuristic",
        colors={
            "primary": "#10b981",
            "secondary": "#3b82f6",
            "accent": "#8b5cf6",
            "background": "#0f172a",
            "text": "#f8fafc",
        },
        heading_font="Chakra Petch",
        body_font="Roboto Mono",
        spacing="normal",
        border_radius="small",
    ),
}


def get_preset(key: str | None) -> StylePreset | None:
    """Look up a preset. None for an unknown key; callers pick the fallback."""
    if not key:
        return PRESETS[DEFAULT_PRESET]
    return PRESETS.get(key)


def preset_keys() -> list[str]:
    return list(PRESETS)
