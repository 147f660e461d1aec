"""
blockcanvas Kernel — Built-in Block Catalog

The standard palette. Definitions use the declarative dict format accepted by
ComponentRegistry.register (`html` + `properties` with a `type` per property).
Templates are mustache; every slot is a property name, a derived slot
(`column_items`, `grid_style`), or a compile-context slot (`year`).
"""

from __future__ import annotations

from typing import Any

from blockcanvas.kernel.registry import ComponentRegistry

HEADER: dict[str, Any] = {
    "type": "header",
    "name": "Header",
    "icon": "header-icon.svg",
    "category": "navigation",
    "html": """<header class="wb-header">
  <div class="wb-logo">{{logoText}}</div>
  <nav class="wb-nav">
    <ul>
      <li><a href="#">Home</a></li>
      <li><a href="#">About</a></li>
      <li><a href="#">Services</a></li>
      <li><a href="#">Contact</a></li>
    </ul>
  </nav>
</header>""",
    "properties": {
        "backgroundColor": {"type": "color", "default": "#ffffff"},
        "textColor": {"type": "color", "default": "#333333"},
        "logoText": {"type": "text", "default": "Logo"},
        "fixed": {"type": "boolean", "default": False},
    },
    "styles": """.wb-header {
  display: flex;
  justify-content: space-between;
  align-items: center;
  padding: 1rem 2rem;
  box-shadow: 0 2px 5px rgba(0,0,0,0.1);
}
.wb-logo { font-size: 1.5rem; font-weight: bold; }
.wb-nav ul { display: flex; list-style: none; }
.wb-nav li { margin-left: 1rem; }
.wb-nav a { text-decoration: none; color: inherit; }""",
}

HERO: dict[str, Any] = {
    "type": "hero",
    "name": "Hero Section",
    "icon": "hero-icon.svg",
    "category": "content",
    "html": """<section class="wb-hero">
  <h1>{{heading}}</h1>
  <p>{{subheading}}</p>
  <button class="wb-button">{{buttonText}}</button>
</section>""",
    "properties": {
        "heading": {"type": "text", "default": "Welcome to Our Website"},
        "subheading": {
            "type": "textarea",
            "default": "This is a hero section with a powerful call to action",
        },
        "buttonText": {"type": "text", "default": "Learn More"},
        "backgroundImage": {"type": "image", "default": ""},
        "backgroundColor": {"type": "color", "default": "#1f2937"},
        "textColor": {"type": "color", "default": "#ffffff"},
    },
    "styles": """.wb-hero { padding: 4rem 2rem; text-align: center; }
.wb-hero h1 { font-size: 2.5rem; margin-bottom: 1rem; }
.wb-hero p {
  font-size: 1.2rem;
  margin: 0 auto 2rem;
  max-width: 800px;
}""",
}

GRID: dict[str, Any] = {
    "type": "grid",
    "name": "Content Grid",
    "icon": "grid-icon.svg",
    "category": "layout",
    "html": """<div class="wb-grid" style="{{grid_style}}">
  {{#column_items}}
  <div class="wb-grid-item" data-column="{{index}}">{{label}}</div>
  {{/column_items}}
</div>""",
    "properties": {
        "columns": {"type": "number", "default": 3, "min": 1, "max": 6, "step": 1},
        "columnGap": {"type": "range", "default": 20, "min": 0, "max": 50, "unit": "px"},
        "rowGap": {"type": "range", "default": 20, "min": 0, "max": 50, "unit": "px"},
    },
    "styles": """.wb-grid { display: grid; padding: 2rem; }
.wb-grid-item {
  padding: 2rem;
  background-color: #f9f9f9;
  border-radius: 4px;
  text-align: center;
}""",
}

TEXT: dict[str, Any] = {
    "type": "text",
    "name": "Text Block",
    "icon": "text-icon.svg",
    "category": "content",
    "html": """<section class="wb-text">
  <h2>{{heading}}</h2>
  <p>{{text}}</p>
</section>""",
    "properties": {
        "heading": {"type": "text", "default": "About Us"},
        "text": {
            "type": "textarea",
            "default": "Tell your visitors who you are and what you do.",
        },
        "textAlign": {
            "type": "select",
            "default": "left",
            "options": ["left", "center", "right"],
        },
        "textColor": {"type": "color", "default": "#333333"},
    },
    "styles": """.wb-text { padding: 3rem 2rem; max-width: 900px; margin: 0 auto; }
.wb-text h2 { font-size: 2rem; margin-bottom: 1rem; }""",
}

IMAGE: dict[str, Any] = {
    "type": "image",
    "name": "Image",
    "icon": "image-icon.svg",
    "category": "media",
    "html": """<figure class="wb-image">
  <img src="{{imageUrl}}" alt="{{altText}}">
</figure>""",
    "properties": {
        "imageUrl": {"type": "image", "default": "https://placehold.co/1200x600"},
        "altText": {"type": "text", "default": "Placeholder image"},
        "padding": {"type": "range", "default": 16, "min": 0, "max": 80, "unit": "px"},
    },
    "styles": """.wb-image img { display: block; max-width: 100%; height: auto; margin: 0 auto; }""",
}

CTA: dict[str, Any] = {
    "type": "cta",
    "name": "Call to Action",
    "icon": "cta-icon.svg",
    "category": "content",
    "html": """<section class="wb-cta">
  <h2>{{heading}}</h2>
  <a class="wb-button" href="{{buttonLink}}">{{buttonText}}</a>
</section>""",
    "properties": {
        "heading": {"type": "text", "default": "Ready to get started?"},
        "buttonText": {"type": "text", "default": "Contact Us"},
        "buttonLink": {"type": "text", "default": "#contact"},
        "backgroundColor": {"type": "color", "default": "#4a90e2"},
        "textColor": {"type": "color", "default": "#ffffff"},
        "layout": {
            "type": "select",
            "default": "centered",
            "options": ["centered", "split"],
        },
    },
    "styles": """.wb-cta { padding: 3rem 2rem; text-align: center; }
.wb-cta h2 { margin-bottom: 1.5rem; }
.wb-cta .wb-button { display: inline-block; text-decoration: none; background-color: #ffffff; color: #4a90e2; }""",
}

FOOTER: dict[str, Any] = {
    "type": "footer",
    "name": "Footer",
    "icon": "footer-icon.svg",
    "category": "navigation",
    "html": """<footer class="wb-footer">
  <p>&copy; {{year}} {{copyright}}</p>
</footer>""",
    "properties": {
        "copyright": {"type": "text", "default": "All rights reserved."},
        "backgroundColor": {"type": "color", "default": "#222222"},
        "textColor": {"type": "color", "default": "#ffffff"},
    },
    "styles": """.wb-footer { padding: 2rem; text-align: center; font-size: 0.9rem; }""",
}

STANDARD_BLOCKS: list[dict[str, Any]] = [HEADER, HERO, GRID, TEXT, IMAGE, CTA, FOOTER]


def default_registry() -> ComponentRegistry:
    """A registry pre-loaded with the standard palette."""
    registry = ComponentRegistry()
    registry.register_many(STANDARD_BLOCKS)
    return registry
