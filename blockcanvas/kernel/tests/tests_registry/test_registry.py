"""
blockcanvas Registry -- Registration and lookup tests

Verifies:
  - Required fields are enforced (type, name, markup_template)
  - Templates may only reference fillable slots
  - Unknown property kinds fall back to text with a warning
  - Re-registration is last-write-wins and keeps palette position
  - list() / palette() are insertion-ordered
"""

import logging

import pytest

from blockcanvas.kernel.registry import ComponentRegistry, template_slots
from blockcanvas.kernel.types import BlockType, InvalidSchema, NotFound, PropertySpec


def banner(**overrides):
    definition = {
        "type": "banner",
        "name": "Banner",
        "html": "<div class=\"banner\"><h1>{{heading}}</h1></div>",
        "properties": {
            "heading": {"type": "text", "default": "Hello"},
            "backgroundColor": {"type": "color", "default": "#ffffff"},
        },
    }
    definition.update(overrides)
    return definition


# ============================================================================
# Standard catalog
# ============================================================================


class TestDefaultRegistry:
    def test_standard_types_in_palette_order(self, registry):
        assert [t.type for t in registry.list()] == [
            "header",
            "hero",
            "grid",
            "text",
            "image",
            "cta",
            "footer",
        ]

    def test_palette_entries(self, registry):
        entry = registry.palette()[0]
        assert entry == {
            "type": "header",
            "name": "Header",
            "icon": "header-icon.svg",
            "category": "navigation",
        }

    def test_hero_schema(self, registry):
        hero = registry.get("hero")
        assert hero.property_schema["heading"].kind == "text"
        assert hero.property_schema["subheading"].kind == "textarea"
        assert hero.defaults()["buttonText"] == "Learn More"

    def test_grid_constraints(self, registry):
        columns = registry.get("grid").property_schema["columns"]
        assert columns.kind == "number"
        assert (columns.min, columns.max, columns.step) == (1, 6, 1)


# ============================================================================
# register
# ============================================================================


class TestRegister:
    def test_register_dict_definition(self):
        reg = ComponentRegistry()
        stored = reg.register(banner())
        assert isinstance(stored, BlockType)
        assert stored.markup_template.startswith("<div")
        assert "banner" in reg
        assert len(reg) == 1

    def test_register_block_type(self):
        reg = ComponentRegistry()
        bt = BlockType(
            type="note",
            name="Note",
            markup_template="<p>{{text}}</p>",
            property_schema={"text": PropertySpec(kind="textarea", default="...")},
        )
        assert reg.register(bt).type == "note"

    @pytest.mark.parametrize("field", ["type", "name", "html"])
    def test_missing_required_field(self, field):
        reg = ComponentRegistry()
        definition = banner()
        del definition[field]
        with pytest.raises(InvalidSchema):
            reg.register(definition)
        assert len(reg) == 0

    def test_unknown_slot_rejected(self):
        reg = ComponentRegistry()
        with pytest.raises(InvalidSchema, match="tagline"):
            reg.register(banner(html="<h1>{{heading}}</h1><p>{{tagline}}</p>"))

    def test_property_without_slot_transform_cannot_fill_slot(self):
        # backgroundColor styles the wrapper; it does not provide a template slot
        reg = ComponentRegistry()
        with pytest.raises(InvalidSchema):
            reg.register(banner(html="<h1 style=\"color: {{backgroundColor}}\">x</h1>"))

    def test_derived_slots_require_their_property(self):
        reg = ComponentRegistry()
        with pytest.raises(InvalidSchema, match="grid_style"):
            reg.register(banner(html="<div style=\"{{grid_style}}\">{{heading}}</div>"))

    def test_context_slots_allowed(self):
        reg = ComponentRegistry()
        reg.register(banner(html="<h1 id=\"{{block_id}}\">{{heading}} {{year}}</h1>"))
        assert "banner" in reg

    def test_unknown_kind_falls_back_to_text(self, caplog):
        reg = ComponentRegistry()
        definition = banner()
        definition["properties"]["heading"] = {"type": "richtext", "default": "Hi"}
        with caplog.at_level(logging.WARNING, logger="blockcanvas.kernel.registry"):
            stored = reg.register(definition)
        assert stored.property_schema["heading"].kind == "text"
        assert stored.property_schema["heading"].default == "Hi"
        assert "richtext" in caplog.text

    def test_reregister_overwrites_in_place(self):
        reg = ComponentRegistry()
        reg.register(banner())
        reg.register(banner(type="other", name="Other"))
        reg.register(banner(name="Banner v2"))

        assert [t.type for t in reg.list()] == ["banner", "other"]
        assert reg.get("banner").name == "Banner v2"

    def test_register_many(self):
        reg = ComponentRegistry()
        reg.register_many([banner(), banner(type="b2", name="B2")])
        assert len(reg) == 2


# ============================================================================
# get / find
# ============================================================================


class TestLookup:
    def test_get_unknown_raises(self, registry):
        with pytest.raises(NotFound) as exc:
            registry.get("carousel")
        assert exc.value.key == "carousel"

    def test_find_unknown_returns_none(self, registry):
        assert registry.find("carousel") is None

    def test_registered_types_are_immutable(self, registry):
        hero = registry.get("hero")
        with pytest.raises(AttributeError):
            hero.name = "Changed"


# ============================================================================
# template_slots
# ============================================================================


class TestTemplateSlots:
    def test_simple_slots_in_order(self):
        assert template_slots("<h1>{{heading}}</h1><p>{{ subheading }}</p>") == [
            "heading",
            "subheading",
        ]

    def test_section_items_are_not_top_level(self):
        template = "{{#column_items}}<div>{{label}}</div>{{/column_items}}{{grid_style}}"
        assert template_slots(template) == ["column_items", "grid_style"]

    def test_triple_mustache_and_comments(self):
        assert template_slots("{{! note }}{{{heading}}}{{&text}}") == ["heading", "text"]

    def test_duplicates_reported_once(self):
        assert template_slots("{{heading}} {{heading}}") == ["heading"]
