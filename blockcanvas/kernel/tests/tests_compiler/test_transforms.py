"""
blockcanvas Transforms -- Dispatch table tests
"""

import pytest

from blockcanvas.kernel.compiler import compile_instance, compile_layout
from blockcanvas.kernel.transforms import (
    PROPERTY_TRANSFORMS,
    BlockContext,
    PropertyTransform,
    get_transform,
    provided_slots,
    register_transform,
)
from blockcanvas.kernel.types import BlockInstance, PropertySpec


@pytest.fixture
def border_radius():
    def apply(value, spec, ctx):
        ctx.styles["border-radius"] = f"{value}px"

    register_transform(PropertyTransform("borderRadius", apply))
    yield
    PROPERTY_TRANSFORMS.pop("borderRadius", None)


class TestDispatchTable:
    def test_known_keys(self):
        for key in ("backgroundColor", "textColor", "backgroundImage", "heading", "subheading",
                    "buttonText", "logoText", "columns", "columnGap", "rowGap", "fixed"):
            assert get_transform(key) is not None

    def test_provided_slots(self):
        assert provided_slots({"heading", "backgroundColor"}) == {"heading"}
        assert provided_slots({"columns", "rowGap"}) == {"column_items", "grid_style"}
        assert provided_slots({"unknownThing"}) == set()

    def test_columns_clamps_to_one(self):
        ctx = BlockContext()
        get_transform("columns").apply(0, PropertySpec(kind="number", default=3), ctx)
        ctx.resolve_element_styles()
        assert ctx.slots["column_items"] == [{"index": 1, "label": "Column 1"}]
        assert ctx.slots["grid_style"] == "grid-template-columns: repeat(1, 1fr)"

    def test_fixed_false_leaves_flow_alone(self):
        ctx = BlockContext()
        get_transform("fixed").apply("false", PropertySpec(kind="boolean"), ctx)
        assert ctx.styles == {}

    def test_empty_background_image_ignored(self):
        ctx = BlockContext()
        get_transform("backgroundImage").apply("", PropertySpec(kind="image"), ctx)
        assert ctx.styles == {}

    def test_registered_transform_used_by_compiler(self, registry, border_radius):
        inst = BlockInstance(id="t", type="text", properties={"borderRadius": 8})
        body = compile_layout(registry, [inst]).body
        assert "border-radius: 8px" in body
        assert "data-border-radius" not in body

    def test_unregistered_key_is_data_attribute(self, registry):
        inst = BlockInstance(id="t", type="text", properties={"borderRadius": 8})
        assert 'data-border-radius="8"' in compile_layout(registry, [inst]).body


class TestFailingTransform:
    @pytest.fixture
    def exploding(self):
        def apply(value, spec, ctx):
            raise RuntimeError("boom")

        register_transform(PropertyTransform("sparkle", apply))
        yield
        PROPERTY_TRANSFORMS.pop("sparkle", None)

    def test_failing_block_skipped_others_kept(self, registry, exploding):
        instances = [
            BlockInstance(id="a", type="hero"),
            BlockInstance(id="b", type="text", properties={"sparkle": True}),
            BlockInstance(id="c", type="footer"),
        ]
        doc = compile_layout(registry, instances)

        assert [w.code for w in doc.warnings] == ["TRANSFORM_ERROR"]
        assert doc.warnings[0].instance_id == "b"
        assert "boom" in doc.warnings[0].message
        assert 'data-block-id="a"' in doc.body
        assert 'data-block-id="b"' not in doc.body
        assert 'data-block-id="c"' in doc.body

    def test_compile_instance_reports_failure(self, registry, exploding):
        block, warnings = compile_instance(registry, BlockInstance(id="b", type="text", properties={"sparkle": 1}))
        assert block is None
        assert warnings[0].code == "TRANSFORM_ERROR"
