"""
blockcanvas Store -- Instance store tests

Verifies:
  - Ids are unique and never reissued within a session
  - remove() is idempotent
  - Accessors hand out copies
  - Property updates merge, land in one mutation, notify once
  - load() replaces wholesale and never merges
"""

import pytest

from blockcanvas.kernel.store import InstanceStore
from blockcanvas.kernel.types import BlockCanvasError, BlockInstance, InvalidLayout, Layout, NotFound, Position


def collect(store):
    events = []
    store.subscribe(lambda event, instance_id: events.append((event, instance_id)))
    return events


# ============================================================================
# ids
# ============================================================================


class TestIds:
    def test_sequential_ids(self, store):
        a = store.add("hero")
        b = store.add("grid")
        assert (a.id, b.id) == ("block-1", "block-2")

    def test_removed_ids_not_reused(self, store):
        a = store.add("hero")
        store.remove(a.id)
        b = store.add("hero")
        assert b.id != a.id

    def test_loaded_ids_not_reissued(self, store):
        store.load(
            Layout(
                canvas_id="c",
                instances=[
                    BlockInstance(id="block-1", type="hero"),
                    BlockInstance(id="block-2", type="grid"),
                ],
            )
        )
        new = store.add("text")
        assert new.id == "block-3"


# ============================================================================
# mutations
# ============================================================================


class TestMutations:
    def test_add_appends_in_order(self, store):
        store.add("header")
        store.add("hero")
        store.add("footer")
        assert [i.type for i in store.instances()] == ["header", "hero", "footer"]

    def test_add_defaults_to_auto_position(self, store):
        inst = store.add("hero")
        assert inst.position == Position()
        assert not inst.position.is_absolute

    def test_remove_is_idempotent(self, store):
        inst = store.add("hero")
        store.add("grid")

        assert store.remove(inst.id) is True
        assert len(store) == 1
        assert store.remove(inst.id) is False
        assert len(store) == 1
        assert store.remove("block-999") is False

    def test_update_properties_merges(self, store):
        inst = store.add("hero", {"heading": "A", "subheading": "B"})
        store.update_properties(inst.id, {"heading": "New"})
        assert store.get(inst.id).properties == {"heading": "New", "subheading": "B"}

    def test_update_unknown_raises(self, store):
        with pytest.raises(NotFound):
            store.update_properties("block-404", {"heading": "x"})

    def test_set_position(self, store):
        inst = store.add("hero")
        store.set_position(inst.id, Position(top="10px", left="20px"))
        assert store.get(inst.id).position == Position(top="10px", left="20px")

    def test_get_returns_copy(self, store):
        inst = store.add("hero", {"heading": "A"})
        copy = store.get(inst.id)
        copy.properties["heading"] = "mutated"
        copy.position.top = "999px"
        assert store.get(inst.id).properties["heading"] == "A"
        assert store.get(inst.id).position.top is None

    def test_add_copies_input_properties(self, store):
        props = {"heading": "A"}
        inst = store.add("hero", props)
        props["heading"] = "B"
        assert store.get(inst.id).properties["heading"] == "A"

    def test_clear(self, store):
        store.add("hero")
        store.clear()
        assert len(store) == 0


# ============================================================================
# notifications
# ============================================================================


class TestNotifications:
    def test_each_mutation_notifies_once(self, store):
        events = collect(store)
        inst = store.add("hero")
        store.update_properties(inst.id, {"heading": "x", "subheading": "y"})
        store.set_position(inst.id, Position(top="1px"))
        store.remove(inst.id)
        store.remove(inst.id)

        assert events == [
            ("add", inst.id),
            ("update", inst.id),
            ("move", inst.id),
            ("remove", inst.id),
        ]

    def test_listener_sees_complete_update(self, store):
        inst = store.add("hero", {"heading": "A", "subheading": "B"})
        seen = []
        store.subscribe(lambda event, iid: seen.append(store.get(iid).properties if iid else None))
        store.update_properties(inst.id, {"heading": "X", "subheading": "Y"})
        assert seen == [{"heading": "X", "subheading": "Y"}]

    def test_unsubscribe(self, store):
        events = []
        unsubscribe = store.subscribe(lambda e, i: events.append(e))
        store.add("hero")
        unsubscribe()
        store.add("hero")
        assert events == ["add"]


# ============================================================================
# layout
# ============================================================================


class TestLayout:
    def test_load_replaces_never_merges(self, store):
        store.add("hero")
        store.add("grid")
        store.load(Layout(canvas_id="other", instances=[BlockInstance(id="x-1", type="footer")]))

        assert store.ids() == ["x-1"]
        assert store.canvas_id == "other"

    def test_load_rejects_duplicate_ids(self, store):
        store.add("hero")
        dup = Layout(
            canvas_id="c",
            instances=[BlockInstance(id="a", type="hero"), BlockInstance(id="a", type="grid")],
        )
        with pytest.raises(InvalidLayout) as exc:
            store.load(dup)
        assert isinstance(exc.value, BlockCanvasError)
        assert store.ids() == ["block-1"]

    def test_to_layout_is_detached(self, store):
        inst = store.add("hero", {"heading": "A"})
        layout = store.to_layout(saved_at=123)
        layout.instances[0].properties["heading"] = "B"
        assert store.get(inst.id).properties["heading"] == "A"
        assert layout.saved_at == 123
        assert layout.canvas_id == "canvas-test"

    def test_load_notifies(self):
        store = InstanceStore()
        events = collect(store)
        store.load(Layout(canvas_id="c"))
        assert events == [("load", None)]
