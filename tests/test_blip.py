"""Tests for the blip model and its lifecycle."""

from __future__ import annotations

import json
import logging
from collections.abc import Callable

import pytest

from rave.exceptions import InvalidOptionError, StructureError
from rave.ids import IdGenerator
from rave.models import (
    Blip,
    BlipCreation,
    BlipState,
    Context,
    OperationType,
    Range,
)

AddBlip = Callable[..., Blip]


class TestConstruction:
    """Tests for Blip.__init__."""

    def test_defaults(self) -> None:
        blip = Blip("b+1")
        assert blip.content == ""
        assert blip.version == -1
        assert blip.state is BlipState.NORMAL
        assert blip.creation is BlipCreation.ORIGINAL
        assert blip.child_blip_ids == []
        assert blip.last_modified_time.tzinfo is not None

    def test_accepts_string_state_and_creation(self) -> None:
        blip = Blip("b+1", state="deleted", creation="virtual")
        assert blip.state is BlipState.DELETED
        assert blip.is_virtual

    def test_bad_state(self) -> None:
        """Invalid states name the value and the allowed set."""
        with pytest.raises(InvalidOptionError) as exc_info:
            Blip("b+1", state="gone")
        message = str(exc_info.value)
        assert "'gone'" in message
        assert "normal, deleted, null" in message

    def test_bad_creation(self) -> None:
        with pytest.raises(ValueError, match="Bad creation 'copied'"):
            Blip("b+1", creation="copied")

    def test_bad_option_does_not_consume_an_id(self) -> None:
        generator = IdGenerator()
        with pytest.raises(InvalidOptionError):
            Blip(wavelet_id="wl", state="bogus", id_generator=generator)
        assert Blip(wavelet_id="wl", id_generator=generator).id == "TBD_wl_1"

    def test_generated_ids_are_scoped_by_wavelet(self) -> None:
        generator = IdGenerator()
        first = Blip(wavelet_id="wl+a", id_generator=generator)
        second = Blip(wavelet_id="wl+b", id_generator=generator)
        assert first.id == "TBD_wl+a_1"
        assert second.id == "TBD_wl+b_2"

    def test_uses_context_generator(self) -> None:
        context = Context(id_generator=IdGenerator(start=40))
        assert Blip(wavelet_id="wl", context=context).id == "TBD_wl_40"

    def test_timestamp_from_wire(self) -> None:
        blip = Blip("b+1", last_modified_time=1250000000000)
        assert blip.last_modified_time.year == 2009


class TestPredicates:
    """Root/leaf/deleted predicates."""

    def test_root_and_leaf(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        child = add_blip("b+1", root)
        assert root.is_root and not root.is_leaf
        assert not child.is_root and child.is_leaf

    def test_empty_parent_id_is_root(self) -> None:
        assert Blip("b+1", parent_blip_id="").is_root

    def test_deleted_includes_null(self) -> None:
        assert Blip("b+1", state="null").is_deleted
        assert Blip("b+1", state="deleted").is_deleted
        assert not Blip("b+1", state="deleted").is_null

    def test_has_annotation(self, add_blip: AddBlip) -> None:
        blip = add_blip("b+0", content="hello")
        assert not blip.has_annotation("style/color")
        blip.set_annotation("style/color", "red", 0, 5)
        assert blip.has_annotation("style/color")


class TestDelete:
    """Tests for Blip.delete() and the delete/destroy transitions."""

    def test_delete_leaf_siblings(self, context: Context, add_blip: AddBlip) -> None:
        """Deleting both leaves of the root empties its child list."""
        root = add_blip("b+0")
        a = add_blip("b+a", root, "hello")
        b = add_blip("b+b", root, "world")

        assert a.delete() == "b+a"
        assert a.state is BlipState.NULL
        assert a.parent_blip_id is None
        assert a.content == ""
        assert root.child_blip_ids == ["b+b"]
        assert "b+a" not in context.blips

        assert b.delete() == "b+b"
        assert b.is_null
        assert root.child_blip_ids == []
        assert root.state is BlipState.NORMAL
        assert context.blips["b+0"] is root

    def test_delete_queues_one_operation(self, context: Context, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        a = add_blip("b+a", root, "hello")

        a.delete()

        assert len(context.operations) == 1
        op = context.operations[0]
        assert op.type is OperationType.BLIP_DELETE
        assert (op.wave_id, op.wavelet_id, op.blip_id) == (a.wave_id, a.wavelet_id, "b+a")

    def test_delete_with_children_keeps_structure(
        self, context: Context, add_blip: AddBlip
    ) -> None:
        root = add_blip("b+0")
        a = add_blip("b+a", root, "parent text")
        add_blip("b+x", a, "reply")

        assert a.delete() == "b+a"

        assert a.state is BlipState.DELETED
        assert a.content == ""
        assert a.child_blip_ids == ["b+x"]
        assert a.parent_blip_id == "b+0"
        assert root.child_blip_ids == ["b+a"]
        assert context.blips["b+a"] is a

    def test_deleted_chain_cascades(self, context: Context, add_blip: AddBlip) -> None:
        """R -> C (deleted) -> D: deleting D also destroys C."""
        root = add_blip("b+0")
        c = add_blip("b+c", root, state="deleted")
        d = add_blip("b+d", c, "leaf")

        d.delete()

        assert d.is_null
        assert c.is_null
        assert c.parent_blip_id is None
        assert root.child_blip_ids == []
        assert "b+c" not in context.blips
        assert "b+d" not in context.blips
        assert len(context.operations) == 1

    def test_cascade_climbs_several_levels(self, context: Context, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        c1 = add_blip("b+c1", root, state="deleted")
        c2 = add_blip("b+c2", c1, state="deleted")
        d = add_blip("b+d", c2, "leaf")

        d.delete()

        assert c2.is_null and c1.is_null
        assert root.child_blip_ids == []
        assert set(context.blips) == {"b+0"}

    def test_cascade_stops_at_ancestor_with_other_children(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        c = add_blip("b+c", root, state="deleted")
        d = add_blip("b+d", c, "first")
        add_blip("b+e", c, "second")

        d.delete()

        assert c.state is BlipState.DELETED
        assert c.child_blip_ids == ["b+e"]
        assert root.child_blip_ids == ["b+c"]

    def test_delete_then_delete_last_child_cascades(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        a = add_blip("b+a", root, "parent")
        x = add_blip("b+x", a, "reply")

        a.delete()
        x.delete()

        assert a.is_null
        assert root.child_blip_ids == []

    @pytest.mark.parametrize("state", ["deleted", "null"])
    def test_delete_already_deleted_warns(
        self,
        context: Context,
        add_blip: AddBlip,
        caplog: pytest.LogCaptureFixture,
        state: str,
    ) -> None:
        root = add_blip("b+0")
        blip = add_blip("b+a", root, state=state)

        with caplog.at_level(logging.WARNING):
            assert blip.delete() is None

        assert blip.state is BlipState(state)
        assert context.operations == []
        assert "already been deleted: b+a" in caplog.text

    def test_delete_root_warns(
        self, context: Context, add_blip: AddBlip, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = add_blip("b+0", content="root text")
        add_blip("b+a", root)

        with caplog.at_level(logging.WARNING):
            assert root.delete() is None

        assert root.state is BlipState.NORMAL
        assert root.content == "root text"
        assert context.operations == []
        assert "Attempt to delete root blip: b+0" in caplog.text

    def test_delete_twice_warns_second_time(
        self, context: Context, add_blip: AddBlip, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = add_blip("b+0")
        a = add_blip("b+a", root)

        a.delete()
        with caplog.at_level(logging.WARNING):
            assert a.delete() is None

        assert len(context.operations) == 1

    def test_internal_delete_of_root_raises(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        with pytest.raises(StructureError, match="Can't delete root blip"):
            root._delete()

    def test_internal_destroy_of_root_raises(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        with pytest.raises(StructureError, match="Can't destroy root blip"):
            root._destroy()

    def test_internal_destroy_of_non_leaf_raises(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        a = add_blip("b+a", root)
        add_blip("b+x", a)
        with pytest.raises(StructureError, match="Can't destroy non-leaf blip"):
            a._destroy()


class TestCreateChild:
    """Tests for Blip.create_child_blip()."""

    def test_links_and_registers(self, context: Context, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        add_blip("b+a", root)

        child = root.create_child_blip()

        assert root.child_blip_ids == ["b+a", child.id]
        assert child.parent_blip_id == "b+0"
        assert child.wave_id == root.wave_id
        assert child.wavelet_id == root.wavelet_id
        assert child.is_generated
        assert child.contributor_ids == ["robot@appspot.com"]
        assert context.blips[child.id] is child
        assert child.id.startswith(f"TBD_{root.wavelet_id}_")

    def test_queues_one_creation(self, context: Context, add_blip: AddBlip) -> None:
        root = add_blip("b+0")

        child = root.create_child_blip()

        assert len(context.operations) == 1
        op = context.operations[0]
        assert op.type is OperationType.BLIP_CREATE_CHILD
        assert op.blip_id == "b+0"
        assert op.property is child
        assert op.to_dict()["property"] == child.to_dict()

    def test_child_can_be_deleted(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0")
        child = root.create_child_blip()

        child.delete()

        assert root.child_blip_ids == []


class TestDocumentOperations:
    """Text edits queue operations and update local content."""

    def test_set_text(self, context: Context, add_blip: AddBlip) -> None:
        blip = add_blip("b+0", content="old")
        blip.set_text("new")
        assert blip.content == "new"
        op = context.operations[0]
        assert op.type is OperationType.DOCUMENT_REPLACE
        assert op.property == "new"

    def test_append_and_insert(self, context: Context, add_blip: AddBlip) -> None:
        blip = add_blip("b+0", content="world")
        blip.insert_text(0, "hello ")
        blip.append_text("!")
        assert blip.content == "hello world!"
        assert [op.type for op in context.operations] == [
            OperationType.DOCUMENT_INSERT,
            OperationType.DOCUMENT_APPEND,
        ]
        assert context.operations[0].index == 0

    def test_delete_range(self, context: Context, add_blip: AddBlip) -> None:
        blip = add_blip("b+0", content="hello world")
        blip.delete_range(5, 11)
        assert blip.content == "hello"
        assert context.operations[0].property == Range(5, 11)

    def test_out_of_range(self, add_blip: AddBlip) -> None:
        blip = add_blip("b+0", content="abc")
        with pytest.raises(ValueError):
            blip.insert_text(4, "x")
        with pytest.raises(ValueError):
            blip.delete_range(1, 9)
        with pytest.raises(ValueError):
            blip.delete_range(2, 1)

    def test_edit_deleted_blip_warns(
        self, context: Context, add_blip: AddBlip, caplog: pytest.LogCaptureFixture
    ) -> None:
        root = add_blip("b+0")
        a = add_blip("b+a", root, "text")
        add_blip("b+x", a)
        a.delete()
        context.operations.clear()

        with caplog.at_level(logging.WARNING):
            a.set_text("revived")

        assert a.content == ""
        assert context.operations == []
        assert "deleted blip: b+a" in caplog.text

    def test_positional_edits_on_deleted_blip_warn(
        self, context: Context, add_blip: AddBlip, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Positions are not checked against the cleared content."""
        root = add_blip("b+0")
        a = add_blip("b+a", root, "some text")
        add_blip("b+x", a)
        a.delete()
        context.operations.clear()

        with caplog.at_level(logging.WARNING):
            a.insert_text(3, "x")
            a.delete_range(0, 4)
            annotation = a.set_annotation("style/color", "red", 0, 4)

        assert annotation is None
        assert a.annotations == []
        assert a.content == ""
        assert context.operations == []
        assert caplog.text.count("deleted blip: b+a") == 3


class TestSerialization:
    """Display string and wire payload."""

    def test_to_dict_is_minimal(self) -> None:
        blip = Blip(
            "b+1",
            content="x" * 10_000,
            wave_id="w+1",
            wavelet_id="wl+1",
            contributor_ids=["a@x"],
        )
        assert blip.to_dict() == {
            "blipId": "b+1",
            "javaClass": "com.google.wave.api.impl.BlipData",
            "waveId": "w+1",
            "waveletId": "wl+1",
        }
        assert json.loads(blip.to_json()) == blip.to_dict()

    def test_str_normal(self) -> None:
        blip = Blip("b+1", content="hi\nthere", contributor_ids=["a@x", "b@x"])
        assert str(blip) == "Blip:b+1:a@x,b@x:hi\\nthere"

    def test_str_truncates_long_content(self) -> None:
        blip = Blip("b+1", content="abcdefghijklmnopqrstuvwxyz", contributor_ids=["a@x"])
        assert str(blip) == "Blip:b+1:a@x:abcdefghijklmnopqrstu..."

    def test_str_keeps_24_chars(self) -> None:
        blip = Blip("b+1", content="x" * 24)
        assert str(blip) == f"Blip:b+1::{'x' * 24}"

    def test_str_deleted_and_null(self) -> None:
        assert str(Blip("b+1", state="deleted")) == "Blip:b+1:<DELETED>"
        assert str(Blip("b+1", state="null")) == "Blip:b+1:<NULL>"


class TestPrintStructure:
    """Tests for Blip.print_structure()."""

    def test_single_blip(self, add_blip: AddBlip) -> None:
        root = add_blip("b+0", content="root")
        assert root.print_structure() == "Blip:b+0:a@x:root\n"

    def test_branches_and_thread(self, add_blip: AddBlip) -> None:
        """Replies after the first are indented; the first continues the thread."""
        root = add_blip("R", content="root")
        a = add_blip("A", root, "a")
        add_blip("B", root, "b")
        add_blip("C", root, "c")
        add_blip("A1", a, "a1")

        assert root.print_structure() == (
            "Blip:R:a@x:root\n"
            "  Blip:B:a@x:b\n"
            "\n"
            "  Blip:C:a@x:c\n"
            "Blip:A:a@x:a\n"
            "Blip:A1:a@x:a1\n"
        )

    def test_nested_indent(self, add_blip: AddBlip) -> None:
        root = add_blip("R", content="r")
        add_blip("A", root, "a")
        b = add_blip("B", root, "b")
        add_blip("B1", b, "b1")
        add_blip("B2", b, "b2")

        assert root.print_structure(1) == (
            "  Blip:R:a@x:r\n"
            "    Blip:B:a@x:b\n"
            "      Blip:B2:a@x:b2\n"
            "    Blip:B1:a@x:b1\n"
            "  Blip:A:a@x:a\n"
        )

    def test_has_no_side_effects(self, context: Context, add_blip: AddBlip) -> None:
        root = add_blip("R")
        add_blip("A", root)
        add_blip("B", root)

        root.print_structure()

        assert root.child_blip_ids == ["A", "B"]
        assert context.operations == []
