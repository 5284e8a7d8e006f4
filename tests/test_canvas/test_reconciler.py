"""Tests for the element reconciler."""

from __future__ import annotations

import copy

from vibeframe.canvas.normalizer import normalize_all
from vibeframe.canvas.reconciler import apply_ops, reconcile, reconcile_update
from vibeframe.models.edit_ops import ElementUpdate, ElementUpdateOp
from tests.conftest import CTA_ARROW, FEAT1, HEADER_BG, LANDING_ELEMENTS, LOGO


def _ids(elements):
    return [el["id"] for el in elements]


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------

class TestPrecedence:
    def test_no_update_returns_copy_of_current(self):
        out = reconcile(LANDING_ELEMENTS)
        assert out == LANDING_ELEMENTS
        assert out is not LANDING_ELEMENTS
        assert out[0] is not LANDING_ELEMENTS[0]

    def test_empty_ops_and_empty_replacement_are_identity(self):
        assert reconcile(LANDING_ELEMENTS, [], []) == LANDING_ELEMENTS

    def test_full_replacement_supersedes_current(self):
        out = reconcile(LANDING_ELEMENTS, full_replacement=[FEAT1])
        assert _ids(out) == ["feat1"]

    def test_partial_ops_take_precedence_over_replacement(self):
        out = reconcile(
            LANDING_ELEMENTS,
            full_replacement=[FEAT1],
            partial_ops=[ElementUpdateOp(operation="delete", element_id="logo")],
        )
        assert _ids(out) == ["header-bg", "feat1"]

    def test_reconcile_update_dispatches_on_update(self):
        update = ElementUpdate(partial_ops=[ElementUpdateOp(operation="delete", element_id="feat1")])
        assert update.mode == "partial"
        assert _ids(reconcile_update(LANDING_ELEMENTS, update)) == ["header-bg", "logo"]
        assert ElementUpdate().mode == "none"
        assert ElementUpdate(full_replacement=[LOGO]).mode == "full"


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

class TestOperations:
    def test_update_merges_only_given_fields(self):
        out = apply_ops(LANDING_ELEMENTS, [ElementUpdateOp(operation="update", element_id="feat1", changes={"x": 5})])
        feat = out[2]
        assert feat["x"] == 5
        assert feat["y"] == FEAT1["y"]
        assert feat["width"] == FEAT1["width"]
        assert feat["backgroundColor"] == FEAT1["backgroundColor"]

    def test_update_ignores_id_change(self):
        out = apply_ops([LOGO], [ElementUpdateOp(operation="update", element_id="logo", changes={"id": "brand", "text": "B"})])
        assert out[0]["id"] == "logo"
        assert out[0]["text"] == "B"

    def test_delete_is_idempotent(self):
        op = ElementUpdateOp(operation="delete", element_id="feat1")
        once = apply_ops(LANDING_ELEMENTS, [op])
        twice = apply_ops(once, [op])
        assert once == twice
        assert _ids(twice) == ["header-bg", "logo"]

    def test_unknown_target_skipped(self, caplog):
        with caplog.at_level("INFO", logger="vibeframe.canvas.reconciler"):
            out = apply_ops(LANDING_ELEMENTS, [
                ElementUpdateOp(operation="delete", element_id="ghost"),
                ElementUpdateOp(operation="update", element_id="ghost", changes={"x": 1}),
            ])
        assert out == LANDING_ELEMENTS
        assert "ghost" in caplog.text

    def test_update_then_delete_in_one_turn(self):
        out = apply_ops(LANDING_ELEMENTS, [
            ElementUpdateOp(operation="update", element_id="feat1", changes={"x": 1}),
            ElementUpdateOp(operation="delete", element_id="feat1"),
        ])
        assert "feat1" not in _ids(out)

    def test_delete_leaves_bindings_dangling(self):
        out = apply_ops([FEAT1, CTA_ARROW], [ElementUpdateOp(operation="delete", element_id="feat1")])
        assert out == [CTA_ARROW]

    def test_dict_ops_are_coerced(self):
        out = reconcile(LANDING_ELEMENTS, partial_ops=[
            {"operation": "update", "element_id": "logo", "changes": {"text": "MyBrand"}},
        ])
        assert out[1]["text"] == "MyBrand"

    def test_order_preserved_for_survivors(self):
        out = apply_ops(LANDING_ELEMENTS, [ElementUpdateOp(operation="delete", element_id="header-bg")])
        assert _ids(out) == ["logo", "feat1"]

    def test_input_not_mutated(self):
        current = copy.deepcopy(LANDING_ELEMENTS)
        apply_ops(current, [
            ElementUpdateOp(operation="update", element_id="logo", changes={"text": "X"}),
            ElementUpdateOp(operation="delete", element_id="feat1"),
        ])
        assert current == LANDING_ELEMENTS


# ---------------------------------------------------------------------------
# Landing page edit
# ---------------------------------------------------------------------------

def test_delete_card_and_rename_logo():
    out = reconcile(LANDING_ELEMENTS, partial_ops=[
        ElementUpdateOp(operation="delete", element_id="feat1"),
        ElementUpdateOp(operation="update", element_id="logo", changes={"text": "MyBrand"}),
    ])
    kept, dropped = normalize_all(out)
    assert _ids(kept) == ["header-bg", "logo"]
    assert kept[1]["text"] == "MyBrand"
    assert kept[0]["backgroundColor"] == HEADER_BG["backgroundColor"]
    assert dropped == []


def test_full_replacement_then_normalize_drops_invalid():
    out = reconcile(LANDING_ELEMENTS, full_replacement=[HEADER_BG, {"type": "arrow", "id": "x", "x": 0, "y": 0}])
    kept, dropped = normalize_all(out)
    assert _ids(kept) == ["header-bg"]
    assert dropped == ["x"]
