"""Tests for the element normalizer."""

from __future__ import annotations

import math

import pytest

from vibeframe.canvas.normalizer import is_number, normalize, normalize_all
from tests.conftest import CTA_ARROW, FEAT1, HEADER_BG, LOGO


# ---------------------------------------------------------------------------
# Rejection
# ---------------------------------------------------------------------------

class TestRejection:
    @pytest.mark.parametrize(
        "raw",
        [
            None,
            42,
            "rectangle",
            [],
            {},
            {"type": "rectangle", "x": 0, "y": 0, "width": 1, "height": 1},
            {"id": "a", "x": 0, "y": 0, "width": 1, "height": 1},
            {"type": "rectangle", "id": "a", "x": "0", "y": 0, "width": 1, "height": 1},
            {"type": "rectangle", "id": "a", "x": 0, "y": None, "width": 1, "height": 1},
            {"type": "rectangle", "id": "a", "x": 0, "y": 0, "width": 1},
            {"type": "ellipse", "id": "a", "x": 0, "y": 0, "width": "wide", "height": 1},
            {"type": "text", "id": "a", "x": 0, "y": 0, "width": 1, "height": 1},
            {"type": "text", "id": "a", "x": 0, "y": 0, "width": 1, "height": 1, "text": 5},
            {"type": "freedraw", "id": "a", "x": 0, "y": 0, "width": 1, "height": 1, "points": []},
        ],
    )
    def test_invalid_input_yields_none(self, raw):
        assert normalize(raw) is None

    def test_arrow_without_points_rejected(self):
        assert normalize({"type": "arrow", "id": "x", "x": 0, "y": 0}) is None

    @pytest.mark.parametrize(
        "points",
        [
            [[0, 0]],
            [[0, 0], [10]],
            [[0, 0], [10, "10"]],
            [[0, 0], [10, 10, 10]],
            "0,0 10,10",
            [[0, 0], None],
        ],
    )
    def test_line_with_bad_points_rejected(self, points):
        assert normalize({"type": "line", "id": "l", "x": 0, "y": 0, "points": points}) is None

    def test_non_finite_and_bool_are_not_numbers(self):
        assert not is_number(float("nan"))
        assert not is_number(math.inf)
        assert not is_number(True)
        assert is_number(0)
        assert is_number(-1.5)
        assert normalize({"type": "rectangle", "id": "a", "x": float("nan"), "y": 0, "width": 1, "height": 1}) is None
        assert normalize({"type": "rectangle", "id": "a", "x": True, "y": 0, "width": 1, "height": 1}) is None


# ---------------------------------------------------------------------------
# Acceptance and defaults
# ---------------------------------------------------------------------------

class TestDefaults:
    def test_arrow_with_points_accepted_with_defaults(self):
        el = normalize({"type": "arrow", "id": "x", "x": 0, "y": 0, "points": [[0, 0], [10, 10]]})
        assert el is not None
        assert el["strokeColor"] == "#000000"
        assert el["backgroundColor"] == "transparent"
        assert el["fillStyle"] == "solid"
        assert el["strokeWidth"] == 2
        assert el["roughness"] == 1
        assert el["opacity"] == 100
        assert el["angle"] == 0
        assert el["groupIds"] == []
        assert el["frameId"] is None
        assert el["roundness"] is None
        assert el["boundElements"] is None
        assert el["link"] is None
        assert el["locked"] is False
        assert el["isDeleted"] is False
        assert "width" not in el

    def test_text_defaults(self):
        el = normalize({"type": "text", "id": "t", "x": 1, "y": 2, "width": 10, "height": 5, "text": "Hi"})
        assert el["fontSize"] == 20
        assert el["fontFamily"] == 1
        assert el["textAlign"] == "left"
        assert el["verticalAlign"] == "top"

    def test_empty_text_is_still_a_string(self):
        assert normalize({"type": "text", "id": "t", "x": 0, "y": 0, "width": 0, "height": 0, "text": ""}) is not None

    def test_given_values_are_kept(self):
        el = normalize(HEADER_BG)
        assert el["strokeWidth"] == 1
        assert el["roughness"] == 0
        assert el["backgroundColor"] == "#f5f5f5"

    def test_zero_values_survive_nullish_defaults(self):
        el = normalize({**FEAT1, "opacity": 0, "angle": 0, "strokeWidth": 0})
        assert el["opacity"] == 0
        assert el["strokeWidth"] == 0

    def test_falsy_colors_get_defaults(self):
        el = normalize({**FEAT1, "backgroundColor": "", "strokeColor": None})
        assert el["backgroundColor"] == "transparent"
        assert el["strokeColor"] == "#000000"

    def test_input_not_mutated(self):
        raw = dict(LOGO)
        normalize(raw)
        assert raw == LOGO

    def test_points_tuples_become_lists(self):
        el = normalize({"type": "line", "id": "l", "x": 0, "y": 0, "points": ((0, 0), (5, 5))})
        assert el["points"] == [[0, 0], [5, 5]]

    def test_dangling_binding_tolerated(self):
        el = normalize(CTA_ARROW)
        assert el is not None
        assert el["startBinding"] == {"elementId": "feat1"}

    def test_unknown_type_treated_as_boxed(self):
        assert normalize({"type": "frame", "id": "f", "x": 0, "y": 0, "width": 100, "height": 100}) is not None
        assert normalize({"type": "frame", "id": "f", "x": 0, "y": 0}) is None

    def test_idempotent(self):
        once = normalize(LOGO)
        assert normalize(once) == once


# ---------------------------------------------------------------------------
# Collections
# ---------------------------------------------------------------------------

class TestNormalizeAll:
    def test_drops_invalid_and_reports_ids(self):
        kept, dropped = normalize_all([HEADER_BG, {"type": "text", "id": "bad", "x": 0, "y": 0}, None, LOGO])
        assert [el["id"] for el in kept] == ["header-bg", "logo"]
        assert dropped == ["bad", "<index 2>"]

    def test_duplicate_ids_keep_first(self):
        kept, dropped = normalize_all([FEAT1, {**FEAT1, "x": 999}])
        assert len(kept) == 1
        assert kept[0]["x"] == 60
        assert dropped == ["feat1"]

    def test_non_list_input(self):
        assert normalize_all(None) == ([], [])
