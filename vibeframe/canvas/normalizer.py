"""Element normalizer: structural validation plus default filling for one element.

Every element that reaches the canonical collection has passed through ``normalize``.
The function is total: any input, including ``None`` or non-mappings, yields either a
well-formed element dict or ``None``.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from vibeframe.models.edit_ops import Element

logger = logging.getLogger(__name__)

ELEMENT_TYPES = ("rectangle", "ellipse", "diamond", "text", "arrow", "line", "freedraw")
LINEAR_TYPES = frozenset({"line", "arrow"})

# Applied when the attribute is missing or falsy
_TRUTHY_DEFAULTS: dict[str, Any] = {
    "backgroundColor": "transparent",
    "strokeColor": "#000000",
    "fillStyle": "solid",
}

# Applied only when the attribute is missing or None
_NULLISH_DEFAULTS: dict[str, Any] = {
    "strokeWidth": 2,
    "roughness": 1,
    "opacity": 100,
    "angle": 0,
    "frameId": None,
    "roundness": None,
    "boundElements": None,
    "link": None,
    "isDeleted": False,
    "locked": False,
}

_TEXT_NULLISH_DEFAULTS: dict[str, Any] = {
    "fontSize": 20,
    "fontFamily": 1,
}

_TEXT_TRUTHY_DEFAULTS: dict[str, Any] = {
    "textAlign": "left",
    "verticalAlign": "top",
}


def is_number(value: Any) -> bool:
    """Finite int/float, excluding bool."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_point(value: Any) -> bool:
    return (
        isinstance(value, (list, tuple))
        and len(value) == 2
        and is_number(value[0])
        and is_number(value[1])
    )


def _valid_points(points: Any, minimum: int) -> bool:
    if not isinstance(points, (list, tuple)) or len(points) < minimum:
        return False
    return all(_is_point(p) for p in points)


def normalize(raw: Any) -> Element | None:
    """Validate one raw element and fill its optional attributes, or return None."""
    if not isinstance(raw, dict):
        return None

    el_type = raw.get("type")
    el_id = raw.get("id")
    if not isinstance(el_type, str) or not el_type:
        return None
    if not isinstance(el_id, str) or not el_id:
        return None
    if not is_number(raw.get("x")) or not is_number(raw.get("y")):
        return None

    if el_type in LINEAR_TYPES:
        if not _valid_points(raw.get("points"), 2):
            return None
    elif el_type == "freedraw":
        if not _valid_points(raw.get("points"), 1):
            return None
    if el_type not in LINEAR_TYPES:
        # freedraw and unknown types (frames, images) are boxed too
        if not is_number(raw.get("width")) or not is_number(raw.get("height")):
            return None
    if el_type == "text" and not isinstance(raw.get("text"), str):
        return None

    element: Element = dict(raw)
    for key, default in _TRUTHY_DEFAULTS.items():
        if not element.get(key):
            element[key] = default
    for key, default in _NULLISH_DEFAULTS.items():
        if element.get(key) is None:
            element[key] = default

    group_ids = element.get("groupIds")
    element["groupIds"] = list(group_ids) if isinstance(group_ids, (list, tuple)) else []

    if el_type in LINEAR_TYPES or el_type == "freedraw":
        element["points"] = [[p[0], p[1]] for p in element["points"]]

    if el_type == "text":
        for key, default in _TEXT_NULLISH_DEFAULTS.items():
            if element.get(key) is None:
                element[key] = default
        for key, default in _TEXT_TRUTHY_DEFAULTS.items():
            if not element.get(key):
                element[key] = default

    return element


def normalize_all(elements: Any) -> tuple[list[Element], list[str]]:
    """Normalize a collection, dropping invalid elements and repeated ids.

    Returns (kept, dropped) where ``dropped`` lists the ids (or "<index N>" when the
    element had no usable id) of everything that did not survive.
    """
    kept: list[Element] = []
    dropped: list[str] = []
    seen: set[str] = set()

    if not isinstance(elements, (list, tuple)):
        return kept, dropped

    for index, raw in enumerate(elements):
        element = normalize(raw)
        if element is None:
            dropped.append(_label(raw, index))
            continue
        if element["id"] in seen:
            dropped.append(element["id"])
            continue
        seen.add(element["id"])
        kept.append(element)

    if dropped:
        logger.warning("Dropped %d invalid element(s): %s", len(dropped), ", ".join(dropped))

    return kept, dropped


def _label(raw: Any, index: int) -> str:
    if isinstance(raw, dict) and isinstance(raw.get("id"), str) and raw["id"]:
        return raw["id"]
    return f"<index {index}>"
