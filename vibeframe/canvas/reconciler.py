"""Element reconciler. Merges a turn's proposed changes into the element collection."""

from __future__ import annotations

import logging
from typing import Any, Iterable

from vibeframe.models.edit_ops import Element, ElementUpdate, ElementUpdateOp

logger = logging.getLogger(__name__)


def reconcile(
    current: list[Element],
    full_replacement: list[Element] | None = None,
    partial_ops: Iterable[ElementUpdateOp | dict[str, Any]] | None = None,
) -> list[Element]:
    """Apply one turn's update to ``current`` and return the new collection.

    Precedence: a non-empty ``partial_ops`` is applied against ``current``; otherwise a
    non-empty ``full_replacement`` replaces it wholesale; otherwise ``current`` comes back
    unchanged. The result is always a fresh list and ``current`` is never mutated.

    The output is not normalized here; callers run it through the normalizer.
    """
    ops = [_coerce(op) for op in partial_ops] if partial_ops else []
    if ops:
        return apply_ops(current, ops)
    if full_replacement:
        return [dict(el) if isinstance(el, dict) else el for el in full_replacement]
    return [dict(el) for el in current]


def reconcile_update(current: list[Element], update: ElementUpdate) -> list[Element]:
    return reconcile(current, update.full_replacement, update.partial_ops)


def apply_ops(current: list[Element], ops: list[ElementUpdateOp]) -> list[Element]:
    """Apply update/delete operations in order. Unknown targets are skipped."""
    result = [dict(el) for el in current]

    for op in ops:
        index = _find(result, op.element_id)
        if index < 0:
            logger.info("Element op %s: unknown target %r, skipping", op.operation, op.element_id)
            continue

        if op.operation == "delete":
            # Bound references on other elements are left dangling
            del result[index]
        elif op.operation == "update":
            if not op.changes:
                continue
            changes = {k: v for k, v in op.changes.items() if k != "id"}
            result[index] = {**result[index], **changes}

    return result


def _find(elements: list[Element], element_id: str) -> int:
    for index, el in enumerate(elements):
        if el.get("id") == element_id:
            return index
    return -1


def _coerce(op: ElementUpdateOp | dict[str, Any]) -> ElementUpdateOp:
    if isinstance(op, ElementUpdateOp):
        return op
    return ElementUpdateOp.model_validate(op)
