"""Element update operations for incremental canvas modification."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# An element is a loose attribute bag keyed by Excalidraw property names.
Element = dict[str, Any]


class ElementUpdateOp(BaseModel):
    """A single partial update against an element addressed by id."""

    operation: Literal["update", "delete"] = Field(
        ..., description="update: modify existing element, delete: remove element"
    )
    element_id: str = Field(..., description="ID of the element to update or delete")
    changes: dict[str, Any] | None = Field(
        default=None, description="Properties to update (only for update operation)"
    )


class ElementUpdate(BaseModel):
    """One turn's proposed change to the element collection.

    ``partial_ops`` wins when non-empty, otherwise a non-empty ``full_replacement``
    replaces the collection, otherwise nothing changes.
    """

    full_replacement: list[Element] | None = None
    partial_ops: list[ElementUpdateOp] | None = None

    @property
    def mode(self) -> str:
        if self.partial_ops:
            return "partial"
        if self.full_replacement:
            return "full"
        return "none"
