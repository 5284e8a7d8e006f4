"""Excalidraw document export and import."""

from __future__ import annotations

import logging
from typing import Any

from vibeframe.canvas.normalizer import normalize_all
from vibeframe.errors import ExportFormatError
from vibeframe.models.edit_ops import Element

logger = logging.getLogger(__name__)

DOCUMENT_TYPE = "excalidraw"
DOCUMENT_VERSION = 2
DOCUMENT_SOURCE = "vibeframe"
FILE_EXTENSION = ".excalidraw"


def export_document(
    elements: list[Element],
    background: str = "#ffffff",
    grid_size: int = 20,
) -> dict[str, Any]:
    """Serialize an element collection as a self-describing Excalidraw document."""
    return {
        "type": DOCUMENT_TYPE,
        "version": DOCUMENT_VERSION,
        "source": DOCUMENT_SOURCE,
        "elements": [dict(el) for el in elements],
        "appState": {
            "viewBackgroundColor": background,
            "gridSize": grid_size,
        },
        "files": {},
    }


def import_document(doc: Any) -> tuple[list[Element], dict[str, Any]]:
    """Validate an exported document and re-normalize its elements.

    Returns (elements, appState). Raises ExportFormatError when the document is not an
    Excalidraw document this package can read.
    """
    if not isinstance(doc, dict):
        raise ExportFormatError("Document must be a JSON object")
    if doc.get("type") != DOCUMENT_TYPE:
        raise ExportFormatError(f"Unsupported document type: {doc.get('type')!r}")
    version = doc.get("version")
    if not isinstance(version, int) or isinstance(version, bool) or version > DOCUMENT_VERSION:
        raise ExportFormatError(f"Unsupported document version: {version!r}")
    elements = doc.get("elements")
    if not isinstance(elements, list):
        raise ExportFormatError("Document has no elements array")

    kept, dropped = normalize_all(elements)
    if dropped:
        logger.info("Import dropped %d element(s)", len(dropped))

    app_state = doc.get("appState")
    return kept, dict(app_state) if isinstance(app_state, dict) else {}


def export_filename(title: str | None) -> str:
    return f"{title or 'wireframe'}{FILE_EXTENSION}"
