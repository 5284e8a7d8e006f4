"""Canvas change notifications and Excalidraw export/import."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from vibeframe.api import errors
from vibeframe.api.conversations import conversation_response, load_or_404, save_or_500
from vibeframe.canvas.export import export_document, export_filename, import_document
from vibeframe.canvas.sync import CanvasHub
from vibeframe.config import settings
from vibeframe.dependencies import get_canvas_hub, get_store
from vibeframe.errors import ExportFormatError, PersistenceError
from vibeframe.models.requests import CanvasSnapshotRequest
from vibeframe.models.responses import CanvasSyncResponse, ConversationResponse
from vibeframe.storage.sessions import SessionStore

router = APIRouter(prefix="/conversations")
logger = logging.getLogger(__name__)


@router.put("/{session_id}/elements", response_model=CanvasSyncResponse)
async def canvas_changed(
    session_id: str,
    req: CanvasSnapshotRequest,
    store: SessionStore = Depends(get_store),
    hub: CanvasHub = Depends(get_canvas_hub),
) -> CanvasSyncResponse:
    """Full snapshot reported by the renderer after a user edit."""
    load_or_404(store, session_id)
    try:
        status = hub.get(session_id).notify(req.elements)
    except PersistenceError as e:
        raise errors.persistence_failed(e) from e
    return CanvasSyncResponse(status=status, element_count=len(req.elements))


@router.get("/{session_id}/export")
async def export_conversation(session_id: str, store: SessionStore = Depends(get_store)) -> JSONResponse:
    session = load_or_404(store, session_id)
    doc = export_document(
        session.elements,
        background=settings.canvas_background,
        grid_size=settings.canvas_grid_size,
    )
    filename = export_filename(session.wireframe_title)
    return JSONResponse(
        content=doc,
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )


@router.post("/{session_id}/import", response_model=ConversationResponse)
async def import_conversation(
    session_id: str,
    doc: dict[str, Any] = Body(...),
    store: SessionStore = Depends(get_store),
    hub: CanvasHub = Depends(get_canvas_hub),
) -> ConversationResponse:
    session = load_or_404(store, session_id)
    try:
        elements, _ = import_document(doc)
    except ExportFormatError as e:
        raise errors.bad_import(e) from e

    updated = session.with_elements(elements)
    save_or_500(store, updated)
    hub.push(session_id, updated.elements)
    logger.info("Imported %d elements into %s", len(elements), session_id)
    return conversation_response(updated)
