"""Conversation CRUD, titles, undo and explicit workflow reset under /api/conversations."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Response

from vibeframe.api import errors
from vibeframe.canvas.sync import CanvasHub
from vibeframe.config import settings
from vibeframe.dependencies import get_canvas_hub, get_generation_client, get_store
from vibeframe.errors import NothingToUndo, PersistenceError, SessionNotFound
from vibeframe.llm.client import GenerationClient
from vibeframe.llm.titles import generate_title
from vibeframe.models.requests import (
    CreateConversationRequest,
    GenerateTitleRequest,
    RenameConversationRequest,
    ResetWorkflowRequest,
)
from vibeframe.models.responses import ConversationResponse
from vibeframe.models.session import SessionDocument, SessionSummary
from vibeframe.storage.sessions import SessionStore
from vibeframe.workflow.catalog import Progress, get_catalog
from vibeframe.workflow.machine import WorkflowStateMachine

router = APIRouter(prefix="/conversations")
logger = logging.getLogger(__name__)


def progress_for(session: SessionDocument) -> Progress | None:
    state = session.workflow
    catalog = get_catalog(state.version)
    if not catalog.has_step(state.mode, state.step):
        return None
    return catalog.progress(state.mode, state.step, session.answers)


def load_or_404(store: SessionStore, session_id: str) -> SessionDocument:
    try:
        return store.load_session(session_id)
    except SessionNotFound as e:
        raise errors.not_found(e) from e


def save_or_500(store: SessionStore, session: SessionDocument) -> None:
    try:
        store.save_session(session)
    except PersistenceError as e:
        raise errors.persistence_failed(e) from e


def conversation_response(session: SessionDocument) -> ConversationResponse:
    return ConversationResponse(conversation=session, progress=progress_for(session))


@router.post("", response_model=ConversationResponse, status_code=201)
async def create_conversation(
    req: CreateConversationRequest,
    store: SessionStore = Depends(get_store),
) -> ConversationResponse:
    version = req.version or settings.workflow_version
    try:
        catalog = get_catalog(version)
    except KeyError as e:
        raise errors.invalid_request(str(e)) from e
    if req.mode not in catalog.modes():
        raise errors.invalid_request(f"Mode {req.mode!r} is not available in catalog {version}")

    state = WorkflowStateMachine(catalog).initial_state(req.mode)
    session = SessionDocument.new(state, title=req.title)
    save_or_500(store, session)
    logger.info("Created conversation %s (%s, %s)", session.id, version, req.mode)
    return conversation_response(session)


@router.get("", response_model=list[SessionSummary])
async def list_conversations(store: SessionStore = Depends(get_store)) -> list[SessionSummary]:
    return store.list_sessions()


@router.get("/{session_id}", response_model=ConversationResponse)
async def get_conversation(session_id: str, store: SessionStore = Depends(get_store)) -> ConversationResponse:
    return conversation_response(load_or_404(store, session_id))


@router.patch("/{session_id}", response_model=ConversationResponse)
async def rename_conversation(
    session_id: str,
    req: RenameConversationRequest,
    store: SessionStore = Depends(get_store),
) -> ConversationResponse:
    session = load_or_404(store, session_id).with_title(req.title)
    save_or_500(store, session)
    return conversation_response(session)


@router.post("/{session_id}/title", response_model=ConversationResponse)
async def generate_conversation_title(
    session_id: str,
    req: GenerateTitleRequest,
    store: SessionStore = Depends(get_store),
    client: GenerationClient = Depends(get_generation_client),
) -> ConversationResponse:
    session = load_or_404(store, session_id)
    message = req.message or next((m.text for m in session.messages if m.role == "user"), "")
    if not message.strip():
        raise errors.invalid_request("No message to title the conversation from")

    title = await generate_title(client, message, timeout=settings.title_timeout_seconds)
    updated = session.with_title(title)
    save_or_500(store, updated)
    logger.info("Titled conversation %s: %s", session_id, title)
    return conversation_response(updated)


@router.delete("/{session_id}", status_code=204)
async def delete_conversation(
    session_id: str,
    store: SessionStore = Depends(get_store),
    hub: CanvasHub = Depends(get_canvas_hub),
) -> Response:
    try:
        store.delete_session(session_id)
    except SessionNotFound as e:
        raise errors.not_found(e) from e
    hub.discard(session_id)
    return Response(status_code=204)


@router.post("/{session_id}/reset", response_model=ConversationResponse)
async def reset_workflow(
    session_id: str,
    req: ResetWorkflowRequest,
    store: SessionStore = Depends(get_store),
) -> ConversationResponse:
    session = load_or_404(store, session_id)
    catalog = get_catalog(session.workflow.version)
    if req.mode not in catalog.modes():
        raise errors.invalid_request(
            f"Mode {req.mode!r} is not available in catalog {catalog.version}"
        )

    state, answers = WorkflowStateMachine(catalog).reset(req.mode)
    updated = session.copy_for_turn()
    updated.workflow = state
    updated.answers = answers
    updated.touch()
    save_or_500(store, updated)
    logger.info("Reset workflow of %s to %s", session_id, req.mode)
    return conversation_response(updated)


@router.post("/{session_id}/undo", response_model=ConversationResponse)
async def undo_exchange(
    session_id: str,
    store: SessionStore = Depends(get_store),
    hub: CanvasHub = Depends(get_canvas_hub),
) -> ConversationResponse:
    """Drop the last exchange and restore the canvas that preceded it."""
    session = load_or_404(store, session_id)
    try:
        updated = session.undone()
    except NothingToUndo as e:
        raise errors.nothing_to_undo(e) from e

    try:
        store.save_session(updated)
        store.replace_messages(session_id, updated.messages)
    except PersistenceError as e:
        raise errors.persistence_failed(e) from e
    hub.push(session_id, updated.elements)
    logger.info("Undid last exchange of %s (%d messages left)", session_id, len(updated.messages))
    return conversation_response(updated)
