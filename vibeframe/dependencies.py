"""FastAPI dependency injection."""

from __future__ import annotations

from fastapi import Depends

from vibeframe.canvas.sync import CanvasHub
from vibeframe.config import settings
from vibeframe.engine.orchestrator import GenerationOrchestrator
from vibeframe.engine.turns import TurnRegistry, get_turn_registry
from vibeframe.llm.client import AnthropicGenerationClient, GenerationClient
from vibeframe.storage.sessions import SessionStore, get_session_store
from vibeframe.usage.recorder import UsageRecorder, get_usage_recorder

_client: GenerationClient | None = None
_hub: CanvasHub | None = None


def get_settings():
    return settings


def get_store() -> SessionStore:
    return get_session_store()


def get_generation_client() -> GenerationClient:
    global _client
    if _client is None:
        _client = AnthropicGenerationClient(settings)
    return _client


def get_orchestrator(
    store: SessionStore = Depends(get_store),
    client: GenerationClient = Depends(get_generation_client),
) -> GenerationOrchestrator:
    return GenerationOrchestrator(client, store, config=settings)


def get_turns() -> TurnRegistry:
    return get_turn_registry()


def get_canvas_hub() -> CanvasHub:
    global _hub
    if _hub is None:
        _hub = CanvasHub(get_store(), quiet_period=settings.canvas_debounce_seconds)
    return _hub


def get_usage() -> UsageRecorder:
    return get_usage_recorder()
