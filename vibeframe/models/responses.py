"""API response models."""

from __future__ import annotations

from pydantic import BaseModel, Field

from vibeframe.models.session import Message, SessionDocument
from vibeframe.workflow.catalog import Progress


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str = "0.1.0"
    catalogs: list[str] = Field(default_factory=list)


class ConversationResponse(BaseModel):
    conversation: SessionDocument
    progress: Progress | None = None


class StepOverrideInfo(BaseModel):
    prior: str
    expected: str
    claimed: str


class TurnResponse(BaseModel):
    message: Message
    conversation: SessionDocument
    progress: Progress | None = None
    step: str
    awaiting_input: bool = False
    input_prompt: str | None = None
    input_options: list[str] | None = None
    update_mode: str = "none"
    dropped_element_ids: list[str] = Field(default_factory=list)
    override: StepOverrideInfo | None = None


class CanvasSyncResponse(BaseModel):
    status: str
    element_count: int = 0
