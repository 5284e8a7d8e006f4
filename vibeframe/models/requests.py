"""API request models."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from vibeframe.models.wireframe import WorkflowMode


class CreateConversationRequest(BaseModel):
    title: str | None = Field(default=None, description="Title; derived from the first message when omitted")
    mode: WorkflowMode = Field(default="guided", description="Workflow mode to start in")
    version: str | None = Field(default=None, description="Step catalog version (defaults to settings)")


class RenameConversationRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)


class GenerateTitleRequest(BaseModel):
    message: str | None = Field(
        default=None, description="Text to title the conversation from; defaults to the first user message"
    )


class ResetWorkflowRequest(BaseModel):
    mode: WorkflowMode = Field(..., description="Mode to restart the workflow in")


class TurnRequest(BaseModel):
    text: str = Field(..., description="User message")
    images: list[str] = Field(default_factory=list, description="Image URLs (http(s) or data:)")
    idempotency_key: str | None = Field(
        default=None, description="Key for usage accounting; duplicates are recorded once"
    )
    timeout_seconds: float | None = Field(default=None, gt=0, description="Turn deadline")


class CanvasSnapshotRequest(BaseModel):
    elements: list[dict[str, Any]] = Field(..., description="Full canvas snapshot")
