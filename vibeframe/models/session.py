"""Session document: one conversation's messages, canvas and workflow state."""

from __future__ import annotations

import time
import uuid
from typing import Literal

from pydantic import BaseModel, Field

from vibeframe.errors import NothingToUndo
from vibeframe.models.edit_ops import Element
from vibeframe.models.wireframe import ThemeColors, WorkflowAnswers, WorkflowMode

DEFAULT_TITLE = "New Conversation"
_TITLE_LIMIT = 50


def _new_id() -> str:
    return uuid.uuid4().hex


class MessageContent(BaseModel):
    """One content block of a message."""

    type: Literal["text", "code", "image"]
    text: str | None = None
    language: str | None = None  # code blocks
    url: str | None = None  # image blocks: http(s) or data: URL


class Message(BaseModel):
    id: str = Field(default_factory=_new_id)
    role: Literal["user", "assistant"]
    content: list[MessageContent] = Field(default_factory=list)
    # Element collection as it stood after this message, when one was produced
    wireframe: list[Element] | None = None
    error: str | None = None
    created_at: float = Field(default_factory=time.time)

    @classmethod
    def user(cls, text: str, images: list[str] | None = None) -> "Message":
        blocks = [MessageContent(type="text", text=text)]
        blocks.extend(MessageContent(type="image", url=url) for url in images or [])
        return cls(role="user", content=blocks)

    @property
    def text(self) -> str:
        """Plain-text rendering used when replaying history to the collaborator."""
        parts: list[str] = []
        for block in self.content:
            if block.type == "text" and block.text:
                parts.append(block.text)
            elif block.type == "code" and block.text:
                parts.append(f"```{block.language or ''}\n{block.text}\n```")
        return "\n\n".join(parts)

    @property
    def images(self) -> list[str]:
        return [block.url for block in self.content if block.type == "image" and block.url]


class WorkflowState(BaseModel):
    """Where a conversation stands in its step catalog."""

    version: str = "v2"
    mode: WorkflowMode = "guided"
    step: str
    awaiting_input: bool = False
    input_prompt: str | None = None
    input_options: list[str] | None = None


class SessionSummary(BaseModel):
    id: str
    title: str
    step: str
    mode: WorkflowMode
    element_count: int
    created_at: float
    updated_at: float


class SessionDocument(BaseModel):
    """Canonical state of one conversation.

    The element collection and the collected answers are the two pieces of state that
    must survive every turn. Methods return updated copies; the receiver is never
    mutated, so a failed turn can hand back the original untouched.
    """

    id: str = Field(default_factory=_new_id)
    title: str = DEFAULT_TITLE
    created_at: float = Field(default_factory=time.time)
    updated_at: float = Field(default_factory=time.time)
    messages: list[Message] = Field(default_factory=list)
    elements: list[Element] = Field(default_factory=list)
    workflow: WorkflowState
    answers: WorkflowAnswers = Field(default_factory=WorkflowAnswers)
    wireframe_title: str = ""
    wireframe_description: str = ""

    @classmethod
    def new(cls, workflow: WorkflowState, title: str | None = None) -> "SessionDocument":
        return cls(workflow=workflow, title=title or DEFAULT_TITLE)

    @property
    def theme_colors(self) -> ThemeColors | None:
        return self.answers.theme_colors

    def copy_for_turn(self) -> "SessionDocument":
        return self.model_copy(deep=True)

    def touch(self) -> None:
        self.updated_at = time.time()

    def with_elements(self, elements: list[Element]) -> "SessionDocument":
        """Accept a full canvas snapshot. User edits are ground truth and not re-validated."""
        updated = self.model_copy(deep=True)
        updated.elements = [dict(el) for el in elements]
        updated.touch()
        return updated

    def undone(self) -> "SessionDocument":
        """Drop the last user/assistant exchange and put back the canvas it replaced.

        The restored canvas is the snapshot on the latest remaining assistant message
        that has one, or an empty canvas. Workflow position and answers are kept.
        """
        messages = list(self.messages)
        if messages and messages[-1].role == "assistant":
            messages.pop()
        if messages and messages[-1].role == "user":
            messages.pop()
        if len(messages) == len(self.messages):
            raise NothingToUndo(self.id)

        snapshot: list[Element] = []
        for message in reversed(messages):
            if message.wireframe is not None:
                snapshot = message.wireframe
                break

        updated = self.model_copy(deep=True)
        updated.messages = [m.model_copy(deep=True) for m in messages]
        updated.elements = [dict(el) for el in snapshot]
        updated.touch()
        return updated

    def with_title(self, title: str) -> "SessionDocument":
        updated = self.model_copy(deep=True)
        updated.title = title
        updated.touch()
        return updated

    def summary(self) -> SessionSummary:
        return SessionSummary(
            id=self.id,
            title=self.title,
            step=self.workflow.step,
            mode=self.workflow.mode,
            element_count=len(self.elements),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def default_title(first_message: str) -> str:
    """Conversation title derived from the first user message."""
    text = first_message.strip()
    if not text:
        return DEFAULT_TITLE
    if len(text) > _TITLE_LIMIT:
        return text[:_TITLE_LIMIT] + "..."
    return text
