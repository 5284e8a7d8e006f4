"""Exception hierarchy shared by the engine, the stores and the HTTP layer."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from vibeframe.models.session import Message, SessionDocument

# Collaborator failure kinds. rate_limited covers quota and capacity rejections.
RATE_LIMITED = "rate_limited"
AUTHENTICATION = "authentication"
MALFORMED_OUTPUT = "malformed_output"
TRANSPORT = "transport"
TIMEOUT = "timeout"

_RETRYABLE = {RATE_LIMITED, TRANSPORT, TIMEOUT}


class VibeFrameError(Exception):
    """Base class for every error raised on purpose by this package."""


class GenerationError(VibeFrameError):
    """The generation collaborator failed to produce a structured result."""

    def __init__(self, kind: str, message: str, raw: Any | None = None):
        super().__init__(f"Generation failure ({kind}): {message}")
        self.kind = kind
        self.message = message
        self.raw = raw

    @property
    def retryable(self) -> bool:
        return self.kind in _RETRYABLE


class TurnFailed(VibeFrameError):
    """A turn was aborted atomically; ``session`` is the untouched input document.

    ``annotation`` is the assistant message shown in place of the aborted turn. It carries
    the error and no content, and is never written to the session history.
    """

    def __init__(
        self,
        reason: str,
        message: str,
        session: "SessionDocument",
        annotation: "Message | None" = None,
    ):
        super().__init__(message)
        self.reason = reason
        self.message = message
        self.session = session
        self.annotation = annotation

    @property
    def retryable(self) -> bool:
        return self.reason in _RETRYABLE


class TurnSuperseded(VibeFrameError):
    """The turn was cancelled because a newer turn started on the same session."""

    def __init__(self, session_id: str):
        super().__init__(f"Turn on session {session_id} was superseded by a newer submission")
        self.session_id = session_id


class SessionNotFound(VibeFrameError, KeyError):
    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Session not found: {self.session_id}"


class PersistenceError(VibeFrameError):
    """Saving failed. ``session`` holds the in-memory document the caller may save again."""

    def __init__(self, message: str, session: "SessionDocument | None" = None):
        super().__init__(message)
        self.message = message
        self.session = session


class NothingToUndo(VibeFrameError):
    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} has no exchange to undo")
        self.session_id = session_id


class ExportFormatError(VibeFrameError, ValueError):
    """An import document does not carry the expected type/version marker."""
