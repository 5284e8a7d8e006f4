"""Session persistence, the gateway the engine loads and saves documents through.

Two implementations share one contract:

- ``save_session`` writes everything except the message history;
- ``append_message`` is the only way history grows, and re-appending a message id
  that is already stored is ignored;
- ``load_session`` returns the document with its history attached, or raises
  ``SessionNotFound``.

The file store keeps ``<data_dir>/sessions/<id>.json`` for the document and
``<id>.messages.jsonl`` as an append-only history.
"""

from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Protocol

from vibeframe.config import settings
from vibeframe.errors import PersistenceError, SessionNotFound
from vibeframe.models.session import Message, SessionDocument, SessionSummary

logger = logging.getLogger(__name__)

_SAFE_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,128}$")


class SessionStore(Protocol):
    def load_session(self, session_id: str) -> SessionDocument: ...

    def save_session(self, doc: SessionDocument) -> None: ...

    def append_message(self, session_id: str, message: Message) -> None: ...

    def replace_messages(self, session_id: str, messages: list[Message]) -> None: ...

    def delete_session(self, session_id: str) -> None: ...

    def list_sessions(self) -> list[SessionSummary]: ...


class InMemorySessionStore:
    """Process-local store, used by tests and ``SESSION_STORE=memory``."""

    def __init__(self) -> None:
        self._docs: dict[str, SessionDocument] = {}
        self._messages: dict[str, list[Message]] = {}

    def load_session(self, session_id: str) -> SessionDocument:
        doc = self._docs.get(session_id)
        if doc is None:
            raise SessionNotFound(session_id)
        loaded = doc.model_copy(deep=True)
        loaded.messages = [m.model_copy(deep=True) for m in self._messages.get(session_id, [])]
        return loaded

    def save_session(self, doc: SessionDocument) -> None:
        stored = doc.model_copy(deep=True)
        stored.messages = []
        self._docs[doc.id] = stored
        self._messages.setdefault(doc.id, [])

    def append_message(self, session_id: str, message: Message) -> None:
        if session_id not in self._docs:
            raise SessionNotFound(session_id)
        history = self._messages.setdefault(session_id, [])
        if any(m.id == message.id for m in history):
            return
        history.append(message.model_copy(deep=True))

    def replace_messages(self, session_id: str, messages: list[Message]) -> None:
        if session_id not in self._docs:
            raise SessionNotFound(session_id)
        self._messages[session_id] = [m.model_copy(deep=True) for m in messages]

    def delete_session(self, session_id: str) -> None:
        if self._docs.pop(session_id, None) is None:
            raise SessionNotFound(session_id)
        self._messages.pop(session_id, None)

    def list_sessions(self) -> list[SessionSummary]:
        summaries = [doc.summary() for doc in self._docs.values()]
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)


class JsonFileSessionStore:
    """JSON document + JSONL history per session under ``data_dir/sessions``."""

    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.data_dir = Path(data_dir or settings.data_dir)
        self.sessions_dir = self.data_dir / "sessions"
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

    def _doc_path(self, session_id: str) -> Path:
        if not _SAFE_ID_RE.match(session_id):
            raise SessionNotFound(session_id)
        return self.sessions_dir / f"{session_id}.json"

    def _messages_path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.messages.jsonl"

    def load_session(self, session_id: str) -> SessionDocument:
        path = self._doc_path(session_id)
        if not path.exists():
            raise SessionNotFound(session_id)
        doc = self._read_doc(path)
        doc.messages = self._load_messages(session_id)
        return doc

    def save_session(self, doc: SessionDocument) -> None:
        path = self._doc_path(doc.id)
        payload = doc.model_dump(mode="json", by_alias=True, exclude={"messages"})
        tmp = path.with_suffix(".json.tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"Could not save session {doc.id}: {e}", session=doc) from e

    def append_message(self, session_id: str, message: Message) -> None:
        if not self._doc_path(session_id).exists():
            raise SessionNotFound(session_id)
        if any(m.id == message.id for m in self._load_messages(session_id)):
            return
        try:
            with open(self._messages_path(session_id), "a", encoding="utf-8") as f:
                f.write(message.model_dump_json(by_alias=True) + "\n")
        except OSError as e:
            raise PersistenceError(f"Could not append message to {session_id}: {e}") from e

    def replace_messages(self, session_id: str, messages: list[Message]) -> None:
        """Rewrite the history file, used when an exchange is undone."""
        if not self._doc_path(session_id).exists():
            raise SessionNotFound(session_id)
        path = self._messages_path(session_id)
        tmp = path.with_suffix(".jsonl.tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                for message in messages:
                    f.write(message.model_dump_json(by_alias=True) + "\n")
            os.replace(tmp, path)
        except OSError as e:
            raise PersistenceError(f"Could not rewrite history of {session_id}: {e}") from e

    def delete_session(self, session_id: str) -> None:
        path = self._doc_path(session_id)
        if not path.exists():
            raise SessionNotFound(session_id)
        path.unlink()
        self._messages_path(session_id).unlink(missing_ok=True)
        logger.info("Deleted session %s", session_id)

    def list_sessions(self) -> list[SessionSummary]:
        summaries: list[SessionSummary] = []
        for path in self.sessions_dir.glob("*.json"):
            try:
                summaries.append(self._read_doc(path).summary())
            except PersistenceError as e:
                logger.warning("Skipping unreadable session file %s: %s", path.name, e)
        return sorted(summaries, key=lambda s: s.updated_at, reverse=True)

    @staticmethod
    def _read_doc(path: Path) -> SessionDocument:
        try:
            with open(path, encoding="utf-8") as f:
                return SessionDocument.model_validate(json.load(f))
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read {path.name}: {e}") from e

    def _load_messages(self, session_id: str) -> list[Message]:
        path = self._messages_path(session_id)
        if not path.exists():
            return []
        messages: list[Message] = []
        with open(path, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    messages.append(Message.model_validate_json(line))
                except ValueError:
                    logger.warning("Skipping malformed message line in %s", path.name)
        return messages


# Singleton
_store: SessionStore | None = None


def create_session_store(kind: str | None = None, data_dir: Path | str | None = None) -> SessionStore:
    kind = kind or settings.session_store
    if kind == "memory":
        return InMemorySessionStore()
    if kind == "file":
        return JsonFileSessionStore(data_dir)
    raise ValueError(f"Unknown session store: {kind!r}")


def get_session_store() -> SessionStore:
    global _store
    if _store is None:
        _store = create_session_store()
    return _store
