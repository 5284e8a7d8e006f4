"""Canvas and session hand-off.

Two mutators share a session's element collection: generation turns push new
collections to the renderer, and the renderer reports user edits back as full
snapshots. ``CanvasSync`` keeps the two from feeding each other:

- while a programmatic update is being applied (``applying-programmatic-update``),
  inbound change notifications are queued, not merged, and replayed afterwards;
- in ``idle`` a snapshot whose content matches what was last pushed is an echo and
  is dropped;
- anything else is debounced so a burst of drag/resize events commits once.
"""

from __future__ import annotations

import asyncio
import json
import logging
from contextlib import contextmanager
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Iterator

from vibeframe.models.edit_ops import Element

if TYPE_CHECKING:
    from vibeframe.storage.sessions import SessionStore

logger = logging.getLogger(__name__)

# Renderer bookkeeping that changes on every redraw without any user edit
_CHURN_FIELDS = frozenset({"version", "versionNonce", "seed", "updated"})


class SyncState(str, Enum):
    IDLE = "idle"
    APPLYING = "applying-programmatic-update"


def content_key(elements: list[Element]) -> str:
    rows = [{k: v for k, v in el.items() if k not in _CHURN_FIELDS} for el in elements]
    return json.dumps(rows, sort_keys=True, default=str)


class CanvasSync:
    """Single-writer sync protocol for one element collection."""

    def __init__(
        self,
        commit: Callable[[list[Element]], Any],
        render: Callable[[list[Element]], Any] | None = None,
        quiet_period: float = 0.3,
    ) -> None:
        self._commit = commit
        self._render = render
        self.quiet_period = quiet_period
        self.state = SyncState.IDLE
        self._queue: list[list[Element]] = []
        self._last_key: str | None = None
        self._pending: list[Element] | None = None
        self._timer: asyncio.TimerHandle | None = None

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    @contextmanager
    def programmatic_update(self, elements: list[Element]) -> Iterator[None]:
        """Push ``elements`` to the renderer with change notifications held back."""
        self.state = SyncState.APPLYING
        self._last_key = content_key(elements)
        self._cancel_timer()
        self._pending = None
        try:
            if self._render is not None:
                self._render([dict(el) for el in elements])
            yield
        finally:
            self.state = SyncState.IDLE
            queued, self._queue = self._queue, []
            for snapshot in queued:
                self.notify(snapshot)

    def notify(self, elements: list[Element]) -> str:
        """Report a full canvas snapshot.

        Returns one of ``queued``, ``echo``, ``scheduled`` or ``committed``.
        """
        snapshot = [dict(el) for el in elements]
        if self.state is SyncState.APPLYING:
            self._queue.append(snapshot)
            return "queued"

        if content_key(snapshot) == self._last_key:
            # Canvas already matches the session; a stale pending edit must not land
            self._cancel_timer()
            self._pending = None
            return "echo"

        self._pending = snapshot
        if self.quiet_period <= 0:
            self.flush()
            return "committed"

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.flush()
            return "committed"

        self._cancel_timer()
        self._timer = loop.call_later(self.quiet_period, self._fire)
        return "scheduled"

    def flush(self) -> bool:
        """Commit the pending snapshot now. Returns False when nothing was pending."""
        self._cancel_timer()
        if self._pending is None:
            return False
        snapshot, self._pending = self._pending, None
        self._last_key = content_key(snapshot)
        self._commit(snapshot)
        return True

    def close(self) -> None:
        self._cancel_timer()
        self._pending = None
        self._queue.clear()

    def _fire(self) -> None:
        self._timer = None
        try:
            self.flush()
        except Exception:
            logger.exception("Canvas snapshot commit failed")

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None


class CanvasHub:
    """One ``CanvasSync`` per session, committing snapshots to the session store."""

    def __init__(self, store: "SessionStore", quiet_period: float = 0.3) -> None:
        self.store = store
        self.quiet_period = quiet_period
        self._syncs: dict[str, CanvasSync] = {}

    def get(self, session_id: str) -> CanvasSync:
        sync = self._syncs.get(session_id)
        if sync is None:
            sync = CanvasSync(
                commit=lambda elements: self._commit(session_id, elements),
                quiet_period=self.quiet_period,
            )
            self._syncs[session_id] = sync
        return sync

    def push(self, session_id: str, elements: list[Element]) -> None:
        """Record a collection the session now holds so its echo is suppressed."""
        with self.get(session_id).programmatic_update(elements):
            pass

    def discard(self, session_id: str) -> None:
        sync = self._syncs.pop(session_id, None)
        if sync is not None:
            sync.close()

    def _commit(self, session_id: str, elements: list[Element]) -> None:
        session = self.store.load_session(session_id)
        self.store.save_session(session.with_elements(elements))
        logger.info("Committed canvas snapshot for %s (%d elements)", session_id, len(elements))
