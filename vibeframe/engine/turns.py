"""At most one in-flight generation turn per session.

Submitting a new turn claims the session's slot immediately and cancels whichever turn
held it. The new turn only starts once every earlier turn on the session has unwound,
so two turns never reconcile against the same stale collection. A cancelled turn's
caller gets ``TurnSuperseded``; its result, if any, is discarded.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from vibeframe.errors import TurnSuperseded

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TurnRegistry:
    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task] = {}
        self._unfinished: dict[str, set[asyncio.Task]] = {}
        self._superseded: set[asyncio.Task] = set()

    def in_flight(self, session_id: str) -> bool:
        task = self._tasks.get(session_id)
        return task is not None and not task.done()

    async def run(self, session_id: str, turn: Callable[[], Awaitable[T]]) -> T:
        # No await before the slot is claimed
        previous = self._tasks.get(session_id)
        if previous is not None and not previous.done():
            self._superseded.add(previous)
            previous.cancel()
            logger.info("Superseded in-flight turn on %s", session_id)

        unfinished = self._unfinished.setdefault(session_id, set())
        predecessors = {t for t in unfinished if not t.done()}
        task = asyncio.ensure_future(self._after(predecessors, turn))
        self._tasks[session_id] = task
        unfinished.add(task)
        task.add_done_callback(lambda t: self._forget(session_id, t))
        try:
            return await task
        except asyncio.CancelledError:
            if task in self._superseded:
                raise TurnSuperseded(session_id) from None
            task.cancel()
            raise
        finally:
            self._superseded.discard(task)
            if self._tasks.get(session_id) is task:
                del self._tasks[session_id]

    def _forget(self, session_id: str, task: asyncio.Task) -> None:
        unfinished = self._unfinished.get(session_id)
        if unfinished is None:
            return
        unfinished.discard(task)
        if not unfinished:
            del self._unfinished[session_id]

    @staticmethod
    async def _after(predecessors: set[asyncio.Task], turn: Callable[[], Awaitable[T]]) -> T:
        if predecessors:
            await asyncio.wait(predecessors)
        return await turn()


# Singleton
_registry: TurnRegistry | None = None


def get_turn_registry() -> TurnRegistry:
    global _registry
    if _registry is None:
        _registry = TurnRegistry()
    return _registry
