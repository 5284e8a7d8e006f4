"""Usage ledger: one JSONL line per completed generation turn.

Accounting runs after the turn has been returned to the user. A failure here is logged
and never rolls back the delivered turn. Events carry a caller-supplied idempotency
key; replaying a key is a no-op.
"""

from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import asdict, dataclass
from pathlib import Path

from vibeframe.config import settings

logger = logging.getLogger(__name__)


@dataclass
class UsageEvent:
    """Record of one completed generation turn."""

    idempotency_key: str
    session_id: str
    task: str
    model: str
    step: str = ""
    update_mode: str = "none"  # partial | full | none
    element_count: int = 0
    timestamp: float = 0.0


class UsageRecorder:
    def __init__(self, data_dir: Path | str | None = None) -> None:
        self.data_dir = Path(data_dir or settings.data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.usage_file = self.data_dir / "usage.jsonl"
        self._keys: set[str] | None = None
        self._lock = threading.Lock()

    def record(self, event: UsageEvent) -> bool:
        """Append ``event``. Returns False when its idempotency key was already recorded."""
        with self._lock:
            keys = self._known_keys()
            if event.idempotency_key in keys:
                logger.debug("Usage event %s already recorded", event.idempotency_key)
                return False
            if not event.timestamp:
                event.timestamp = time.time()
            with open(self.usage_file, "a", encoding="utf-8") as f:
                f.write(json.dumps(asdict(event), ensure_ascii=False) + "\n")
            keys.add(event.idempotency_key)
        logger.info("Recorded usage %s for session %s", event.idempotency_key, event.session_id)
        return True

    def events(self, session_id: str | None = None) -> list[UsageEvent]:
        if not self.usage_file.exists():
            return []
        events: list[UsageEvent] = []
        with open(self.usage_file, encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    event = UsageEvent(**json.loads(line))
                except (json.JSONDecodeError, TypeError):
                    continue
                if session_id is None or event.session_id == session_id:
                    events.append(event)
        return events

    def _known_keys(self) -> set[str]:
        if self._keys is None:
            self._keys = {e.idempotency_key for e in self.events()}
        return self._keys


def record_usage_background(recorder: UsageRecorder, event: UsageEvent) -> None:
    """Fire-and-forget usage accounting. Runs in background, never raises."""
    try:
        recorder.record(event)
    except Exception as e:
        logger.warning("Usage accounting failed for %s (non-critical): %s", event.idempotency_key, e)


# Singleton
_recorder: UsageRecorder | None = None


def get_usage_recorder() -> UsageRecorder:
    global _recorder
    if _recorder is None:
        _recorder = UsageRecorder()
    return _recorder
