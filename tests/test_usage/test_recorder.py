"""Tests for the usage ledger."""

from __future__ import annotations

import logging

from vibeframe.usage.recorder import UsageEvent, UsageRecorder, record_usage_background


def _event(key="turn-1", session_id="s1", **fields) -> UsageEvent:
    return UsageEvent(idempotency_key=key, session_id=session_id, task="generate", model="claude", **fields)


def test_record_and_read_back(tmp_path):
    recorder = UsageRecorder(tmp_path)
    assert recorder.record(_event(step="building", update_mode="full", element_count=12))

    events = recorder.events()
    assert len(events) == 1
    assert events[0].update_mode == "full"
    assert events[0].element_count == 12
    assert events[0].timestamp > 0


def test_replayed_key_is_noop(tmp_path):
    recorder = UsageRecorder(tmp_path)
    assert recorder.record(_event())
    assert not recorder.record(_event())
    assert len(recorder.events()) == 1


def test_dedupe_survives_restart(tmp_path):
    UsageRecorder(tmp_path).record(_event())
    assert not UsageRecorder(tmp_path).record(_event())


def test_filter_by_session(tmp_path):
    recorder = UsageRecorder(tmp_path)
    recorder.record(_event("a", "s1"))
    recorder.record(_event("b", "s2"))
    assert [e.idempotency_key for e in recorder.events("s2")] == ["b"]


def test_background_failure_is_logged_not_raised(tmp_path, caplog):
    class BrokenRecorder(UsageRecorder):
        def record(self, event):
            raise OSError("disk full")

    with caplog.at_level(logging.WARNING, logger="vibeframe.usage.recorder"):
        record_usage_background(BrokenRecorder(tmp_path), _event())
    assert "disk full" in caplog.text
