"""Tests for the canvas sync protocol."""

from __future__ import annotations

import asyncio

from vibeframe.canvas.sync import CanvasHub, CanvasSync, SyncState, content_key
from vibeframe.models.session import SessionDocument, WorkflowState
from tests.conftest import FEAT1, HEADER_BG, LANDING_ELEMENTS, LOGO


def _moved(el, dx):
    return {**el, "x": el["x"] + dx}


class Recorder:
    def __init__(self):
        self.commits = []
        self.renders = []

    def commit(self, elements):
        self.commits.append(elements)

    def render(self, elements):
        self.renders.append(elements)


# ---------------------------------------------------------------------------
# Content key
# ---------------------------------------------------------------------------

def test_content_key_ignores_render_churn():
    a = [{**LOGO, "seed": 1, "versionNonce": 10}]
    b = [{**LOGO, "seed": 2, "versionNonce": 99}]
    assert content_key(a) == content_key(b)
    assert content_key(a) != content_key([_moved(LOGO, 1)])
    assert content_key(a) != content_key([{**LOGO, "seed": 1, "fontSize": 32}])


# ---------------------------------------------------------------------------
# Programmatic updates
# ---------------------------------------------------------------------------

class TestProgrammaticUpdate:
    def test_notifications_queued_then_replayed(self):
        rec = Recorder()
        sync = CanvasSync(rec.commit, rec.render, quiet_period=0)
        edited = [_moved(FEAT1, 10)]

        with sync.programmatic_update(LANDING_ELEMENTS):
            assert sync.state is SyncState.APPLYING
            assert sync.notify(LANDING_ELEMENTS) == "queued"
            assert sync.notify(edited) == "queued"
            assert rec.commits == []

        assert sync.state is SyncState.IDLE
        assert rec.renders == [LANDING_ELEMENTS]
        # The echo of the pushed collection is dropped; the user edit lands
        assert rec.commits == [edited]

    def test_echo_suppressed(self):
        rec = Recorder()
        sync = CanvasSync(rec.commit, quiet_period=0)
        with sync.programmatic_update(LANDING_ELEMENTS):
            pass
        assert sync.notify(LANDING_ELEMENTS) == "echo"
        assert rec.commits == []

    def test_soft_delete_is_a_user_edit(self):
        rec = Recorder()
        sync = CanvasSync(rec.commit, quiet_period=0)
        with sync.programmatic_update(LANDING_ELEMENTS):
            pass
        deleted = [HEADER_BG, LOGO, {**FEAT1, "isDeleted": True}]
        assert sync.notify(deleted) == "committed"
        assert rec.commits == [deleted]

    def test_style_only_edit_is_a_user_edit(self):
        rec = Recorder()
        sync = CanvasSync(rec.commit, quiet_period=0)
        with sync.programmatic_update(LANDING_ELEMENTS):
            pass
        restyled = [HEADER_BG, LOGO, {**FEAT1, "angle": 1.57, "fillStyle": "hachure", "opacity": 40}]
        assert sync.notify(restyled) == "committed"
        assert rec.commits == [restyled]

    def test_echo_with_redraw_bookkeeping_suppressed(self):
        rec = Recorder()
        sync = CanvasSync(rec.commit, quiet_period=0)
        with sync.programmatic_update(LANDING_ELEMENTS):
            pass
        redrawn = [{**el, "version": 3, "versionNonce": 77, "updated": 1700000000000} for el in LANDING_ELEMENTS]
        assert sync.notify(redrawn) == "echo"
        assert rec.commits == []

    def test_state_restored_when_render_fails(self):
        def boom(_elements):
            raise RuntimeError("renderer gone")

        sync = CanvasSync(lambda _: None, boom, quiet_period=0)
        try:
            with sync.programmatic_update(LANDING_ELEMENTS):
                pass
        except RuntimeError:
            pass
        assert sync.state is SyncState.IDLE


# ---------------------------------------------------------------------------
# Debounce
# ---------------------------------------------------------------------------

class TestDebounce:
    def test_zero_quiet_period_commits_immediately(self):
        rec = Recorder()
        sync = CanvasSync(rec.commit, quiet_period=0)
        assert sync.notify([LOGO]) == "committed"
        assert rec.commits == [[LOGO]]
        # Same content again is now an echo
        assert sync.notify([LOGO]) == "echo"

    def test_no_running_loop_commits_immediately(self):
        rec = Recorder()
        sync = CanvasSync(rec.commit, quiet_period=5)
        assert sync.notify([LOGO]) == "committed"
        assert len(rec.commits) == 1

    def test_burst_coalesces_into_one_commit(self):
        rec = Recorder()

        async def drag():
            sync = CanvasSync(rec.commit, quiet_period=0.05)
            statuses = [sync.notify([_moved(FEAT1, dx)]) for dx in (1, 2, 3)]
            assert sync.has_pending
            await asyncio.sleep(0.15)
            return statuses

        statuses = asyncio.run(drag())
        assert statuses == ["scheduled", "scheduled", "scheduled"]
        assert rec.commits == [[_moved(FEAT1, 3)]]

    def test_programmatic_update_cancels_pending_edit(self):
        rec = Recorder()

        async def race():
            sync = CanvasSync(rec.commit, quiet_period=0.05)
            sync.notify([_moved(FEAT1, 1)])
            with sync.programmatic_update(LANDING_ELEMENTS):
                pass
            assert not sync.has_pending
            await asyncio.sleep(0.1)

        asyncio.run(race())
        assert rec.commits == []

    def test_flush_without_pending(self):
        sync = CanvasSync(lambda _: None)
        assert sync.flush() is False


# ---------------------------------------------------------------------------
# Hub
# ---------------------------------------------------------------------------

class TestCanvasHub:
    def _session(self, store):
        session = SessionDocument.new(WorkflowState(step="profile_role"))
        store.save_session(session)
        return session

    def test_commit_writes_session_elements(self, store):
        session = self._session(store)
        hub = CanvasHub(store, quiet_period=0)
        assert hub.get(session.id).notify([LOGO]) == "committed"
        assert store.load_session(session.id).elements == [LOGO]

    def test_push_suppresses_echo(self, store):
        session = self._session(store)
        hub = CanvasHub(store, quiet_period=0)
        hub.push(session.id, LANDING_ELEMENTS)
        assert hub.get(session.id).notify(LANDING_ELEMENTS) == "echo"
        assert store.load_session(session.id).elements == []

    def test_discard_forgets_sync(self, store):
        hub = CanvasHub(store, quiet_period=0)
        first = hub.get("abc")
        hub.discard("abc")
        assert hub.get("abc") is not first
