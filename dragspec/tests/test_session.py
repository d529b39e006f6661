"""
Tests for drag sessions.

Tests:
- Begin / update / end lifecycle
- Commit and cancel outcomes
- Aborting on resolution errors
- Session manager bookkeeping
"""

import pytest

from ..config import DragConfig
from ..engine_core.spec import MalformedSpecError, continuous, fixed, layered_fallback, nearest_of
from ..session import (
    DragSessionManager,
    SessionClosedError,
    SessionNotFoundError,
    SessionState,
    begin_drag,
    cancel_drag,
    end_drag,
    update_drag,
)
from ..spec_schema import SpecValidationError
from .conftest import at


ORIGINAL = {"x": 0, "y": 0, "name": "start"}


class TestLifecycle:
    """Tests for a single drag from start to release."""

    def test_begin_computes_first_preview(self, three_targets, xy_anchor):
        session = begin_drag(three_targets, (1, 1), xy_anchor, state=ORIGINAL)

        assert session.state == SessionState.PREVIEWING
        assert session.active_path == "closest/0"
        assert session.last_preview.reachable

    def test_update_is_idempotent(self, three_targets, xy_anchor):
        """Same pointer twice gives the same preview and path."""
        session = begin_drag(three_targets, (0, 0), xy_anchor, state=ORIGINAL)

        first = update_drag(session, (52, 48))
        second = update_drag(session, (52, 48))

        assert first.preview_state == second.preview_state
        assert first.active_path == second.active_path == "closest/2"
        assert first == second

    def test_commit_on_release(self, three_targets, xy_anchor):
        session = begin_drag(three_targets, (0, 0), xy_anchor, state=ORIGINAL)
        update_drag(session, (98, 3))
        outcome = end_drag(session)

        assert outcome.committed
        assert outcome.committed_state["name"] == "b"
        assert outcome.active_path == "closest/1"
        assert session.state == SessionState.COMMITTED

    def test_snap_radius_cancels_far_release(self, xy_anchor):
        """Distance 15 with snap radius 10 cancels."""
        spec = nearest_of([fixed(at(15, 0))], snap_radius=10)
        session = begin_drag(spec, (0, 0), xy_anchor, state=ORIGINAL)
        outcome = end_drag(session)

        assert outcome.cancelled
        assert outcome.restored_state == ORIGINAL
        assert outcome.reason == "outside snap radius"
        assert session.state == SessionState.CANCELLED

    def test_snap_radius_commits_near_release(self, xy_anchor):
        """Distance 5 with snap radius 10 commits."""
        spec = nearest_of([fixed(at(5, 0, name="target"))], snap_radius=10)
        session = begin_drag(spec, (0, 0), xy_anchor, state=ORIGINAL)
        outcome = end_drag(session)

        assert outcome.committed
        assert outcome.committed_state["name"] == "target"

    def test_nothing_reachable_cancels(self, xy_anchor):
        session = begin_drag(nearest_of([]), (0, 0), xy_anchor, state=ORIGINAL)

        assert session.last_preview.preview_state == ORIGINAL
        assert session.last_preview.active_path == ""
        outcome = end_drag(session)
        assert outcome.cancelled
        assert outcome.reason == "no reachable candidate"

    def test_chained_commits_continuation(self, xy_anchor):
        spec = fixed(at(0, 0, step="dropped")).and_then(at(0, 0, step="settled"))
        session = begin_drag(spec, (0, 0), xy_anchor, state=ORIGINAL)
        outcome = end_drag(session)

        assert outcome.intermediate_state["step"] == "dropped"
        assert outcome.committed_state["step"] == "settled"

    def test_cancel_restores_original(self, three_targets, xy_anchor):
        session = begin_drag(three_targets, (0, 0), xy_anchor, state=ORIGINAL)
        outcome = cancel_drag(session)

        assert outcome.cancelled
        assert outcome.restored_state == ORIGINAL
        assert outcome.reason == "interrupted"

    def test_finished_session_rejects_use(self, three_targets, xy_anchor):
        session = begin_drag(three_targets, (0, 0), xy_anchor)
        end_drag(session)

        with pytest.raises(SessionClosedError):
            update_drag(session, (1, 1))
        with pytest.raises(SessionClosedError):
            end_drag(session)
        with pytest.raises(SessionClosedError):
            cancel_drag(session)


class TestCommitPolicy:
    """Tests for how snap radius, chaining and layering decide a release."""

    def test_nested_radius_falls_back_to_sibling(self, xy_anchor):
        """An inner nearest-of outside its radius does not cancel the drag."""
        inner = nearest_of([fixed(at(10, 0, name="a"))], snap_radius=5)
        spec = nearest_of([inner, fixed(at(20, 0, name="b"))])
        session = begin_drag(spec, (0, 0), xy_anchor, state=ORIGINAL)
        assert session.active_path == "closest/0/closest/0"

        outcome = end_drag(session)

        assert outcome.committed
        assert outcome.committed_state["name"] == "b"
        assert outcome.active_path == "closest/1"

    def test_nested_radius_cancels_without_sibling(self, xy_anchor):
        inner = nearest_of([fixed(at(10, 0))], snap_radius=5)
        session = begin_drag(nearest_of([inner]), (0, 0), xy_anchor, state=ORIGINAL)
        outcome = end_drag(session)

        assert outcome.cancelled
        assert outcome.reason == "outside snap radius"

    def test_chaining_keeps_sticky_child_outside_radius(self, xy_anchor):
        """The radius is checked on the kept child, not on the nominally closest one."""
        spec = nearest_of(
            [fixed(at(0, 0, name="a")), fixed(at(20, 0, name="b"))],
            snap_radius=7,
            chaining=True,
            hysteresis=8,
        )
        session = begin_drag(spec, (0, 0), xy_anchor, state=ORIGINAL)

        # b is 6 away and inside the radius, a is 14 away: not closer by more than 8.
        preview = update_drag(session, (14, 0))
        assert preview.active_path == "closest/0"
        assert not preview.committable

        outcome = end_drag(session)
        assert outcome.cancelled
        assert outcome.reason == "outside snap radius"

    def test_chaining_switches_then_commits(self, xy_anchor):
        spec = nearest_of(
            [fixed(at(0, 0, name="a")), fixed(at(20, 0, name="b"))],
            snap_radius=7,
            chaining=True,
            hysteresis=8,
        )
        session = begin_drag(spec, (0, 0), xy_anchor, state=ORIGINAL)
        update_drag(session, (14, 0))

        preview = update_drag(session, (16, 0))
        assert preview.active_path == "closest/1"
        assert preview.snapped

        outcome = end_drag(session)
        assert outcome.committed
        assert outcome.committed_state["name"] == "b"

    def test_layered_release_uses_background(self, xy_anchor):
        """The preview shows the foreground, the release commits the background."""
        fg = nearest_of([fixed(at(20, 0, name="fg"))], snap_radius=5)
        spec = layered_fallback(fg, fixed(at(0, 40, name="bg")), radius=50)
        session = begin_drag(spec, (0, 0), xy_anchor, state=ORIGINAL)

        assert session.active_path == "fg/closest/0"
        assert session.last_preview.preview_state["name"] == "fg"

        outcome = end_drag(session)
        assert outcome.committed
        assert outcome.committed_state["name"] == "bg"
        assert outcome.active_path == "bg"


class TestErrors:
    """Tests for resolution failures."""

    def test_strict_validation_rejects_bad_paths(self, xy_anchor):
        with pytest.raises(SpecValidationError) as exc_info:
            begin_drag(continuous({"x": 0}, "missing"), (0, 0), xy_anchor)
        assert "missing" in exc_info.value.errors[0]

    def test_resolution_error_aborts_session(self, xy_anchor, lenient_config):
        """An error aborts to IDLE and reaches the caller."""
        broken = continuous({"x": 0}, "missing")
        spec = layered_fallback(fixed(at(0, 0)), broken, radius=10)
        session = begin_drag(spec, (0, 0), xy_anchor, config=lenient_config)
        assert session.active_path == "fg"

        with pytest.raises(MalformedSpecError):
            update_drag(session, (100, 0))
        assert session.state == SessionState.IDLE

        with pytest.raises(SessionClosedError):
            update_drag(session, (0, 0))


class TestSessionManager:
    """Tests for DragSessionManager."""

    @pytest.fixture
    def manager(self):
        return DragSessionManager()

    def test_begin_registers_session(self, manager, three_targets, xy_anchor):
        session = manager.begin(three_targets, (0, 0), xy_anchor)

        assert manager.get(session.session_id) is session
        assert manager.list_active() == [session.session_id]

    def test_end_removes_session(self, manager, three_targets, xy_anchor):
        session = manager.begin(three_targets, (0, 0), xy_anchor)
        outcome = manager.end(session.session_id)

        assert outcome.committed
        assert manager.get(session.session_id) is None
        assert manager.list_active() == []

    def test_cancel_removes_session(self, manager, three_targets, xy_anchor):
        session = manager.begin(three_targets, (0, 0), xy_anchor, state=ORIGINAL)
        outcome = manager.cancel(session.session_id, "escape pressed")

        assert outcome.reason == "escape pressed"
        assert manager.get(session.session_id) is None

    def test_unknown_session(self, manager):
        with pytest.raises(SessionNotFoundError):
            manager.update("nope", (0, 0))
        with pytest.raises(SessionNotFoundError):
            manager.end("nope")

    def test_failed_update_drops_session(self, xy_anchor):
        manager = DragSessionManager(DragConfig(strict_validation=False))
        spec = layered_fallback(fixed(at(0, 0)), continuous({"x": 0}, "missing"), radius=10)
        session = manager.begin(spec, (0, 0), xy_anchor)

        with pytest.raises(MalformedSpecError):
            manager.update(session.session_id, (100, 0))
        assert manager.get(session.session_id) is None

    def test_cleanup_stale(self, manager, three_targets, xy_anchor):
        fresh = manager.begin(three_targets, (0, 0), xy_anchor)
        stale = manager.begin(three_targets, (0, 0), xy_anchor)
        stale.updated_at -= 1000

        removed = manager.cleanup_stale(max_age_seconds=60)

        assert removed == [stale.session_id]
        assert stale.state == SessionState.CANCELLED
        assert manager.list_active() == [fresh.session_id]
