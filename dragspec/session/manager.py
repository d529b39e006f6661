"""
Drag Sessions - Lifecycle of one drag, from pointer-down to release.

LIFECYCLE:
1. begin_drag: spec tree built for the state at drag start, origin
   pointer recorded, first preview computed -> PREVIEWING
2. update_drag (every pointer move): resolve, remember the active path,
   return the preview
3. end_drag (pointer up): resolve once more for commit
   - a committable candidate -> COMMITTED, final state handed back
   - nothing committable -> CANCELLED, original state handed back
4. cancel_drag (interrupted interaction) -> CANCELLED

A session is consumed exactly once. Any error while resolving aborts
the session (IDLE) and is re-raised; the caller should not retry.

Sessions are single-threaded and in-memory only.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import logging
import math
import time
import uuid

from ..config import DEFAULT_CONFIG, DragConfig
from ..engine_core.anchors import AnchorLookup
from ..engine_core.geometry import Metric, Point, euclidean
from ..engine_core.resolver import DragFrame, Resolution, ResolverMemory, SpecResolver
from ..engine_core.spec import Presentation, SpecNode
from ..spec_schema import validate_spec

logger = logging.getLogger(__name__)


class SessionState(Enum):
    """State of a drag session."""
    IDLE = "idle"  # Aborted by an error, or never started
    PREVIEWING = "previewing"  # Drag in progress
    COMMITTED = "committed"  # Released on a valid candidate
    CANCELLED = "cancelled"  # Released on nothing, or interrupted


class SessionClosedError(RuntimeError):
    """The session has already been committed, cancelled or aborted."""


class SessionNotFoundError(LookupError):
    """No live session with this id."""


@dataclass(frozen=True)
class DragPreview:
    """
    What to show for the current pointer position.

    When nothing is reachable, preview_state is the original state and
    active_path is empty.
    """
    preview_state: Any
    active_path: str
    drop_state: Any = None
    distance: float = math.inf
    anchor: Point | None = None
    reachable: bool = False
    committable: bool = False
    snapped: bool = False
    presentation: Presentation | None = None

    @classmethod
    def from_resolution(cls, resolution: Resolution | None, original_state: Any) -> DragPreview:
        if resolution is None:
            return cls(preview_state=original_state, active_path="")
        return cls(
            preview_state=resolution.preview_state,
            active_path=resolution.active_path,
            drop_state=resolution.drop_state,
            distance=resolution.distance,
            anchor=resolution.anchor,
            reachable=True,
            committable=resolution.committable,
            snapped=resolution.snapped,
            presentation=resolution.presentation,
        )


@dataclass(frozen=True)
class DragOutcome:
    """
    Result of a finished drag.

    committed: committed_state is the state to adopt; intermediate_state
    is the dropped state before any chained continuation ran.
    cancelled: restored_state is the state the drag started from.
    """
    committed: bool
    committed_state: Any = None
    intermediate_state: Any = None
    restored_state: Any = None
    active_path: str = ""
    presentation: Presentation | None = None
    reason: str | None = None

    @property
    def cancelled(self) -> bool:
        return not self.committed

    @classmethod
    def commit(cls, resolution: Resolution) -> DragOutcome:
        return cls(
            committed=True,
            committed_state=resolution.final_state(),
            intermediate_state=resolution.drop_state,
            active_path=resolution.active_path,
            presentation=resolution.presentation,
        )

    @classmethod
    def cancel(cls, original_state: Any, reason: str) -> DragOutcome:
        return cls(committed=False, restored_state=original_state, reason=reason)


@dataclass
class DragSession:
    """
    One drag interaction.

    Owns the spec tree, the origin and latest pointer, the active path
    and the resolver memory (chaining selections, cached anchors).
    """
    session_id: str
    spec: SpecNode
    resolver: SpecResolver
    origin: Point
    pointer: Point
    original_state: Any = None
    created_at: float = field(default_factory=time.time)
    updated_at: float = field(default_factory=time.time)

    state: SessionState = SessionState.PREVIEWING
    active_path: str = ""
    memory: ResolverMemory = field(default_factory=ResolverMemory)
    last_preview: DragPreview | None = None

    def is_active(self) -> bool:
        return self.state == SessionState.PREVIEWING

    def _require_active(self):
        if not self.is_active():
            raise SessionClosedError(f"Session {self.session_id} is {self.state.value}")

    def _resolve(self, for_commit: bool = False) -> Resolution | None:
        frame = DragFrame(pointer=self.pointer, origin=self.origin)
        try:
            return self.resolver.resolve(self.spec, frame, self.memory, for_commit=for_commit)
        except Exception:
            self.state = SessionState.IDLE
            logger.warning("Drag session %s aborted while resolving", self.session_id, exc_info=True)
            raise

    def update(self, pointer: Point | tuple[float, float]) -> DragPreview:
        """Resolve for a new pointer position."""
        self._require_active()
        self.pointer = Point.of(pointer)
        self.updated_at = time.time()
        preview = DragPreview.from_resolution(self._resolve(), self.original_state)
        self.active_path = preview.active_path
        self.last_preview = preview
        return preview

    def end(self) -> DragOutcome:
        """Release the pointer: commit the selected candidate or cancel."""
        self._require_active()
        resolution = self._resolve(for_commit=True)
        if resolution is None:
            return self._finish(DragOutcome.cancel(self.original_state, "no reachable candidate"))
        if not resolution.committable:
            return self._finish(DragOutcome.cancel(self.original_state, "outside snap radius"))
        return self._finish(DragOutcome.commit(resolution))

    def cancel(self, reason: str = "interrupted") -> DragOutcome:
        """Abandon the drag and restore the original state."""
        self._require_active()
        return self._finish(DragOutcome.cancel(self.original_state, reason))

    def _finish(self, outcome: DragOutcome) -> DragOutcome:
        self.state = SessionState.COMMITTED if outcome.committed else SessionState.CANCELLED
        if outcome.committed:
            self.active_path = outcome.active_path
        logger.debug(
            "Drag session %s %s (%s)",
            self.session_id,
            self.state.value,
            outcome.active_path if outcome.committed else outcome.reason,
        )
        return outcome


def begin_drag(
    spec: SpecNode,
    pointer: Point | tuple[float, float],
    anchor_of: AnchorLookup,
    state: Any = None,
    metric: Metric = euclidean,
    config: DragConfig | None = None,
) -> DragSession:
    """
    Start a drag session at pointer.

    state is the state the drag started from; it is handed back when the
    drag is cancelled. With config.strict_validation the spec is checked
    first and SpecValidationError raised on errors.
    """
    config = config or DEFAULT_CONFIG
    if config.strict_validation:
        validate_spec(spec, raise_on_error=True)

    origin = Point.of(pointer)
    session = DragSession(
        session_id=str(uuid.uuid4()),
        spec=spec,
        resolver=SpecResolver(anchor_of, metric=metric, config=config),
        origin=origin,
        pointer=origin,
        original_state=state,
    )
    session.update(origin)
    logger.debug("Drag session %s started at %s", session.session_id, origin)
    return session


def update_drag(session: DragSession, pointer: Point | tuple[float, float]) -> DragPreview:
    return session.update(pointer)


def end_drag(session: DragSession) -> DragOutcome:
    return session.end()


def cancel_drag(session: DragSession, reason: str = "interrupted") -> DragOutcome:
    return session.cancel(reason)


class DragSessionManager:
    """
    Registry of live drag sessions, keyed by session id.

    Responsibilities:
    - Start sessions and hand out their ids
    - Route pointer moves and releases to the right session
    - Forget sessions once they finish, fail or go stale

    No persistence - sessions are in-memory only.
    """

    def __init__(self, config: DragConfig | None = None):
        self.config = config or DEFAULT_CONFIG
        self._sessions: dict[str, DragSession] = {}

    def begin(
        self,
        spec: SpecNode,
        pointer: Point | tuple[float, float],
        anchor_of: AnchorLookup,
        state: Any = None,
        metric: Metric = euclidean,
    ) -> DragSession:
        session = begin_drag(spec, pointer, anchor_of, state=state, metric=metric, config=self.config)
        self._sessions[session.session_id] = session
        return session

    def get(self, session_id: str) -> DragSession | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def require(self, session_id: str) -> DragSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(f"Session {session_id} not found")
        return session

    def update(self, session_id: str, pointer: Point | tuple[float, float]) -> DragPreview:
        session = self.require(session_id)
        try:
            return session.update(pointer)
        except Exception:
            self._sessions.pop(session_id, None)
            raise

    def end(self, session_id: str) -> DragOutcome:
        session = self.require(session_id)
        try:
            return session.end()
        finally:
            self._sessions.pop(session_id, None)

    def cancel(self, session_id: str, reason: str = "interrupted") -> DragOutcome:
        session = self.require(session_id)
        try:
            return session.cancel(reason)
        finally:
            self._sessions.pop(session_id, None)

    def list_active(self) -> list[str]:
        """List IDs of active sessions."""
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_stale(self, max_age_seconds: float | None = None) -> list[str]:
        """
        Cancel sessions with no pointer activity for max_age_seconds.

        Called periodically to free memory; returns the removed ids.
        """
        if max_age_seconds is None:
            max_age_seconds = self.config.session_max_age_seconds
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.updated_at > max_age_seconds
        ]
        for sid in stale:
            session = self._sessions.pop(sid)
            if session.is_active():
                session.cancel("stale")
        return stale
