"""
Session Module - Drives one drag from pointer-down to release.

A session represents one drag:
- Created on drag start with a freshly built spec tree
- Updated on every pointer move
- Consumed exactly once by release (commit or cancel)

Sessions are EPHEMERAL and owned by the UI thread.
"""

from .manager import (
    DragOutcome,
    DragPreview,
    DragSession,
    DragSessionManager,
    SessionClosedError,
    SessionNotFoundError,
    SessionState,
    begin_drag,
    cancel_drag,
    end_drag,
    update_drag,
)

__all__ = [
    "DragOutcome",
    "DragPreview",
    "DragSession",
    "DragSessionManager",
    "SessionClosedError",
    "SessionNotFoundError",
    "SessionState",
    "begin_drag",
    "cancel_drag",
    "end_drag",
    "update_drag",
]
