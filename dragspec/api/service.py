"""
API Service - Business logic layer between API and engine.

The service:
1. Builds spec trees from their wire form
2. Manages drag sessions
3. Enumerates candidate states
4. Formats engine results as response models

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import math

from .schemas import (
    # Requests
    BeginDragRequest,
    CandidatesRequest,
    MoveRequest,
    # Responses
    CandidatesResponse,
    DragSessionResponse,
    ErrorResponse,
    OutcomeResponse,
    PreviewResponse,
    ValidationResponse,
    # Shared
    PointModel,
    PresentationModel,
    SpecNodeModel,
    # Enums
    CandidateOperation,
    ErrorCode,
    SessionStatus,
)
from ..engine_core.candidates import (
    insertion_states,
    removal_state,
    reorder_states,
    transfer_states,
)
from ..engine_core.geometry import METRICS
from ..engine_core.paths import PathError
from ..engine_core.spec import MalformedSpecError, Presentation
from ..session import (
    DragOutcome,
    DragPreview,
    DragSessionManager,
    SessionClosedError,
    SessionNotFoundError,
)
from ..spec_schema import SpecValidationError, validate_spec

logger = logging.getLogger(__name__)


@dataclass
class DragService:
    """
    Main API service for remote drag clients.

    Usage:
        service = DragService()

        started = service.begin(request)
        preview = service.move(started.session_id, MoveRequest(pointer=...))
        outcome = service.end(started.session_id)
    """
    session_manager: DragSessionManager = field(default_factory=DragSessionManager)

    def begin(self, request: BeginDragRequest) -> DragSessionResponse | ErrorResponse:
        """
        Start a drag session.

        The spec tree is built from its wire form, validated (unless the
        manager's config turns strict validation off) and resolved once
        at the starting pointer.
        """
        try:
            spec = request.spec.to_spec()
        except (MalformedSpecError, PathError) as e:
            return _malformed(str(e))

        warnings = validate_spec(spec).warnings
        try:
            session = self.session_manager.begin(
                spec,
                request.pointer.to_point(),
                request.anchor.to_lookup(),
                state=request.state,
                metric=METRICS[request.metric.value],
            )
        except SpecValidationError as e:
            return _malformed(str(e), {"errors": e.errors})
        except MalformedSpecError as e:
            return _malformed(str(e))

        return DragSessionResponse(
            session_id=session.session_id,
            status=SessionStatus(session.state.value),
            created_at=session.created_at,
            preview=_preview_response(session.session_id, session.last_preview),
            warnings=warnings,
        )

    def move(self, session_id: str, request: MoveRequest) -> PreviewResponse | ErrorResponse:
        """Resolve the drag for a new pointer position."""
        try:
            preview = self.session_manager.update(session_id, request.pointer.to_point())
        except SessionNotFoundError:
            return _not_found(session_id)
        except MalformedSpecError as e:
            return _malformed(str(e))
        return _preview_response(session_id, preview)

    def get_preview(self, session_id: str) -> PreviewResponse | ErrorResponse:
        """Latest preview of a live session."""
        session = self.session_manager.get(session_id)
        if not session:
            return _not_found(session_id)
        return _preview_response(session_id, session.last_preview)

    def end(self, session_id: str) -> OutcomeResponse | ErrorResponse:
        """Release the pointer: commit or cancel."""
        try:
            outcome = self.session_manager.end(session_id)
        except SessionNotFoundError:
            return _not_found(session_id)
        except MalformedSpecError as e:
            return _malformed(str(e))
        return _outcome_response(session_id, outcome)

    def cancel(self, session_id: str, reason: str = "interrupted") -> OutcomeResponse | ErrorResponse:
        """Abandon a drag and hand back the state it started from."""
        try:
            outcome = self.session_manager.cancel(session_id, reason)
        except (SessionNotFoundError, SessionClosedError):
            return _not_found(session_id)
        return _outcome_response(session_id, outcome)

    def list_sessions(self) -> list[str]:
        """List active session IDs."""
        return self.session_manager.list_active()

    def validate(self, spec: SpecNodeModel) -> ValidationResponse:
        """Build and validate a spec tree without starting a drag."""
        try:
            node = spec.to_spec()
        except (MalformedSpecError, PathError) as e:
            return ValidationResponse(valid=False, errors=[str(e)])
        result = validate_spec(node)
        return ValidationResponse(valid=result.valid, errors=result.errors, warnings=result.warnings)

    def candidates(self, request: CandidatesRequest) -> CandidatesResponse | ErrorResponse:
        """Enumerate candidate states for one of the built-in list edits."""
        try:
            states = _enumerate(request)
        except (PathError, IndexError, TypeError, ValueError) as e:
            return ErrorResponse(
                error=str(e),
                error_code=ErrorCode.VALIDATION_ERROR,
                details={"operation": request.operation.value},
            )
        logger.debug("%s produced %d candidates", request.operation.value, len(states))
        return CandidatesResponse(states=states, count=len(states))


# =============================================================================
# Conversion helpers
# =============================================================================

def _enumerate(request: CandidatesRequest) -> list[Any]:
    op = request.operation
    if op == CandidateOperation.INSERT:
        return insertion_states(request.state, request.list_path, request.item)

    if request.index is None:
        raise ValueError(f"{op.value} needs an index")
    if op == CandidateOperation.REORDER:
        return reorder_states(
            request.state, request.list_path, request.index,
            include_identity=request.include_identity,
        )
    if op == CandidateOperation.TRANSFER:
        if not request.target_paths:
            raise ValueError("transfer needs at least one target path")
        return transfer_states(request.state, request.list_path, request.index, request.target_paths)
    return [removal_state(request.state, request.list_path, request.index)]


def _presentation_model(presentation: Presentation | None) -> PresentationModel | None:
    if presentation is None:
        return None
    return PresentationModel.model_validate(presentation, from_attributes=True)


def _preview_response(session_id: str, preview: DragPreview | None) -> PreviewResponse:
    if preview is None:
        return PreviewResponse(session_id=session_id, preview_state=None, active_path="")
    return PreviewResponse(
        session_id=session_id,
        preview_state=preview.preview_state,
        active_path=preview.active_path,
        drop_state=preview.drop_state,
        distance=preview.distance if math.isfinite(preview.distance) else None,
        anchor=PointModel.from_point(preview.anchor),
        reachable=preview.reachable,
        committable=preview.committable,
        snapped=preview.snapped,
        presentation=_presentation_model(preview.presentation),
    )


def _outcome_response(session_id: str, outcome: DragOutcome) -> OutcomeResponse:
    return OutcomeResponse(
        session_id=session_id,
        status=SessionStatus.COMMITTED if outcome.committed else SessionStatus.CANCELLED,
        committed=outcome.committed,
        committed_state=outcome.committed_state,
        intermediate_state=outcome.intermediate_state,
        restored_state=outcome.restored_state,
        active_path=outcome.active_path,
        reason=outcome.reason,
        presentation=_presentation_model(outcome.presentation),
    )


def _not_found(session_id: str) -> ErrorResponse:
    return ErrorResponse(
        error=f"Session {session_id} not found",
        error_code=ErrorCode.SESSION_NOT_FOUND,
    )


def _malformed(message: str, details: dict | None = None) -> ErrorResponse:
    return ErrorResponse(error=message, error_code=ErrorCode.MALFORMED_SPEC, details=details)
