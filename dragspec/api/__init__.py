"""
API Module - Remote drag interface.

Exposes the resolver via REST API for clients that cannot embed it.
The client:
1. Starts a drag with a spec tree and an anchor description
2. Streams pointer moves and receives previews
3. Releases (commit or cancel)

All state is session-scoped and in-memory.
"""

from .schemas import (
    # Requests
    BeginDragRequest,
    CandidatesRequest,
    MoveRequest,
    ValidateSpecRequest,
    # Responses
    CandidatesResponse,
    DragSessionResponse,
    ErrorResponse,
    OutcomeResponse,
    PreviewResponse,
    ValidationResponse,
    # Shared
    AnchorModel,
    PointModel,
    PresentationModel,
    SpecNodeModel,
    # Enums
    CandidateOperation,
    ErrorCode,
    MetricName,
    SessionStatus,
)
from .service import DragService
from .app import create_app

__all__ = [
    # Requests
    "BeginDragRequest",
    "CandidatesRequest",
    "MoveRequest",
    "ValidateSpecRequest",
    # Responses
    "CandidatesResponse",
    "DragSessionResponse",
    "ErrorResponse",
    "OutcomeResponse",
    "PreviewResponse",
    "ValidationResponse",
    # Shared
    "AnchorModel",
    "PointModel",
    "PresentationModel",
    "SpecNodeModel",
    # Enums
    "CandidateOperation",
    "ErrorCode",
    "MetricName",
    "SessionStatus",
    # Service
    "DragService",
    "create_app",
]
