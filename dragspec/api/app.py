"""
FastAPI Application - REST API for remote drag clients.

Endpoints:
    GET    /api/v1/health               Health check
    POST   /api/v1/drags                Start a drag
    GET    /api/v1/drags                List live drags
    GET    /api/v1/drags/{id}           Latest preview of a drag
    POST   /api/v1/drags/{id}/move      Pointer moved
    POST   /api/v1/drags/{id}/end       Pointer released
    DELETE /api/v1/drags/{id}           Cancel a drag
    POST   /api/v1/specs/validate       Validate a spec tree
    POST   /api/v1/candidates           Enumerate candidate states

Drag Flow:
    1. POST /drags with the spec tree, an anchor description and the
       starting pointer; the response carries the first preview
    2. POST /drags/{id}/move on every pointer move
    3. POST /drags/{id}/end on release, or DELETE to abandon

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional, Union
import logging
import os

# Environment configuration
DRAGSPEC_ENV = os.getenv("DRAGSPEC_ENV", "development")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional DragService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Query, Request
        from fastapi.exceptions import RequestValidationError
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from .. import __version__
    from ..config import DragConfig
    from ..session import DragSessionManager
    from .service import DragService
    from .schemas import (
        # Request models
        BeginDragRequest,
        CandidatesRequest,
        MoveRequest,
        ValidateSpecRequest,
        # Response models
        CandidatesResponse,
        DragSessionResponse,
        ErrorResponse,
        HealthResponse,
        OutcomeResponse,
        PreviewResponse,
        SessionListResponse,
        ValidationResponse,
        # Enums
        ErrorCode,
    )

    app = FastAPI(
        title="Drag Spec API",
        description="""
Declarative drag-and-drop resolution over HTTP.

A client describes where a dragged element may go as a spec tree, then
streams pointer positions. Every move returns the preview state and the
active path; release commits the selected candidate or cancels.

## Error Codes

| Code | Description |
|------|-------------|
| `SESSION_NOT_FOUND` | Drag does not exist or already finished |
| `MALFORMED_SPEC` | Spec tree cannot be built or fails validation |
| `VALIDATION_ERROR` | Request payload is invalid |
| `INTERNAL_ERROR` | Unexpected failure while resolving |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    api_service = service or DragService(session_manager=DragSessionManager(DragConfig.from_env()))

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    def error_to_json(error: ErrorResponse) -> JSONResponse:
        status_code = 404 if error.error_code == ErrorCode.SESSION_NOT_FOUND else 400
        return make_error_response(error.error_code, error.error, status_code, error.details)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return make_error_response(
            ErrorCode.VALIDATION_ERROR,
            "Request validation failed",
            status_code=422,
            details={"errors": [
                {"loc": [str(part) for part in err.get("loc", ())], "msg": err.get("msg", "")}
                for err in exc.errors()
            ]},
        )

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return make_error_response(ErrorCode.INTERNAL_ERROR, str(exc), status_code=500)

    # =========================================================================
    # Health
    # =========================================================================

    @app.get(
        "/api/v1/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", service="dragspec", version=__version__)

    # =========================================================================
    # Drag Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/drags",
        response_model=DragSessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Malformed spec"}},
        tags=["Drags"],
        summary="Start a drag",
    )
    async def begin_drag(body: BeginDragRequest) -> Union[DragSessionResponse, JSONResponse]:
        """
        Start a drag session.

        The response includes the preview for the starting pointer and any
        validation warnings (e.g. an empty nearest-of).
        """
        response = api_service.begin(body)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    @app.get(
        "/api/v1/drags",
        response_model=SessionListResponse,
        tags=["Drags"],
        summary="List live drags",
    )
    async def list_drags() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/drags/{session_id}",
        response_model=PreviewResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Drags"],
        summary="Latest preview of a drag",
    )
    async def get_drag(session_id: str) -> Union[PreviewResponse, JSONResponse]:
        response = api_service.get_preview(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    @app.post(
        "/api/v1/drags/{session_id}/move",
        response_model=PreviewResponse,
        responses={404: {"model": ErrorResponse}, 400: {"model": ErrorResponse}},
        tags=["Drags"],
        summary="Pointer moved",
    )
    async def move_drag(session_id: str, body: MoveRequest) -> Union[PreviewResponse, JSONResponse]:
        """Resolve the drag for a new pointer position."""
        response = api_service.move(session_id, body)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    @app.post(
        "/api/v1/drags/{session_id}/end",
        response_model=OutcomeResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Drags"],
        summary="Release the pointer",
    )
    async def end_drag(session_id: str) -> Union[OutcomeResponse, JSONResponse]:
        """
        Release the pointer.

        `committed=true` carries `committed_state`; otherwise
        `restored_state` is the state the drag started from.
        """
        response = api_service.end(session_id)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    @app.delete(
        "/api/v1/drags/{session_id}",
        response_model=OutcomeResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Drags"],
        summary="Cancel a drag",
    )
    async def cancel_drag(
        session_id: str,
        reason: str = Query("interrupted", description="Reason for cancelling"),
    ) -> Union[OutcomeResponse, JSONResponse]:
        response = api_service.cancel(session_id, reason)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    # =========================================================================
    # Specs and Candidates
    # =========================================================================

    @app.post(
        "/api/v1/specs/validate",
        response_model=ValidationResponse,
        tags=["Specs"],
        summary="Validate a spec tree",
    )
    async def validate_spec(body: ValidateSpecRequest) -> ValidationResponse:
        return api_service.validate(body.spec)

    @app.post(
        "/api/v1/candidates",
        response_model=CandidatesResponse,
        responses={400: {"model": ErrorResponse}},
        tags=["Specs"],
        summary="Enumerate candidate states",
    )
    async def candidates(body: CandidatesRequest) -> Union[CandidatesResponse, JSONResponse]:
        """
        Enumerate every state one list edit can produce.

        Order is stable: positions ascend, and for transfers the target
        lists are tried in the order given.
        """
        response = api_service.candidates(body)
        if isinstance(response, ErrorResponse):
            return error_to_json(response)
        return response

    return app


# For running directly: uvicorn dragspec.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
