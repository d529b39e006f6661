"""
Pydantic Schemas for API - Wire format for spec trees, drags and candidates.

These models define the exact contract between a remote pointer layer
(browser, native client) and the resolver. States are arbitrary JSON;
anchors are read out of the state with field paths, since there is no
renderer on this side of the wire.

Error Codes:
- SESSION_NOT_FOUND: Drag session does not exist or already finished
- MALFORMED_SPEC: Spec tree cannot be built or fails validation
- VALIDATION_ERROR: Request payload is invalid
- INTERNAL_ERROR: Unexpected failure while resolving
"""

import math
from dataclasses import replace
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, Field

from ..engine_core import spec as specs
from ..engine_core.anchors import PathAnchor
from ..engine_core.geometry import METRICS, Point, scaled
from ..engine_core.spec import Easing, Presentation, SpecNode, Transition


# =============================================================================
# Enums
# =============================================================================

class SessionStatus(str, Enum):
    """Drag session status values."""
    IDLE = "idle"
    PREVIEWING = "previewing"
    COMMITTED = "committed"
    CANCELLED = "cancelled"


class MetricName(str, Enum):
    """Distance metrics available over the wire."""
    EUCLIDEAN = "euclidean"
    MANHATTAN = "manhattan"
    CHEBYSHEV = "chebyshev"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


class CandidateOperation(str, Enum):
    """Candidate generators exposed by POST /candidates."""
    INSERT = "insert"
    REORDER = "reorder"
    TRANSFER = "transfer"
    REMOVE = "remove"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    MALFORMED_SPEC = "MALFORMED_SPEC"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


PathModel = Union[str, list[Union[int, str]]]


# =============================================================================
# Shared Models
# =============================================================================

class PointModel(BaseModel):
    """A screen-space point."""
    x: float
    y: float

    def to_point(self) -> Point:
        return Point(self.x, self.y)

    @classmethod
    def from_point(cls, point: Optional[Point]) -> Optional["PointModel"]:
        if point is None or not (math.isfinite(point.x) and math.isfinite(point.y)):
            return None
        return cls(x=point.x, y=point.y)


class TransitionModel(BaseModel):
    """Settle animation."""
    easing: Easing = Easing.CUBIC_OUT
    duration_ms: float = Field(200.0, ge=0.0)

    model_config = {"from_attributes": True}


class PresentationModel(BaseModel):
    """Renderer hints attached to a spec node."""
    floating: Optional[bool] = None
    ghost: Optional[Union[bool, dict[str, Any]]] = Field(
        None, description="true, or attributes to apply to the ghost element"
    )
    on_top: Optional[bool] = None
    drop_transition: Optional[TransitionModel] = None

    model_config = {"from_attributes": True}

    def to_presentation(self) -> Presentation:
        return Presentation(
            floating=self.floating,
            ghost=self.ghost,
            on_top=self.on_top,
            drop_transition=(
                Transition(self.drop_transition.easing, self.drop_transition.duration_ms)
                if self.drop_transition
                else None
            ),
        )


class AnchorModel(BaseModel):
    """Where the dragged element sits in a state: numeric fields for x and y."""
    x_path: PathModel = Field(..., description='e.g. "items.0.x" or ["items", 0, "x"]')
    y_path: PathModel
    offset: tuple[float, float] = (0.0, 0.0)

    def to_lookup(self) -> PathAnchor:
        return PathAnchor.of(self.x_path, self.y_path, self.offset)


# =============================================================================
# Spec Tree Models
# =============================================================================

class _NodeBase(BaseModel):
    presentation: Optional[PresentationModel] = None

    def _styled(self, node: SpecNode) -> SpecNode:
        if self.presentation is None:
            return node
        return replace(node, presentation=self.presentation.to_presentation())


class FixedNode(_NodeBase):
    type: Literal["fixed"] = "fixed"
    state: Any

    def to_spec(self) -> SpecNode:
        return self._styled(specs.fixed(self.state))


class ContinuousNode(_NodeBase):
    type: Literal["continuous"] = "continuous"
    state: Any
    fields: list[PathModel] = Field(..., min_length=1, description="Numeric fields driven by the pointer")
    scale: Optional[list[Union[float, tuple[float, float]]]] = Field(
        None, description="Per field: factor on its default axis, or an explicit [sx, sy]"
    )
    bounds: Optional[list[Optional[tuple[float, float]]]] = None

    def to_spec(self) -> SpecNode:
        return self._styled(
            specs.continuous(self.state, *self.fields, scale=self.scale, bounds=self.bounds)
        )


class NearestOfNode(_NodeBase):
    type: Literal["nearest_of"] = "nearest_of"
    children: list["SpecNodeModel"]
    snap_radius: Optional[float] = Field(None, ge=0.0)
    chaining: bool = False
    hysteresis: Optional[float] = Field(None, ge=0.0)

    def to_spec(self) -> SpecNode:
        return self._styled(specs.nearest_of(
            [child.to_spec() for child in self.children],
            snap_radius=self.snap_radius,
            chaining=self.chaining,
            hysteresis=self.hysteresis,
        ))


class LayeredFallbackNode(_NodeBase):
    type: Literal["layered_fallback"] = "layered_fallback"
    foreground: "SpecNodeModel"
    background: "SpecNodeModel"
    radius: Optional[float] = Field(None, ge=0.0)

    def to_spec(self) -> SpecNode:
        return self._styled(specs.layered_fallback(
            self.foreground.to_spec(), self.background.to_spec(), radius=self.radius
        ))


class ChainedNode(_NodeBase):
    type: Literal["chained"] = "chained"
    child: "SpecNodeModel"
    continuation: Any

    def to_spec(self) -> SpecNode:
        return self._styled(specs.chained(self.child.to_spec(), self.continuation))


class MetricOverrideNode(_NodeBase):
    type: Literal["metric_override"] = "metric_override"
    child: "SpecNodeModel"
    metric: MetricName = MetricName.EUCLIDEAN
    factor: float = Field(1.0, gt=0.0, description="Multiplier applied to the metric")

    def to_spec(self) -> SpecNode:
        metric = METRICS[self.metric.value]
        if self.factor != 1.0:
            metric = scaled(metric, self.factor)
        return self._styled(specs.metric_override(self.child.to_spec(), metric))


class DiscreteChoiceNode(_NodeBase):
    type: Literal["discrete_choice"] = "discrete_choice"
    states: list[Any]
    snap_radius: Optional[float] = Field(None, ge=0.0)
    chaining: bool = False

    def to_spec(self) -> SpecNode:
        return self._styled(specs.discrete_choice(
            self.states, snap_radius=self.snap_radius, chaining=self.chaining
        ))


class InterpolateNode(_NodeBase):
    type: Literal["interpolate"] = "interpolate"
    states: list[Any] = Field(..., min_length=2)

    def to_spec(self) -> SpecNode:
        return self._styled(specs.interpolate(*self.states))


SpecNodeModel = Annotated[
    Union[
        FixedNode,
        ContinuousNode,
        NearestOfNode,
        LayeredFallbackNode,
        ChainedNode,
        MetricOverrideNode,
        DiscreteChoiceNode,
        InterpolateNode,
    ],
    Field(discriminator="type"),
]

for _model in (NearestOfNode, LayeredFallbackNode, ChainedNode, MetricOverrideNode):
    _model.model_rebuild()


# =============================================================================
# Request Models
# =============================================================================

class BeginDragRequest(BaseModel):
    """Request to start a drag."""
    spec: SpecNodeModel
    anchor: AnchorModel
    pointer: PointModel = Field(..., description="Pointer position at drag start")
    state: Any = Field(None, description="State the drag starts from, restored on cancel")
    metric: MetricName = MetricName.EUCLIDEAN


class MoveRequest(BaseModel):
    """Pointer moved."""
    pointer: PointModel


class CancelRequest(BaseModel):
    reason: str = "interrupted"


class ValidateSpecRequest(BaseModel):
    spec: SpecNodeModel


class CandidatesRequest(BaseModel):
    """Request to enumerate candidate states with one of the built-in generators."""
    operation: CandidateOperation
    state: Any
    list_path: PathModel = Field(..., description="List the operation works on (source list for transfer)")
    item: Any = Field(None, description="Item to insert (insert)")
    index: Optional[int] = Field(None, description="Element to move or remove (reorder, transfer, remove)")
    target_paths: list[PathModel] = Field(default_factory=list, description="Destination lists (transfer)")
    include_identity: bool = True


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class PreviewResponse(BaseModel):
    """What to show for the current pointer position."""
    session_id: str
    preview_state: Any
    active_path: str
    drop_state: Any = None
    distance: Optional[float] = Field(None, description="null when nothing is reachable")
    anchor: Optional[PointModel] = None
    reachable: bool = False
    committable: bool = False
    snapped: bool = False
    presentation: Optional[PresentationModel] = None
    api_version: str = "v1"


class DragSessionResponse(BaseModel):
    """Response from starting a drag."""
    session_id: str
    status: SessionStatus
    created_at: float
    preview: PreviewResponse
    warnings: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class OutcomeResponse(BaseModel):
    """Result of releasing or cancelling a drag."""
    session_id: str
    status: SessionStatus
    committed: bool
    committed_state: Any = None
    intermediate_state: Any = None
    restored_state: Any = None
    active_path: str = ""
    reason: Optional[str] = None
    presentation: Optional[PresentationModel] = None
    api_version: str = "v1"


class ValidationResponse(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)
    api_version: str = "v1"


class CandidatesResponse(BaseModel):
    """Enumerated candidate states, in generation order."""
    states: list[Any]
    count: int
    api_version: str = "v1"


class SessionListResponse(BaseModel):
    """Response listing live drag sessions."""
    sessions: list[str]
    count: int


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
