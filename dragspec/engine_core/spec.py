"""
Drag Spec - Declarative description of where a dragged element can go.

A spec tree is built fresh when a drag starts and thrown away when it
ends. Nodes are frozen; "changing" a node produces a new one.

Node kinds:
- Fixed:           one concrete target state
- Continuous:      numeric fields driven by pointer displacement, or a
                   track of states interpolated along their anchors
- NearestOf:       whichever child is closest to the pointer
- LayeredFallback: foreground while near it, background otherwise
- Chained:         a child plus a state adopted right after it commits
- MetricOverride:  a child resolved with a different distance function

Every node may carry a Presentation, which is configuration for the
renderer (floating, ghosting, transitions) and has no effect on which
state is selected.
"""

from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass, replace
from enum import Enum
from numbers import Real
from typing import Any, Callable, Iterable, Sequence, Union

from .geometry import Metric
from .paths import FieldPath, PathLike, parse_path


class MalformedSpecError(ValueError):
    """A spec tree cannot be resolved as written."""


# =============================================================================
# Presentation
# =============================================================================

class Easing(Enum):
    """Easing curves understood by the renderer."""
    CUBIC_OUT = "cubic-out"
    ELASTIC_OUT = "elastic-out"


@dataclass(frozen=True)
class Transition:
    """Animation used when the drag settles (commit or cancel)."""
    easing: Easing = Easing.CUBIC_OUT
    duration_ms: float = 200.0


@dataclass(frozen=True)
class Presentation:
    """
    Renderer hints attached to a node.

    None means "not set here". When several nodes on the selected branch
    set the same hint, the innermost one wins.
    """
    floating: bool | None = None
    ghost: bool | Mapping[str, Any] | None = None  # True, or attributes for the ghost element
    on_top: bool | None = None
    drop_transition: Transition | None = None

    def merged(self, inner: Presentation | None) -> Presentation:
        """Overlay inner's hints on top of this one."""
        if inner is None:
            return self
        return Presentation(
            floating=inner.floating if inner.floating is not None else self.floating,
            ghost=inner.ghost if inner.ghost is not None else self.ghost,
            on_top=inner.on_top if inner.on_top is not None else self.on_top,
            drop_transition=(
                inner.drop_transition
                if inner.drop_transition is not None
                else self.drop_transition
            ),
        )


# =============================================================================
# Nodes
# =============================================================================

class _Fluent:
    """Chainable helpers shared by every node kind."""

    def and_then(self, continuation: Any) -> Chained:
        return Chained(child=self, continuation=continuation)

    def with_background(self, background: SpecNode, radius: float | None = None) -> LayeredFallback:
        return LayeredFallback(foreground=self, background=background, radius=radius)

    def with_metric(self, distance: Metric) -> MetricOverride:
        return MetricOverride(child=self, distance=distance)

    def with_snap_radius(self, radius: float, chaining: bool = False) -> NearestOf:
        if isinstance(self, NearestOf):
            return replace(self, snap_radius=radius, chaining=chaining)
        return NearestOf(children=(self,), snap_radius=radius, chaining=chaining)

    def with_presentation(self, **hints: Any) -> SpecNode:
        current = self.presentation or Presentation()
        return replace(self, presentation=current.merged(Presentation(**hints)))

    def with_drop_transition(self, transition: Transition | None = None) -> SpecNode:
        return self.with_presentation(drop_transition=transition or Transition())


@dataclass(frozen=True, eq=False)
class Fixed(_Fluent):
    state: Any
    presentation: Presentation | None = None


@dataclass(frozen=True, eq=False)
class Continuous(_Fluent):
    """
    Continuous variation of a base state.

    Free mode (field_paths set): each field is driven by the pointer
    displacement, value = base + sx * dx + sy * dy with scale[i] = (sx, sy).
    bounds[i] optionally clamps field i.

    Track mode (track set): the pointer is projected onto the polyline
    through the anchors of the track states, and the preview is the
    interpolation of the two states around the projected point.
    """
    base: Any
    field_paths: tuple[FieldPath, ...] = ()
    scale: tuple[tuple[float, float], ...] = ()
    bounds: tuple[tuple[float, float] | None, ...] = ()
    track: tuple[Any, ...] = ()
    presentation: Presentation | None = None

    def __post_init__(self):
        if self.track and self.field_paths:
            raise MalformedSpecError("continuous spec cannot have both field paths and a track")
        if len(self.scale) != len(self.field_paths):
            raise MalformedSpecError("continuous spec needs exactly one scale per field path")
        if self.bounds and len(self.bounds) != len(self.field_paths):
            raise MalformedSpecError("continuous spec bounds must match its field paths")
        for bound in self.bounds:
            if bound is not None and bound[0] > bound[1]:
                raise MalformedSpecError(f"empty bounds {bound}")

    @property
    def is_track(self) -> bool:
        return len(self.track) > 0


@dataclass(frozen=True, eq=False)
class NearestOf(_Fluent):
    """
    Pick the child whose anchor is closest to the pointer.

    snap_radius: on release, the selection only commits when its
    distance is within this radius.
    chaining: keep the previous selection unless another child is
    closer by more than hysteresis (DragConfig default when None).
    """
    children: tuple[SpecNode, ...] = ()
    snap_radius: float | None = None
    chaining: bool = False
    hysteresis: float | None = None
    presentation: Presentation | None = None

    def __post_init__(self):
        if self.snap_radius is not None and self.snap_radius < 0:
            raise MalformedSpecError(f"snap radius must be non-negative, got {self.snap_radius}")
        if self.hysteresis is not None and self.hysteresis < 0:
            raise MalformedSpecError(f"hysteresis must be non-negative, got {self.hysteresis}")


@dataclass(frozen=True, eq=False)
class LayeredFallback(_Fluent):
    """Foreground while its anchor is within radius of the pointer, else background."""
    foreground: SpecNode
    background: SpecNode
    radius: float | None = None
    presentation: Presentation | None = None

    def __post_init__(self):
        if self.radius is not None and self.radius < 0:
            raise MalformedSpecError(f"activation radius must be non-negative, got {self.radius}")


@dataclass(frozen=True, eq=False)
class Chained(_Fluent):
    """
    Resolve as child; after the child's state commits, move on to
    continuation (a state, or a function of the committed state).
    """
    child: SpecNode
    continuation: Any
    presentation: Presentation | None = None


@dataclass(frozen=True, eq=False)
class MetricOverride(_Fluent):
    """Resolve child with distance(pointer, anchor) in place of the active metric."""
    child: SpecNode
    distance: Metric
    presentation: Presentation | None = None

    def __post_init__(self):
        if not callable(self.distance):
            raise MalformedSpecError("metric override needs a callable distance function")


SpecNode = Union[Fixed, Continuous, NearestOf, LayeredFallback, Chained, MetricOverride]

NODE_TYPES = (Fixed, Continuous, NearestOf, LayeredFallback, Chained, MetricOverride)


# =============================================================================
# Constructors
# =============================================================================

ScaleLike = Union[float, Sequence[float]]


def _default_axis(index: int) -> tuple[float, float]:
    return (1.0, 0.0) if index % 2 == 0 else (0.0, 1.0)


def _normalize_scale(
    count: int, scale: ScaleLike | Sequence[ScaleLike] | None
) -> tuple[tuple[float, float], ...]:
    if scale is None:
        return tuple(_default_axis(i) for i in range(count))
    if isinstance(scale, Real):
        return tuple(
            (ax * scale, ay * scale) for ax, ay in (_default_axis(i) for i in range(count))
        )
    entries = list(scale)
    if len(entries) != count:
        raise MalformedSpecError(f"expected {count} scale entries, got {len(entries)}")
    result = []
    for i, entry in enumerate(entries):
        if isinstance(entry, Real):
            ax, ay = _default_axis(i)
            result.append((ax * entry, ay * entry))
        else:
            sx, sy = entry
            result.append((float(sx), float(sy)))
    return tuple(result)


def fixed(state: Any) -> Fixed:
    return Fixed(state=state)


def floating(
    state: Any,
    ghost: bool | Mapping[str, Any] | None = None,
    on_top: bool = True,
) -> Fixed:
    """A fixed target whose dragged element is drawn detached, following the pointer."""
    return Fixed(
        state=state,
        presentation=Presentation(floating=True, ghost=ghost, on_top=on_top),
    )


def floatings(states: Iterable[Any], ghost: bool | Mapping[str, Any] | None = None) -> list[Fixed]:
    return [floating(state, ghost=ghost) for state in states]


def continuous(
    state: Any,
    *field_paths: PathLike,
    scale: ScaleLike | Sequence[ScaleLike] | None = None,
    bounds: Sequence[tuple[float, float] | None] | None = None,
) -> Continuous:
    """
    Drive numeric fields of state from the pointer.

    By default the first path follows x, the second y, and so on
    alternating. scale is a single factor, or one entry per path that is
    either a factor on that path's default axis or an explicit (sx, sy).
    """
    paths = tuple(parse_path(p) for p in field_paths)
    return Continuous(
        base=state,
        field_paths=paths,
        scale=_normalize_scale(len(paths), scale),
        bounds=tuple(bounds) if bounds is not None else (),
    )


def nearest_of(
    children: Iterable[SpecNode],
    snap_radius: float | None = None,
    chaining: bool = False,
    hysteresis: float | None = None,
) -> NearestOf:
    return NearestOf(
        children=tuple(children),
        snap_radius=snap_radius,
        chaining=chaining,
        hysteresis=hysteresis,
    )


def layered_fallback(
    foreground: SpecNode, background: SpecNode, radius: float | None = None
) -> LayeredFallback:
    return LayeredFallback(foreground=foreground, background=background, radius=radius)


def chained(child: SpecNode, continuation: Any | Callable[[Any], Any]) -> Chained:
    return Chained(child=child, continuation=continuation)


def metric_override(child: SpecNode, distance: Metric) -> MetricOverride:
    return MetricOverride(child=child, distance=distance)


def discrete_choice(
    states: Iterable[Any],
    snap_radius: float | None = None,
    chaining: bool = False,
) -> NearestOf:
    """Nearest of a fixed target per state."""
    return nearest_of(
        [fixed(state) for state in states],
        snap_radius=snap_radius,
        chaining=chaining,
    )


def interpolate(state_a: Any, state_b: Any, *more: Any) -> NearestOf:
    """Continuous interpolation along the path connecting the given states."""
    track = (state_a, state_b) + more
    return nearest_of([Continuous(base=state_a, track=track)])


def children_of(node: SpecNode) -> tuple[SpecNode, ...]:
    """Direct children of a node, in resolution order."""
    if isinstance(node, NearestOf):
        return node.children
    if isinstance(node, LayeredFallback):
        return (node.foreground, node.background)
    if isinstance(node, (Chained, MetricOverride)):
        return (node.child,)
    return ()
