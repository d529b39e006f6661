"""
Spec Resolver - Picks the live destination of a drag for a pointer position.

The resolver walks a spec tree once per pointer move and returns a
Resolution: what to preview, what would be dropped on release, how far
the pointer is from it, and the active path naming the live subtree.

Design principles:
- Stateless between calls except for the ResolverMemory the caller
  passes in (chaining selections and cached anchors for one drag)
- Dispatch per node kind through a handler table
- Locally greedy: every move is resolved on its own

Active path grammar:
    NearestOf        closest/<child index>/<child path>
    LayeredFallback  fg/<path> or bg/<path>
    Continuous       vary (free fields) or span (track)
    Fixed, Chained, MetricOverride contribute no segment
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Any, Callable
import logging

from ..config import DEFAULT_CONFIG, DragConfig
from .anchors import AnchorLookup
from .geometry import Metric, Point, euclidean, project_onto_polyline
from .paths import PathError, format_path, get_number_at_path, lerp_state, set_at_path
from .spec import (
    Chained,
    Continuous,
    Fixed,
    LayeredFallback,
    MalformedSpecError,
    MetricOverride,
    NearestOf,
    Presentation,
    SpecNode,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DragFrame:
    """Pointer position for one move, plus where the drag started."""
    pointer: Point
    origin: Point

    @property
    def displacement(self) -> Point:
        return self.pointer - self.origin


@dataclass
class ResolverMemory:
    """
    Per-drag scratch space owned by a single session.

    selections: chaining nearest-of key -> last selected child index
    anchors: (id(node), index) -> anchor, looked up once per drag
    """
    selections: dict[str, int] = field(default_factory=dict)
    anchors: dict[tuple[int, int], Point | None] = field(default_factory=dict)


@dataclass(frozen=True)
class Resolution:
    """
    Outcome of resolving a spec tree for one pointer position.

    drop_state is what a release would adopt before continuations run;
    final_state() applies them. committable is False when a snap radius
    on the selected branch is exceeded.
    """
    preview_state: Any
    drop_state: Any
    anchor: Point
    distance: float
    active_path: str
    committable: bool = True
    snapped: bool = False
    continuations: tuple[Any, ...] = ()
    presentation: Presentation | None = None

    def final_state(self) -> Any:
        state = self.drop_state
        for continuation in self.continuations:
            state = continuation(state) if callable(continuation) else continuation
        return state


@dataclass
class _Walk:
    frame: DragFrame
    memory: ResolverMemory
    for_commit: bool


def _join(*segments: str) -> str:
    return "/".join(s for s in segments if s)


class SpecResolver:
    """
    Resolves spec trees against an anchor lookup.

    anchor_of: maps a candidate state to its screen anchor (or None)
    metric: default distance function, overridable per subtree
    """

    def __init__(
        self,
        anchor_of: AnchorLookup,
        metric: Metric = euclidean,
        config: DragConfig | None = None,
    ):
        self.anchor_of = anchor_of
        self.metric = metric
        self.config = config or DEFAULT_CONFIG
        self._handlers: dict[type, Callable[..., Resolution | None]] = {
            Fixed: self._resolve_fixed,
            Continuous: self._resolve_continuous,
            NearestOf: self._resolve_nearest,
            LayeredFallback: self._resolve_layered,
            Chained: self._resolve_chained,
            MetricOverride: self._resolve_metric_override,
        }

    def resolve(
        self,
        spec: SpecNode,
        frame: DragFrame,
        memory: ResolverMemory | None = None,
        for_commit: bool = False,
    ) -> Resolution | None:
        """
        Resolve spec for frame.

        Returns None when nothing in the tree is reachable. With
        for_commit, layered fallbacks skip a foreground that could not
        commit.
        """
        walk = _Walk(frame=frame, memory=memory or ResolverMemory(), for_commit=for_commit)
        return self._resolve(spec, walk, "", self.metric)

    def _resolve(self, node: SpecNode, walk: _Walk, prefix: str, metric: Metric) -> Resolution | None:
        handler = self._handlers.get(type(node))
        if handler is None:
            raise MalformedSpecError(f"not a spec node: {node!r}")
        result = handler(node, walk, prefix, metric)
        if result is not None and node.presentation is not None:
            result = replace(result, presentation=node.presentation.merged(result.presentation))
        return result

    def _anchor(self, node: SpecNode, index: int, state: Any, memory: ResolverMemory) -> Point | None:
        key = (id(node), index)
        if key not in memory.anchors:
            memory.anchors[key] = self.anchor_of(state)
        return memory.anchors[key]

    # =========================================================================
    # Handlers
    # =========================================================================

    def _resolve_fixed(self, node: Fixed, walk: _Walk, prefix: str, metric: Metric) -> Resolution | None:
        anchor = self._anchor(node, 0, node.state, walk.memory)
        if anchor is None:
            return None
        return Resolution(
            preview_state=node.state,
            drop_state=node.state,
            anchor=anchor,
            distance=metric(walk.frame.pointer, anchor),
            active_path=prefix,
        )

    def _resolve_continuous(
        self, node: Continuous, walk: _Walk, prefix: str, metric: Metric
    ) -> Resolution | None:
        if node.is_track:
            return self._resolve_track(node, walk, prefix, metric)

        delta = walk.frame.displacement
        state = node.base
        clamped = False
        for i, path in enumerate(node.field_paths):
            try:
                start = get_number_at_path(node.base, path)
            except PathError as e:
                raise MalformedSpecError(
                    f"continuous field {format_path(path)} is not a numeric leaf: {e.reason}"
                ) from e
            sx, sy = node.scale[i]
            value = start + sx * delta.x + sy * delta.y
            bound = node.bounds[i] if node.bounds else None
            if bound is not None:
                limited = min(max(value, bound[0]), bound[1])
                clamped = clamped or limited != value
                value = limited
            state = set_at_path(state, path, value)

        pointer = walk.frame.pointer
        anchor = pointer
        if clamped:
            # Where the pointer would be if it still held the element.
            start_anchor = self._anchor(node, 0, node.base, walk.memory)
            reached = self.anchor_of(state)
            if start_anchor is not None and reached is not None:
                anchor = walk.frame.origin + (reached - start_anchor)
        return Resolution(
            preview_state=state,
            drop_state=state,
            anchor=anchor,
            distance=metric(pointer, anchor),
            active_path=_join(prefix, "vary"),
        )

    def _resolve_track(self, node: Continuous, walk: _Walk, prefix: str, metric: Metric) -> Resolution | None:
        pointer = walk.frame.pointer
        placed = []
        for i, state in enumerate(node.track):
            anchor = self._anchor(node, i, state, walk.memory)
            if anchor is not None:
                placed.append((i, anchor))
        if not placed:
            return None

        projection = project_onto_polyline([anchor for _, anchor in placed], pointer)
        start_idx = placed[projection.segment][0]
        if len(placed) == 1:
            preview = node.track[start_idx]
        else:
            end_idx = placed[projection.segment + 1][0]
            preview = lerp_state(node.track[start_idx], node.track[end_idx], projection.t)

        drop_idx, drop_dist = placed[0][0], metric(pointer, placed[0][1])
        for i, anchor in placed[1:]:
            dist = metric(pointer, anchor)
            if dist < drop_dist:
                drop_idx, drop_dist = i, dist

        return Resolution(
            preview_state=preview,
            drop_state=node.track[drop_idx],
            anchor=projection.point,
            distance=metric(pointer, projection.point),
            active_path=_join(prefix, "span"),
        )

    def _resolve_nearest(self, node: NearestOf, walk: _Walk, prefix: str, metric: Metric) -> Resolution | None:
        key = _join(prefix, "closest")
        candidates: dict[int, Resolution] = {}
        for i, child in enumerate(node.children):
            result = self._resolve(child, walk, _join(key, str(i)), metric)
            if result is not None:
                candidates[i] = result
        if not candidates:
            return None

        pool = candidates
        if walk.for_commit:
            # A child that cannot commit is unreachable on release, unless no child can.
            pool = {i: result for i, result in candidates.items() if result.committable} or candidates

        best_idx = None
        for i, result in pool.items():
            # Strict comparison keeps the earliest child on ties.
            if best_idx is None or result.distance < pool[best_idx].distance:
                best_idx = i

        if node.chaining:
            previous = walk.memory.selections.get(key)
            if previous is not None and previous in pool and previous != best_idx:
                margin = node.hysteresis if node.hysteresis is not None else self.config.hysteresis_margin
                if pool[best_idx].distance + margin >= pool[previous].distance:
                    best_idx = previous
            walk.memory.selections[key] = best_idx

        best = pool[best_idx]
        logger.debug("%s selected child %d at distance %.2f", key, best_idx, best.distance)

        if node.snap_radius is None:
            return best
        if best.distance <= node.snap_radius:
            return replace(best, preview_state=best.drop_state, snapped=True)
        return replace(best, committable=False, snapped=False)

    def _resolve_layered(
        self, node: LayeredFallback, walk: _Walk, prefix: str, metric: Metric
    ) -> Resolution | None:
        radius = node.radius if node.radius is not None else self.config.fallback_radius
        foreground = self._resolve(node.foreground, walk, _join(prefix, "fg"), metric)
        if foreground is not None and foreground.distance <= radius:
            if foreground.committable or not walk.for_commit:
                return foreground
        background = self._resolve(node.background, walk, _join(prefix, "bg"), metric)
        if background is None:
            return foreground
        return background

    def _resolve_chained(self, node: Chained, walk: _Walk, prefix: str, metric: Metric) -> Resolution | None:
        result = self._resolve(node.child, walk, prefix, metric)
        if result is None:
            return None
        return replace(result, continuations=result.continuations + (node.continuation,))

    def _resolve_metric_override(
        self, node: MetricOverride, walk: _Walk, prefix: str, metric: Metric
    ) -> Resolution | None:
        return self._resolve(node.child, walk, prefix, node.distance)


def resolve_once(
    spec: SpecNode,
    pointer: Point | tuple[float, float],
    anchor_of: AnchorLookup,
    origin: Point | tuple[float, float] | None = None,
    metric: Metric = euclidean,
) -> Resolution | None:
    """
    Convenience function to resolve a spec for a single pointer position.

    Creates a SpecResolver and a throwaway memory.
    """
    pointer = Point.of(pointer)
    frame = DragFrame(pointer=pointer, origin=Point.of(origin) if origin is not None else pointer)
    return SpecResolver(anchor_of, metric=metric).resolve(spec, frame)
