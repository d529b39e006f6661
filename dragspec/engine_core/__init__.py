"""
Engine Core - Candidate enumeration and drag spec resolution.

The engine is the part that:
1. Enumerates candidate states with the amb evaluator
2. Describes drag behaviour as a spec tree
3. Resolves the spec tree against the pointer on every move
"""

from .amb import AmbUsageError, choose, collect, generate, prune, require
from .anchors import AnchorLookup, PathAnchor
from .candidates import (
    choose_index,
    insertion_states,
    produce_all,
    removal_state,
    reorder_states,
    transfer_states,
)
from .geometry import METRICS, Metric, Point, euclidean
from .paths import PathError, get_at_path, lerp_state, set_at_path
from .resolver import DragFrame, Resolution, ResolverMemory, SpecResolver, resolve_once
from .spec import (
    Chained,
    Continuous,
    Easing,
    Fixed,
    LayeredFallback,
    MalformedSpecError,
    MetricOverride,
    NearestOf,
    Presentation,
    SpecNode,
    Transition,
    chained,
    continuous,
    discrete_choice,
    fixed,
    floating,
    floatings,
    interpolate,
    layered_fallback,
    metric_override,
    nearest_of,
)

__all__ = [
    "AmbUsageError",
    "choose",
    "collect",
    "generate",
    "prune",
    "require",
    "AnchorLookup",
    "PathAnchor",
    "choose_index",
    "insertion_states",
    "produce_all",
    "removal_state",
    "reorder_states",
    "transfer_states",
    "METRICS",
    "Metric",
    "Point",
    "euclidean",
    "PathError",
    "get_at_path",
    "lerp_state",
    "set_at_path",
    "DragFrame",
    "Resolution",
    "ResolverMemory",
    "SpecResolver",
    "resolve_once",
    "Chained",
    "Continuous",
    "Easing",
    "Fixed",
    "LayeredFallback",
    "MalformedSpecError",
    "MetricOverride",
    "NearestOf",
    "Presentation",
    "SpecNode",
    "Transition",
    "chained",
    "continuous",
    "discrete_choice",
    "fixed",
    "floating",
    "floatings",
    "interpolate",
    "layered_fallback",
    "metric_override",
    "nearest_of",
]
