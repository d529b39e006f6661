"""
Spec Validation - Static checks on a drag spec tree.

Validates that:
1. Every node is a known spec node
2. Continuous field paths reach numeric leaves of the base state
3. Radii and margins are non-negative, metrics are callable
4. Nothing is obviously inert (empty nearest-of, continuous with no fields)

Construction already rejects most malformed nodes; this catches what
can only be seen against the states (paths) and reports everything at
once instead of failing on the first problem.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.paths import PathError, format_path, get_number_at_path
from ..engine_core.spec import (
    NODE_TYPES,
    Chained,
    Continuous,
    LayeredFallback,
    MetricOverride,
    NearestOf,
    SpecNode,
    children_of,
)


class SpecValidationError(Exception):
    """Raised when spec validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Spec validation failed with {len(errors)} error(s): " + "; ".join(errors))


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def validate_spec(spec: SpecNode, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate a complete spec tree.

    Returns ValidationResult with errors and warnings.
    Raises SpecValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    stack: list[tuple[SpecNode, str]] = [(spec, "<root>")]
    while stack:
        node, where = stack.pop()
        if not isinstance(node, NODE_TYPES):
            errors.append(f"{where}: not a spec node ({type(node).__name__})")
            continue

        node_errors, node_warnings = _validate_node(node)
        errors.extend(f"{where}: {e}" for e in node_errors)
        warnings.extend(f"{where}: {w}" for w in node_warnings)

        for i, child in reversed(list(enumerate(children_of(node)))):
            stack.append((child, f"{where}/{_child_label(node, i)}"))

    result = ValidationResult(valid=len(errors) == 0, errors=errors, warnings=warnings)
    if raise_on_error and errors:
        raise SpecValidationError(errors)
    return result


def _child_label(node: SpecNode, index: int) -> str:
    if isinstance(node, NearestOf):
        return f"closest/{index}"
    if isinstance(node, LayeredFallback):
        return "fg" if index == 0 else "bg"
    if isinstance(node, Chained):
        return "and-then"
    if isinstance(node, MetricOverride):
        return "metric"
    return str(index)


def _validate_node(node: SpecNode) -> tuple[list[str], list[str]]:
    errors: list[str] = []
    warnings: list[str] = []

    if isinstance(node, Continuous):
        if not node.is_track and not node.field_paths:
            warnings.append("continuous spec has no field paths and never changes")
        for path in node.field_paths:
            try:
                get_number_at_path(node.base, path)
            except PathError as e:
                errors.append(f"continuous field {format_path(path)}: {e.reason}")

    elif isinstance(node, NearestOf):
        if not node.children:
            warnings.append("nearest-of has no children and is never reachable")
        if node.snap_radius is not None and node.snap_radius < 0:
            errors.append("snap radius must be non-negative")

    elif isinstance(node, LayeredFallback):
        if node.radius is not None and node.radius < 0:
            errors.append("activation radius must be non-negative")

    elif isinstance(node, MetricOverride):
        if not callable(node.distance):
            errors.append("metric override distance is not callable")

    elif isinstance(node, Chained):
        if node.continuation is None:
            errors.append("chained spec has no continuation")

    return errors, warnings
