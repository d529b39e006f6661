"""
Anchors - Where a candidate state would put the dragged element on screen.

The resolver never renders anything itself. It asks an anchor lookup,
normally supplied by the rendering layer, for the screen position of
the dragged element in a candidate state. None means the element does
not appear in that state, so the candidate is not reachable.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Protocol

from .geometry import Point
from .paths import PathError, PathLike, get_number_at_path, parse_path


class AnchorLookup(Protocol):
    def __call__(self, state: Any) -> Point | None: ...


@dataclass(frozen=True)
class PathAnchor:
    """
    Anchor read straight out of the state.

    Useful when the state already stores the element's position, and for
    hosts (HTTP, CLI) that have no renderer to ask.
    """
    x_path: tuple
    y_path: tuple
    offset: Point = Point(0.0, 0.0)

    @classmethod
    def of(cls, x_path: PathLike, y_path: PathLike, offset: tuple[float, float] = (0.0, 0.0)) -> PathAnchor:
        return cls(x_path=parse_path(x_path), y_path=parse_path(y_path), offset=Point.of(offset))

    def __call__(self, state: Any) -> Point | None:
        try:
            x = get_number_at_path(state, self.x_path)
            y = get_number_at_path(state, self.y_path)
        except PathError:
            return None
        return Point(float(x), float(y)) + self.offset
