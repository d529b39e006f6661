"""
Pytest fixtures for dragspec tests.
"""

import pytest

from ..config import DragConfig
from ..engine_core.anchors import PathAnchor
from ..engine_core.spec import fixed, nearest_of


def at(x: float, y: float, **extra) -> dict:
    """A state whose dragged element sits at (x, y)."""
    return {"x": x, "y": y, **extra}


@pytest.fixture
def xy_anchor() -> PathAnchor:
    """Anchor read from the top-level x and y fields of a state."""
    return PathAnchor.of("x", "y")


@pytest.fixture
def three_targets():
    """Nearest-of over fixed targets at (0,0), (100,0) and (50,50)."""
    return nearest_of([
        fixed(at(0, 0, name="a")),
        fixed(at(100, 0, name="b")),
        fixed(at(50, 50, name="c")),
    ])


@pytest.fixture
def lenient_config() -> DragConfig:
    """Config that skips static validation on drag start."""
    return DragConfig(strict_validation=False)
