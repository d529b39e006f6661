"""
Configuration - Defaults for drag resolution and session handling.

Values can be overridden per process through environment variables:
    DRAGSPEC_FALLBACK_RADIUS   default activation radius for layered fallbacks
    DRAGSPEC_HYSTERESIS        default chaining hysteresis margin (pixels)
    DRAGSPEC_STRICT            "0"/"false" disables spec validation on drag start
    DRAGSPEC_SESSION_MAX_AGE   seconds before an idle session counts as stale
"""

from __future__ import annotations
from dataclasses import dataclass
import os


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


@dataclass(frozen=True)
class DragConfig:
    """
    Tunables shared by the resolver and the session layer.

    fallback_radius is used by layered fallbacks built without an explicit
    radius. hysteresis_margin applies to chaining nearest-of nodes that do
    not set their own margin.
    """
    fallback_radius: float = 50.0
    hysteresis_margin: float = 8.0
    strict_validation: bool = True
    session_max_age_seconds: float = 300.0

    @classmethod
    def from_env(cls) -> DragConfig:
        """Build a config from DRAGSPEC_* environment variables."""
        return cls(
            fallback_radius=_env_float("DRAGSPEC_FALLBACK_RADIUS", cls.fallback_radius),
            hysteresis_margin=_env_float("DRAGSPEC_HYSTERESIS", cls.hysteresis_margin),
            strict_validation=_env_bool("DRAGSPEC_STRICT", cls.strict_validation),
            session_max_age_seconds=_env_float(
                "DRAGSPEC_SESSION_MAX_AGE", cls.session_max_age_seconds
            ),
        )


DEFAULT_CONFIG = DragConfig()
