"""
Tests for configuration loading.
"""

import pytest

from ..config import DEFAULT_CONFIG, DragConfig


class TestDragConfig:

    def test_defaults(self):
        assert DEFAULT_CONFIG.fallback_radius == 50.0
        assert DEFAULT_CONFIG.hysteresis_margin == 8.0
        assert DEFAULT_CONFIG.strict_validation is True

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DRAGSPEC_FALLBACK_RADIUS", "75")
        monkeypatch.setenv("DRAGSPEC_HYSTERESIS", "2.5")
        monkeypatch.setenv("DRAGSPEC_STRICT", "false")
        monkeypatch.setenv("DRAGSPEC_SESSION_MAX_AGE", "30")

        config = DragConfig.from_env()

        assert config == DragConfig(
            fallback_radius=75.0,
            hysteresis_margin=2.5,
            strict_validation=False,
            session_max_age_seconds=30.0,
        )

    def test_unset_variables_keep_defaults(self, monkeypatch):
        for name in ("DRAGSPEC_FALLBACK_RADIUS", "DRAGSPEC_HYSTERESIS", "DRAGSPEC_STRICT"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.setenv("DRAGSPEC_SESSION_MAX_AGE", "")
        assert DragConfig.from_env() == DragConfig()

    def test_invalid_number(self, monkeypatch):
        monkeypatch.setenv("DRAGSPEC_HYSTERESIS", "wide")
        with pytest.raises(ValueError, match="DRAGSPEC_HYSTERESIS"):
            DragConfig.from_env()
