"""
Tests for spec validation.

Tests:
- Valid trees pass
- Bad continuous field paths are errors
- Inert nodes are warnings
- raise_on_error
"""

import pytest

from ..engine_core.geometry import manhattan
from ..engine_core.spec import (
    Chained,
    LayeredFallback,
    MetricOverride,
    continuous,
    discrete_choice,
    fixed,
    nearest_of,
)
from ..spec_schema import SpecValidationError, validate_spec


class TestValidSpecs:

    def test_simple_tree_is_valid(self, three_targets):
        result = validate_spec(three_targets)
        assert result.valid
        assert result.errors == []
        assert result.warnings == []

    def test_full_tree_is_valid(self):
        spec = nearest_of([
            continuous({"pos": {"x": 0, "y": 0}}, "pos.x", "pos.y"),
            discrete_choice([1, 2]).with_metric(manhattan),
        ]).with_background(fixed(0)).and_then(lambda s: s)
        assert validate_spec(spec).valid


class TestErrors:

    def test_bad_field_path(self):
        spec = nearest_of([fixed(1), continuous({"x": 0}, "items.0")])
        result = validate_spec(spec)

        assert not result.valid
        assert len(result.errors) == 1
        assert result.errors[0].startswith("<root>/closest/1: continuous field items.0")

    def test_non_numeric_field(self):
        result = validate_spec(continuous({"label": "a"}, "label"))
        assert "expected a number" in result.errors[0]

    def test_errors_are_all_reported(self):
        spec = LayeredFallback(
            foreground=continuous({"x": 0}, "a"),
            background=continuous({"x": 0}, "b"),
        )
        result = validate_spec(spec)
        assert [e.split(":")[0] for e in result.errors] == ["<root>/fg", "<root>/bg"]

    def test_not_a_node(self):
        result = validate_spec(nearest_of([fixed(1), "oops"]))
        assert "not a spec node (str)" in result.errors[0]

    def test_missing_continuation(self):
        result = validate_spec(Chained(child=fixed(1), continuation=None))
        assert result.errors == ["<root>: chained spec has no continuation"]

    def test_metric_override_label(self):
        spec = MetricOverride(child=continuous({}, "x"), distance=manhattan)
        assert validate_spec(spec).errors[0].startswith("<root>/metric:")

    def test_raise_on_error(self):
        with pytest.raises(SpecValidationError) as exc_info:
            validate_spec(continuous({"x": 0}, "y"), raise_on_error=True)
        assert len(exc_info.value.errors) == 1


class TestWarnings:

    def test_empty_nearest_of(self):
        result = validate_spec(nearest_of([]))
        assert result.valid
        assert result.warnings == ["<root>: nearest-of has no children and is never reachable"]

    def test_continuous_without_fields(self):
        result = validate_spec(continuous({"x": 0}))
        assert result.valid
        assert "never changes" in result.warnings[0]
