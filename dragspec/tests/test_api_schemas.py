"""
Tests for API Pydantic schemas.

Validates that:
- Wire spec trees parse through the discriminated union
- Wire nodes convert to engine spec nodes
- Error codes are properly structured
- The OpenAPI schema generates
"""

import pytest
from pydantic import TypeAdapter, ValidationError


def parse_spec(data):
    from dragspec.api.schemas import SpecNodeModel

    return TypeAdapter(SpecNodeModel).validate_python(data)


class TestSpecNodeModels:
    """Tests for the wire form of spec trees."""

    def test_fixed(self):
        """A fixed node converts to Fixed with the same state."""
        from dragspec.engine_core.spec import Fixed

        node = parse_spec({"type": "fixed", "state": {"x": 1, "y": 2}}).to_spec()

        assert isinstance(node, Fixed)
        assert node.state == {"x": 1, "y": 2}

    def test_nested_tree(self):
        """Nested nodes keep their order and options."""
        from dragspec.engine_core.spec import LayeredFallback, NearestOf

        wire = {
            "type": "layered_fallback",
            "radius": 30,
            "foreground": {
                "type": "nearest_of",
                "snap_radius": 10,
                "chaining": True,
                "children": [
                    {"type": "fixed", "state": 1},
                    {"type": "discrete_choice", "states": [2, 3]},
                ],
            },
            "background": {"type": "fixed", "state": 0},
        }
        node = parse_spec(wire).to_spec()

        assert isinstance(node, LayeredFallback)
        assert node.radius == 30
        assert isinstance(node.foreground, NearestOf)
        assert node.foreground.snap_radius == 10
        assert node.foreground.chaining
        assert len(node.foreground.children) == 2

    def test_continuous_paths_and_scale(self):
        node = parse_spec({
            "type": "continuous",
            "state": {"pos": [0, 0]},
            "fields": ["pos.0", ["pos", 1]],
            "scale": [2, [0.0, 0.5]],
        }).to_spec()

        assert node.field_paths == (("pos", 0), ("pos", 1))
        assert node.scale == ((2.0, 0.0), (0.0, 0.5))

    def test_metric_override_by_name(self):
        from dragspec.engine_core.geometry import Point, manhattan

        node = parse_spec({
            "type": "metric_override",
            "metric": "manhattan",
            "child": {"type": "fixed", "state": 1},
        }).to_spec()
        assert node.distance is manhattan

        scaled = parse_spec({
            "type": "metric_override",
            "metric": "manhattan",
            "factor": 2,
            "child": {"type": "fixed", "state": 1},
        }).to_spec()
        assert scaled.distance(Point(0, 0), Point(1, 1)) == 4

    def test_chained_and_interpolate(self):
        from dragspec.engine_core.spec import Chained, Continuous

        chained = parse_spec({
            "type": "chained",
            "child": {"type": "interpolate", "states": [{"v": 0}, {"v": 1}]},
            "continuation": {"v": 2},
        }).to_spec()

        assert isinstance(chained, Chained)
        assert chained.continuation == {"v": 2}
        (track,) = chained.child.children
        assert isinstance(track, Continuous)
        assert track.track == ({"v": 0}, {"v": 1})

    def test_presentation(self):
        from dragspec.engine_core.spec import Easing, Transition

        node = parse_spec({
            "type": "fixed",
            "state": 1,
            "presentation": {
                "floating": True,
                "ghost": {"opacity": 0.4},
                "drop_transition": {"easing": "elastic-out", "duration_ms": 350},
            },
        }).to_spec()

        assert node.presentation.floating is True
        assert node.presentation.ghost == {"opacity": 0.4}
        assert node.presentation.drop_transition == Transition(Easing.ELASTIC_OUT, 350)

    def test_unknown_type_rejected(self):
        with pytest.raises(ValidationError):
            parse_spec({"type": "teleport", "state": 1})

    def test_negative_radius_rejected(self):
        with pytest.raises(ValidationError):
            parse_spec({"type": "nearest_of", "children": [], "snap_radius": -1})

    def test_interpolate_needs_two_states(self):
        with pytest.raises(ValidationError):
            parse_spec({"type": "interpolate", "states": [1]})

    def test_continuous_needs_fields(self):
        with pytest.raises(ValidationError):
            parse_spec({"type": "continuous", "state": {}, "fields": []})


class TestSharedModels:

    def test_anchor_lookup(self):
        from dragspec.api.schemas import AnchorModel
        from dragspec.engine_core.geometry import Point

        lookup = AnchorModel(x_path="pos.x", y_path=["pos", "y"], offset=(1, 1)).to_lookup()

        assert lookup({"pos": {"x": 10, "y": 20}}) == Point(11, 21)
        assert lookup({"other": 1}) is None

    def test_point_from_infinite(self):
        from dragspec.api.schemas import PointModel
        from dragspec.engine_core.geometry import Point

        assert PointModel.from_point(None) is None
        assert PointModel.from_point(Point(float("inf"), 0)) is None
        assert PointModel.from_point(Point(1, 2)) == PointModel(x=1, y=2)

    def test_preview_response_serializes(self):
        from dragspec.api.schemas import PreviewResponse

        data = PreviewResponse(
            session_id="drag-1",
            preview_state={"x": 1},
            active_path="closest/0",
        ).model_dump(mode="json")

        assert data["distance"] is None
        assert data["reachable"] is False
        assert data["api_version"] == "v1"


class TestErrorCodes:
    """Tests for error code coverage."""

    def test_all_error_codes_defined(self):
        """All required error codes are defined."""
        from dragspec.api.schemas import ErrorCode

        required_codes = [
            "SESSION_NOT_FOUND",
            "MALFORMED_SPEC",
            "VALIDATION_ERROR",
            "INTERNAL_ERROR",
        ]

        for code in required_codes:
            assert hasattr(ErrorCode, code), f"Missing error code: {code}"
            assert ErrorCode[code].value == code

    def test_error_response_serializes(self):
        from dragspec.api.schemas import ErrorCode, ErrorResponse

        data = ErrorResponse(error="gone", error_code=ErrorCode.SESSION_NOT_FOUND).model_dump(mode="json")
        assert data == {
            "error": "gone",
            "error_code": "SESSION_NOT_FOUND",
            "details": None,
            "api_version": "v1",
        }


class TestOpenAPISchema:
    """Tests for OpenAPI schema generation."""

    def test_openapi_schema_generates(self):
        """OpenAPI schema generates without errors."""
        from dragspec.api.app import create_app

        schema = create_app().openapi()

        assert "/api/v1/drags" in schema["paths"]
        assert "/api/v1/drags/{session_id}/move" in schema["paths"]

        schemas = schema["components"]["schemas"]
        for name in ["DragSessionResponse", "PreviewResponse", "OutcomeResponse", "ErrorResponse"]:
            assert name in schemas, f"Missing schema: {name}"
