"""
Dragspec CLI - Command-line interface for the resolver.

Usage:
    dragspec validate <spec_file>     Validate a spec tree (wire JSON)
    dragspec replay <trace_file>      Replay a recorded pointer trace

A trace file is JSON with keys:
    state          state the drag starts from
    anchor         {"x_path": ..., "y_path": ...} locating the element
    spec           spec tree in wire form
    pointer_start  [x, y]
    moves          [[x, y], ...]
"""

from typing import Any
import argparse
import json
import logging
import sys

from pydantic import BaseModel, Field, TypeAdapter, ValidationError

from .api.schemas import AnchorModel, MetricName, SpecNodeModel
from .config import DragConfig
from .engine_core.geometry import METRICS
from .engine_core.spec import MalformedSpecError
from .session import begin_drag
from .spec_schema import SpecValidationError, validate_spec


class ReplayTrace(BaseModel):
    """A recorded drag: the spec, the start and every pointer move."""
    state: Any = None
    anchor: AnchorModel
    spec: SpecNodeModel
    pointer_start: tuple[float, float]
    moves: list[tuple[float, float]] = Field(default_factory=list)
    metric: MetricName = MetricName.EUCLIDEAN


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Dragspec - Declarative drag-and-drop resolution",
        prog="dragspec",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Validate a spec tree")
    validate_parser.add_argument("spec_file", help="Path to spec JSON file")

    # Replay command
    replay_parser = subparsers.add_parser("replay", help="Replay a recorded pointer trace")
    replay_parser.add_argument("trace_file", help="Path to trace JSON file")
    replay_parser.add_argument("--json", action="store_true", help="Print the outcome as JSON")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.command == "validate":
        cmd_validate(args)
    elif args.command == "replay":
        cmd_replay(args)
    else:
        parser.print_help()
        sys.exit(1)


def _load_json(path: str) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        print(f"Error: File not found: {path}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        print(f"Error: Invalid JSON in {path}: {e}")
        sys.exit(1)


def cmd_validate(args):
    """Validate a spec tree."""
    data = _load_json(args.spec_file)
    if isinstance(data, dict) and "spec" in data and "type" not in data:
        data = data["spec"]

    try:
        node = TypeAdapter(SpecNodeModel).validate_python(data).to_spec()
    except ValidationError as e:
        print(f"Invalid spec file: {e.error_count()} error(s)")
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            print(f"  - {loc}: {err['msg']}")
        sys.exit(1)
    except MalformedSpecError as e:
        print(f"Malformed spec: {e}")
        sys.exit(1)

    result = validate_spec(node)
    print(f"Validating: {args.spec_file}")
    if result.warnings:
        print("\nWarnings:")
        for w in result.warnings:
            print(f"  - {w}")
    if result.errors:
        print("\nErrors:")
        for e in result.errors:
            print(f"  - {e}")
        sys.exit(1)
    print("Spec is valid")


def cmd_replay(args):
    """Replay a recorded pointer trace and print what the drag did."""
    data = _load_json(args.trace_file)
    try:
        trace = ReplayTrace.model_validate(data)
    except ValidationError as e:
        print(f"Invalid trace file: {e.error_count()} error(s)")
        for err in e.errors():
            loc = ".".join(str(part) for part in err["loc"])
            print(f"  - {loc}: {err['msg']}")
        sys.exit(1)

    try:
        session = begin_drag(
            trace.spec.to_spec(),
            trace.pointer_start,
            trace.anchor.to_lookup(),
            state=trace.state,
            metric=METRICS[trace.metric.value],
            config=DragConfig.from_env(),
        )
        print(f"start {trace.pointer_start}: {session.active_path or '<none>'}")
        for pointer in trace.moves:
            preview = session.update(pointer)
            marker = " (snapped)" if preview.snapped else ""
            print(f"move  {pointer}: {preview.active_path or '<none>'}{marker}")
        outcome = session.end()
    except SpecValidationError as e:
        print("Spec validation failed:")
        for err in e.errors:
            print(f"  - {err}")
        sys.exit(1)
    except MalformedSpecError as e:
        print(f"Malformed spec: {e}")
        sys.exit(1)

    if outcome.committed:
        print(f"committed via {outcome.active_path or '<root>'}")
        final = outcome.committed_state
    else:
        print(f"cancelled: {outcome.reason}")
        final = outcome.restored_state
    if args.json:
        print(json.dumps(final, indent=2, default=str))


if __name__ == "__main__":
    main()
