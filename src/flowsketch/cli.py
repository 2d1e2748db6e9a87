"""Command-line entrypoint for FlowSketch."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from .config.settings import get_settings
from .core.exceptions import ConfigurationError, GenerationError, SchemaError, UnsupportedShapeError
from .flowchart.layout import Orientation, layout_document
from .flowchart.repair import import_flowchart
from .utils.logging import configure_logging

EXIT_INPUT_ERROR = 2
EXIT_GENERATION_ERROR = 1


def _read_json(source: str) -> Any:
    text = sys.stdin.read() if source == "-" else Path(source).read_text(encoding="utf-8")
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise SchemaError("Input is not valid JSON", context={"source": source, "error": str(exc)}) from exc


def _write_json(data: Any, output: Optional[str]) -> None:
    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def cmd_repair(args: argparse.Namespace) -> int:
    document = import_flowchart(_read_json(args.input))
    _write_json(document.to_dict(), args.output)
    return 0


def cmd_layout(args: argparse.Namespace) -> int:
    document = import_flowchart(_read_json(args.input))
    result = layout_document(document, Orientation.parse(args.direction))
    _write_json(result.to_dict(), args.output)
    return 0


def cmd_generate(args: argparse.Namespace) -> int:
    from .generation.service import FlowchartService

    result = FlowchartService().generate(args.prompt, args.detail_level, args.audience)
    if result.notice:
        print(f"Note: {result.notice}", file=sys.stderr)
    _write_json(result.to_dict(), args.output)
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    from .api.app import create_app

    settings = get_settings()
    app = create_app(settings=settings)
    app.run(host=args.host, port=args.port or settings.port, debug=args.debug)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="flowsketch", description="Flowchart generation and layout tools.")
    subparsers = parser.add_subparsers(dest="command", required=True)

    repair = subparsers.add_parser("repair", help="Repair an exported or hand-written flowchart JSON file.")
    repair.add_argument("input", help="Path to the JSON file, or - for stdin.")
    repair.add_argument("--output", "-o", help="Write the result here instead of stdout.")
    repair.set_defaults(func=cmd_repair)

    layout = subparsers.add_parser("layout", help="Compute node positions for a flowchart JSON file.")
    layout.add_argument("input", help="Path to the JSON file, or - for stdin.")
    layout.add_argument(
        "--direction",
        "-d",
        default=Orientation.VERTICAL.value,
        choices=[orientation.value for orientation in Orientation],
        help="Layout orientation (default: TB).",
    )
    layout.add_argument("--output", "-o", help="Write the result here instead of stdout.")
    layout.set_defaults(func=cmd_layout)

    generate = subparsers.add_parser("generate", help="Generate a flowchart from a description.")
    generate.add_argument("prompt", help="Natural-language description of the process.")
    generate.add_argument(
        "--detail-level",
        default="balanced",
        choices=["concise", "balanced", "detailed"],
    )
    generate.add_argument("--audience", default="", help="Who the diagram is for.")
    generate.add_argument("--output", "-o", help="Write the result here instead of stdout.")
    generate.set_defaults(func=cmd_generate)

    serve = subparsers.add_parser("serve", help="Run the HTTP API.")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=None, help="Defaults to FLOWSKETCH_PORT (3001).")
    serve.add_argument("--debug", action="store_true")
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = get_settings()
        configure_logging(level=settings.log_level, json_logs=settings.json_logs)
        return args.func(args)
    except (ConfigurationError, SchemaError, UnsupportedShapeError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_INPUT_ERROR
    except GenerationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return EXIT_GENERATION_ERROR


if __name__ == "__main__":
    raise SystemExit(main())
