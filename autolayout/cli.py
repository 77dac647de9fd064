#!/usr/bin/env python3
"""Autolayout CLI - lay out, validate and inspect diagrams from JSON files."""

import argparse
import json
import os
import sys
import time
from pathlib import Path

from loguru import logger
from pydantic import ValidationError

from .analysis import summarize_diagram
from .config import ServerSettings
from .engine import build_scene, elements_to_json, layout_diagram
from .errors import DiagramFormatError
from .generation import parse_diagram_response
from .log import configure_logging
from .models import Diagram
from .validation import validate_diagram, validation_summary


class CliError(Exception):
    """A failure reported as ``{"status": "error"}`` with a non-zero exit code."""

    def __init__(self, message: str, exit_code: int = 1):
        super().__init__(message)
        self.message = message
        self.exit_code = exit_code


def _json_out(data, output: str | None = None) -> None:
    text = json.dumps(data, indent=2)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        print(json.dumps({"status": "ok", "written": output}))
    else:
        print(text)


def _read_text(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    file_path = Path(path)
    if not file_path.exists():
        raise CliError(f"input file not found: {file_path}", exit_code=2)
    try:
        return file_path.read_text(encoding="utf-8")
    except OSError as e:
        raise CliError(f"failed to read input file: {file_path}: {e}")


def _load_diagram(path: str) -> Diagram:
    """Read a ``{"nodes": [...], "edges": [...]}`` JSON file."""
    try:
        data = json.loads(_read_text(path))
    except json.JSONDecodeError as e:
        raise CliError(f"invalid JSON in {path}: {e}")
    if not isinstance(data, dict):
        raise CliError(f"expected a JSON object in {path}")
    try:
        return Diagram.from_json_dict(data)
    except ValidationError as e:
        raise CliError(f"invalid diagram in {path}: {e.error_count()} error(s)\n{e}")


def _now(args) -> int:
    return args.now if args.now is not None else int(time.time() * 1000)


def _layout_output(diagram: Diagram, args) -> None:
    elements = layout_diagram(diagram.nodes, diagram.edges, now=_now(args))
    if args.scene:
        _json_out(build_scene(elements), args.output)
    else:
        _json_out(elements_to_json(elements), args.output)


# ── Layout ───────────────────────────────────────────────────────────────────

def cmd_layout(args):
    _layout_output(_load_diagram(args.file), args)


def cmd_parse(args):
    try:
        diagram = parse_diagram_response(_read_text(args.file), args.max_shapes)
    except DiagramFormatError as e:
        raise CliError(f"{e.code}: {e.message}")
    _layout_output(diagram, args)


# ── Inspection ───────────────────────────────────────────────────────────────

def cmd_validate(args):
    issues = validate_diagram(_load_diagram(args.file))
    _json_out({
        "status": "ok",
        "issues": [issue.to_dict() for issue in issues],
        "summary": validation_summary(issues),
    })


def cmd_summary(args):
    summary = summarize_diagram(_load_diagram(args.file))
    _json_out({"status": "ok", "summary": summary.to_dict()})


# ── Service ──────────────────────────────────────────────────────────────────

def cmd_serve(args):
    from .backend.main import run

    settings = ServerSettings.from_env()
    if args.host:
        settings.host = args.host
    if args.port:
        settings.port = args.port
    run(settings)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="autolayout",
        description="Lay out node/edge diagrams as canvas elements.",
    )
    parser.add_argument("--log-level", default=None,
                        help="Log level (default: AUTOLAYOUT_LOG_LEVEL or WARNING)")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_layout_options(p):
        p.add_argument("--now", type=int, default=None,
                       help="Timestamp in ms used for seeds (default: current time)")
        p.add_argument("--scene", action="store_true",
                       help="Emit a full scene document instead of a bare element list")
        p.add_argument("-o", "--output", help="Write JSON here instead of stdout")

    p = sub.add_parser("layout", help="Lay out a diagram JSON file ('-' for stdin)")
    p.add_argument("file")
    add_layout_options(p)
    p.set_defaults(func=cmd_layout)

    p = sub.add_parser("parse", help="Validate a raw model response, then lay it out")
    p.add_argument("file")
    p.add_argument("--max-shapes", type=int, default=None)
    add_layout_options(p)
    p.set_defaults(func=cmd_parse)

    p = sub.add_parser("validate", help="Report structural issues in a diagram")
    p.add_argument("file")
    p.set_defaults(func=cmd_validate)

    p = sub.add_parser("summary", help="Summarize a diagram's structure")
    p.add_argument("file")
    p.set_defaults(func=cmd_summary)

    p = sub.add_parser("serve", help="Run the HTTP backend")
    p.add_argument("--host", default=None)
    p.add_argument("--port", type=int, default=None)
    p.set_defaults(func=cmd_serve)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    # Quiet by default so output can be piped
    level = args.log_level or os.environ.get("AUTOLAYOUT_LOG_LEVEL", "WARNING")
    configure_logging(level.upper())

    try:
        args.func(args)
    except CliError as e:
        logger.debug("Command {} failed: {}", args.command, e.message)
        print(json.dumps({"status": "error", "error": e.message}))
        return e.exit_code
    return 0


if __name__ == "__main__":
    sys.exit(main())
