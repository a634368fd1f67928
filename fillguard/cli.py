"""Command-line front end for the fill rule."""

from __future__ import annotations

import argparse
import json
import logging
import sys

from . import constants
from .api import check_source
from .config import FillOptions, InvalidOptionsError, load_options_file, load_options_json
from .diagnostics import Diagnostic
from .tracing import LoggingTracer, NullTracer

logger = logging.getLogger(__name__)

EXIT_CLEAN = 0
EXIT_DIAGNOSTICS = 1
EXIT_ERROR = 2


def _build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fillguard",
        description="Flag Array fill() calls that share one reference-type value",
    )
    parser.add_argument(
        "files", nargs="*", help="JavaScript files to check (default: stdin)"
    )
    parser.add_argument(
        "--options", default=None, help="Rule options as a JSON object"
    )
    parser.add_argument(
        "--config", default=None, help="Path to a JSON file holding rule options"
    )
    parser.add_argument(
        "--format",
        "-f",
        default=constants.OUTPUT_TEXT,
        choices=[constants.OUTPUT_TEXT, constants.OUTPUT_JSON],
        help="Output format (default: text)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Log pipeline steps"
    )
    parser.add_argument(
        "--trace", action="store_true", help="Log every classifier trace event"
    )
    return parser


def _resolve_options(args: argparse.Namespace) -> FillOptions:
    if args.options is not None:
        return load_options_json(args.options)
    if args.config is not None:
        return load_options_file(args.config)
    return FillOptions()


def _read_inputs(files: list[str]) -> list[tuple[str, str]]:
    if not files or files == [constants.STDIN_PATH]:
        return [(constants.STDIN_DISPLAY_NAME, sys.stdin.read())]
    inputs = []
    for path in files:
        with open(path, encoding="utf-8") as f:
            inputs.append((path, f.read()))
    return inputs


def _render(diagnostics: list[Diagnostic], output_format: str) -> str:
    if output_format == constants.OUTPUT_JSON:
        return json.dumps([d.model_dump() for d in diagnostics], indent=2)
    return "\n".join(str(d) for d in diagnostics)


def main(argv: list[str] | None = None) -> int:
    args = _build_arg_parser().parse_args(argv)
    level = logging.DEBUG if (args.verbose or args.trace) else logging.WARNING
    logging.basicConfig(level=level, format="%(message)s")

    try:
        options = _resolve_options(args)
        inputs = _read_inputs(args.files)
    except (InvalidOptionsError, OSError, UnicodeDecodeError) as exc:
        logger.error("fillguard: %s", exc)
        return EXIT_ERROR

    tracer = LoggingTracer() if args.trace else NullTracer()
    diagnostics: list[Diagnostic] = []
    for path, source in inputs:
        diagnostics.extend(check_source(source, options, tracer, path=path))

    rendered = _render(diagnostics, args.format)
    if rendered:
        print(rendered)
    return EXIT_DIAGNOSTICS if diagnostics else EXIT_CLEAN


if __name__ == "__main__":
    sys.exit(main())
