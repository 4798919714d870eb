from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .config import CONFIG_FILENAME, load_config
from .frontend import SimplicityFrontend
from .server import create_server
from .syntax import FrontendError

log = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="simplicity-ls", description="Language server for SimplicityHL")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--stdio", action="store_true", help="Serve over stdin/stdout (the default)")
    mode.add_argument("--tcp", action="store_true", help="Serve over TCP on --host/--port")
    mode.add_argument("--analyze", metavar="FILE", type=Path, help="Check FILE once and print the first error")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address for --tcp")
    parser.add_argument("--port", type=int, default=2087, help="Bind port for --tcp")
    parser.add_argument("--log-level", type=str.upper, choices=LOG_LEVELS, default="WARNING")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    # stderr keeps the stdio transport clean.
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s", stream=sys.stderr)

    if args.analyze is not None:
        sys.exit(_run_analysis(args.analyze))

    server = create_server()
    if args.tcp:
        log.info("Listening on %s:%d", args.host, args.port)
        server.start_tcp(args.host, args.port)
    else:
        server.start_io()


def _run_analysis(path: Path) -> int:
    if not path.is_file():
        print(f"File not found: {path}", file=sys.stderr)
        return 2

    workspace_root = _discover_workspace_root(path)
    log.info("Analyzing %s (workspace root: %s)", path, workspace_root)

    config, warnings = load_config(workspace_root)
    for warning in warnings:
        log.warning(warning)

    error = _analyze_source(path.read_text(encoding="utf-8"))
    if error is None:
        print(f"{path}: no issues found")
        return 0

    # Compiler positions are 1-based, matching the path:line:col convention.
    start = error.span.start
    print(f"{path}:{start.line}:{start.col}: error [{config.diagnostics.source}] {error}")
    excerpt = error.excerpt()
    if excerpt:
        print(excerpt)
    return 1


def _analyze_source(source: str) -> Optional[FrontendError]:
    frontend = SimplicityFrontend()
    try:
        program = frontend.parse(source)
        frontend.analyze(program, source)
    except FrontendError as exc:
        return exc
    return None


def _discover_workspace_root(target: Path) -> Path:
    start = target if target.is_dir() else target.parent
    candidates = (folder for folder in (start, *start.parents) if (folder / CONFIG_FILENAME).is_file())
    return next(candidates, start)


if __name__ == "__main__":
    main()
