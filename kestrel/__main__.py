"""Command line entry point: REPL, script runner and page server."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from kestrel import __version__
from kestrel import config
from kestrel.errors import KestrelError

logger = logging.getLogger("kestrel")


def run_script_file(file_path: str) -> int:
    """Run a script file; print emitted output, then the final value if any."""
    from kestrel.interpreter import evaluate, new_session_state
    from kestrel.printer import to_string

    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        return 1
    try:
        result = evaluate(new_session_state(), source, sys.stdout)
    except (KestrelError, ZeroDivisionError, RecursionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    if result is not None:
        print(to_string(result))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kestrel", description="Kestrel interpreter")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    sub.add_parser("repl", help="Start the interactive console (default)")

    run = sub.add_parser("run", help="Evaluate a script file")
    run.add_argument("file")

    serve = sub.add_parser("serve", help="Serve pages and templates over HTTP")
    serve.add_argument("--host", default="localhost")
    serve.add_argument("--port", type=int, default=80)
    serve.add_argument("--workers", type=int, default=None,
                       help="Worker threads (default: KESTREL_WORKERS or 4)")
    serve.add_argument("--root", type=Path, default=None,
                       help="Public root directory (default: KESTREL_PUBLIC_ROOT or ./public)")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    config.apply_recursion_limit()

    if args.command == "run":
        return run_script_file(args.file)
    if args.command == "serve":
        from kestrel.server.http import serve
        try:
            serve(args.host, args.port, root=args.root, workers=args.workers)
        except KeyboardInterrupt:
            logger.info("Shutting down")
        return 0

    from kestrel.repl import start_repl
    try:
        start_repl()
    except KeyboardInterrupt:
        print("\nExiting.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
