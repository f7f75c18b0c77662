"""Command-line entry point: serve the web reader, read in the terminal, show stats."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from swiftread import __version__
from swiftread.analytics import UsageLog
from swiftread.config import Settings
from swiftread.extract import ExtractionError, extract_text_from_file, fetch_text_from_url, is_url_like
from swiftread.pivot import PivotMode
from swiftread.playback import InvalidRateError, PlaybackController, clamp_rate
from swiftread.session import ReadingSession
from swiftread.terminal import TerminalReader

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


def load_source(source: str, settings: Settings) -> str:
    if source == "-":
        return sys.stdin.read()
    if is_url_like(source):
        # The terminal reader runs on the user's own machine, so local URLs are fine.
        return fetch_text_from_url(source, timeout=settings.fetch_timeout, allow_private=True)
    path = Path(source)
    if not path.is_file():
        raise ExtractionError(f"File not found: {source}")
    return extract_text_from_file(str(path))


def cmd_serve(args: argparse.Namespace, settings: Settings) -> int:
    from swiftread.web import create_app

    app = create_app(settings)
    host = args.host or settings.host
    port = args.port or settings.port
    _status(f"Starting SwiftRead on http://{host}:{port}")
    app.run(host=host, port=port, debug=args.debug)
    return 0


def cmd_read(args: argparse.Namespace, settings: Settings) -> int:
    try:
        text = load_source(args.source, settings)
    except ExtractionError as e:
        _status(f"Error: {e}")
        return 1
    logger.debug("Loaded %d characters from %s", len(text), args.source)

    try:
        rate = clamp_rate(args.wpm if args.wpm is not None else settings.default_wpm)
    except InvalidRateError as e:
        _status(f"Error: {e}")
        return 1

    controller = PlaybackController(rate=rate, pivot_mode=args.mode)
    recorder = None if args.no_log else UsageLog(settings.analytics_path)
    reading = ReadingSession(controller, recorder)
    reading.load_text(text, source=args.source)
    if not controller.total_units:
        _status("No readable text found.")
        return 1

    reader = TerminalReader(controller)

    # Playback starts inside the loop so the tick is scheduled on it; the
    # reader's own start() is then a no-op.
    async def run() -> None:
        reading.toggle()
        await reader.run()

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        _status("Stopped.")
    return 0


def cmd_stats(args: argparse.Namespace, settings: Settings) -> int:
    summary = UsageLog(settings.analytics_path).summary()
    if not args.sessions:
        summary.pop("sessions")
    print(json.dumps(summary, indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="swiftread", description="RSVP speed reader")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the web reader")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)
    serve.add_argument("--debug", action="store_true")
    serve.set_defaults(func=cmd_serve)

    read = sub.add_parser("read", help="read a file, URL or stdin in the terminal")
    read.add_argument("source", help="path to .pdf/.epub/.txt, an http(s) URL, or - for stdin")
    read.add_argument("--wpm", type=float, default=None, help="words per minute (60-1000)")
    read.add_argument(
        "--mode",
        choices=[m.value for m in PivotMode],
        default=PivotMode.HEURISTIC.value,
        help="pivot placement",
    )
    read.add_argument("--no-log", action="store_true", help="do not record this read in the usage log")
    read.set_defaults(func=cmd_read)

    stats = sub.add_parser("stats", help="print the usage summary")
    stats.add_argument("--sessions", action="store_true", help="include individual sessions")
    stats.set_defaults(func=cmd_stats)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    return args.func(args, Settings.from_env())


if __name__ == "__main__":
    sys.exit(main())
