"""Command-line interface for the Bunsetsu Reader.

WHY: Users want to read a text file phrase by phrase straight from the
terminal, or just look at how a text gets segmented, without opening a
window. The CLI wires the full pipeline — text loading, segmentation
with fallback, and timed playback — behind a single command.

HOW: Uses argparse to accept an input file (or "-" for stdin; the
built-in sample when omitted), the segmentation service URL and the
playback interval. --list and --stats print and exit. Otherwise the
text is played in place on one terminal line by a PlaybackController
running on a ThreadingScheduler, until the read-through completes or
the user presses Ctrl+C. Status and warnings go to stderr.

RULES:
- Input is read as UTF-8; undecodable input exits with status 1
- A degraded segmentation prints a warning to stderr, never fails
- Empty input exits with status 1 in play mode
- Ctrl+C stops playback, tears the session down, exits with 130
- Python 3.9 compatible — no match/case, no X | Y unions at runtime
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
import threading
from pathlib import Path
from typing import List, Optional

from bunsetsu_reader import __version__
from bunsetsu_reader.api.client import build_phrase_segmenter
from bunsetsu_reader.config import (
    DEFAULT_INTERVAL_MS,
    INTERVAL_MAX_MS,
    INTERVAL_MIN_MS,
    SAMPLE_TEXT,
    clamp_interval_ms,
)
from bunsetsu_reader.core.ir import PlaybackState
from bunsetsu_reader.core.playback import PlaybackController, ThreadingScheduler
from bunsetsu_reader.core.session import ReaderSession
from bunsetsu_reader.core.stats import compute_stats


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so --list can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _read_text(source: Optional[str]) -> str:
    """Load the input text from a file path, stdin ("-"), or the sample."""
    if source is None:
        return SAMPLE_TEXT
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _interval_arg(value: str) -> int:
    try:
        interval = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(
            "interval must be an integer number of milliseconds"
        ) from None
    clamped = clamp_interval_ms(interval)
    if clamped != interval:
        _status("Interval {} ms is out of range; using {} ms.".format(interval, clamped))
    return clamped


def _render(state: PlaybackState) -> None:
    """Redraw the current phrase on a single terminal line."""
    phrase = state.current_phrase
    if phrase is None:
        return
    text = phrase.text.replace("\n", " ").strip()
    sys.stdout.write("\r\033[K{}  [{}]".format(text, state.position_label))
    sys.stdout.flush()


def _play(session: ReaderSession) -> int:
    """Run one read-through in the terminal; return the exit code."""
    controller = session.controller
    finished = threading.Event()

    def _on_change(state: PlaybackState) -> None:
        if state.running:
            _render(state)
        else:
            finished.set()

    unsubscribe = controller.subscribe(_on_change)
    controller.start()
    try:
        while not finished.wait(0.1):
            pass
    except KeyboardInterrupt:
        controller.stop()
        sys.stdout.write("\n")
        _status("Stopped at phrase {}.".format(controller.state.position_label))
        return 130
    finally:
        unsubscribe()
        session.close()

    sys.stdout.write("\n")
    return 0


def _run(args: argparse.Namespace) -> int:
    try:
        text = _read_text(args.input)
    except (OSError, UnicodeDecodeError) as e:
        print("Error: Cannot read {}: {}".format(args.input, e), file=sys.stderr)
        return 1

    segmenter = build_phrase_segmenter(args.service_url)

    if args.list or args.stats:
        outcome = asyncio.run(segmenter.segment(text))
        if outcome.reason:
            _status("Warning: {}".format(outcome.reason))
        if args.list:
            for phrase in outcome.phrases:
                print(phrase.text.replace("\n", "\\n"))
        if args.stats:
            stats = compute_stats(text, outcome.phrases, args.interval)
            print(json.dumps(stats.to_dict(), ensure_ascii=False, indent=2))
        return 0

    controller = PlaybackController(ThreadingScheduler(), interval_ms=args.interval)
    session = ReaderSession(segmenter, controller)
    reason = asyncio.run(session.on_text_changed(text))
    if reason:
        _status("Warning: {}".format(reason))
    if not session.state.sequence:
        _status("Error: Nothing to read, the input text is empty.")
        session.close()
        return 1

    _status("Reading {} phrases at {} ms per phrase (Ctrl+C to stop)...".format(
        len(session.state.sequence), session.state.interval_ms
    ))
    return _play(session)


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="bunsetsu-reader",
        description="Read Japanese text one phrase (bunsetsu) at a time.",
    )
    parser.add_argument(
        "input",
        nargs="?",
        help="UTF-8 text file to read, or '-' for stdin (default: built-in sample).",
    )
    parser.add_argument(
        "--interval",
        type=_interval_arg,
        default=DEFAULT_INTERVAL_MS,
        help="Milliseconds per phrase, {}–{} (default: {}).".format(
            INTERVAL_MIN_MS, INTERVAL_MAX_MS, DEFAULT_INTERVAL_MS
        ),
    )
    parser.add_argument(
        "--service-url",
        default=None,
        help="Base URL of the precise segmentation service "
             "(default: BUNSETSU_SERVICE_URL; fallback heuristic when unset).",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the phrases one per line and exit.",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print text statistics as JSON and exit.",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    sys.exit(_run(args))


if __name__ == "__main__":
    main()
