"""Command-line interface for the caption editor.

WHY: Editors and pipelines need the editing core without a browser:
apply text edits to a transcript file and keep its word timing, dump
caption frames for a time range to check animation styles, list the
style presets, and start the HTTP session service.

HOW: argparse with one subcommand per task:
  align   : load a transcript, apply --edit SEGMENT_ID TEXT edits in
             order, write the realigned transcript as JSON
  frames  : load a transcript, map a range of playback times to caption
             frames with a preset, write one JSON line per frame
  presets : list caption style presets
  serve   : run the FastAPI session service with uvicorn
Status messages go to stderr; data goes to stdout or --output.

RULES:
- Exit codes: 0 = success, 1 = error
- Logging is configured here and only here (-v for debug)
- align and frames write JSON to stdout so the CLI can be piped
- Python 3.9 compatible: no match/case, no X | Y unions
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from caption_editor.config import SERVER_HOST, SERVER_PORT
from caption_editor.core.session import EditSession
from caption_editor.core.transcript_io import load_transcript, transcript_to_dict
from caption_overlay import PRESETS, get_preset

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _write_json(data: Any, output: Optional[str]) -> None:
    text = json.dumps(data, indent=2, ensure_ascii=False)
    if output:
        Path(output).write_text(text + "\n", encoding="utf-8")
        _status("Saved: {}".format(output))
    else:
        print(text)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _cmd_align(args: argparse.Namespace) -> None:
    segments = load_transcript(args.transcript)
    session = EditSession(segments, similarity_threshold=args.similarity)
    _status("Loaded {} segments from {}".format(len(segments), args.transcript))

    for segment_id, text in args.edit or []:
        changed = session.update_segment_text(segment_id, text)
        _status("  Segment {}: {}".format(segment_id, "updated" if changed else "unchanged"))

    result: Dict[str, Any] = transcript_to_dict(session.segments)
    if args.changes:
        result["changes"] = [change.to_dict() for change in session.pending_changes()]
    _write_json(result, args.output)


def _frange(start: float, end: float, step: float) -> List[float]:
    count = int(math.floor((end - start) / step + 1e-9)) + 1 if end >= start else 0
    return [round(start + index * step, 6) for index in range(count)]


def _cmd_frames(args: argparse.Namespace) -> None:
    if args.step <= 0:
        raise ValueError("--step must be positive, got {}".format(args.step))
    style = get_preset(args.preset)
    session = EditSession(load_transcript(args.transcript))

    end = args.end
    if end is None:
        ends = [s.end for s in session.segments]
        end = max(ends) if ends else args.start

    times = _frange(args.start, end, args.step)
    _status("Mapping {} frames with preset '{}'".format(len(times), args.preset))
    for t in times:
        states = session.frame(t, style)
        print(json.dumps({"time": t, "words": [s.to_dict() for s in states]}, ensure_ascii=False))


def _cmd_presets(args: argparse.Namespace) -> None:
    if args.json:
        print(json.dumps({key: style.to_dict() for key, style in sorted(PRESETS.items())}, indent=2))
        return
    for key, style in sorted(PRESETS.items()):
        print("{:<14} {:<13} {}".format(key, style.animation.value, style.highlight_color or "-"))


def _cmd_serve(args: argparse.Namespace) -> None:
    from caption_editor.server.app import run_api

    run_api(host=args.host, port=args.port)


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() lets tests inspect the
    parser without running a command.
    """
    parser = argparse.ArgumentParser(
        prog="caption-editor",
        description="Edit word-timed transcripts without losing timing, "
                    "and preview animated caption frames.",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    align = subparsers.add_parser(
        "align",
        help="Apply text edits and realign word timing.",
    )
    align.add_argument("transcript", help="Path to the transcript JSON file.")
    align.add_argument(
        "--edit",
        nargs=2,
        action="append",
        metavar=("SEGMENT_ID", "TEXT"),
        help="Replace a segment's text. Can be specified multiple times.",
    )
    align.add_argument(
        "--similarity",
        type=float,
        default=None,
        help="Fuzzy word match ratio (0-1) so typo fixes keep timing.",
    )
    align.add_argument(
        "--changes",
        action="store_true",
        help="Include the pending save payloads in the output.",
    )
    align.add_argument("--output", "-o", default=None, help="Output file (default: stdout).")
    align.set_defaults(func=_cmd_align)

    frames = subparsers.add_parser(
        "frames",
        help="Dump caption frames for a time range as JSON lines.",
    )
    frames.add_argument("transcript", help="Path to the transcript JSON file.")
    frames.add_argument(
        "--preset",
        default="default",
        help="Style preset (default: %(default)s). Available: {}.".format(
            ", ".join(sorted(PRESETS))
        ),
    )
    frames.add_argument("--start", type=float, default=0.0, help="First time in seconds.")
    frames.add_argument(
        "--end",
        type=float,
        default=None,
        help="Last time in seconds (default: end of the transcript).",
    )
    frames.add_argument(
        "--step",
        type=float,
        default=0.5,
        help="Time between frames in seconds (default: %(default)s).",
    )
    frames.set_defaults(func=_cmd_frames)

    presets = subparsers.add_parser("presets", help="List caption style presets.")
    presets.add_argument("--json", action="store_true", help="Print full styles as JSON.")
    presets.set_defaults(func=_cmd_presets)

    serve = subparsers.add_parser("serve", help="Run the HTTP session service.")
    serve.add_argument("--host", default=SERVER_HOST, help="Bind address (default: %(default)s).")
    serve.add_argument("--port", type=int, default=SERVER_PORT, help="Port (default: %(default)s).")
    serve.set_defaults(func=_cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the ``caption-editor`` console script.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format=_LOG_FORMAT,
        stream=sys.stderr,
    )

    try:
        args.func(args)
    except (ValueError, OSError) as e:
        # TranscriptFormatError and SessionError are ValueErrors
        print("Error: {}".format(e), file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
