"""Caption Editor: timing-safe transcript editing with animated caption preview.

WHY: Transcription produces word-level timestamps that captions depend
on. Editors must be able to retype text, nudge word timing, and undo or
redo any of it without the captions drifting from the audio.

HOW: Three stages: align (core.aligner keeps timing for unchanged words),
record (core.history keeps a bounded undo/redo history of immutable
snapshots), render (caption_overlay maps playback time to per-word visual
state). core.session wires them together; server and cli expose them.

RULES:
- Snapshots are immutable; every edit produces a new one
- The core is synchronous and side-effect free
- Surfaces (server, api, cli) never bypass core.session
"""

__version__ = "0.1.0"
