"""Configuration constants and .env loading.

WHY: Centralizes the tunable values of the editor core and its surfaces
(history depth, minimum word duration, session limits, server address)
so they are easy to find and override without touching logic.

HOW: python-dotenv loads the .env file on import. Each constant reads an
environment variable with a typed fallback. The _env_int/_env_float
helpers raise a clear error when a variable holds a non-numeric value.

RULES:
- All defaults can be overridden via environment variables
- HISTORY_LIMIT caps the undo stack (oldest entries evicted first)
- MIN_WORD_DURATION_S is the epsilon floor for aligned word durations
- SESSION_TTL_SECONDS measures idle time, not total lifetime
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(
            "{} must be an integer, got '{}'".format(name, raw)
        ) from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(
            "{} must be a number, got '{}'".format(name, raw)
        ) from None


# ---------------------------------------------------------------------------
# Editing core
# ---------------------------------------------------------------------------

HISTORY_LIMIT = _env_int("CAPTION_EDITOR_HISTORY_LIMIT", 50)
"""Maximum number of past snapshots kept for undo."""

MIN_WORD_DURATION_S = _env_float("CAPTION_EDITOR_MIN_WORD_DURATION", 0.05)
"""Shortest duration the aligner assigns to any word (seconds)."""

INTERPOLATED_CONFIDENCE = 0.5
"""Confidence given to words whose timing was interpolated."""

FUZZY_MATCH_CONFIDENCE_FACTOR = 0.8
"""Confidence multiplier for words matched by similarity rather than equality."""

# ---------------------------------------------------------------------------
# Session service
# ---------------------------------------------------------------------------

SESSION_TTL_SECONDS = _env_int("CAPTION_EDITOR_SESSION_TTL", 3600)
MAX_SESSIONS = _env_int("CAPTION_EDITOR_MAX_SESSIONS", 100)
SERVER_HOST = os.getenv("CAPTION_EDITOR_HOST", "127.0.0.1")
SERVER_PORT = _env_int("CAPTION_EDITOR_PORT", 8000)
API_URL = os.getenv("CAPTION_EDITOR_API_URL", "http://127.0.0.1:8000")
