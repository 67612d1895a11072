"""Shared test fixtures for the caption editor test suite.

WHY: Aligner, session, service and CLI tests all need the same small,
hand-checked transcript. Centralizing it here keeps the expected timings
in one place.

HOW: SAMPLE_TRANSCRIPT is the upstream JSON shape. Fixtures provide it as
a dict, as parsed Segments, and as a file on disk.

RULES:
- Segment s1: "Hello world" over [0, 2], one second per word
- Segment s2: "This is a test" over [2.5, 4.5], half a second per word
- All timings are exact binary fractions so equality checks are safe
"""

import copy
import json
from typing import Any, Dict, Tuple

import pytest

from caption_editor.core.ir import Segment
from caption_editor.core.transcript_io import parse_transcript

SAMPLE_TRANSCRIPT: Dict[str, Any] = {
    "segments": [
        {
            "id": "s1",
            "text": "Hello world",
            "start": 0.0,
            "end": 2.0,
            "words": [
                {"id": "s1-w0", "text": "Hello", "start": 0.0, "end": 1.0, "confidence": 0.9},
                {"id": "s1-w1", "text": "world", "start": 1.0, "end": 2.0, "confidence": 0.95},
            ],
        },
        {
            "id": "s2",
            "text": "This is a test",
            "start": 2.5,
            "end": 4.5,
            "words": [
                {"id": "s2-w0", "text": "This", "start": 2.5, "end": 3.0},
                {"id": "s2-w1", "text": "is", "start": 3.0, "end": 3.5},
                {"id": "s2-w2", "text": "a", "start": 3.5, "end": 4.0},
                {"id": "s2-w3", "text": "test", "start": 4.0, "end": 4.5},
            ],
        },
    ]
}


@pytest.fixture
def sample_transcript_dict() -> Dict[str, Any]:
    """A fresh deep copy of SAMPLE_TRANSCRIPT (tests may mutate it)."""
    return copy.deepcopy(SAMPLE_TRANSCRIPT)


@pytest.fixture
def sample_segments() -> Tuple[Segment, ...]:
    """SAMPLE_TRANSCRIPT parsed into Segments."""
    return parse_transcript(copy.deepcopy(SAMPLE_TRANSCRIPT))


@pytest.fixture
def sample_transcript_file(tmp_path):
    """SAMPLE_TRANSCRIPT written to a JSON file."""
    path = tmp_path / "transcript.json"
    path.write_text(json.dumps(SAMPLE_TRANSCRIPT), encoding="utf-8")
    return path
