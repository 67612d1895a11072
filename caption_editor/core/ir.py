"""Intermediate representation dataclasses for editable transcripts.

WHY: The editor, the history machine, and the caption overlay all need the
same view of a transcript: segments of text, each made of timed words.
Undo/redo compares whole transcript states by value, so the IR must be
immutable and value-comparable.

HOW: Frozen dataclasses form a small hierarchy:
  Word        : one whitespace-delimited token with its own timing
  Segment     : contiguous span of text made of Words
  EditSnapshot: tuple of Segments, one full transcript state
Two payload dataclasses describe what a caller sends to a persistence
collaborator after an edit:
  TextUpdate      : {segmentId, text}
  WordTimingUpdate: {segmentId, wordIndex, start, end}

RULES:
- All times are float seconds
- Words and Segments are frozen; edits produce new values (dataclasses.replace)
- Segment.words is a tuple, never a list, so snapshots compare and hash by value
- Segment.text normalizes (whitespace-joined) to the join of its word texts
- Segment.start/end equal the first word's start and last word's end
  whenever the segment has words
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class Word:
    """A single timed token of a transcript segment.

    RULES:
    - text: token as displayed, punctuation attached ("world!")
    - start < end, both >= 0 (upstream may violate this; the aligner corrects it)
    - confidence: 0.0-1.0; interpolated words carry a lower value
    """

    id: str
    text: str
    start: float
    end: float
    confidence: float = 1.0

    @property
    def duration(self) -> float:
        return self.end - self.start


@dataclass(frozen=True)
class Segment:
    """A contiguous span of transcript text composed of Words.

    WHY: Users edit transcripts one segment at a time. The segment keeps
    its overall time bounds so the aligner knows how much room inserted
    words may occupy.

    RULES:
    - words are ordered by start
    - an empty words tuple is allowed (a segment edited down to nothing);
      start/end then keep their last known values
    """

    id: str
    text: str
    start: float
    end: float
    words: Tuple[Word, ...] = field(default_factory=tuple)


EditSnapshot = Tuple[Segment, ...]
"""One complete, immutable transcript state in edit history."""


def normalize_whitespace(text: str) -> str:
    """Trim and collapse internal whitespace to single spaces."""
    return " ".join(text.split())


def segment_bounds_from_words(segment: Segment) -> Segment:
    """Return the segment with start/end re-derived from its words.

    Segments without words are returned unchanged.
    """
    if not segment.words:
        return segment
    start = segment.words[0].start
    end = segment.words[-1].end
    if start == segment.start and end == segment.end:
        return segment
    return Segment(
        id=segment.id,
        text=segment.text,
        start=start,
        end=end,
        words=segment.words,
    )


# ---------------------------------------------------------------------------
# Save payloads (shape only; transport belongs to the persistence collaborator)
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TextUpdate:
    """A segment whose text changed since the last confirmed save."""

    segment_id: str
    text: str

    def to_dict(self) -> Dict[str, Any]:
        return {"segmentId": self.segment_id, "text": self.text}


@dataclass(frozen=True)
class WordTimingUpdate:
    """A single word whose timing changed since the last confirmed save."""

    segment_id: str
    word_index: int
    start: float
    end: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segmentId": self.segment_id,
            "wordIndex": self.word_index,
            "start": self.start,
            "end": self.end,
        }
