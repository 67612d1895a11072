"""Load and dump editable transcripts as JSON.

WHY: The editing session starts from whatever the transcription backend
delivered and hands its state back in the same shape. Validating the
input up front gives one clear error instead of AttributeErrors deep in
the aligner.

HOW: The input document is validated with jsonschema against the bundled
schemas/transcript.schema.json, then converted into frozen Segment/Word
values. Dumping is the reverse mapping.

RULES:
- Top level is {"segments": [...]}; each segment has id, text, start, end
  and an optional words list
- Word ids are optional; missing ids become "{segment_id}-w{index}"
- Word confidence defaults to 1.0
- Numeric ids are converted to strings
- Timing is loaded as given; overlaps are the aligner's job to correct
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import jsonschema

from caption_editor.core.ir import EditSnapshot, Segment, Word

_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "schemas" / "transcript.schema.json"

_CACHED_SCHEMA: Optional[dict] = None


class TranscriptFormatError(ValueError):
    """Raised when a transcript document does not match the expected shape."""


def _get_schema() -> dict:
    """Load and cache the transcript JSON schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def validate_transcript(data: Any) -> None:
    """Validate a decoded transcript document.

    Raises:
        TranscriptFormatError: If the document does not match the schema.
    """
    try:
        jsonschema.validate(instance=data, schema=_get_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "<root>"
        raise TranscriptFormatError(
            "Invalid transcript at {}: {}".format(location, exc.message)
        ) from exc


def _parse_word(data: Dict[str, Any], segment_id: str, index: int) -> Word:
    word_id = data.get("id")
    return Word(
        id=str(word_id) if word_id is not None else "{}-w{}".format(segment_id, index),
        text=data["text"],
        start=float(data["start"]),
        end=float(data["end"]),
        confidence=float(data.get("confidence", 1.0)),
    )


def _parse_segment(data: Dict[str, Any]) -> Segment:
    segment_id = str(data["id"])
    words = tuple(
        _parse_word(word, segment_id, index)
        for index, word in enumerate(data.get("words") or [])
    )
    return Segment(
        id=segment_id,
        text=data["text"],
        start=float(data["start"]),
        end=float(data["end"]),
        words=words,
    )


def parse_transcript(data: Any) -> EditSnapshot:
    """Validate a decoded document and convert it into a snapshot."""
    validate_transcript(data)
    return tuple(_parse_segment(segment) for segment in data["segments"])


def load_transcript(path: Union[str, Path]) -> EditSnapshot:
    """Read a transcript JSON file.

    Raises:
        TranscriptFormatError: If the file is not valid JSON or fails validation.
        OSError: If the file cannot be read.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise TranscriptFormatError("{} is not valid JSON: {}".format(path, exc)) from exc
    return parse_transcript(data)


def word_to_dict(word: Word) -> Dict[str, Any]:
    return {
        "id": word.id,
        "text": word.text,
        "start": word.start,
        "end": word.end,
        "confidence": word.confidence,
    }


def segment_to_dict(segment: Segment) -> Dict[str, Any]:
    return {
        "id": segment.id,
        "text": segment.text,
        "start": segment.start,
        "end": segment.end,
        "words": [word_to_dict(word) for word in segment.words],
    }


def transcript_to_dict(snapshot: EditSnapshot) -> Dict[str, List[Dict[str, Any]]]:
    """Inverse of parse_transcript()."""
    return {"segments": [segment_to_dict(segment) for segment in snapshot]}
