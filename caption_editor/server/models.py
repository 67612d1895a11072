"""Pydantic request/response models for the session service.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation.

HOW: Each endpoint has its own request and/or response model. Transcript
segments in requests stay plain dicts because they are validated against
the bundled JSON schema by core.transcript_io (one source of truth for
the input format). Save payloads and visual word states are serialized
with camelCase aliases, the shape the product backend and the painter
consume.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Outer response fields are snake_case; payload and frame items are camelCase
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Transcript shapes
# ---------------------------------------------------------------------------


class WordModel(BaseModel):
    id: str = Field(description="Word identifier.")
    text: str = Field(description="Word text with attached punctuation.")
    start: float = Field(description="Start time in seconds.")
    end: float = Field(description="End time in seconds.")
    confidence: float = Field(description="0.0-1.0; 0.5 marks interpolated timing.")


class SegmentModel(BaseModel):
    id: str = Field(description="Segment identifier.")
    text: str = Field(description="Segment text as last edited.")
    start: float = Field(description="Segment start time in seconds.")
    end: float = Field(description="Segment end time in seconds.")
    words: List[WordModel] = Field(default_factory=list, description="Timed words.")


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    """Open an editing session over an upstream transcript.

    RULES:
    - segments follow the transcript JSON schema (validated server-side)
    - similarity_threshold enables fuzzy word matching in the aligner
    """

    segments: List[Dict[str, Any]] = Field(
        description="Upstream segments: {id, text, start, end, words[]}.",
    )
    name: Optional[str] = Field(default=None, description="Optional display label.")
    similarity_threshold: Optional[float] = Field(
        default=None,
        ge=0.0,
        le=1.0,
        description="Fuzzy match ratio (0-1) for keeping timing on typo fixes.",
    )


class SyncRequest(BaseModel):
    segments: List[Dict[str, Any]] = Field(
        description="Authoritative segments; replaces the session state and clears history.",
    )


class TextUpdateRequest(BaseModel):
    text: str = Field(description="New segment text.")


class WordTimingRequest(BaseModel):
    start: float = Field(allow_inf_nan=False, description="New word start in seconds.")
    end: float = Field(allow_inf_nan=False, description="New word end in seconds.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class SessionResponse(BaseModel):
    """Current state of an editing session.

    RULES:
    - changed is only set by edit/undo/redo endpoints
    - dirty is True when the state differs from the last sync/save
    """

    id: str = Field(description="Session identifier (UUID hex).")
    name: Optional[str] = Field(default=None, description="Display label.")
    created_at: float = Field(description="Creation timestamp (Unix epoch seconds).")
    updated_at: float = Field(description="Last activity timestamp (Unix epoch seconds).")
    segments: List[SegmentModel] = Field(description="Present transcript state.")
    can_undo: bool = Field(description="An undo step is available.")
    can_redo: bool = Field(description="A redo step is available.")
    history_size: int = Field(description="Number of undo steps available.")
    redo_size: int = Field(description="Number of redo steps available.")
    dirty: bool = Field(description="State differs from the last synced baseline.")
    changed: Optional[bool] = Field(
        default=None,
        description="Whether the request changed the state (edit/undo/redo only).",
    )


class TextUpdatePayload(BaseModel):
    segment_id: str = Field(alias="segmentId", description="Segment identifier.")
    text: str = Field(description="Segment text to persist.")

    model_config = {"populate_by_name": True}


class WordTimingPayload(BaseModel):
    segment_id: str = Field(alias="segmentId", description="Segment identifier.")
    word_index: int = Field(alias="wordIndex", description="Index of the word in its segment.")
    start: float = Field(description="Word start in seconds.")
    end: float = Field(description="Word end in seconds.")

    model_config = {"populate_by_name": True}


class ChangesResponse(BaseModel):
    """Save payloads that bring the persisted baseline up to date."""

    session_id: str = Field(description="Session identifier.")
    text_updates: List[TextUpdatePayload] = Field(description="Segments with changed text.")
    word_timing_updates: List[WordTimingPayload] = Field(
        description="Words with changed timing in segments whose text is unchanged.",
    )


class VisualWordModel(BaseModel):
    word_id: str = Field(alias="wordId", description="Source word identifier.")
    text: str = Field(description="Text to paint (after text transform).")
    is_current: bool = Field(alias="isCurrent", description="Playback time is inside this word.")
    is_past: bool = Field(alias="isPast", description="Word ended before playback time.")
    opacity: float = Field(description="0.0-1.0.")
    scale: float = Field(description="Scale factor, 1.0 = natural size.")
    color: str = Field(description="CSS color.")
    glow_color: Optional[str] = Field(default=None, alias="glowColor", description="Glow color or null.")

    model_config = {"populate_by_name": True}


class FrameResponse(BaseModel):
    """Visual state of the session's words at one playback time."""

    session_id: str = Field(description="Session identifier.")
    time: float = Field(description="Playback time in seconds.")
    preset: str = Field(description="Preset id used for the style.")
    current_word_id: Optional[str] = Field(default=None, description="Current word id, if any.")
    words: List[VisualWordModel] = Field(description="Emitted words in order.")


class PresetInfo(BaseModel):
    key: str = Field(description="Preset identifier used in requests.")
    style: Dict[str, Any] = Field(description="Style configuration of the preset.")


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
    sessions: int = Field(description="Number of open sessions.")
