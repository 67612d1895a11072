"""FastAPI application exposing editing sessions over HTTP.

WHY: Browser-based editors and preview tools need the editing core
without embedding Python. An HTTP session service lets them open a
session on a transcript, send text and timing edits, walk undo/redo,
collect save payloads, and ask for caption frames while the video plays.

HOW: A single FastAPI app keeps EditSessions in an in-memory
SessionStore. Each endpoint resolves the session, calls one EditSession
operation, and returns the resulting state. A lifespan task expires idle
sessions every 5 minutes.

RULES:
- All endpoints are async def, so operations on a session run one at a
  time on the event loop
- Error responses use the shared ErrorResponse schema:
  404 unknown session/segment, 422 invalid transcript or timing,
  429 session limit, 400 unknown preset
- History never outlives its session; nothing is persisted
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Annotated, Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from caption_editor import __version__
from caption_editor.config import SERVER_HOST, SERVER_PORT
from caption_editor.core.ir import EditSnapshot, TextUpdate, WordTimingUpdate
from caption_editor.core.session import InvalidWordTimingError, UnknownSegmentError
from caption_editor.core.transcript_io import (
    TranscriptFormatError,
    parse_transcript,
    segment_to_dict,
)
from caption_editor.server.models import (
    ChangesResponse,
    CreateSessionRequest,
    ErrorResponse,
    FrameResponse,
    HealthResponse,
    PresetInfo,
    SessionResponse,
    SyncRequest,
    TextUpdatePayload,
    TextUpdateRequest,
    VisualWordModel,
    WordTimingPayload,
    WordTimingRequest,
)
from caption_editor.server.sessions import SessionEntry, SessionStore
from caption_overlay import PRESETS, get_preset

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

_CLEANUP_INTERVAL_S = 300

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Expire idle sessions every 5 minutes."""
    while True:
        await asyncio.sleep(_CLEANUP_INTERVAL_S)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Caption Editor Session API",
    description=(
        "Editing sessions over word-timed transcripts. Retype segments "
        "without losing word timing, adjust individual words, undo and "
        "redo, collect save payloads, and map playback time to animated "
        "caption frames."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)

_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Session or segment not found"}}


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_entry(session_id: str) -> SessionEntry:
    entry = session_store.get_session(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return entry


def _parse_segments(segments: List[Dict[str, Any]]) -> EditSnapshot:
    try:
        return parse_transcript({"segments": segments})
    except TranscriptFormatError as exc:
        raise HTTPException(status_code=422, detail=str(exc))


def _session_response(entry: SessionEntry, changed: Optional[bool] = None) -> SessionResponse:
    """Convert a SessionEntry to a SessionResponse Pydantic model."""
    session = entry.session
    return SessionResponse(
        id=entry.id,
        name=entry.name,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        segments=[segment_to_dict(segment) for segment in session.segments],
        can_undo=session.can_undo,
        can_redo=session.can_redo,
        history_size=session.history.history_size,
        redo_size=session.history.redo_size,
        dirty=session.is_dirty,
        changed=changed,
    )


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    tags=["sessions"],
    summary="Open an editing session",
    description=(
        "Validate the upstream transcript and open a session over it. "
        "The transcript becomes both the present state and the saved baseline."
    ),
    responses={
        422: {"model": ErrorResponse, "description": "Invalid transcript"},
        429: {"model": ErrorResponse, "description": "Too many open sessions"},
    },
)
async def create_session(request: CreateSessionRequest) -> SessionResponse:
    segments = _parse_segments(request.segments)
    try:
        entry = session_store.create_session(
            segments,
            name=request.name,
            similarity_threshold=request.similarity_threshold,
        )
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))
    return _session_response(entry)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session state",
    responses=_NOT_FOUND,
)
async def get_session(session_id: str) -> SessionResponse:
    return _session_response(_get_entry(session_id))


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Close a session",
    description="Close the session and discard its history.",
    responses=_NOT_FOUND,
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Edits
# ---------------------------------------------------------------------------


@app.put(
    "/sessions/{session_id}/segments/{segment_id}/text",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Replace a segment's text",
    description=(
        "Replace the text of one segment. Words that did not change keep "
        "their timing; inserted words share the time around them."
    ),
    responses=_NOT_FOUND,
)
async def update_segment_text(
    session_id: str,
    segment_id: str,
    request: TextUpdateRequest,
) -> SessionResponse:
    entry = _get_entry(session_id)
    try:
        changed = entry.session.update_segment_text(segment_id, request.text)
    except UnknownSegmentError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    return _session_response(entry, changed=changed)


@app.put(
    "/sessions/{session_id}/segments/{segment_id}/words/{word_index}/timing",
    response_model=SessionResponse,
    tags=["edits"],
    summary="Adjust one word's timing",
    description=(
        "Set the start and end of one word. The interval must be positive "
        "and must not overlap the neighbouring words."
    ),
    responses={
        **_NOT_FOUND,
        422: {"model": ErrorResponse, "description": "Invalid word timing"},
    },
)
async def update_word_timing(
    session_id: str,
    segment_id: str,
    word_index: int,
    request: WordTimingRequest,
) -> SessionResponse:
    entry = _get_entry(session_id)
    try:
        changed = entry.session.update_word_timing(
            segment_id, word_index, request.start, request.end
        )
    except UnknownSegmentError as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    except InvalidWordTimingError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    return _session_response(entry, changed=changed)


# ---------------------------------------------------------------------------
# Endpoints: History
# ---------------------------------------------------------------------------


@app.post(
    "/sessions/{session_id}/undo",
    response_model=SessionResponse,
    tags=["history"],
    summary="Undo the last edit",
    description="No-op (changed=false) when there is nothing to undo.",
    responses=_NOT_FOUND,
)
async def undo(session_id: str) -> SessionResponse:
    entry = _get_entry(session_id)
    return _session_response(entry, changed=entry.session.undo())


@app.post(
    "/sessions/{session_id}/redo",
    response_model=SessionResponse,
    tags=["history"],
    summary="Redo the last undone edit",
    description="No-op (changed=false) when there is nothing to redo.",
    responses=_NOT_FOUND,
)
async def redo(session_id: str) -> SessionResponse:
    entry = _get_entry(session_id)
    return _session_response(entry, changed=entry.session.redo())


@app.post(
    "/sessions/{session_id}/clear-history",
    response_model=SessionResponse,
    tags=["history"],
    summary="Drop undo and redo history",
    responses=_NOT_FOUND,
)
async def clear_history(session_id: str) -> SessionResponse:
    entry = _get_entry(session_id)
    return _session_response(entry, changed=entry.session.clear_history())


@app.post(
    "/sessions/{session_id}/sync",
    response_model=SessionResponse,
    tags=["history"],
    summary="Adopt authoritative segments",
    description=(
        "Replace the session state with segments from the backend. "
        "History is cleared and the segments become the saved baseline."
    ),
    responses={
        **_NOT_FOUND,
        422: {"model": ErrorResponse, "description": "Invalid transcript"},
    },
)
async def sync_session(session_id: str, request: SyncRequest) -> SessionResponse:
    entry = _get_entry(session_id)
    entry.session.sync_with_server(_parse_segments(request.segments))
    return _session_response(entry)


@app.post(
    "/sessions/{session_id}/confirm-save",
    response_model=SessionResponse,
    tags=["history"],
    summary="Confirm the present state was saved",
    description="The present state becomes the baseline and history is cleared.",
    responses=_NOT_FOUND,
)
async def confirm_save(session_id: str) -> SessionResponse:
    entry = _get_entry(session_id)
    entry.session.confirm_saved()
    return _session_response(entry)


@app.get(
    "/sessions/{session_id}/changes",
    response_model=ChangesResponse,
    tags=["history"],
    summary="List pending save payloads",
    description=(
        "Text and word-timing updates that bring the saved baseline up "
        "to the present state."
    ),
    responses=_NOT_FOUND,
)
async def pending_changes(session_id: str) -> ChangesResponse:
    entry = _get_entry(session_id)
    text_updates = []
    timing_updates = []
    for change in entry.session.pending_changes():
        if isinstance(change, TextUpdate):
            text_updates.append(TextUpdatePayload(segment_id=change.segment_id, text=change.text))
        elif isinstance(change, WordTimingUpdate):
            timing_updates.append(WordTimingPayload(
                segment_id=change.segment_id,
                word_index=change.word_index,
                start=change.start,
                end=change.end,
            ))
    return ChangesResponse(
        session_id=entry.id,
        text_updates=text_updates,
        word_timing_updates=timing_updates,
    )


# ---------------------------------------------------------------------------
# Endpoints: Captions
# ---------------------------------------------------------------------------


@app.get(
    "/sessions/{session_id}/frame",
    response_model=FrameResponse,
    tags=["captions"],
    summary="Caption frame at a playback time",
    description=(
        "Visual state (opacity, scale, color) of every emitted word at "
        "playback time t, using the named style preset."
    ),
    responses={
        **_NOT_FOUND,
        400: {"model": ErrorResponse, "description": "Unknown preset"},
    },
)
async def caption_frame(
    session_id: str,
    t: Annotated[float, Query(description="Playback time in seconds.")],
    preset: Annotated[str, Query(description="Style preset id (see GET /presets).")] = "default",
) -> FrameResponse:
    entry = _get_entry(session_id)
    try:
        style = get_preset(preset)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc))

    states = entry.session.frame(t, style)
    current = next((s.word_id for s in states if s.is_current), None)
    return FrameResponse(
        session_id=entry.id,
        time=t,
        preset=preset,
        current_word_id=current,
        words=[VisualWordModel(**state.to_dict()) for state in states],
    )


@app.get(
    "/presets",
    response_model=List[PresetInfo],
    tags=["captions"],
    summary="List caption style presets",
)
async def list_presets() -> List[PresetInfo]:
    return [
        PresetInfo(key=key, style=style.to_dict())
        for key, style in sorted(PRESETS.items())
    ]


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness check with the number of open sessions.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, sessions=len(session_store))


def run_api(host: str = SERVER_HOST, port: int = SERVER_PORT) -> None:
    """Serve the app with uvicorn."""
    import uvicorn

    logger.info("Starting session service on %s:%d", host, port)
    uvicorn.run(app, host=host, port=port)
