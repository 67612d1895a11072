"""In-memory editing session store with idle-TTL cleanup.

WHY: The HTTP service keeps one EditSession per open editor. Sessions
carry undo history that must die with the session, so an in-memory
store is the right lifetime: nothing is persisted and a restart starts
clean.

HOW: Two components work together:
  SessionEntry : dataclass holding the EditSession and its timestamps
  SessionStore : thread-safe dict-based store with create/get/list/delete
                  and TTL cleanup of idle sessions

RULES:
- All store mutations are protected by threading.Lock
- Session IDs are UUID4 hex strings generated at creation time
- get_session() counts as activity and bumps updated_at
- TTL is measured from the last activity (updated_at), not creation
- create_session() raises ValueError once max_sessions is reached
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from caption_editor.config import HISTORY_LIMIT, MAX_SESSIONS, SESSION_TTL_SECONDS
from caption_editor.core.ir import Segment
from caption_editor.core.session import EditSession

logger = logging.getLogger(__name__)


@dataclass
class SessionEntry:
    """One open editing session and its bookkeeping.

    RULES:
    - id: UUID4 hex, unique and immutable after creation
    - created_at / updated_at: epoch seconds
    - name: optional display label supplied by the client
    """

    id: str
    session: EditSession
    created_at: float
    updated_at: float
    name: Optional[str] = None


class SessionStore:
    """Thread-safe in-memory store for editing sessions.

    WHY: Concurrent requests for different sessions hit the store at the
    same time as the periodic cleanup task. A single lock around the dict
    keeps lookups, inserts and expiry consistent.

    RULES:
    - get_session() returns None for unknown ids (no exceptions)
    - delete_session() returns False for unknown ids
    - cleanup_expired() returns the count of removed sessions
    """

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
        history_limit: int = HISTORY_LIMIT,
    ) -> None:
        self._sessions: Dict[str, SessionEntry] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions
        self.history_limit = history_limit

    def create_session(
        self,
        segments: Sequence[Segment],
        name: Optional[str] = None,
        similarity_threshold: Optional[float] = None,
    ) -> SessionEntry:
        """Open a new editing session over the given segments.

        Raises:
            ValueError: If the store already holds max_sessions sessions.
        """
        with self._lock:
            if len(self._sessions) >= self.max_sessions:
                raise ValueError(
                    "Maximum number of open sessions ({}) reached".format(
                        self.max_sessions
                    )
                )

            session_id = uuid.uuid4().hex
            now = time.time()
            entry = SessionEntry(
                id=session_id,
                session=EditSession(
                    segments,
                    history_limit=self.history_limit,
                    similarity_threshold=similarity_threshold,
                ),
                created_at=now,
                updated_at=now,
                name=name,
            )
            self._sessions[session_id] = entry

        logger.info("Created session %s with %d segments", session_id, len(segments))
        return entry

    def get_session(self, session_id: str) -> Optional[SessionEntry]:
        """Look up a session and mark it active, or return None."""
        with self._lock:
            entry = self._sessions.get(session_id)
            if entry is not None:
                entry.updated_at = time.time()
            return entry

    def list_sessions(self) -> List[SessionEntry]:
        """All sessions, oldest first."""
        with self._lock:
            return sorted(self._sessions.values(), key=lambda e: e.created_at)

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            entry = self._sessions.pop(session_id, None)
        if entry is None:
            return False
        logger.info("Deleted session %s", session_id)
        return True

    def cleanup_expired(self) -> int:
        """Remove sessions idle for longer than the TTL."""
        now = time.time()
        expired: List[SessionEntry] = []

        with self._lock:
            for session_id, entry in list(self._sessions.items()):
                if now - entry.updated_at > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for entry in expired:
            logger.info(
                "Expired session %s (idle %.0fs)", entry.id, now - entry.updated_at
            )
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
