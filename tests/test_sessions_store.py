"""Unit tests for the in-memory editing session store.

WHY: The store is the HTTP service's only state. Leaked sessions would
hold undo history forever, and a broken limit would let one client
exhaust memory.

HOW:
  - TestCreate: ids, timestamps, limits, per-session settings
  - TestLookup: get/list/delete
  - TestTTLCleanup: idle expiry measured from the last activity
  - TestThreadSafety: concurrent creation keeps the count consistent

RULES:
- Each test builds its own SessionStore
- Time-dependent tests use monkeypatch to control time.time()
"""

from __future__ import annotations

import threading
import time

import pytest

from caption_editor.server.sessions import SessionStore


# ---------------------------------------------------------------------------
# TestCreate
# ---------------------------------------------------------------------------


class TestCreate:
    def test_creates_session_over_segments(self, sample_segments):
        store = SessionStore()
        entry = store.create_session(sample_segments, name="episode 1")
        assert entry.session.segments == sample_segments
        assert entry.name == "episode 1"
        assert len(store) == 1

    def test_unique_hex_ids(self, sample_segments):
        store = SessionStore()
        first = store.create_session(sample_segments)
        second = store.create_session(sample_segments)
        assert first.id != second.id
        assert len(first.id) == 32

    def test_timestamps(self, sample_segments, monkeypatch):
        monkeypatch.setattr(time, "time", lambda: 42.0)
        entry = SessionStore().create_session(sample_segments)
        assert entry.created_at == entry.updated_at == 42.0

    def test_max_sessions(self, sample_segments):
        store = SessionStore(max_sessions=1)
        store.create_session(sample_segments)
        with pytest.raises(ValueError, match="Maximum"):
            store.create_session(sample_segments)

    def test_history_limit_applies_to_sessions(self, sample_segments):
        store = SessionStore(history_limit=3)
        entry = store.create_session(sample_segments)
        assert entry.session.history.limit == 3


# ---------------------------------------------------------------------------
# TestLookup
# ---------------------------------------------------------------------------


class TestLookup:
    def test_get_unknown_returns_none(self):
        assert SessionStore().get_session("nope") is None

    def test_get_bumps_updated_at(self, sample_segments, monkeypatch):
        store = SessionStore()
        monkeypatch.setattr(time, "time", lambda: 100.0)
        entry = store.create_session(sample_segments)
        monkeypatch.setattr(time, "time", lambda: 150.0)
        assert store.get_session(entry.id) is entry
        assert entry.updated_at == 150.0
        assert entry.created_at == 100.0

    def test_list_oldest_first(self, sample_segments, monkeypatch):
        store = SessionStore()
        monkeypatch.setattr(time, "time", lambda: 200.0)
        newer = store.create_session(sample_segments)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        older = store.create_session(sample_segments)
        assert [e.id for e in store.list_sessions()] == [older.id, newer.id]

    def test_delete(self, sample_segments):
        store = SessionStore()
        entry = store.create_session(sample_segments)
        assert store.delete_session(entry.id) is True
        assert store.delete_session(entry.id) is False
        assert len(store) == 0


# ---------------------------------------------------------------------------
# TestTTLCleanup
# ---------------------------------------------------------------------------


class TestTTLCleanup:
    def test_removes_idle_session(self, sample_segments, monkeypatch):
        store = SessionStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        entry = store.create_session(sample_segments)

        # 61 seconds idle, past the 60s TTL
        monkeypatch.setattr(time, "time", lambda: 161.0)
        assert store.cleanup_expired() == 1
        assert store.get_session(entry.id) is None

    def test_keeps_recent_session(self, sample_segments, monkeypatch):
        store = SessionStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        store.create_session(sample_segments)

        monkeypatch.setattr(time, "time", lambda: 159.0)
        assert store.cleanup_expired() == 0
        assert len(store) == 1

    def test_activity_extends_lifetime(self, sample_segments, monkeypatch):
        store = SessionStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        entry = store.create_session(sample_segments)

        monkeypatch.setattr(time, "time", lambda: 150.0)
        store.get_session(entry.id)

        monkeypatch.setattr(time, "time", lambda: 200.0)
        assert store.cleanup_expired() == 0

    def test_multiple_expired(self, sample_segments, monkeypatch):
        store = SessionStore(ttl_seconds=60)
        monkeypatch.setattr(time, "time", lambda: 100.0)
        for _ in range(3):
            store.create_session(sample_segments)
        monkeypatch.setattr(time, "time", lambda: 500.0)
        assert store.cleanup_expired() == 3
        assert len(store) == 0


# ---------------------------------------------------------------------------
# TestThreadSafety
# ---------------------------------------------------------------------------


class TestThreadSafety:
    def test_concurrent_creation(self, sample_segments):
        store = SessionStore(max_sessions=100)
        ids = []

        def create():
            ids.append(store.create_session(sample_segments).id)

        threads = [threading.Thread(target=create) for _ in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(store) == 20
        assert len(set(ids)) == 20
