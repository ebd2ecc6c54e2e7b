#!/usr/bin/env python3
"""
In-memory store of live HandStates keyed by session id.

A session's state is created on its first event, replaced on every
HAND_START, and evicted when the session ends or has been idle longer than
the configured timeout. Each session has its own lock so events for one
session are applied one at a time while other sessions proceed in parallel.

Usage:
    from src.tracker.session_store import SessionStore

    store = SessionStore()
    with store.lock_for("table-1"):
        state = store.get_or_create("table-1")
    store.evict_idle()
"""

import logging
import time
from contextlib import contextmanager
from threading import Lock, RLock
from typing import Callable, Dict, Iterator, List, Optional

from src.config.settings import Settings
from src.models.hand_state import HandState

logger = logging.getLogger(__name__)


class _SessionLock:
    """A session's lock and the number of callers holding or waiting on it."""

    def __init__(self):
        self.lock = RLock()
        self.users = 0


class SessionStore:
    """Repository of per-session hand state with idle eviction."""

    def __init__(self, idle_timeout_seconds: Optional[float] = None,
                 clock: Callable[[], float] = time.monotonic):
        """
        Initialize the store.

        Args:
            idle_timeout_seconds: Evict sessions untouched for this long. If None, uses Settings.
            clock: Monotonic time source
        """
        self.settings = Settings()
        self.settings.create("tracker.sessions.idle_timeout_seconds", default=3600)

        if idle_timeout_seconds is None:
            idle_timeout_seconds = self.settings.get("tracker.sessions.idle_timeout_seconds")

        self.idle_timeout_seconds = float(idle_timeout_seconds)
        self._clock = clock
        self._states: Dict[str, HandState] = {}
        self._last_touched: Dict[str, float] = {}
        self._session_locks: Dict[str, _SessionLock] = {}
        self._lock = Lock()

        logger.info(f"SessionStore initialized (idle timeout {self.idle_timeout_seconds:.0f}s)")

    @contextmanager
    def lock_for(self, session_id: str) -> Iterator[None]:
        """
        Hold the lock serializing all mutation of one session's state.

        Reentrant. The lock entry is kept while any caller holds or waits on
        it, so every caller for a session contends on the same lock even
        across an eviction.
        """
        with self._lock:
            entry = self._session_locks.get(session_id)
            if entry is None:
                entry = _SessionLock()
                self._session_locks[session_id] = entry
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            with self._lock:
                entry.users -= 1
                if entry.users == 0 and session_id not in self._states:
                    self._session_locks.pop(session_id, None)

    def get(self, session_id: str) -> Optional[HandState]:
        with self._lock:
            return self._states.get(session_id)

    def get_or_create(self, session_id: str) -> HandState:
        """Current state for the session, creating a WAITING state on first sight."""
        with self._lock:
            state = self._states.get(session_id)
            if state is None:
                state = HandState(session_id=session_id)
                self._states[session_id] = state
                logger.info(f"Session {session_id} created")
            self._last_touched[session_id] = self._clock()
            return state

    def replace(self, session_id: str, state: HandState) -> None:
        """Swap in a fresh state wholesale (new hand)."""
        with self._lock:
            self._states[session_id] = state
            self._last_touched[session_id] = self._clock()

    def evict(self, session_id: str) -> bool:
        """
        Drop a session's state once no event is being applied to it.

        Returns:
            True if the session existed
        """
        with self.lock_for(session_id):
            with self._lock:
                existed = self._states.pop(session_id, None) is not None
                self._last_touched.pop(session_id, None)

        if existed:
            logger.info(f"Session {session_id} evicted")
        return existed

    def evict_idle(self, now: Optional[float] = None) -> List[str]:
        """
        Evict every session idle for longer than the timeout.

        Returns:
            Ids of the evicted sessions
        """
        now = self._clock() if now is None else now
        with self._lock:
            expired = [
                session_id for session_id, touched in self._last_touched.items()
                if now - touched > self.idle_timeout_seconds
            ]

        for session_id in expired:
            self.evict(session_id)

        if expired:
            logger.info(f"Evicted {len(expired)} idle sessions")
        return expired

    def session_ids(self) -> List[str]:
        with self._lock:
            return list(self._states)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._states

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)
