#!/usr/bin/env python3
"""
SessionTracker for advisor session lifecycle and decision analytics.

A session is opened against the URL of the table being watched and closed
explicitly. While it runs, every recommendation the player acts on can be
recorded as a HandRecord; the summary covers the last eight hours of hand
history.
"""

import json
import logging
import uuid
from datetime import datetime, timedelta
from typing import Optional, Dict, Any

from src.models.decision import Decision
from src.models.events import encode_event
from src.models.hand_record import HandRecord
from src.models.hand_state import HandState
from src.history.hand_storage import HandStorage
from src.tracker.state_machine import HandStateMachine

logger = logging.getLogger(__name__)

SUMMARY_WINDOW = timedelta(hours=8)


class SessionTracker:
    """Session management with decision recording."""

    def __init__(self, hand_storage: HandStorage, state_machine: Optional[HandStateMachine] = None):
        """
        Initialize session tracker.

        Args:
            hand_storage: HandStorage instance for persistence
            state_machine: Tracker whose session state is evicted on end_session
        """
        self.hand_storage = hand_storage
        self.state_machine = state_machine

        self.current_session_id: Optional[str] = None
        self.session_start_time: Optional[datetime] = None
        self.source_url: Optional[str] = None
        self.decisions_recorded: int = 0

        logger.info("SessionTracker initialized")

    def start_session(self, source_url: str) -> str:
        """
        Start watching a table.

        Args:
            source_url: Page the events are scraped from

        Returns:
            session_id: UUID string for the new session

        Raises:
            RuntimeError: If a session is already active or cannot be stored
        """
        if self.is_session_active():
            raise RuntimeError(
                f"Session {self.current_session_id} is already active. "
                "End current session before starting a new one."
            )

        session_id = str(uuid.uuid4())
        start_time = datetime.now()

        if not self.hand_storage.create_session(session_id, source_url, start_time):
            raise RuntimeError(f"Failed to create session {session_id} in database")

        self.current_session_id = session_id
        self.session_start_time = start_time
        self.source_url = source_url
        self.decisions_recorded = 0

        logger.info(f"Session {session_id} started for {source_url}")
        return session_id

    def end_session(self) -> Dict[str, Any]:
        """
        End the current session.

        Returns:
            Dict with session_id, source_url, start_time, end_time,
            duration_minutes and decisions_recorded

        Raises:
            RuntimeError: If no session is active
        """
        if not self.is_session_active():
            raise RuntimeError("No active session to end")

        end_time = datetime.now()
        duration_minutes = (end_time - self.session_start_time).total_seconds() / 60

        if not self.hand_storage.end_session(self.current_session_id, end_time):
            logger.warning(f"Failed to update session {self.current_session_id} in database")

        if self.state_machine is not None:
            self.state_machine.end_session(self.current_session_id)

        stats = {
            'session_id': self.current_session_id,
            'source_url': self.source_url,
            'start_time': self.session_start_time.isoformat(),
            'end_time': end_time.isoformat(),
            'duration_minutes': round(duration_minutes, 2),
            'decisions_recorded': self.decisions_recorded,
        }

        logger.info(
            f"Session {self.current_session_id} ended: "
            f"{self.decisions_recorded} decisions, {duration_minutes:.1f} minutes"
        )

        self.current_session_id = None
        self.session_start_time = None
        self.source_url = None
        self.decisions_recorded = 0

        return stats

    def is_session_active(self) -> bool:
        return self.current_session_id is not None

    def record_decision(self, state: HandState, decision: Decision, lam: float,
                        hero_decision: Optional[str] = None,
                        ev_loss: Optional[float] = None) -> Optional[str]:
        """
        Persist a recommendation and what the hero did with it.

        Args:
            state: Hand the decision was made in
            decision: Advisor output
            lam: Lambda the player requested
            hero_decision: Action the hero actually took, if known
            ev_loss: Estimated EV given up by deviating, if known

        Returns:
            Hand record id, or None if it could not be saved
        """
        raw_log = json.dumps([encode_event(e) for e in state.events], default=str)

        record = HandRecord(
            raw_log=raw_log,
            hero_position=state.hero_position,
            hero_cards=' '.join(str(c) for c in state.hero_cards) or None,
            board=' '.join(str(c) for c in state.board) or None,
            hero_decision=hero_decision,
            recommended=decision.label,
            lambda_used=min(1.0, max(0.0, lam)),
            ev_loss=ev_loss,
        )

        record_id = self.hand_storage.save_hand_record(record)
        if record_id is None:
            logger.error(f"Failed to save decision for hand {state.hand_id}")
            return None

        self.decisions_recorded += 1
        return record_id

    def session_summary(self) -> Dict[str, Any]:
        """Hands played, first hand time, hero decision counts and EV loss over the last 8 hours."""
        return self.hand_storage.summarize(datetime.now() - SUMMARY_WINDOW)
