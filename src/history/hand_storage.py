#!/usr/bin/env python3
"""
HandStorage for SQLite-based event log, hand history, sessions and chat.

The event log is append-only: every event that enters the engine is stored
verbatim before it is applied. Hand history rows are analytics only (what
was recommended, what the hero did) and never feed back into decisions.
"""

import sqlite3
import json
import logging
import uuid
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Optional, List, Dict, Any

from src.models.chat import ChatMessage
from src.models.events import EVENT_TYPES, encode_event
from src.models.hand_record import HandRecord
from src.models.hand_state import coerce_float, coerce_str
from src.config.settings import Settings

logger = logging.getLogger(__name__)


class HandStorage:
    """SQLite database manager for the event log, hand history and sessions."""

    def __init__(self, db_path: Optional[str] = None):
        """
        Initialize database connection and create tables.

        Args:
            db_path: Path to SQLite database. If None, uses Settings.
        """
        self.settings = Settings()
        self.settings.create("history.database_path", default="data/poker_advisor.db")

        if db_path is None:
            db_path = self.settings.get("history.database_path")

        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        self.conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._lock = Lock()

        self._create_tables()

        logger.info(f"HandStorage initialized with database: {self.db_path}")

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        try:
            cursor = self.conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS sessions (
                    id TEXT PRIMARY KEY,
                    source_url TEXT NOT NULL,
                    started_at TEXT NOT NULL,
                    ended_at TEXT,
                    status TEXT NOT NULL DEFAULT 'active'
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS hand_events (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    event_type TEXT NOT NULL,
                    timestamp REAL NOT NULL,
                    payload TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS hand_history (
                    id TEXT PRIMARY KEY,
                    played_at TEXT NOT NULL,
                    raw_log TEXT NOT NULL,
                    hero_position TEXT,
                    hero_cards TEXT,
                    board TEXT,
                    hero_decision TEXT,
                    recommended TEXT,
                    lambda_used REAL,
                    ev_loss REAL
                )
            """)

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS chat_history (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    session_id TEXT NOT NULL,
                    role TEXT NOT NULL,
                    content TEXT NOT NULL,
                    created_at TEXT NOT NULL
                )
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_events_session
                ON hand_events(session_id)
            """)

            cursor.execute("""
                CREATE INDEX IF NOT EXISTS idx_history_played_at
                ON hand_history(played_at)
            """)

            self.conn.commit()
            logger.info("Database tables created successfully")

        except sqlite3.Error as e:
            logger.error(f"Failed to create database tables: {e}")
            raise

    def insert_event(self, session_id: str, event: Any) -> bool:
        """
        Append one event to the log.

        Args:
            session_id: Session the event belongs to
            event: Typed GameEvent or the raw dict as received

        Returns:
            True if saved successfully, False otherwise
        """
        if isinstance(event, EVENT_TYPES):
            event = encode_event(event)
        if not isinstance(event, dict):
            logger.warning(f"Not logging non-dict event for session {session_id}")
            return False

        event_type = coerce_str(event.get('type') or event.get('kind')).upper() or 'UNKNOWN'
        payload = event.get('payload')

        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute("""
                    INSERT INTO hand_events (session_id, event_type, timestamp, payload)
                    VALUES (?, ?, ?, ?)
                """, (
                    session_id,
                    event_type,
                    coerce_float(event.get('timestamp')),
                    json.dumps(payload if payload is not None else {}, default=str)
                ))
                self.conn.commit()
                return True

            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"Database error logging {event_type} for session {session_id}: {e}")
                return False

    def get_events(self, session_id: str) -> List[Dict[str, Any]]:
        """
        Get a session's logged events in arrival order.

        Returns:
            List of {"type", "timestamp", "payload"} dicts (empty if none found)
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                SELECT event_type, timestamp, payload FROM hand_events
                WHERE session_id = ?
                ORDER BY id
            """, (session_id,))

            return [
                {
                    'type': row['event_type'],
                    'timestamp': row['timestamp'],
                    'payload': json.loads(row['payload']),
                }
                for row in cursor.fetchall()
            ]

        except sqlite3.Error as e:
            logger.error(f"Database error retrieving events for session {session_id}: {e}")
            return []

    def save_hand_record(self, record: HandRecord) -> Optional[str]:
        """
        Save a hand history entry.

        Args:
            record: HandRecord to save; id and played_at are generated if unset

        Returns:
            The record id if saved successfully, None otherwise
        """
        record_id = record.id or str(uuid.uuid4())
        played_at = record.played_at or datetime.now()

        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute("""
                    INSERT INTO hand_history (
                        id, played_at, raw_log, hero_position, hero_cards, board,
                        hero_decision, recommended, lambda_used, ev_loss
                    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """, (
                    record_id,
                    played_at.isoformat(),
                    record.raw_log,
                    record.hero_position,
                    record.hero_cards,
                    record.board,
                    record.hero_decision,
                    record.recommended,
                    record.lambda_used,
                    record.ev_loss
                ))
                self.conn.commit()

                logger.info(f"Hand record {record_id} saved (recommended {record.recommended})")
                return record_id

            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"Database error saving hand record {record_id}: {e}")
                return None

    def get_recent_hands(self, limit: int = 20) -> List[HandRecord]:
        """
        Most recent hand history entries, newest first.

        Returns:
            List of HandRecords (empty list if none found)
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                SELECT * FROM hand_history
                ORDER BY played_at DESC
                LIMIT ?
            """, (limit,))

            hands = []
            for row in cursor.fetchall():
                data = dict(row)
                data['played_at'] = datetime.fromisoformat(data['played_at'])
                hands.append(HandRecord(**data))
            return hands

        except sqlite3.Error as e:
            logger.error(f"Database error retrieving recent hands: {e}")
            return []

    def create_session(self, session_id: str, source_url: str, start_time: datetime) -> bool:
        """
        Create a new session record.

        Returns:
            True if created successfully, False otherwise
        """
        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute("""
                    INSERT INTO sessions (id, source_url, started_at, status)
                    VALUES (?, ?, ?, 'active')
                """, (session_id, source_url, start_time.isoformat()))
                self.conn.commit()

                logger.info(f"Session {session_id} created at {start_time.isoformat()}")
                return True

            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"Database error creating session {session_id}: {e}")
                return False

    def end_session(self, session_id: str, end_time: datetime) -> bool:
        """
        Mark a session ended.

        Returns:
            True if a session row was updated, False otherwise
        """
        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute("""
                    UPDATE sessions
                    SET ended_at = ?, status = 'ended'
                    WHERE id = ?
                """, (end_time.isoformat(), session_id))
                self.conn.commit()
                return cursor.rowcount > 0

            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"Database error ending session {session_id}: {e}")
                return False

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """
        Get session metadata.

        Returns:
            Dict with session data if found, None otherwise
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT * FROM sessions WHERE id = ?", (session_id,))

            row = cursor.fetchone()
            if not row:
                logger.warning(f"Session {session_id} not found")
                return None

            return dict(row)

        except sqlite3.Error as e:
            logger.error(f"Database error retrieving session {session_id}: {e}")
            return None

    def summarize(self, since: datetime) -> Dict[str, Any]:
        """
        Aggregate hand history played at or after a point in time.

        Returns:
            Dict with hands_played, session_start, hero_decisions
            (fold/call/raise/bet counts) and ev_loss_total
        """
        summary: Dict[str, Any] = {
            'hands_played': 0,
            'session_start': None,
            'hero_decisions': {'fold': 0, 'call': 0, 'raise': 0, 'bet': 0},
            'ev_loss_total': None,
        }
        since_text = since.isoformat()

        try:
            cursor = self.conn.cursor()

            cursor.execute("""
                SELECT COUNT(*) AS hands_played,
                       MIN(played_at) AS session_start,
                       SUM(ev_loss) AS ev_loss_total
                FROM hand_history
                WHERE played_at >= ?
            """, (since_text,))
            row = cursor.fetchone()
            if row:
                summary['hands_played'] = row['hands_played']
                summary['session_start'] = row['session_start']
                summary['ev_loss_total'] = row['ev_loss_total']

            cursor.execute("""
                SELECT hero_decision, COUNT(*) AS cnt
                FROM hand_history
                WHERE played_at >= ? AND hero_decision IS NOT NULL
                GROUP BY hero_decision
            """, (since_text,))
            for decision_row in cursor.fetchall():
                key = decision_row['hero_decision'].lower()
                if key in summary['hero_decisions']:
                    summary['hero_decisions'][key] = decision_row['cnt']

        except sqlite3.Error as e:
            logger.error(f"Database error summarizing hand history: {e}")

        return summary

    def insert_chat_message(self, session_id: str, message: ChatMessage) -> bool:
        """
        Append one chat turn to a session's conversation.

        Returns:
            True if saved successfully, False otherwise
        """
        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute("""
                    INSERT INTO chat_history (session_id, role, content, created_at)
                    VALUES (?, ?, ?, ?)
                """, (session_id, message.role, message.content, datetime.now().isoformat()))
                self.conn.commit()
                return True

            except sqlite3.Error as e:
                logger.error(f"Database error saving chat message for session {session_id}: {e}")
                self.conn.rollback()
                return False

    def get_chat_history(self, session_id: str, limit: int = 20) -> List[ChatMessage]:
        """The last `limit` chat turns of a session, oldest first."""
        try:
            cursor = self.conn.cursor()
            cursor.execute("""
                SELECT role, content FROM chat_history
                WHERE session_id = ?
                ORDER BY id DESC
                LIMIT ?
            """, (session_id, limit))
            rows = cursor.fetchall()

        except sqlite3.Error as e:
            logger.error(f"Database error retrieving chat history for session {session_id}: {e}")
            return []

        return [ChatMessage(role=row['role'], content=row['content']) for row in reversed(rows)]

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            logger.info("Database connection closed")
