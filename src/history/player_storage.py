#!/usr/bin/env python3
"""
PlayerStorage for SQLite-based player registry and behavioral counters.

Players are keyed by a stable hash of their display name. Every registered
player has exactly one stats row; counters are only ever incremented, each
event's increments landing in a single UPDATE so concurrent observers of the
same real-world player never lose updates.
"""

import sqlite3
import logging
from datetime import datetime
from pathlib import Path
from threading import Lock
from typing import Optional, List, Dict, Any

from src.models.player_stats import COUNTER_FIELDS, PlayerStats
from src.config.settings import Settings

logger = logging.getLogger(__name__)


class PlayerStorage:
    """SQLite database manager for players and their stats."""

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

        logger.info(f"PlayerStorage initialized with database: {self.db_path}")

    def _create_tables(self) -> None:
        """Create database tables if they don't exist."""
        counter_columns = ",\n".join(f"{name} INTEGER NOT NULL DEFAULT 0" for name in COUNTER_FIELDS)
        try:
            cursor = self.conn.cursor()

            cursor.execute("""
                CREATE TABLE IF NOT EXISTS players (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    first_seen TEXT NOT NULL,
                    last_seen TEXT NOT NULL,
                    total_hands INTEGER NOT NULL DEFAULT 0,
                    llm_notes TEXT
                )
            """)

            cursor.execute(f"""
                CREATE TABLE IF NOT EXISTS stats (
                    player_id TEXT PRIMARY KEY,
                    {counter_columns},
                    updated_at TEXT NOT NULL,
                    FOREIGN KEY (player_id) REFERENCES players(id)
                )
            """)

            self.conn.commit()
            logger.info("Player tables created successfully")

        except sqlite3.Error as e:
            logger.error(f"Failed to create player tables: {e}")
            raise

    def upsert_player(self, player_id: str, name: str, count_hand: bool = True) -> bool:
        """
        Register a player or refresh an existing one.

        Ensures a zeroed stats row exists, which is what makes the player
        observable by the aggregator.

        Args:
            player_id: Stable player id
            name: Display name
            count_hand: Whether this sighting starts a new hand for the player

        Returns:
            True if saved successfully, False otherwise
        """
        now = datetime.now().isoformat()
        hands = 1 if count_hand else 0
        with self._lock:
            try:
                cursor = self.conn.cursor()

                cursor.execute("""
                    INSERT INTO players (id, name, first_seen, last_seen, total_hands)
                    VALUES (?, ?, ?, ?, ?)
                    ON CONFLICT(id) DO UPDATE SET
                        last_seen = excluded.last_seen,
                        total_hands = total_hands + excluded.total_hands
                """, (player_id, name or 'Unknown', now, now, hands))

                cursor.execute("""
                    INSERT OR IGNORE INTO stats (player_id, updated_at) VALUES (?, ?)
                """, (player_id, now))

                self.conn.commit()
                logger.debug(f"Player {name or player_id[:8]} registered")
                return True

            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"Database error registering player {player_id[:8]}: {e}")
                return False

    def get_player(self, player_id: str) -> Optional[Dict[str, Any]]:
        """
        Get a player's registry row.

        Returns:
            Dict with player data if found, None otherwise
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT * FROM players WHERE id = ?", (player_id,))
            row = cursor.fetchone()
            return dict(row) if row else None

        except sqlite3.Error as e:
            logger.error(f"Database error retrieving player {player_id[:8]}: {e}")
            return None

    def get_all_players(self) -> List[Dict[str, Any]]:
        """All players, most recently seen first."""
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT * FROM players ORDER BY last_seen DESC")
            return [dict(row) for row in cursor.fetchall()]

        except sqlite3.Error as e:
            logger.error(f"Database error retrieving players: {e}")
            return []

    def get_stats(self, player_id: str) -> Optional[PlayerStats]:
        """
        Get a player's counters.

        Returns:
            PlayerStats if the player is registered, None otherwise
        """
        try:
            cursor = self.conn.cursor()
            cursor.execute("SELECT * FROM stats WHERE player_id = ?", (player_id,))
            row = cursor.fetchone()
            if not row:
                return None

            data = dict(row)
            data['updated_at'] = datetime.fromisoformat(data['updated_at']) if data.get('updated_at') else None
            return PlayerStats(**data)

        except sqlite3.Error as e:
            logger.error(f"Database error retrieving stats for {player_id[:8]}: {e}")
            return None

    def increment_stats(self, player_id: str, increments: Dict[str, int]) -> bool:
        """
        Add increments to a player's counters in one statement.

        Args:
            player_id: Registered player id
            increments: Counter name -> amount; unknown names are ignored

        Returns:
            True if a stats row was updated, False if the player is not
            registered or the update failed
        """
        deltas = {name: int(amount) for name, amount in increments.items()
                  if name in COUNTER_FIELDS and amount}
        if not deltas:
            return False

        assignments = ", ".join(f"{name} = {name} + ?" for name in deltas)
        params = list(deltas.values()) + [datetime.now().isoformat(), player_id]

        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute(
                    f"UPDATE stats SET {assignments}, updated_at = ? WHERE player_id = ?",
                    params
                )
                self.conn.commit()
                return cursor.rowcount > 0

            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"Database error updating stats for {player_id[:8]}: {e}")
                return False

    def update_llm_notes(self, player_id: str, notes: str) -> bool:
        """Store a generated tendency summary for a player."""
        with self._lock:
            try:
                cursor = self.conn.cursor()
                cursor.execute("UPDATE players SET llm_notes = ? WHERE id = ?", (notes, player_id))
                self.conn.commit()
                return cursor.rowcount > 0

            except sqlite3.Error as e:
                self.conn.rollback()
                logger.error(f"Database error saving notes for {player_id[:8]}: {e}")
                return False

    def close(self) -> None:
        """Close database connection."""
        if self.conn:
            self.conn.close()
            logger.info("Player database connection closed")
