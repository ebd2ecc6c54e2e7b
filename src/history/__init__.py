#!/usr/bin/env python3
"""
History module for player stats, the event log, hand history and sessions.

Public API:
    - PlayerStorage: Player registry and stats counters (SQLite)
    - HandStorage: Event log, hand history and session records (SQLite)
    - SessionTracker: Session lifecycle and decision recording
"""

from src.history.player_storage import PlayerStorage
from src.history.hand_storage import HandStorage
from src.history.session_tracker import SessionTracker

__all__ = ['PlayerStorage', 'HandStorage', 'SessionTracker']
