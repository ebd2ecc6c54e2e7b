#!/usr/bin/env python3
"""Tracker module for per-session hand state tracking."""

from src.tracker.session_store import SessionStore
from src.tracker.position_calculator import PositionCalculator
from src.tracker.state_machine import HandStateMachine, street_for_board

__all__ = ['SessionStore', 'PositionCalculator', 'HandStateMachine', 'street_for_board']
