#!/usr/bin/env python3
"""
Models package for the poker advisor data models.

Provides Pydantic models for type-safe event decoding, hand state, player
statistics and decisions across the advisor.
"""

from .card import Card
from .player_stats import PlayerStats, PlayerProfile, StatsSummary, hash_player_id
from .hand_state import HandState, SeatedPlayer, PlayerAction
from .events import GameEvent, decode_event
from .game_state import GameState, Villain
from .decision import Decision, PolicyResult
from .hand_record import HandRecord
from .chat import ChatMessage, ChatResult

__all__ = [
    'Card',
    'PlayerStats',
    'PlayerProfile',
    'StatsSummary',
    'hash_player_id',
    'HandState',
    'SeatedPlayer',
    'PlayerAction',
    'GameEvent',
    'decode_event',
    'GameState',
    'Villain',
    'Decision',
    'PolicyResult',
    'HandRecord',
    'ChatMessage',
    'ChatResult'
]
