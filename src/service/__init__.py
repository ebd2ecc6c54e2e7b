#!/usr/bin/env python3
"""
Service module exposing the advisor's public operations.

Public API:
    - AdvisorService: apply_event / get_decision / classify facade
    - EventIngestor: Event log, tracker and stats orchestration
    - PlayerLookup: Opponent profiles
    - HandChat: Questions about the current spot
"""

from src.service.ingest import EventIngestor
from src.service.lookup import PlayerLookup
from src.service.chat import HandChat
from src.service.advisor_service import AdvisorService

__all__ = ['EventIngestor', 'PlayerLookup', 'HandChat', 'AdvisorService']
