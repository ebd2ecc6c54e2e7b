#!/usr/bin/env python3
"""
Event ingest: the single entry point for events coming from the data source.

Each event is logged verbatim, folded into the session's HandState, and fed
to the stats aggregator. The tracker and the aggregator consume the same
event independently; the aggregator only reads the resulting street.
"""

import logging
from typing import Any, Optional

from src.history.hand_storage import HandStorage
from src.models.events import ActionEvent, HandStartEvent, PlayerJoinEvent, ShowdownEvent, decode_event
from src.models.hand_state import HandState
from src.stats.aggregator import StatsAggregator
from src.tracker.state_machine import HandStateMachine

logger = logging.getLogger(__name__)


class EventIngestor:
    """Log, track and aggregate incoming game events."""

    def __init__(self, state_machine: HandStateMachine, aggregator: StatsAggregator,
                 hand_storage: Optional[HandStorage] = None):
        """
        Initialize the ingestor.

        Args:
            state_machine: Per-session hand tracker
            aggregator: Player stats aggregator
            hand_storage: Event log; events are not logged if None
        """
        self.state_machine = state_machine
        self.aggregator = aggregator
        self.hand_storage = hand_storage
        logger.info("EventIngestor initialized")

    def ingest(self, session_id: str, raw_event: Any) -> HandState:
        """
        Process one event for a session.

        Events for the same session are processed one at a time, in the order
        they are ingested.

        Args:
            session_id: Session the event belongs to
            raw_event: Raw event dict from the data source (or a typed event)

        Returns:
            The session's HandState after the event
        """
        store = self.state_machine.store
        with store.lock_for(session_id):
            if self.hand_storage is not None:
                self.hand_storage.insert_event(session_id, raw_event)

            event = decode_event(raw_event)
            if event is None:
                return store.get_or_create(session_id)

            state = self.state_machine.apply(session_id, event)

            if isinstance(event, (HandStartEvent, PlayerJoinEvent)):
                new_hand = isinstance(event, HandStartEvent)
                for player in event.payload.players:
                    if player.id:
                        self.aggregator.register_player(player.id, player.name, count_hand=new_hand)

            elif isinstance(event, ActionEvent):
                payload = event.payload
                if payload.player_id and payload.action:
                    self.aggregator.observe(payload.player_id, payload.action, state)

            elif isinstance(event, ShowdownEvent):
                for player_id in event.payload.player_ids:
                    self.aggregator.observe(player_id, 'SHOWDOWN', state)

            return state
