#!/usr/bin/env python3
"""
AdvisorService: the public surface of the poker advisor.

Wires the tracker, stats, persistence and decision engine together and
exposes the three core operations to whatever transport sits in front of it:

    apply_event(session_id, event) -> HandState
    get_decision(state, lam, villain_stats=None) -> Decision | None
    classify(stats) -> tag

plus hand chat, player lookup and session bookkeeping.

Usage:
    from src.service.advisor_service import AdvisorService

    service = AdvisorService()
    state = service.apply_event("table-1", raw_event)
    decision = service.get_decision(state, lam=0.7, to_call_bb=2.0)
"""

import logging
import os
from typing import Any, Dict, List, Optional, Union

from src.advisor.decision_engine import DecisionEngine
from src.advisor.llm_adviser import AnthropicAdviser
from src.config.settings import Settings
from src.history.hand_storage import HandStorage
from src.history.player_storage import PlayerStorage
from src.history.session_tracker import SessionTracker
from src.models.chat import ChatMessage, ChatResult
from src.models.decision import Decision
from src.models.game_state import GameState
from src.models.hand_state import HandState
from src.models.player_stats import PlayerProfile, PlayerStats
from src.service.chat import HandChat
from src.service.ingest import EventIngestor
from src.service.lookup import PlayerLookup
from src.stats.aggregator import StatsAggregator
from src.stats.classifier import classify
from src.tracker.session_store import SessionStore
from src.tracker.state_machine import HandStateMachine

logger = logging.getLogger(__name__)


class AdvisorService:
    """Facade over the decision engine and its collaborators."""

    def __init__(self, db_path: Optional[str] = None, store: Optional[SessionStore] = None,
                 adviser: Optional[AnthropicAdviser] = None):
        """
        Initialize the service.

        Args:
            db_path: SQLite database path. If None, uses Settings.
            store: Session store. A fresh one is created if None.
            adviser: External adviser. Created from ANTHROPIC_API_KEY when
                enabled in Settings and not given.
        """
        self.settings = Settings()
        self.settings.create("advisor.external.enabled", default=True)

        self.player_storage = PlayerStorage(db_path)
        self.hand_storage = HandStorage(db_path)

        self.store = store or SessionStore()
        self.state_machine = HandStateMachine(self.store)
        self.aggregator = StatsAggregator(self.player_storage)
        self.ingestor = EventIngestor(self.state_machine, self.aggregator, self.hand_storage)

        if adviser is None and self.settings.get("advisor.external.enabled") and os.environ.get("ANTHROPIC_API_KEY"):
            adviser = AnthropicAdviser()

        self.engine = DecisionEngine(adviser=adviser)
        self.player_lookup = PlayerLookup(self.player_storage, adviser)
        self.sessions = SessionTracker(self.hand_storage, self.state_machine)
        self.hand_chat = HandChat(self.player_storage, self.hand_storage, adviser)

        logger.info("AdvisorService initialized")

    def apply_event(self, session_id: str, event: Any) -> HandState:
        """Fold one event into the session's state and the players' stats."""
        return self.ingestor.ingest(session_id, event)

    def get_hand_state(self, session_id: str) -> Optional[HandState]:
        return self.state_machine.get_state(session_id)

    def get_decision(self, state: Union[GameState, HandState], lam: float,
                     villain_stats: Optional[PlayerStats] = None, screenshot: Optional[str] = None,
                     to_call_bb: float = 0.0, stack_bb: float = 100.0) -> Optional[Decision]:
        """
        Recommend an action.

        Args:
            state: GameState, or a tracker HandState to project
            lam: Exploit weight in [0, 1] (clamped)
            villain_stats: Primary villain's counters; read from storage if None
            screenshot: Optional base64 screenshot for the external adviser
            to_call_bb: Amount faced, when projecting a HandState
            stack_bb: Hero stack, when projecting a HandState

        Returns:
            Decision, or None when hero cards are unknown
        """
        if isinstance(state, HandState):
            state = GameState.from_hand_state(state, to_call_bb=to_call_bb, stack_bb=stack_bb)

        villain = state.primary_villain
        profile = None
        if villain is not None:
            if villain_stats is None:
                villain_stats = self.player_storage.get_stats(villain.player_id)
            if self.engine.adviser is not None:
                profile = self.player_lookup.lookup(villain.player_id)

        return self.engine.get_decision(state, lam, villain_stats, screenshot=screenshot,
                                        villain_profile=profile)

    def chat(self, question: str, state: Optional[Union[GameState, HandState]] = None,
             recommendation: Optional[str] = None, lam: float = 0.5, session_id: Optional[str] = None,
             history: Optional[List[ChatMessage]] = None) -> ChatResult:
        """Answer a question about the spot; see HandChat.ask."""
        if isinstance(state, HandState):
            state = GameState.from_hand_state(state)
        return self.hand_chat.ask(question, state, recommendation=recommendation, lam=lam,
                                  session_id=session_id, history=history)

    def classify(self, stats: Optional[PlayerStats]) -> str:
        return classify(stats)

    def lookup_player(self, player_id: str) -> PlayerProfile:
        return self.player_lookup.lookup(player_id)

    def start_session(self, source_url: str) -> str:
        return self.sessions.start_session(source_url)

    def end_session(self) -> Dict[str, Any]:
        return self.sessions.end_session()

    def record_decision(self, state: HandState, decision: Decision, lam: float,
                        hero_decision: Optional[str] = None) -> Optional[str]:
        return self.sessions.record_decision(state, decision, lam, hero_decision=hero_decision)

    def session_summary(self) -> Dict[str, Any]:
        return self.sessions.session_summary()

    def evict_idle_sessions(self) -> List[str]:
        return self.store.evict_idle()

    def close(self) -> None:
        """Close database connections."""
        self.player_storage.close()
        self.hand_storage.close()
