#!/usr/bin/env python3
"""
Hand chat: free-form questions about the current spot.

The coach sees the spot, every villain's counters and the recommendation
already on screen. Turns are kept per session so follow-up questions carry
the earlier conversation. Chat never raises on adviser problems; the hero
gets a short error answer instead.
"""

import logging
from typing import Dict, List, Optional

from src.advisor.llm_adviser import AnthropicAdviser, ExternalAdviserError, follow_up_suggestions
from src.config.settings import Settings
from src.history.hand_storage import HandStorage
from src.history.player_storage import PlayerStorage
from src.models.chat import ChatMessage, ChatResult
from src.models.game_state import GameState
from src.models.player_stats import PlayerStats

logger = logging.getLogger(__name__)

UNAVAILABLE_ANSWER = "Chat coach unavailable: no ANTHROPIC_API_KEY configured."


class HandChat:
    """Answers hero questions through the external adviser."""

    def __init__(self, player_storage: PlayerStorage, hand_storage: HandStorage,
                 adviser: Optional[AnthropicAdviser] = None):
        """
        Initialize the chat.

        Args:
            player_storage: Source of villain counters
            hand_storage: Conversation persistence
            adviser: Answers questions; chat is unavailable when None
        """
        self.player_storage = player_storage
        self.hand_storage = hand_storage
        self.adviser = adviser
        self.settings = Settings()

        self.settings.create("service.chat.history_limit", default=20)
        self.history_limit = int(self.settings.get("service.chat.history_limit"))

    def ask(self, question: str, state: Optional[GameState] = None, recommendation: Optional[str] = None,
            lam: float = 0.5, session_id: Optional[str] = None,
            history: Optional[List[ChatMessage]] = None) -> ChatResult:
        """
        Answer one question.

        Args:
            question: Hero's question
            state: Current game state, if a hand is in progress
            recommendation: Label of the recommendation shown to the hero
            lam: Current exploit weight
            session_id: Conversation key; turns are read and saved under it
            history: Earlier turns. Loaded from storage when None and a
                session_id is given.

        Returns:
            ChatResult with the answer and up to three follow-up questions
        """
        suggestions = follow_up_suggestions(question, state)
        if self.adviser is None:
            return ChatResult(answer=UNAVAILABLE_ANSWER, follow_up_suggestions=suggestions)

        if history is None:
            history = self.hand_storage.get_chat_history(session_id, self.history_limit) if session_id else []

        try:
            answer = self.adviser.chat(question, state, self._villain_stats(state), recommendation, lam, history)
        except ExternalAdviserError as e:
            logger.warning(f"Chat answer failed: {e}")
            return ChatResult(answer=f"Error: {e}", follow_up_suggestions=suggestions)

        if session_id:
            self.hand_storage.insert_chat_message(session_id, ChatMessage(role='user', content=question))
            self.hand_storage.insert_chat_message(session_id, ChatMessage(role='assistant', content=answer))

        return ChatResult(answer=answer, follow_up_suggestions=suggestions)

    def _villain_stats(self, state: Optional[GameState]) -> Dict[str, Optional[PlayerStats]]:
        if state is None:
            return {}
        return {v.player_id: self.player_storage.get_stats(v.player_id) for v in state.villains}
