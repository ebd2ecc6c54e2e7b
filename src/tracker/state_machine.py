#!/usr/bin/env python3
"""
Hand state machine folding game events into per-session HandState.

Each session holds exactly one HandState. HAND_START replaces it wholesale;
every other event kind mutates it in place. The street only ever moves
forward within a hand, and on board deals it is derived from the number of
board cards rather than taken from the event.

No deduplication is done here: delivering the same event twice applies it
twice.

Usage:
    from src.tracker.state_machine import HandStateMachine

    machine = HandStateMachine()
    state = machine.apply("table-1", {"type": "HAND_START", "timestamp": 1,
                                      "payload": {"hand_id": "h1", "players": [...]}})
    print(state.street, state.pot_bb)
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from src.models.events import (ActionEvent, CardDealEvent, HandStartEvent,
                               PlayerJoinEvent, PotWinEvent, ShowdownEvent, decode_event)
from src.models.hand_state import MONEY_ACTIONS, STREETS, HandState, PlayerAction
from src.tracker.session_store import SessionStore

logger = logging.getLogger(__name__)

BOARD_STREETS = {0: 'PREFLOP', 3: 'FLOP', 4: 'TURN', 5: 'RIVER'}


def street_for_board(card_count: int) -> Optional[str]:
    """Map board size to street (0=preflop, 3=flop, 4=turn, 5=river); None if invalid."""
    return BOARD_STREETS.get(card_count)


class HandStateMachine:
    """
    Event-driven tracker of the current hand for every session.

    Sessions are independent; events for the same session are applied under
    that session's lock in arrival order.
    """

    def __init__(self, store: Optional[SessionStore] = None):
        """
        Initialize the state machine.

        Args:
            store: Session repository. A private SessionStore is created if None.
        """
        self.store = store or SessionStore()
        self._handlers: Dict[str, Callable[[HandState, Any], None]] = {
            'CARD_DEAL': self._handle_card_deal,
            'ACTION': self._handle_action,
            'PLAYER_JOIN': self._handle_player_join,
            'SHOWDOWN': self._handle_showdown,
            'POT_WIN': self._handle_pot_win,
        }

        logger.info("HandStateMachine initialized")

    def apply(self, session_id: str, event: Any) -> HandState:
        """
        Apply one event to a session.

        Args:
            session_id: Session the event belongs to
            event: Typed GameEvent or the raw dict from the data source

        Returns:
            The session's HandState after the event. Unknown or undecodable
            events leave the state untouched.
        """
        decoded = decode_event(event)

        with self.store.lock_for(session_id):
            if isinstance(decoded, HandStartEvent):
                return self._start_hand(session_id, decoded)

            state = self.store.get_or_create(session_id)
            if decoded is None:
                return state

            state.events.append(decoded)
            self._handlers[decoded.kind](state, decoded)
            return state

    def get_state(self, session_id: str) -> Optional[HandState]:
        """Current state for a session, or None if the session is unknown."""
        return self.store.get(session_id)

    def end_session(self, session_id: str) -> bool:
        """Forget a session's state."""
        return self.store.evict(session_id)

    def _start_hand(self, session_id: str, event: HandStartEvent) -> HandState:
        payload = event.payload
        previous = self.store.get(session_id)
        if previous is not None and previous.street not in ('WAITING', 'HAND_OVER'):
            logger.debug(f"Hand {previous.hand_id} abandoned at {previous.street} in session {session_id}")

        state = HandState(
            session_id=session_id,
            hand_id=payload.hand_id,
            street='PREFLOP',
            hero_position=payload.hero_position,
            hero_id=payload.hero_id,
            pot_bb=max(0.0, payload.small_blind_bb + payload.big_blind_bb),
            players=[p.model_copy() for p in payload.players],
            events=[event],
        )
        self.store.replace(session_id, state)

        logger.info(f"Hand {payload.hand_id} started in session {session_id} "
                    f"with {len(state.players)} players")
        return state

    def _handle_card_deal(self, state: HandState, event: CardDealEvent) -> None:
        target = event.payload.target
        cards = list(event.payload.cards)

        if target == 'hero':
            state.hero_cards = cards[:2]
            logger.debug(f"Hero dealt {' '.join(str(c) for c in cards)}")
            return

        if target != 'board':
            logger.warning(f"Ignoring card deal with unknown target {target!r}")
            return

        state.board = state.board + cards
        street = street_for_board(len(state.board))
        if street is None:
            logger.warning(f"Invalid board length {len(state.board)} in session {state.session_id}")
            return

        self._advance(state, street)

    def _handle_action(self, state: HandState, event: ActionEvent) -> None:
        payload = event.payload
        action = PlayerAction(player_id=payload.player_id, action=payload.action,
                              amount_bb=payload.amount_bb)
        state.current_actions().append(action)

        if action.action in MONEY_ACTIONS:
            state.pot_bb = state.pot_bb + action.amount_bb
        elif action.action == 'FOLD':
            player = state.get_player(action.player_id)
            if player is not None:
                player.active = False

        logger.debug(f"{state.street}: {action.to_token()} (pot {state.pot_bb:g}bb)")

    def _handle_player_join(self, state: HandState, event: PlayerJoinEvent) -> None:
        known = {p.id for p in state.players}
        joined: List[str] = []
        for player in event.payload.players:
            if not player.id or player.id in known:
                continue
            state.players.append(player.model_copy())
            known.add(player.id)
            joined.append(player.name or player.id)

        if joined:
            logger.debug(f"Players joined session {state.session_id}: {joined}")

    def _handle_showdown(self, state: HandState, event: ShowdownEvent) -> None:
        self._advance(state, 'SHOWDOWN')

    def _handle_pot_win(self, state: HandState, event: PotWinEvent) -> None:
        self._advance(state, 'HAND_OVER')
        logger.info(f"Hand {state.hand_id} over in session {state.session_id} "
                    f"(winner {event.payload.winner_id or 'unknown'})")

    def _advance(self, state: HandState, street: str) -> None:
        """Move the street forward; never backward within a hand."""
        if STREETS.index(street) > STREETS.index(state.street):
            logger.debug(f"Session {state.session_id}: {state.street} -> {street}")
            state.street = street
