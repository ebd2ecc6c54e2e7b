#!/usr/bin/env python3
"""
GameState model: the decision-time view consumed by the policy evaluators.

A GameState is either supplied directly by the data source or projected from
the tracker's HandState with GameState.from_hand_state().
"""

import logging
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from src.models.card import Card, parse_cards
from src.models.hand_state import BETTING_STREETS, HandState

logger = logging.getLogger(__name__)


class Villain(BaseModel):
    """Opponent still contesting the pot."""
    player_id: str = Field(..., description="Stable player identifier")
    position: str = Field('', description="Seat label")
    stack_bb: float = Field(0.0, ge=0, description="Stack in big blinds")

    class Config:
        extra = "ignore"


class GameState(BaseModel):
    """Decision-time snapshot from the hero's point of view."""
    street: str = Field('PREFLOP', description="Betting street (PREFLOP/FLOP/TURN/RIVER)")
    hero_position: str = Field('', description="Hero seat label")
    hero_cards: List[Card] = Field(default_factory=list, description="Hero hole cards")
    board: List[Card] = Field(default_factory=list, description="Community cards")
    pot_bb: float = Field(0.0, ge=0, description="Pot in big blinds")
    to_call_bb: float = Field(0.0, ge=0, description="Amount hero must call")
    stack_bb: float = Field(100.0, ge=0, description="Hero stack in big blinds")
    villains: List[Villain] = Field(default_factory=list, description="Active opponents")
    action_history: List[str] = Field(default_factory=list,
                                      description="Free-text action tokens, most recent last")

    @field_validator('street', mode='before')
    @classmethod
    def validate_street(cls, v):
        street = str(v or '').upper()
        if street not in BETTING_STREETS:
            raise ValueError(f'Invalid street: {v}. Must be one of {BETTING_STREETS}')
        return street

    @field_validator('hero_cards', 'board', mode='before')
    @classmethod
    def parse_card_list(cls, v):
        return parse_cards(v)

    @field_validator('hero_cards')
    @classmethod
    def validate_hero_cards(cls, v):
        if len(v) > 2:
            raise ValueError('Cannot have more than 2 hole cards')
        return v

    @field_validator('board')
    @classmethod
    def validate_board(cls, v):
        if len(v) > 5:
            raise ValueError('Cannot have more than 5 community cards')
        return v

    @property
    def primary_villain(self) -> Optional[Villain]:
        return self.villains[0] if self.villains else None

    @classmethod
    def from_hand_state(cls, hand_state: HandState, hero_id: Optional[str] = None,
                        to_call_bb: float = 0.0, stack_bb: float = 100.0) -> 'GameState':
        """
        Project tracker state into evaluator input.

        Args:
            hand_state: Current tracker state for the session
            hero_id: Hero player id, excluded from villains. Defaults to
                hand_state.hero_id, then to the player seated at hero_position.
            to_call_bb: Amount hero faces
            stack_bb: Hero stack

        Returns:
            GameState for the current betting street
        """
        hero_id = hero_id or hand_state.hero_id or _hero_by_seat(hand_state)
        if not hero_id and hand_state.players:
            logger.warning(f"No hero identified in session {hand_state.session_id}, "
                           f"every seated player is treated as a villain")
        board = hand_state.board[:5]

        street = hand_state.street
        if street not in BETTING_STREETS:
            street = _street_for_board_length(len(board))

        villains = [
            Villain(player_id=p.id, position=p.position, stack_bb=p.stack_bb)
            for p in hand_state.players
            if p.active and p.id and p.id != hero_id
        ]

        names = {p.id: p.name for p in hand_state.players if p.name}
        history = [a.to_token(names) for a in hand_state.actions.get(street, [])]

        return cls(
            street=street,
            hero_position=hand_state.hero_position or '',
            hero_cards=hand_state.hero_cards[:2],
            board=board,
            pot_bb=hand_state.pot_bb,
            to_call_bb=to_call_bb,
            stack_bb=stack_bb,
            villains=villains,
            action_history=history,
        )

    class Config:
        validate_assignment = True
        extra = "forbid"


def _street_for_board_length(count: int) -> str:
    if count >= 5:
        return 'RIVER'
    if count == 4:
        return 'TURN'
    if count == 3:
        return 'FLOP'
    return 'PREFLOP'


def _hero_by_seat(hand_state: HandState) -> Optional[str]:
    seat = (hand_state.hero_position or '').strip().lower()
    if not seat:
        return None
    return next((p.id for p in hand_state.players if p.id and p.position.strip().lower() == seat), None)
