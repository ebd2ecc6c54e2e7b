#!/usr/bin/env python3
"""
HandState model for the point-in-time state of one session's current hand.

The tracker owns and mutates HandState; everything downstream reads it.
Street advances monotonically within a hand:
WAITING -> PREFLOP -> FLOP -> TURN -> RIVER -> SHOWDOWN -> HAND_OVER.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from src.models.card import Card, parse_cards
from src.models.player_stats import hash_player_id

STREETS = ['WAITING', 'PREFLOP', 'FLOP', 'TURN', 'RIVER', 'SHOWDOWN', 'HAND_OVER']
BETTING_STREETS = ['PREFLOP', 'FLOP', 'TURN', 'RIVER']
VALID_ACTIONS = ['FOLD', 'CHECK', 'CALL', 'BET', 'RAISE']
MONEY_ACTIONS = ['CALL', 'BET', 'RAISE']


def coerce_float(value: Any, default: float = 0.0) -> float:
    """Scraped numbers may be missing, None or garbage; fall back to default."""
    if isinstance(value, bool):
        return default
    try:
        result = float(value)
    except (TypeError, ValueError):
        return default
    return result if result == result else default


def coerce_str(value: Any, default: str = '') -> str:
    if value is None:
        return default
    return str(value).strip()


class SeatedPlayer(BaseModel):
    """A player seated in the current hand."""
    id: str = Field('', description="Stable player identifier (hash of display name)")
    name: str = Field('', description="Display name as scraped")
    position: str = Field('', description="Seat label as reported by the data source")
    stack_bb: float = Field(0.0, ge=0, description="Stack in big blinds")
    active: bool = Field(True, description="Still in hand (not folded)")

    @model_validator(mode='before')
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if isinstance(data, BaseModel):
            data = data.model_dump()
        if not isinstance(data, dict):
            return {}
        name = coerce_str(data.get('name'))
        player_id = coerce_str(data.get('id') or data.get('player_id'))
        if not player_id and name:
            player_id = hash_player_id(name)
        return {
            'id': player_id,
            'name': name,
            'position': coerce_str(data.get('position')),
            'stack_bb': max(0.0, coerce_float(data.get('stack_bb'))),
            'active': bool(data.get('active', True)),
        }

    class Config:
        extra = "ignore"


class PlayerAction(BaseModel):
    """Single action recorded on a street."""
    player_id: str = Field('', description="Acting player id")
    action: str = Field('', description="Action as reported (upper-cased)")
    amount_bb: float = Field(0.0, ge=0, description="Chips added to the pot in big blinds")

    def to_token(self, names: Optional[Dict[str, str]] = None) -> str:
        """Free-text token as used in action history ('villain RAISE 3')."""
        who = (names or {}).get(self.player_id) or self.player_id or 'unknown'
        # One word per name so the action is always the second word
        who = '_'.join(who.split())
        if self.amount_bb:
            return f"{who} {self.action} {self.amount_bb:g}"
        return f"{who} {self.action}"

    class Config:
        extra = "forbid"


def empty_action_lists() -> Dict[str, List[PlayerAction]]:
    return {street: [] for street in STREETS}


class HandState(BaseModel):
    """Mutable snapshot of one session's current hand."""
    session_id: str = Field(..., description="Owning session")
    hand_id: Optional[str] = Field(None, description="Hand identifier from HAND_START")
    street: str = Field('WAITING', description="Current street")
    hero_position: Optional[str] = Field(None, description="Hero seat label")
    hero_id: Optional[str] = Field(None, description="Hero player id when known")
    hero_cards: List[Card] = Field(default_factory=list, description="Hero hole cards")
    board: List[Card] = Field(default_factory=list, description="Community cards so far")
    pot_bb: float = Field(0.0, ge=0, description="Pot size in big blinds")
    players: List[SeatedPlayer] = Field(default_factory=list, description="Seated players")
    actions: Dict[str, List[PlayerAction]] = Field(default_factory=empty_action_lists,
                                                   description="Actions keyed by street")
    events: List[Any] = Field(default_factory=list, description="Events applied this hand")

    @field_validator('street')
    @classmethod
    def validate_street(cls, v):
        if v not in STREETS:
            raise ValueError(f'Invalid street: {v}. Must be one of {STREETS}')
        return v

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

    def get_player(self, player_id: str) -> Optional[SeatedPlayer]:
        """Get seated player by id."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def active_players(self) -> List[SeatedPlayer]:
        return [p for p in self.players if p.active]

    def current_actions(self) -> List[PlayerAction]:
        """Actions recorded on the current street."""
        return self.actions.setdefault(self.street, [])

    class Config:
        validate_assignment = True
        extra = "forbid"
