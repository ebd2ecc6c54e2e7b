#!/usr/bin/env python3
"""
GameEvent models: one immutable variant per event kind.

Events arrive from an unreliable scraper as loose dicts
({"type": ..., "timestamp": ..., "payload": {...}}). decode_event() validates
them into the tagged union at the boundary. Missing or invalid payload fields
default to empty/zero; unknown kinds decode to None and are ignored.

Usage:
    from src.models.events import decode_event

    event = decode_event({"type": "CARD_DEAL", "timestamp": 1,
                          "payload": {"target": "board", "cards": ["Kd", "Kc", "8d"]}})
    if event:
        print(event.kind, event.payload.cards)
"""

import logging
from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import (BaseModel, Field, TypeAdapter, ValidationError, field_serializer,
                      field_validator, model_validator)

from src.models.card import Card, parse_cards
from src.models.hand_state import SeatedPlayer, coerce_float, coerce_str

logger = logging.getLogger(__name__)

EVENT_KINDS = ['CARD_DEAL', 'ACTION', 'PLAYER_JOIN', 'HAND_START', 'SHOWDOWN', 'POT_WIN']


def _player_list(value: Any) -> List[Any]:
    if not isinstance(value, list):
        return []
    return [p for p in value if isinstance(p, (dict, SeatedPlayer))]


class HandStartPayload(BaseModel):
    """Payload of HAND_START: new hand id, blinds and seated players."""
    hand_id: Optional[str] = None
    small_blind_bb: float = 0.5
    big_blind_bb: float = 1.0
    hero_position: Optional[str] = None
    hero_id: Optional[str] = None
    players: List[SeatedPlayer] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        return {
            'hand_id': coerce_str(data.get('hand_id')) or None,
            'small_blind_bb': coerce_float(data.get('small_blind_bb'), 0.5),
            'big_blind_bb': coerce_float(data.get('big_blind_bb'), 1.0),
            'hero_position': coerce_str(data.get('hero_position')) or None,
            'hero_id': coerce_str(data.get('hero_id')) or None,
            'players': _player_list(data.get('players')),
        }

    class Config:
        frozen = True


class CardDealPayload(BaseModel):
    """Payload of CARD_DEAL: cards for the hero or the board."""
    target: str = ''
    cards: List[Card] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        return {
            'target': coerce_str(data.get('target')).lower(),
            'cards': parse_cards(data.get('cards')),
        }

    @field_serializer('cards')
    def serialize_cards(self, cards: List[Card]) -> List[str]:
        return [str(card) for card in cards]

    class Config:
        frozen = True


class ActionPayload(BaseModel):
    """Payload of ACTION: one player's decision."""
    player_id: str = ''
    action: str = ''
    amount_bb: float = 0.0

    @model_validator(mode='before')
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        return {
            'player_id': coerce_str(data.get('player_id')),
            'action': coerce_str(data.get('action')).upper(),
            'amount_bb': max(0.0, coerce_float(data.get('amount_bb'))),
        }

    class Config:
        frozen = True


class PlayerJoinPayload(BaseModel):
    """Payload of PLAYER_JOIN: players to merge into the roster."""
    players: List[SeatedPlayer] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        return {'players': _player_list(data.get('players'))}

    class Config:
        frozen = True


class ShowdownPayload(BaseModel):
    """Payload of SHOWDOWN: ids of players who reached showdown."""
    player_ids: List[str] = Field(default_factory=list)

    @model_validator(mode='before')
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        ids = []
        for entry in data.get('players') or data.get('player_ids') or []:
            if isinstance(entry, dict):
                entry = entry.get('id') or entry.get('player_id')
            player_id = coerce_str(entry)
            if player_id:
                ids.append(player_id)
        return {'player_ids': ids}

    class Config:
        frozen = True


class PotWinPayload(BaseModel):
    """Payload of POT_WIN: who took the pot."""
    winner_id: Optional[str] = None
    amount_bb: float = 0.0

    @model_validator(mode='before')
    @classmethod
    def fill_defaults(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return {}
        return {
            'winner_id': coerce_str(data.get('winner_id') or data.get('player_id')) or None,
            'amount_bb': max(0.0, coerce_float(data.get('amount_bb'))),
        }

    class Config:
        frozen = True


class _EventBase(BaseModel):
    timestamp: float = Field(0.0, description="Source timestamp (ms since epoch)")

    @field_validator('timestamp', mode='before')
    @classmethod
    def coerce_timestamp(cls, v):
        return coerce_float(v)

    class Config:
        frozen = True
        extra = "ignore"


class HandStartEvent(_EventBase):
    kind: Literal['HAND_START'] = 'HAND_START'
    payload: HandStartPayload = Field(default_factory=HandStartPayload)


class CardDealEvent(_EventBase):
    kind: Literal['CARD_DEAL'] = 'CARD_DEAL'
    payload: CardDealPayload = Field(default_factory=CardDealPayload)


class ActionEvent(_EventBase):
    kind: Literal['ACTION'] = 'ACTION'
    payload: ActionPayload = Field(default_factory=ActionPayload)


class PlayerJoinEvent(_EventBase):
    kind: Literal['PLAYER_JOIN'] = 'PLAYER_JOIN'
    payload: PlayerJoinPayload = Field(default_factory=PlayerJoinPayload)


class ShowdownEvent(_EventBase):
    kind: Literal['SHOWDOWN'] = 'SHOWDOWN'
    payload: ShowdownPayload = Field(default_factory=ShowdownPayload)


class PotWinEvent(_EventBase):
    kind: Literal['POT_WIN'] = 'POT_WIN'
    payload: PotWinPayload = Field(default_factory=PotWinPayload)


GameEvent = Annotated[
    Union[HandStartEvent, CardDealEvent, ActionEvent, PlayerJoinEvent, ShowdownEvent, PotWinEvent],
    Field(discriminator='kind'),
]

_event_adapter = TypeAdapter(GameEvent)

EVENT_TYPES = (HandStartEvent, CardDealEvent, ActionEvent, PlayerJoinEvent, ShowdownEvent, PotWinEvent)


def decode_event(raw: Any) -> Optional[GameEvent]:
    """
    Decode a raw event dict into its typed variant.

    Args:
        raw: Dict with "type" (or "kind"), "timestamp" and "payload", or an
            already decoded event

    Returns:
        Typed event, or None when the kind is unknown or the shape is unusable
    """
    if isinstance(raw, EVENT_TYPES):
        return raw

    if not isinstance(raw, dict):
        logger.warning(f"Ignoring non-dict event: {type(raw).__name__}")
        return None

    kind = coerce_str(raw.get('kind') or raw.get('type')).upper()
    if kind not in EVENT_KINDS:
        logger.warning(f"Ignoring unknown event kind: {kind or '<missing>'}")
        return None

    payload = raw.get('payload')
    data = {
        'kind': kind,
        'timestamp': raw.get('timestamp'),
        'payload': payload if isinstance(payload, dict) else {},
    }

    try:
        return _event_adapter.validate_python(data)
    except ValidationError as e:
        logger.warning(f"Failed to decode {kind} event: {e}")
        return None


def encode_event(event: GameEvent) -> dict:
    """Raw dict form used by the event log."""
    return {
        'type': event.kind,
        'timestamp': event.timestamp,
        'payload': event.payload.model_dump(mode='json'),
    }
