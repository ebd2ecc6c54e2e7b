#!/usr/bin/env python3
"""
Card model for representing playing cards with validation.

Represents a single playing card with rank and suit validation. Cards arrive
from the data source as short strings ("Kd", "10h", "as") and are parsed
leniently at the boundary; anything unreadable is dropped, never raised.
"""

import logging
from typing import Any, Iterable, List, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

logger = logging.getLogger(__name__)

RANKS = '23456789TJQKA'
SUIT_NAMES = {'h': 'hearts', 'd': 'diamonds', 'c': 'clubs', 's': 'spades'}
SUIT_SYMBOLS = {name: symbol for symbol, name in SUIT_NAMES.items()}


class Card(BaseModel):
    """Represents a playing card with rank and suit."""
    rank: str = Field(..., description="Card rank (A, K, Q, J, T, 9-2)")
    suit: str = Field(..., description="Card suit (hearts, diamonds, clubs, spades)")

    @model_validator(mode='before')
    @classmethod
    def parse_short_notation(cls, data: Any) -> Any:
        if isinstance(data, str):
            text = data.strip()
            if len(text) < 2:
                raise ValueError(f'Invalid card: {data!r}')
            rank, suit = text[:-1].upper(), text[-1].lower()
            if rank == '10':
                rank = 'T'
            return {'rank': rank, 'suit': SUIT_NAMES.get(suit, suit)}
        return data

    @field_validator('rank')
    @classmethod
    def validate_rank(cls, v):
        if len(v) != 1 or v not in RANKS:
            raise ValueError(f'Invalid rank: {v}. Must be one of {list(RANKS)}')
        return v

    @field_validator('suit')
    @classmethod
    def validate_suit(cls, v):
        if v not in SUIT_SYMBOLS:
            raise ValueError(f'Invalid suit: {v}. Must be one of {list(SUIT_SYMBOLS)}')
        return v

    @property
    def rank_index(self) -> int:
        """Rank as 0 (deuce) .. 12 (ace)."""
        return RANKS.index(self.rank)

    @property
    def suit_symbol(self) -> str:
        return SUIT_SYMBOLS[self.suit]

    @classmethod
    def parse(cls, text: str) -> Optional['Card']:
        """Parse short notation, returning None instead of raising."""
        try:
            return cls.model_validate(text)
        except ValueError:
            logger.debug(f"Dropping unparsable card: {text!r}")
            return None

    def __str__(self) -> str:
        """String representation (e.g., 'Ah' for Ace of hearts)."""
        return f"{self.rank}{self.suit_symbol}"

    class Config:
        frozen = True
        extra = "forbid"


def parse_cards(values: Optional[Iterable[Any]]) -> List[Card]:
    """Parse a list of card strings or Card objects, dropping invalid entries."""
    if not values or isinstance(values, (str, bytes)):
        return []

    cards = []
    for value in values:
        if isinstance(value, Card):
            cards.append(value)
        elif isinstance(value, (str, dict)):
            card = Card.parse(value) if isinstance(value, str) else _card_from_dict(value)
            if card is not None:
                cards.append(card)
    return cards


def _card_from_dict(value: dict) -> Optional[Card]:
    try:
        return Card.model_validate(value)
    except ValueError:
        logger.debug(f"Dropping unparsable card: {value!r}")
        return None
