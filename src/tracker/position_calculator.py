#!/usr/bin/env python3
"""
Position calculator for normalizing seat labels.

Scraped seat labels come in many shapes ("Button", "dealer", "big_blind",
"utg_1", "Seat3"). The range tables are keyed by the seven 6-max positions
UTG/MP/HJ/CO/BTN/SB/BB, so every label is mapped onto one of those.
Pure calculation module.

Usage:
    from src.tracker.position_calculator import PositionCalculator

    PositionCalculator.normalize("big blind")   # 'BB'
    PositionCalculator.normalize("UTG+1")       # 'MP'
"""

import logging
import re
from typing import Optional

logger = logging.getLogger(__name__)


class PositionCalculator:
    """Map raw seat labels onto the canonical 6-max positions."""

    POSITIONS = ['UTG', 'MP', 'HJ', 'CO', 'BTN', 'SB', 'BB']

    # Positions without a seat label fall back to the button
    DEFAULT_POSITION = 'BTN'

    ALIASES = {
        'button': 'BTN', 'btn': 'BTN', 'd': 'BTN', 'dealer': 'BTN',
        'cutoff': 'CO', 'co': 'CO',
        'hijack': 'HJ', 'hj': 'HJ',
        'sb': 'SB', 'small blind': 'SB', 'small_blind': 'SB',
        'bb': 'BB', 'big blind': 'BB', 'big_blind': 'BB',
        'utg': 'UTG', 'under the gun': 'UTG', 'ep': 'UTG',
        'utg+1': 'MP', 'utg+2': 'MP', 'mp': 'MP', 'mp+1': 'HJ', 'middle position': 'MP',
        'lj': 'MP', 'lojack': 'MP',
        'unknown': 'BTN',
    }

    @classmethod
    def normalize(cls, label: Optional[str]) -> str:
        """
        Normalize a seat label.

        Args:
            label: Raw label from the data source

        Returns:
            One of POSITIONS
        """
        if not label:
            return cls.DEFAULT_POSITION

        cleaned = label.strip().lower()
        cleaned = re.sub(r'_\d+$', '', cleaned)
        if re.fullmatch(r'seat\s*\d*', cleaned):
            return cls.DEFAULT_POSITION

        position = cls.ALIASES.get(cleaned, cleaned.upper())
        if position not in cls.POSITIONS:
            logger.debug(f"Unrecognized position label {label!r}, using {cls.DEFAULT_POSITION}")
            return cls.DEFAULT_POSITION

        return position

    @classmethod
    def is_late(cls, position: str) -> bool:
        """Cutoff and button open smaller."""
        return position in ('CO', 'BTN')
