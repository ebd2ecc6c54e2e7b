#!/usr/bin/env python3
"""
GTOChartLoader for loading and querying static preflop range charts.

Charts are precomputed tables, not solved at runtime. They are read once
from a single JSON file; when the file is missing or unreadable the built-in
default charts are used instead so the rule-based path always has ranges.

Chart layout:
    {
      "preflop": {
        "opening_ranges":  {"BTN": ["AA", "AKs", "AKo", ...], ...},
        "threebet_ranges": {...},
        "calling_ranges":  {...}
      }
    }

Hands use two-character pairs ("AA") and s/o suffixes otherwise ("AKs", "AKo").
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from src.config.settings import Settings
from src.models.card import Card

logger = logging.getLogger(__name__)

RANGE_KINDS = ['opening_ranges', 'threebet_ranges', 'calling_ranges']


def canonical_hand(cards: Sequence[Any]) -> str:
    """
    Canonical two-card descriptor, higher rank first.

    Args:
        cards: Two Card objects or card strings ("Ah", "Kd")

    Returns:
        "AA" for pairs, "AKs" suited, "AKo" offsuit, "unknown" if fewer than two cards
    """
    parsed = [c if isinstance(c, Card) else Card.parse(str(c)) for c in list(cards)[:2]]
    parsed = [c for c in parsed if c is not None]
    if len(parsed) < 2:
        return 'unknown'

    high, low = sorted(parsed, key=lambda c: c.rank_index, reverse=True)
    if high.rank == low.rank:
        return f"{high.rank}{low.rank}"
    suited = 's' if high.suit == low.suit else 'o'
    return f"{high.rank}{low.rank}{suited}"


def default_charts() -> Dict[str, Any]:
    """Built-in 6-max charts used when no chart file is available."""
    premiums = ['AA', 'KK', 'QQ', 'JJ', 'TT', 'AKs', 'AKo', 'AQs']
    broad_open = ['99', '88', '77', '66', 'AJs', 'AJo', 'ATs', 'ATo', 'KQs', 'KQo', 'AQo', 'QJs', 'QJo', 'JTs']
    mid_open = ['55', '44', '33', '22', 'A9s', 'A9o', 'A8s', 'A7s', 'A6s', 'A5s', 'A4s', 'A3s', 'A2s',
                'KJs', 'KJo', 'KTs', 'KTo', 'QTs', 'QTo', 'J9s', 'T9s', 'T8s', '98s', '97s', '87s', '76s']
    late_open = ['K9s', 'K9o', 'Q9s', 'J8s', 'T7s', '96s', '86s', '75s', '65s', '64s', '54s', '53s',
                 'K8s', 'K7s', 'K6s', 'K5s', 'K4s', 'Q8s', 'J7s', 'A5o', 'A4o', 'A3o', 'A2o']
    threebet_hands = ['AA', 'KK', 'QQ', 'JJ', 'TT', 'AKs', 'AKo', 'AQs', 'AQo', 'AJs', 'KQs']
    call_hands = ['99', '88', '77', '66', '55', '44', '33', '22',
                  'AQo', 'AJs', 'AJo', 'ATs', 'KQs', 'KQo', 'KJs', 'QJs', 'JTs', 'T9s', '98s']

    return {
        'preflop': {
            'opening_ranges': {
                'UTG': premiums + broad_open[:8],
                'MP': premiums + broad_open,
                'HJ': premiums + broad_open + mid_open[:12],
                'CO': premiums + broad_open + mid_open,
                'BTN': premiums + broad_open + mid_open + late_open,
                'SB': premiums + broad_open + mid_open + late_open[:15],
                'BB': [],
            },
            'threebet_ranges': {
                'UTG': threebet_hands[:6],
                'MP': threebet_hands[:8],
                'HJ': threebet_hands[:9],
                'CO': list(threebet_hands),
                'BTN': threebet_hands + ['A5s', 'A4s', 'A3s', 'A2s'],
                'SB': list(threebet_hands),
                'BB': threebet_hands + ['A5s', 'A4s'],
            },
            'calling_ranges': {
                'UTG': call_hands[:5],
                'MP': call_hands[:8],
                'HJ': call_hands[:12],
                'CO': list(call_hands),
                'BTN': call_hands + ['A9o', 'A8o', 'K9s', 'QTs', 'J9s', '87s', '76s'],
                'SB': list(call_hands),
                'BB': call_hands + ['A9o', 'A8o', 'K9s', 'Q9s', 'J9s', 'T8s', '97s', '86s', '75s'],
            },
        },
    }


class GTOChartLoader:
    """Load and query static preflop ranges keyed by normalized position."""

    def __init__(self, chart_path: Optional[str] = None):
        """
        Initialize GTO chart loader.

        Args:
            chart_path: Path to the chart JSON file. If None, uses Settings.
        """
        self.settings = Settings()
        self.settings.create("advisor.gto.chart_path", default="data/gto_charts.json")

        if chart_path is None:
            chart_path = self.settings.get("advisor.gto.chart_path")

        self.chart_path = Path(chart_path)
        self.charts = self._load_charts()
        self.source = 'file' if self.charts is not None else 'default'
        if self.charts is None:
            self.charts = default_charts()

        # Membership lookups happen on every decision
        self._range_sets: Dict[str, Dict[str, frozenset]] = {
            kind: {pos: frozenset(hands) for pos, hands in self.charts['preflop'].get(kind, {}).items()}
            for kind in RANGE_KINDS
        }

        logger.info(f"Initialized GTO chart loader ({self.source} charts)")

    def _load_charts(self) -> Optional[Dict[str, Any]]:
        """Read the chart file; None when missing or malformed."""
        if not self.chart_path.exists():
            logger.warning(f"GTO chart file not found: {self.chart_path}, using default charts")
            return None

        try:
            with open(self.chart_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Error loading GTO chart file {self.chart_path}: {e}")
            return None

        preflop = data.get('preflop') if isinstance(data, dict) else None
        if not isinstance(preflop, dict) or not all(isinstance(preflop.get(k), dict) for k in RANGE_KINDS):
            logger.error(f"GTO chart file {self.chart_path} is missing preflop ranges, using default charts")
            return None

        return data

    def _in_range(self, kind: str, position: str, hand: str) -> bool:
        return hand in self._range_sets[kind].get(position, frozenset())

    def should_open(self, position: str, hand: str) -> bool:
        """
        Check if a hand should be opened from a position.

        Args:
            position: Normalized position (UTG, MP, HJ, CO, BTN, SB, BB)
            hand: Canonical hand (e.g., "AKs", "99", "AKo")
        """
        return self._in_range('opening_ranges', position, hand)

    def should_3bet(self, position: str, hand: str) -> bool:
        return self._in_range('threebet_ranges', position, hand)

    def should_call(self, position: str, hand: str) -> bool:
        return self._in_range('calling_ranges', position, hand)

