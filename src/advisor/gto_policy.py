#!/usr/bin/env python3
"""
GTO policy evaluator: static ranges preflop, strength ladder postflop.

evaluate() is a pure function of the GameState. No persistence, no
randomness: identical states always produce identical results.

Preflop:
    Facing a raise: 3-bet range -> RAISE 3x, calling range -> CALL, else FOLD.
    Unopened: opening range -> RAISE (2.5x from CO/BTN, 3x elsewhere), else FOLD.

Postflop, facing no bet:
    strength >= 0.70 -> BET (100% pot if SPR < 3, else 67% pot)
    strength >= 0.55 -> BET 50% pot
    strength >= 0.38 on a dry (empty) board -> BET 33% pot
    otherwise CHECK

Postflop, facing a bet (pot odds = to_call / (pot + to_call)):
    strength >= 0.72 -> RAISE 2.5x
    strength > pot odds + 0.08 -> CALL
    strength < pot odds - 0.05 -> FOLD
    otherwise CALL (borderline)
"""

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from src.advisor.hand_strength import HAND_STRENGTH_TIERS, board_texture, classify_hand
from src.advisor.range_charts import GTOChartLoader, canonical_hand
from src.models.decision import PolicyResult
from src.models.game_state import GameState
from src.tracker.position_calculator import PositionCalculator

logger = logging.getLogger(__name__)

RAISE_MARKERS = ('raise', '3-bet', '3bet')

STRONG_VALUE = 0.70
GOOD_EQUITY = 0.55
SMALL_BET = 0.38
RAISE_FOR_VALUE = 0.72
CALL_MARGIN = 0.08
FOLD_MARGIN = 0.05
LOW_SPR = 3.0


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


def is_raise_token(token: str) -> bool:
    """
    Whether an action-history token records a raise.

    Tokens read '<player> <ACTION> [amount]'; the leading player name is not
    searched, so a name like 'RaiseMaster' never counts as a raise. A bare
    action ('3bet') is read as the action itself.
    """
    words = token.lower().split()
    if len(words) > 1 and words[0] not in RAISE_MARKERS:
        words = words[1:]
    return any(marker in word for word in words for marker in RAISE_MARKERS)


@dataclass(frozen=True)
class PostflopSpot:
    """Derived postflop features shared by the GTO and exploit policies."""
    texture: str
    tier: str
    strength: float
    spr: float
    pot_odds: float


class GTOPolicy:
    """Baseline strategy from static ranges and the hand-strength ladder."""

    def __init__(self, charts: Optional[GTOChartLoader] = None):
        """
        Initialize the policy.

        Args:
            charts: Range charts. Loaded from Settings if None.
        """
        self.charts = charts or GTOChartLoader()
        logger.info("GTOPolicy initialized")

    def evaluate(self, state: GameState) -> PolicyResult:
        """
        Baseline recommendation for a decision point.

        Args:
            state: Decision-time game state

        Returns:
            PolicyResult with action, optional sizing and reasoning
        """
        if state.street == 'PREFLOP':
            return self._preflop(state)
        return self._postflop(state)

    def preflop_context(self, state: GameState) -> Tuple[str, str, bool]:
        """
        Returns:
            (normalized position, canonical hand, whether a raise is already in)
        """
        position = PositionCalculator.normalize(state.hero_position)
        hand = canonical_hand(state.hero_cards)
        facing_raise = any(is_raise_token(token) for token in state.action_history)
        return position, hand, facing_raise

    def analyze(self, state: GameState) -> PostflopSpot:
        """Texture, ladder tier, strength, stack-to-pot ratio and pot odds."""
        tier = classify_hand(state.hero_cards, state.board)
        pot_odds = state.to_call_bb / (state.pot_bb + state.to_call_bb) if state.to_call_bb > 0 else 0.0
        return PostflopSpot(
            texture=board_texture(state.board),
            tier=tier,
            strength=HAND_STRENGTH_TIERS[tier],
            spr=state.stack_bb / max(state.pot_bb, 1.0),
            pot_odds=pot_odds,
        )

    def _preflop(self, state: GameState) -> PolicyResult:
        position, hand, facing_raise = self.preflop_context(state)

        if facing_raise:
            if self.charts.should_3bet(position, hand):
                return PolicyResult(action='RAISE', sizing='3x',
                                    reasoning=f"{hand} is in GTO 3-bet range from {position}")
            if self.charts.should_call(position, hand):
                return PolicyResult(action='CALL',
                                    reasoning=f"{hand} is in GTO calling range vs raise from {position}")
            return PolicyResult(action='FOLD',
                                reasoning=f"{hand} is outside GTO defend range from {position} vs a raise")

        if self.charts.should_open(position, hand):
            sizing = '2.5x' if PositionCalculator.is_late(position) else '3x'
            return PolicyResult(action='RAISE', sizing=sizing,
                                reasoning=f"{hand} is in GTO opening range from {position}")

        return PolicyResult(action='FOLD', reasoning=f"{hand} is outside GTO opening range from {position}")

    def _postflop(self, state: GameState) -> PolicyResult:
        spot = self.analyze(state)
        strength, texture = spot.strength, spot.texture

        if state.to_call_bb <= 0:
            if strength >= STRONG_VALUE:
                sizing = '100% pot' if spot.spr < LOW_SPR else '67% pot'
                return PolicyResult(action='BET', sizing=sizing,
                                    reasoning=f"GTO value bet {sizing}: strong hand ({_pct(strength)}) "
                                              f"on {texture} board")
            if strength >= GOOD_EQUITY:
                return PolicyResult(action='BET', sizing='50% pot',
                                    reasoning=f"GTO standard bet: good equity ({_pct(strength)}) on {texture} board")
            if strength >= SMALL_BET and not state.board:
                return PolicyResult(action='BET', sizing='33% pot',
                                    reasoning="GTO small bet: dry board, balanced range bets small")
            return PolicyResult(action='CHECK',
                                reasoning=f"GTO check: medium/weak equity ({_pct(strength)}) on {texture} board, "
                                          f"protect checking range")

        if strength >= RAISE_FOR_VALUE:
            return PolicyResult(action='RAISE', sizing='2.5x',
                                reasoning=f"GTO raise: strong hand ({_pct(strength)}), build pot and deny equity")
        if strength > spot.pot_odds + CALL_MARGIN:
            return PolicyResult(action='CALL',
                                reasoning=f"GTO call: equity {_pct(strength)} exceeds pot odds {_pct(spot.pot_odds)}")
        if strength < spot.pot_odds - FOLD_MARGIN:
            return PolicyResult(action='FOLD',
                                reasoning=f"GTO fold: equity {_pct(strength)} below pot odds {_pct(spot.pot_odds)}")
        return PolicyResult(action='CALL',
                            reasoning=f"GTO borderline call: equity {_pct(strength)} close to pot odds "
                                      f"{_pct(spot.pot_odds)}")
