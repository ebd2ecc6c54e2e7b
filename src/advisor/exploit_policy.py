#!/usr/bin/env python3
"""
Exploit policy evaluator: deviations from the GTO baseline against a read.

Each adjustment starts from the GTO result for the same state and moves it
only when the primary villain's classified tag or a specific frequency
justifies it. With no stats, or fewer than the classifier's minimum sample,
the baseline is returned unchanged.

Preflop, facing a raise:
    MANIAC: 3-bet hands GTO flats, defend opening-range hands GTO folds.
    NIT: fold flats that are not in the 3-bet range.
    Fold to 3-bet above 60%: 3-bet hands GTO flats.
Preflop, unopened:
    FISH: open the button range from any seat to isolate.
    NIT in the blinds: steal the button range from CO/BTN/SB.
Postflop, no bet to face:
    MANIAC: check strong hands to induce.
    NIT or fold to c-bet >= 60%: bet 33% pot where GTO checks.
    FISH or fold to c-bet < 35%: bet 75% pot for value where GTO bets.
Postflop, facing a bet:
    NIT or aggression below 1.0: fold marginal calls.
    MANIAC or aggression above 3.0: bluff-catch close folds.
    FISH: raise good hands for value instead of calling.
"""

import logging
from typing import Optional

from src.advisor.gto_policy import GTOPolicy, PostflopSpot
from src.models.decision import PolicyResult
from src.models.game_state import GameState
from src.models.player_stats import PlayerStats
from src.stats.classifier import MIN_SAMPLE, classify

logger = logging.getLogger(__name__)

HIGH_FOLD_TO_3BET = 0.60
HIGH_FOLD_TO_CBET = 0.60
LOW_FOLD_TO_CBET = 0.35
PASSIVE_AF = 1.0
AGGRESSIVE_AF = 3.0
MARGINAL_CALL = 0.62
INDUCE_STRENGTH = 0.55
BLUFF_CATCH_MARGIN = 0.10
STEAL_POSITIONS = ('CO', 'BTN', 'SB')


def _pct(value: float) -> str:
    return f"{value * 100:.0f}%"


class ExploitPolicy:
    """Adjusts the GTO baseline using the primary villain's tendencies."""

    def __init__(self, gto_policy: Optional[GTOPolicy] = None):
        """
        Initialize the policy.

        Args:
            gto_policy: Baseline policy; its range charts are reused here
        """
        self.gto_policy = gto_policy or GTOPolicy()
        logger.info("ExploitPolicy initialized")

    def evaluate(self, state: GameState, villain_stats: Optional[PlayerStats] = None,
                 baseline: Optional[PolicyResult] = None) -> PolicyResult:
        """
        Exploitative recommendation for a decision point.

        Args:
            state: Decision-time game state
            villain_stats: Counters of the primary villain, if known
            baseline: GTO result for the same state; computed if None

        Returns:
            PolicyResult; equal in action and sizing to the baseline when
            there is nothing reliable to exploit
        """
        if baseline is None:
            baseline = self.gto_policy.evaluate(state)

        sample_size = villain_stats.sample_size if villain_stats is not None else 0
        if villain_stats is None or sample_size < MIN_SAMPLE:
            return PolicyResult(action=baseline.action, sizing=baseline.sizing,
                                reasoning=f"Insufficient villain data ({sample_size} hands), "
                                          f"following GTO: {baseline.reasoning}")

        tag = classify(villain_stats)
        if state.street == 'PREFLOP':
            adjusted = self._preflop(state, villain_stats, tag, baseline)
        else:
            adjusted = self._postflop(state, villain_stats, tag, baseline)

        if adjusted is not None:
            logger.debug(f"Exploit vs {tag}: {baseline.label} -> {adjusted.label}")
            return adjusted

        return PolicyResult(action=baseline.action, sizing=baseline.sizing,
                            reasoning=f"No exploitable edge vs {tag}, following GTO: {baseline.reasoning}")

    def _preflop(self, state: GameState, stats: PlayerStats, tag: str,
                 baseline: PolicyResult) -> Optional[PolicyResult]:
        position, hand, facing_raise = self.gto_policy.preflop_context(state)
        charts = self.gto_policy.charts

        if facing_raise:
            if tag == 'MANIAC':
                if baseline.action == 'CALL':
                    return PolicyResult(action='RAISE', sizing='3x',
                                        reasoning=f"Exploit: 3-bet {hand} wider vs maniac's loose opens")
                if baseline.action == 'FOLD' and charts.should_open(position, hand):
                    return PolicyResult(action='CALL',
                                        reasoning=f"Exploit: defend {hand} vs maniac's wide raising range")

            if tag == 'NIT' and baseline.action == 'CALL' and not charts.should_3bet(position, hand):
                return PolicyResult(action='FOLD',
                                    reasoning=f"Exploit: nit's raise is strong, fold marginal {hand}")

            fold_to_3bet = stats.fold_to_3bet
            if fold_to_3bet is not None and fold_to_3bet > HIGH_FOLD_TO_3BET and baseline.action == 'CALL':
                return PolicyResult(action='RAISE', sizing='3x',
                                    reasoning=f"Exploit: villain folds to 3-bets {_pct(fold_to_3bet)}, "
                                              f"3-bet {hand} instead of flatting")
            return None

        if baseline.action == 'FOLD' and charts.should_open('BTN', hand):
            if tag == 'FISH':
                return PolicyResult(action='RAISE', sizing='3x',
                                    reasoning=f"Exploit: open {hand} to isolate the loose-passive player")
            if tag == 'NIT' and position in STEAL_POSITIONS:
                return PolicyResult(action='RAISE', sizing='2.5x',
                                    reasoning=f"Exploit: steal with {hand}, nit over-folds the blinds")
        return None

    def _postflop(self, state: GameState, stats: PlayerStats, tag: str,
                  baseline: PolicyResult) -> Optional[PolicyResult]:
        spot: PostflopSpot = self.gto_policy.analyze(state)
        fold_to_cbet = stats.fold_to_cbet
        aggression = stats.aggression_factor

        if state.to_call_bb <= 0:
            if tag == 'MANIAC' and baseline.action == 'BET' and spot.strength >= INDUCE_STRENGTH:
                return PolicyResult(action='CHECK',
                                    reasoning=f"Exploit: check {_pct(spot.strength)} equity to induce "
                                              f"bluffs from the maniac")

            folds_often = fold_to_cbet is not None and fold_to_cbet >= HIGH_FOLD_TO_CBET
            if baseline.action == 'CHECK' and (tag == 'NIT' or folds_often):
                reason = f"folds to c-bets {_pct(fold_to_cbet)}" if folds_often else "nit gives up too often"
                return PolicyResult(action='BET', sizing='33% pot',
                                    reasoning=f"Exploit: small bet on {spot.texture} board, villain {reason}")

            calls_often = fold_to_cbet is not None and fold_to_cbet < LOW_FOLD_TO_CBET
            if baseline.action == 'BET' and (tag == 'FISH' or calls_often):
                return PolicyResult(action='BET', sizing='75% pot',
                                    reasoning=f"Exploit: bigger value bet ({_pct(spot.strength)}), "
                                              f"villain calls too wide")
            return None

        passive = aggression is not None and aggression < PASSIVE_AF
        if baseline.action == 'CALL' and spot.strength < MARGINAL_CALL and (tag == 'NIT' or passive):
            return PolicyResult(action='FOLD',
                                reasoning=f"Exploit: passive villain's bet is value-heavy, fold "
                                          f"{_pct(spot.strength)} equity")

        aggressive = aggression is not None and aggression > AGGRESSIVE_AF
        if (baseline.action == 'FOLD' and (tag == 'MANIAC' or aggressive)
                and spot.strength >= spot.pot_odds - BLUFF_CATCH_MARGIN):
            return PolicyResult(action='CALL',
                                reasoning=f"Exploit: bluff-catch vs aggressive villain, equity "
                                          f"{_pct(spot.strength)} vs pot odds {_pct(spot.pot_odds)}")

        if baseline.action == 'CALL' and tag == 'FISH' and spot.strength >= MARGINAL_CALL:
            return PolicyResult(action='RAISE', sizing='2.5x',
                                reasoning=f"Exploit: raise {_pct(spot.strength)} for value, fish pays off")
        return None
