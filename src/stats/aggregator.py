#!/usr/bin/env python3
"""
Statistics aggregator turning observed actions into counter increments.

The update rules are the statistical contract the classifier and the
exploit policy rely on:

- VPIP: on PREFLOP, CALL/RAISE/BET count numerator and denominator,
  FOLD/CHECK count the denominator only.
- PFR: on PREFLOP, RAISE/BET count numerator and denominator, any other
  preflop action counts the denominator only.
- Aggression: BET/RAISE count a bet and CALL counts a call on every street.
- Fold to c-bet (flop only): FOLD counts numerator and denominator,
  CALL/RAISE count the denominator only.
- Went to showdown: the synthetic SHOWDOWN action counts both.

Fold to 3-bet is never derived from these rules; a data source that can
tell when a player faces a 3-bet reports it through
observe_facing_three_bet().

Usage:
    from src.stats.aggregator import StatsAggregator

    aggregator = StatsAggregator(storage)
    aggregator.register_player(player_id, "villain")
    aggregator.observe(player_id, "RAISE", "PREFLOP")
"""

import logging
from typing import Any, Dict, Optional

from src.history.player_storage import PlayerStorage
from src.models.player_stats import PlayerStats

logger = logging.getLogger(__name__)


def compute_increments(action: str, street: str) -> Dict[str, int]:
    """
    Counter increments for one observed action.

    Args:
        action: Upper-case action (FOLD, CHECK, CALL, BET, RAISE, SHOWDOWN)
        street: Street the action was taken on

    Returns:
        Counter name -> increment; empty when nothing is affected
    """
    increments: Dict[str, int] = {}

    def bump(name: str) -> None:
        increments[name] = increments.get(name, 0) + 1

    if street == 'PREFLOP':
        if action in ('CALL', 'RAISE', 'BET'):
            bump('vpip_num')
            bump('vpip_denom')
        elif action in ('FOLD', 'CHECK'):
            bump('vpip_denom')

        if action in ('RAISE', 'BET'):
            bump('pfr_num')
        bump('pfr_denom')

    if action in ('BET', 'RAISE'):
        bump('af_bets')
    elif action == 'CALL':
        bump('af_calls')

    if street == 'FLOP':
        if action == 'FOLD':
            bump('cbet_fold_num')
            bump('cbet_fold_denom')
        elif action in ('CALL', 'RAISE'):
            bump('cbet_fold_denom')

    if action == 'SHOWDOWN':
        bump('wtsd_num')
        bump('wtsd_denom')

    return increments


def _street_of(street_context: Any) -> str:
    """Accept either a street name or anything carrying a .street (HandState, GameState)."""
    street = getattr(street_context, 'street', street_context)
    return str(street or '').upper()


class StatsAggregator:
    """Applies the counter update rules to stored or in-memory PlayerStats."""

    def __init__(self, storage: Optional[PlayerStorage] = None):
        """
        Initialize the aggregator.

        Args:
            storage: Player persistence. Without it only apply() is usable.
        """
        self.storage = storage
        logger.info("StatsAggregator initialized")

    @staticmethod
    def apply(stats: PlayerStats, action: str, street: Any) -> PlayerStats:
        """
        Update an in-memory PlayerStats in place.

        Returns:
            The same stats object, for chaining
        """
        increments = compute_increments(str(action or '').upper(), _street_of(street))
        for name, amount in increments.items():
            setattr(stats, name, getattr(stats, name) + amount)
        return stats

    def register_player(self, player_id: str, name: str = '', count_hand: bool = True) -> bool:
        """Create the player's stats row; the only path that makes a player observable."""
        if not player_id:
            return False
        return self._require_storage().upsert_player(player_id, name, count_hand=count_hand)

    def observe(self, player_id: str, action: str, street_context: Any) -> None:
        """
        Record one action for a registered player.

        Observing an unregistered player is a no-op.

        Args:
            player_id: Acting player
            action: Action string as reported
            street_context: Street name, or a state object with a street
        """
        storage = self._require_storage()
        if not player_id or storage.get_stats(player_id) is None:
            logger.debug(f"Ignoring action for unregistered player {str(player_id)[:8]!r}")
            return

        street = _street_of(street_context)
        increments = compute_increments(str(action or '').upper(), street)
        if not increments:
            return

        storage.increment_stats(player_id, increments)
        logger.debug(f"Stats for {player_id[:8]} on {street}: {increments}")

    def observe_facing_three_bet(self, player_id: str, action: str) -> None:
        """
        Record a player's response to a 3-bet.

        FOLD counts numerator and denominator; any other response counts the
        denominator only.
        """
        storage = self._require_storage()
        if not player_id or storage.get_stats(player_id) is None:
            logger.debug(f"Ignoring 3-bet response for unregistered player {str(player_id)[:8]!r}")
            return

        increments = {'fold_to_3bet_denom': 1}
        if str(action or '').upper() == 'FOLD':
            increments['fold_to_3bet_num'] = 1
        storage.increment_stats(player_id, increments)

    def _require_storage(self) -> PlayerStorage:
        if self.storage is None:
            raise RuntimeError("StatsAggregator has no player storage")
        return self.storage
