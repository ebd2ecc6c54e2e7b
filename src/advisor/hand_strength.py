#!/usr/bin/env python3
"""
Heuristic hand-strength ladder and board texture.

Strength is an explainable equity proxy, not an exact equity calculation:
every hand falls into exactly one named tier and each tier has a fixed score
in [0, 1]. Treys classifies the made hand; pair quality and draws are
resolved against the board here.

Usage:
    from src.advisor.hand_strength import estimate_hand_strength, board_texture

    strength = estimate_hand_strength(["Ah", "Kc"], ["9s", "7s", "2s"])   # 0.28
    texture = board_texture(["9s", "7s", "2s"])                           # 'monotone'
"""

import logging
from collections import Counter
from typing import Any, List, Sequence

from treys import Card as TreysCard, Evaluator

from src.models.card import RANKS, Card, parse_cards

logger = logging.getLogger(__name__)

HAND_STRENGTH_TIERS = {
    'straight_flush': 0.99,
    'quads': 0.97,
    'full_house': 0.94,
    'flush': 0.88,
    'straight': 0.85,
    'trips': 0.80,
    'two_pair': 0.72,
    'two_pair_paired_board': 0.65,
    'overpair': 0.72,
    'top_pair': 0.62,
    'middle_pair': 0.52,
    'bottom_pair': 0.42,
    'board_pair': 0.30,
    'combo_draw': 0.46,
    'flush_draw': 0.38,
    'straight_draw': 0.32,
    'two_overcards': 0.28,
    'one_overcard': 0.22,
    'air': 0.15,
    'unknown': 0.40,
}

TEXTURES = ['monotone', 'two-tone', 'connected', 'rainbow']

# treys rank class names -> ladder tiers above one pair
_MADE_HAND_TIERS = {
    'Royal Flush': 'straight_flush',
    'Straight Flush': 'straight_flush',
    'Four of a Kind': 'quads',
    'Full House': 'full_house',
    'Flush': 'flush',
    'Straight': 'straight',
    'Three of a Kind': 'trips',
}

_evaluator = Evaluator()


def _to_treys(card: Card) -> int:
    return TreysCard.new(f"{card.rank}{card.suit_symbol}")


def board_texture(board: Sequence[Any]) -> str:
    """
    Classify the board.

    monotone if all one suit, two-tone if exactly two suits, connected if the
    largest gap between sorted ranks is at most 2 (three or more cards), else
    rainbow. An empty board reads as rainbow.
    """
    cards = parse_cards(board)
    if not cards:
        return 'rainbow'

    suits = {c.suit for c in cards}
    ranks = sorted(c.rank_index for c in cards)
    max_gap = max((b - a for a, b in zip(ranks, ranks[1:])), default=0)

    if len(suits) == 1:
        return 'monotone'
    if len(suits) == 2:
        return 'two-tone'
    if max_gap <= 2 and len(cards) >= 3:
        return 'connected'
    return 'rainbow'


def _longest_run(rank_indexes: List[int]) -> int:
    unique = sorted(set(rank_indexes))
    longest = run = 1 if unique else 0
    for prev, cur in zip(unique, unique[1:]):
        run = run + 1 if cur == prev + 1 else 1
        longest = max(longest, run)
    return longest


def _pair_tier(hero: List[Card], board: List[Card]) -> str:
    counts = Counter(c.rank for c in hero + board)
    paired_rank = next(rank for rank, n in counts.items() if n >= 2)
    if paired_rank not in {c.rank for c in hero}:
        return 'board_pair'

    paired_index = RANKS.index(paired_rank)
    board_ranks = sorted((c.rank_index for c in board), reverse=True)
    if paired_index > board_ranks[0]:
        return 'overpair'
    if paired_index == board_ranks[0]:
        return 'top_pair'
    if paired_index == board_ranks[1]:
        return 'middle_pair'
    return 'bottom_pair'


def _unpaired_tier(hero: List[Card], board: List[Card]) -> str:
    all_cards = hero + board
    suit_counts = Counter(c.suit for c in all_cards)
    flush_draw = any(suit_counts[c.suit] >= 4 for c in hero)
    straight_draw = _longest_run([c.rank_index for c in all_cards]) >= 4

    top_board = max(c.rank_index for c in board)
    overcards = sum(1 for c in hero if c.rank_index > top_board)

    if flush_draw and straight_draw:
        return 'combo_draw'
    if flush_draw:
        return 'flush_draw'
    if straight_draw:
        return 'straight_draw'
    if overcards >= 2:
        return 'two_overcards'
    if overcards == 1:
        return 'one_overcard'
    return 'air'


def classify_hand(hero_cards: Sequence[Any], board: Sequence[Any]) -> str:
    """
    Name the ladder tier of the hero's hand.

    Args:
        hero_cards: Hero hole cards (Card objects or strings)
        board: Community cards (Card objects or strings)

    Returns:
        A key of HAND_STRENGTH_TIERS; 'unknown' without two hole cards and
        at least three board cards
    """
    hero = parse_cards(hero_cards)[:2]
    community = parse_cards(board)[:5]
    if len(hero) < 2 or len(community) < 3:
        return 'unknown'

    if len({str(c) for c in hero + community}) != len(hero) + len(community):
        logger.warning(f"Duplicate cards in hand {[str(c) for c in hero + community]}")
        return 'unknown'

    score = _evaluator.evaluate([_to_treys(c) for c in community], [_to_treys(c) for c in hero])
    hand_class = _evaluator.class_to_string(_evaluator.get_rank_class(score))

    if hand_class in _MADE_HAND_TIERS:
        return _MADE_HAND_TIERS[hand_class]

    if hand_class == 'Two Pair':
        board_paired = len({c.rank for c in community}) < len(community)
        return 'two_pair_paired_board' if board_paired else 'two_pair'

    if hand_class == 'Pair':
        return _pair_tier(hero, community)

    return _unpaired_tier(hero, community)


def estimate_hand_strength(hero_cards: Sequence[Any], board: Sequence[Any]) -> float:
    """Heuristic strength in [0, 1] from the named tier."""
    return HAND_STRENGTH_TIERS[classify_hand(hero_cards, board)]
