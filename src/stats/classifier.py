#!/usr/bin/env python3
"""
Player classifier deriving a behavioral tag from VPIP and PFR.

The tag is recomputed from the live counters on every call; nothing is
cached or persisted. Thresholds are fixed so classification is fully
deterministic.

Usage:
    from src.stats.classifier import classify

    tag = classify(stats)   # 'FISH', 'MANIAC', 'NIT', 'REG' or 'UNKNOWN'
"""

from typing import Optional

from src.models.player_stats import PlayerStats

MIN_SAMPLE = 5
FULL_CONFIDENCE_SAMPLE = 30

LOOSE_VPIP = 0.40
AGGRESSIVE_PFR = 0.30
TIGHT_VPIP = 0.15


def classify(stats: Optional[PlayerStats]) -> str:
    """
    Classify a player from current counters.

    Args:
        stats: Player counters, or None for an unseen player

    Returns:
        UNKNOWN below MIN_SAMPLE preflop decisions, else MANIAC, FISH, NIT or REG
    """
    if stats is None or stats.vpip_denom < MIN_SAMPLE:
        return 'UNKNOWN'

    vpip = stats.vpip_num / stats.vpip_denom
    pfr = stats.pfr_num / stats.pfr_denom if stats.pfr_denom > 0 else 0.0

    if vpip > LOOSE_VPIP and pfr > AGGRESSIVE_PFR:
        return 'MANIAC'
    if vpip > LOOSE_VPIP:
        return 'FISH'
    if vpip < TIGHT_VPIP:
        return 'NIT'
    return 'REG'


def confidence_bucket(sample_size: int) -> str:
    """low below MIN_SAMPLE, medium below FULL_CONFIDENCE_SAMPLE, else high."""
    if sample_size < MIN_SAMPLE:
        return 'low'
    if sample_size < FULL_CONFIDENCE_SAMPLE:
        return 'medium'
    return 'high'


def confidence_label(sample_size: int) -> str:
    """Human readable label, e.g. 'Medium confidence (12 hands)'."""
    return f"{confidence_bucket(sample_size).capitalize()} confidence ({sample_size} hands)"
