#!/usr/bin/env python3
"""
Player lookup building the read-side profile of an opponent.

The tag and ratios are recomputed from the live counters on every lookup.
Once a player has been to showdown often enough, a short generated note is
attached and stored; failing to generate it just leaves the note empty.
"""

import logging
from typing import Optional

from src.advisor.llm_adviser import AnthropicAdviser, ExternalAdviserError
from src.config.settings import Settings
from src.history.player_storage import PlayerStorage
from src.models.player_stats import PlayerProfile, StatsSummary
from src.stats.classifier import classify, confidence_bucket

logger = logging.getLogger(__name__)


class PlayerLookup:
    """Profiles for players seen at the table."""

    def __init__(self, storage: PlayerStorage, adviser: Optional[AnthropicAdviser] = None):
        """
        Initialize the lookup.

        Args:
            storage: Player persistence
            adviser: Generates player notes when set
        """
        self.storage = storage
        self.adviser = adviser
        self.settings = Settings()

        self.settings.create("service.lookup.notes_min_showdowns", default=10)
        self.notes_min_showdowns = self.settings.get("service.lookup.notes_min_showdowns")

        logger.info("PlayerLookup initialized")

    def lookup(self, player_id: str) -> PlayerProfile:
        """
        Build a player's profile.

        Args:
            player_id: Stable player id

        Returns:
            PlayerProfile; an 'Unknown' profile with no stats for unseen players
        """
        player = self.storage.get_player(player_id)
        if player is None:
            return PlayerProfile(id=player_id)

        stats = self.storage.get_stats(player_id)
        sample_size = stats.sample_size if stats is not None else 0

        profile = PlayerProfile(
            id=player_id,
            name=player['name'],
            total_hands=player['total_hands'],
            tag=classify(stats),
            stats=StatsSummary.from_stats(stats),
            llm_notes=player.get('llm_notes') or None,
            confidence=confidence_bucket(sample_size),
        )

        if (profile.llm_notes is None and self.adviser is not None and stats is not None
                and stats.wtsd_denom >= self.notes_min_showdowns):
            profile.llm_notes = self._generate_notes(profile)

        return profile

    def _generate_notes(self, profile: PlayerProfile) -> Optional[str]:
        try:
            notes = self.adviser.summarize_player(profile)
        except ExternalAdviserError as e:
            logger.warning(f"Could not generate notes for {profile.name}: {e}")
            return None

        self.storage.update_llm_notes(profile.id, notes)
        logger.info(f"Generated notes for {profile.name}")
        return notes
