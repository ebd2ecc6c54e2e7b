#!/usr/bin/env python3
"""
Decision Engine producing the advisor's recommendation.

Central coordinator that runs the GTO policy, the exploit policy and the
blender, then optionally lets an external adviser override the result. The
rule-based path never depends on the external adviser: any failure there
falls back to the blended decision with the reasoning marked as a fallback.
"""

import logging
from typing import Optional

from src.advisor.blender import DecisionBlender, clamp_lambda
from src.advisor.exploit_policy import ExploitPolicy
from src.advisor.gto_policy import GTOPolicy
from src.advisor.llm_adviser import AnthropicAdviser, ExternalAdviserError
from src.config.settings import Settings
from src.models.decision import Decision
from src.models.game_state import GameState
from src.models.player_stats import PlayerProfile, PlayerStats, StatsSummary
from src.stats.classifier import classify, confidence_bucket, confidence_label

logger = logging.getLogger(__name__)

FALLBACK_PREFIX = "Fallback to rule-based advice"


class DecisionEngine:
    """Central decision engine combining GTO, exploit and external advice."""

    def __init__(self, gto_policy: Optional[GTOPolicy] = None,
                 exploit_policy: Optional[ExploitPolicy] = None,
                 blender: Optional[DecisionBlender] = None,
                 adviser: Optional[AnthropicAdviser] = None):
        """
        Initialize decision engine with all advisor components.

        Args:
            gto_policy: Baseline policy
            exploit_policy: Exploit policy; shares the GTO policy's charts by default
            blender: Lambda/confidence blender
            adviser: Optional external adviser that may override the rules
        """
        self.settings = Settings()
        self.settings.create("advisor.external.enabled", default=True)

        self.gto_policy = gto_policy or GTOPolicy()
        self.exploit_policy = exploit_policy or ExploitPolicy(self.gto_policy)
        self.blender = blender or DecisionBlender()
        self.adviser = adviser
        self.external_enabled = bool(self.settings.get("advisor.external.enabled"))

        logger.info(f"Initialized decision engine "
                    f"(external adviser {'on' if self.adviser and self.external_enabled else 'off'})")

    def get_decision(self, state: GameState, lam: float, villain_stats: Optional[PlayerStats] = None,
                     screenshot: Optional[str] = None,
                     villain_profile: Optional[PlayerProfile] = None) -> Optional[Decision]:
        """
        Get the recommendation for a decision point.

        Args:
            state: Decision-time game state
            lam: Exploit weight; clamped into [0, 1]
            villain_stats: Counters of the primary villain, if known
            screenshot: Optional base64 table screenshot for the external adviser
            villain_profile: Primary villain's profile for the external adviser

        Returns:
            Decision, or None when no recommendation is available (hero cards unknown)
        """
        if len(state.hero_cards) < 2:
            logger.info("No recommendation available: hero cards unknown")
            return None

        lam = clamp_lambda(lam)
        sample_size = villain_stats.sample_size if villain_stats is not None else 0

        gto = self.gto_policy.evaluate(state)
        exploit = self.exploit_policy.evaluate(state, villain_stats, baseline=gto)
        decision = self.blender.blend(gto, exploit, lam, sample_size)
        decision.reasoning = f"{decision.reasoning.rstrip('.')}. {confidence_label(sample_size)}."

        if self.adviser is not None and self.external_enabled:
            if villain_profile is None and villain_stats is not None:
                villain_profile = self._profile_from_stats(villain_stats)
            try:
                external = self.adviser.advise(state, lam, villain_profile, gto, exploit,
                                               screenshot=screenshot, confidence=decision.confidence)
                logger.info(f"Decision ({state.street}): {external.label} from external adviser")
                return external
            except ExternalAdviserError as e:
                logger.warning(f"External adviser unavailable, using rules: {e}")
                decision.reasoning = f"{FALLBACK_PREFIX}: {decision.reasoning}"

        logger.info(f"Decision ({state.street}): {decision.label} "
                    f"[GTO {decision.gto_action}, exploit {decision.exploit_action}, "
                    f"effective lambda {decision.effective_lambda:.2f}]")
        return decision

    def _profile_from_stats(self, stats: PlayerStats) -> PlayerProfile:
        return PlayerProfile(
            id=stats.player_id,
            tag=classify(stats),
            stats=StatsSummary.from_stats(stats),
            confidence=confidence_bucket(stats.sample_size),
        )
