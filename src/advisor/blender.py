#!/usr/bin/env python3
"""
Decision blender combining the GTO and exploit sub-decisions.

confidence = min(1, sample_size / full_confidence_sample)
effective_lambda = lambda * confidence

The exploit sub-decision is chosen when effective_lambda reaches the
threshold, otherwise the GTO one. Lambda alone never selects exploit play:
against an unseen player (sample 0) every lambda degrades to GTO. Both
sub-decisions and the raw confidence are always reported.
"""

import logging
import math
from typing import Any

from src.config.settings import Settings
from src.models.decision import Decision, PolicyResult

logger = logging.getLogger(__name__)


def clamp_lambda(lam: Any) -> float:
    """Clamp lambda into [0, 1]; NaN and non-numbers become 0."""
    try:
        value = float(lam)
    except (TypeError, ValueError):
        logger.debug(f"Non-numeric lambda {lam!r}, using 0")
        return 0.0

    if math.isnan(value):
        logger.debug("NaN lambda, using 0")
        return 0.0

    clamped = min(1.0, max(0.0, value))
    if clamped != value:
        logger.debug(f"Lambda {value} clamped to {clamped}")
    return clamped


class DecisionBlender:
    """Confidence-gated choice between GTO and exploit recommendations."""

    def __init__(self):
        """Initialize the blender from Settings."""
        self.settings = Settings()

        self.settings.create("advisor.blend.full_confidence_sample", default=30)
        self.settings.create("advisor.blend.exploit_threshold", default=0.5)

        self.full_confidence_sample = self.settings.get("advisor.blend.full_confidence_sample")
        self.exploit_threshold = self.settings.get("advisor.blend.exploit_threshold")

        logger.info(f"DecisionBlender initialized (full confidence at {self.full_confidence_sample} hands, "
                    f"threshold {self.exploit_threshold})")

    def confidence(self, sample_size: int) -> float:
        """Linear ramp from 0 (no hands) to 1 (full_confidence_sample hands or more)."""
        if sample_size <= 0:
            return 0.0
        return min(1.0, sample_size / self.full_confidence_sample)

    def blend(self, gto: PolicyResult, exploit: PolicyResult, lam: float, sample_size: int) -> Decision:
        """
        Combine the two sub-decisions.

        Args:
            gto: GTO policy result
            exploit: Exploit policy result
            lam: Requested exploit weight; clamped into [0, 1]
            sample_size: Observed preflop decisions of the primary villain

        Returns:
            Decision carrying the chosen action, both sub-decisions and confidence
        """
        lam = clamp_lambda(lam)
        confidence = self.confidence(sample_size)
        effective_lambda = lam * confidence
        chosen = exploit if effective_lambda >= self.exploit_threshold else gto

        logger.debug(f"Blend: lambda={lam:.2f} confidence={confidence:.2f} "
                     f"effective={effective_lambda:.2f} -> {'exploit' if chosen is exploit else 'gto'}")

        return Decision(
            action=chosen.action,
            sizing=chosen.sizing,
            reasoning=chosen.reasoning,
            confidence=confidence,
            gto_action=gto.label,
            exploit_action=exploit.label,
            effective_lambda=effective_lambda,
            source='rules',
        )
