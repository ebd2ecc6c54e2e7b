#!/usr/bin/env python3
"""
Advisor module for GTO, exploit and blended decision-making.

Public API:
    - GTOChartLoader: Load and query static preflop charts
    - GTOPolicy: Baseline decision from ranges and hand strength
    - ExploitPolicy: Villain-specific adjustments to the baseline
    - DecisionBlender: Confidence-gated lambda blend
    - AnthropicAdviser: Optional external decision source
    - DecisionEngine: Central coordinator for all decision-making
"""

from src.advisor.range_charts import GTOChartLoader, canonical_hand
from src.advisor.hand_strength import HAND_STRENGTH_TIERS, board_texture, classify_hand, estimate_hand_strength
from src.advisor.gto_policy import GTOPolicy, PostflopSpot
from src.advisor.exploit_policy import ExploitPolicy
from src.advisor.blender import DecisionBlender, clamp_lambda
from src.advisor.llm_adviser import AnthropicAdviser, ExternalAdviserError
from src.advisor.decision_engine import DecisionEngine

__all__ = [
    'GTOChartLoader',
    'canonical_hand',
    'HAND_STRENGTH_TIERS',
    'board_texture',
    'classify_hand',
    'estimate_hand_strength',
    'GTOPolicy',
    'PostflopSpot',
    'ExploitPolicy',
    'DecisionBlender',
    'clamp_lambda',
    'AnthropicAdviser',
    'ExternalAdviserError',
    'DecisionEngine'
]
