#!/usr/bin/env python3
"""
Unit tests for DecisionBlender and lambda clamping.
"""

import math

import pytest

from src.advisor.blender import DecisionBlender, clamp_lambda
from src.config.settings import Settings
from src.models.decision import PolicyResult

GTO = PolicyResult(action='CALL', reasoning='GTO call')
EXPLOIT = PolicyResult(action='RAISE', sizing='3x', reasoning='Exploit 3-bet')


class TestClampLambda:

    @pytest.mark.parametrize("raw,expected", [
        (0.0, 0.0), (0.7, 0.7), (1.0, 1.0), (-0.5, 0.0), (3.0, 1.0),
        (math.nan, 0.0), (None, 0.0), ('high', 0.0), ('0.25', 0.25),
    ])
    def test_clamp(self, raw, expected):
        assert clamp_lambda(raw) == expected


class TestDecisionBlender:

    def setup_method(self):
        self.blender = DecisionBlender()

    def test_defaults_from_settings(self):
        assert self.blender.full_confidence_sample == 30
        assert self.blender.exploit_threshold == 0.5

    def test_confidence_ramp(self):
        assert self.blender.confidence(0) == 0.0
        assert self.blender.confidence(-3) == 0.0
        assert self.blender.confidence(15) == pytest.approx(0.5)
        assert self.blender.confidence(30) == 1.0
        assert self.blender.confidence(300) == 1.0

    def test_unseen_villain_always_gets_gto(self):
        """Lambda alone never selects exploit play."""
        for lam in [0.0, 0.5, 1.0]:
            decision = self.blender.blend(GTO, EXPLOIT, lam, 0)

            assert decision.action == 'CALL'
            assert decision.effective_lambda == 0.0
            assert decision.confidence == 0.0

    def test_full_sample_full_lambda_gets_exploit(self):
        decision = self.blender.blend(GTO, EXPLOIT, 1.0, 30)

        assert decision.label == 'RAISE 3x'
        assert decision.reasoning == 'Exploit 3-bet'
        assert decision.confidence == 1.0
        assert decision.effective_lambda == 1.0

    def test_zero_lambda_gets_gto(self):
        assert self.blender.blend(GTO, EXPLOIT, 0.0, 500).action == 'CALL'

    def test_threshold_is_inclusive(self):
        assert self.blender.blend(GTO, EXPLOIT, 1.0, 15).action == 'RAISE'
        assert self.blender.blend(GTO, EXPLOIT, 0.8, 15).action == 'CALL'

    def test_both_sub_decisions_reported(self):
        decision = self.blender.blend(GTO, EXPLOIT, 0.2, 10)

        assert decision.gto_action == 'CALL'
        assert decision.exploit_action == 'RAISE 3x'
        assert decision.source == 'rules'

    def test_lambda_is_clamped(self):
        decision = self.blender.blend(GTO, EXPLOIT, 7.0, 30)

        assert decision.effective_lambda == 1.0
        assert decision.action == 'RAISE'

    def test_effective_lambda_monotonic_in_sample(self):
        values = [self.blender.blend(GTO, EXPLOIT, 0.9, n).effective_lambda for n in range(0, 60, 3)]

        assert values == sorted(values)
        assert all(0.0 <= value <= 1.0 for value in values)

    def test_threshold_from_settings(self):
        Settings().update("advisor.blend.exploit_threshold", 0.9)
        blender = DecisionBlender()

        assert blender.blend(GTO, EXPLOIT, 0.8, 30).action == 'CALL'
