#!/usr/bin/env python3
"""
Decision models for advisor recommendations.

PolicyResult is what a single policy (GTO or exploit) recommends. Decision is
the blended output shown to the player: the chosen action plus both
contributing sub-decisions and the confidence in the villain read.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator

VALID_ACTIONS = ['FOLD', 'CHECK', 'CALL', 'BET', 'RAISE']
DECISION_SOURCES = ['rules', 'external']


def _validate_action(v: str) -> str:
    action = str(v).upper()
    if action not in VALID_ACTIONS:
        raise ValueError(f'Invalid action: {v}. Must be one of {VALID_ACTIONS}')
    return action


class PolicyResult(BaseModel):
    """Recommendation from a single policy evaluator."""
    action: str = Field(..., description="Recommended action (FOLD/CHECK/CALL/BET/RAISE)")
    sizing: Optional[str] = Field(None, description="Sizing descriptor (e.g. '2.5x', '67% pot')")
    reasoning: str = Field('', description="Explanation of the recommendation")

    @field_validator('action', mode='before')
    @classmethod
    def validate_action(cls, v):
        return _validate_action(v)

    @property
    def label(self) -> str:
        """Action with sizing, e.g. 'RAISE 2.5x'."""
        return f"{self.action} {self.sizing}" if self.sizing else self.action

    class Config:
        frozen = True
        extra = "forbid"


class Decision(BaseModel):
    """Final advisor recommendation."""
    action: str = Field(..., description="Recommended action (FOLD/CHECK/CALL/BET/RAISE)")
    sizing: Optional[str] = Field(None, description="Sizing descriptor if applicable")
    reasoning: str = Field(..., description="Explanation of decision")
    confidence: float = Field(..., ge=0.0, le=1.0, description="Confidence in the villain read")
    gto_action: str = Field(..., description="GTO sub-decision label")
    exploit_action: str = Field(..., description="Exploit sub-decision label")
    effective_lambda: float = Field(0.0, ge=0.0, le=1.0, description="lambda * confidence")
    source: str = Field('rules', description="Who produced the action (rules/external)")

    @field_validator('action', mode='before')
    @classmethod
    def validate_action(cls, v):
        return _validate_action(v)

    @field_validator('source')
    @classmethod
    def validate_source(cls, v):
        if v not in DECISION_SOURCES:
            raise ValueError(f'Invalid source: {v}. Must be one of {DECISION_SOURCES}')
        return v

    @property
    def label(self) -> str:
        return f"{self.action} {self.sizing}" if self.sizing else self.action

    class Config:
        validate_assignment = True
        extra = "forbid"
