#!/usr/bin/env python3
"""
HandRecord model for analytics hand history.

One row per recommendation the player acted on: the raw event log of the
hand, what was recommended, what the hero did and the lambda in use.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.models.decision import VALID_ACTIONS


class HandRecord(BaseModel):
    """Persisted hand history entry."""
    id: Optional[str] = Field(None, description="Generated on save")
    played_at: Optional[datetime] = Field(None, description="Set by storage on save")
    raw_log: str = Field(..., description="JSON array of the hand's events")
    hero_position: Optional[str] = Field(None, description="Hero seat label")
    hero_cards: Optional[str] = Field(None, description="Hero cards, space separated")
    board: Optional[str] = Field(None, description="Board cards, space separated")
    hero_decision: Optional[str] = Field(None, description="Action the hero took")
    recommended: Optional[str] = Field(None, description="Advisor recommendation label")
    lambda_used: Optional[float] = Field(None, ge=0.0, le=1.0, description="Exploit weight requested")
    ev_loss: Optional[float] = Field(None, description="Estimated EV lost vs recommendation")

    @field_validator('hero_decision')
    @classmethod
    def validate_hero_decision(cls, v):
        if v is not None:
            v = v.upper()
            if v not in VALID_ACTIONS:
                raise ValueError(f'Invalid hero decision: {v}. Must be one of {VALID_ACTIONS}')
        return v

    class Config:
        validate_assignment = True
        extra = "forbid"
