#!/usr/bin/env python3
"""
Player statistics models.

PlayerStats holds the raw numerator/denominator counters for one player.
Ratios are derived on read and are None (undefined, not zero) whenever the
denominator is zero. PlayerProfile is the read-side summary used by the
lookup service and the HUD.
"""

import hashlib
from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

PLAYER_TAGS = ['FISH', 'MANIAC', 'NIT', 'REG', 'UNKNOWN']

COUNTER_FIELDS = [
    'vpip_num', 'vpip_denom',
    'pfr_num', 'pfr_denom',
    'af_bets', 'af_calls',
    'cbet_fold_num', 'cbet_fold_denom',
    'fold_to_3bet_num', 'fold_to_3bet_denom',
    'wtsd_num', 'wtsd_denom',
]


def hash_player_id(name: str) -> str:
    """Stable, collision-resistant player id derived from the display name."""
    return hashlib.sha256(name.lower().strip().encode('utf-8')).hexdigest()


def _ratio(num: int, denom: int) -> Optional[float]:
    if denom == 0:
        return None
    return num / denom


class PlayerStats(BaseModel):
    """Cumulative behavioral counters for one player."""
    player_id: str = Field(..., description="Stable player identifier")
    vpip_num: int = Field(0, ge=0)
    vpip_denom: int = Field(0, ge=0)
    pfr_num: int = Field(0, ge=0)
    pfr_denom: int = Field(0, ge=0)
    af_bets: int = Field(0, ge=0)
    af_calls: int = Field(0, ge=0)
    cbet_fold_num: int = Field(0, ge=0)
    cbet_fold_denom: int = Field(0, ge=0)
    fold_to_3bet_num: int = Field(0, ge=0)
    fold_to_3bet_denom: int = Field(0, ge=0)
    wtsd_num: int = Field(0, ge=0)
    wtsd_denom: int = Field(0, ge=0)
    updated_at: Optional[datetime] = Field(None, description="Last counter update")

    @property
    def vpip(self) -> Optional[float]:
        return _ratio(self.vpip_num, self.vpip_denom)

    @property
    def pfr(self) -> Optional[float]:
        return _ratio(self.pfr_num, self.pfr_denom)

    @property
    def aggression_factor(self) -> Optional[float]:
        """Bets and raises per call, on every street."""
        return _ratio(self.af_bets, self.af_calls)

    @property
    def fold_to_cbet(self) -> Optional[float]:
        return _ratio(self.cbet_fold_num, self.cbet_fold_denom)

    @property
    def fold_to_3bet(self) -> Optional[float]:
        return _ratio(self.fold_to_3bet_num, self.fold_to_3bet_denom)

    @property
    def wtsd(self) -> Optional[float]:
        return _ratio(self.wtsd_num, self.wtsd_denom)

    @property
    def sample_size(self) -> int:
        """Observed preflop decisions."""
        return self.vpip_denom

    def counters(self) -> Dict[str, int]:
        return {name: getattr(self, name) for name in COUNTER_FIELDS}

    class Config:
        validate_assignment = True
        extra = "ignore"


class StatsSummary(BaseModel):
    """Derived ratios for display."""
    vpip: Optional[float] = None
    pfr: Optional[float] = None
    af: Optional[float] = None
    fold_to_cbet: Optional[float] = None
    fold_to_3bet: Optional[float] = None
    wtsd: Optional[float] = None
    sample_size: int = 0

    @classmethod
    def from_stats(cls, stats: Optional[PlayerStats]) -> 'StatsSummary':
        if stats is None:
            return cls()
        return cls(
            vpip=stats.vpip,
            pfr=stats.pfr,
            af=stats.aggression_factor,
            fold_to_cbet=stats.fold_to_cbet,
            fold_to_3bet=stats.fold_to_3bet,
            wtsd=stats.wtsd,
            sample_size=stats.sample_size,
        )


class PlayerProfile(BaseModel):
    """Everything known about one opponent."""
    id: str = Field(..., description="Player id")
    name: str = Field('Unknown', description="Display name")
    total_hands: int = Field(0, ge=0, description="Hands the player was seen in")
    tag: str = Field('UNKNOWN', description="Behavioral classification")
    stats: StatsSummary = Field(default_factory=StatsSummary)
    llm_notes: Optional[str] = Field(None, description="Generated tendency summary")
    confidence: str = Field('low', description="low/medium/high by sample size")

    @field_validator('tag')
    @classmethod
    def validate_tag(cls, v):
        if v not in PLAYER_TAGS:
            raise ValueError(f'Invalid tag: {v}. Must be one of {PLAYER_TAGS}')
        return v

    @field_validator('confidence')
    @classmethod
    def validate_confidence(cls, v):
        if v not in ['low', 'medium', 'high']:
            raise ValueError("Confidence must be 'low', 'medium' or 'high'")
        return v

    class Config:
        validate_assignment = True
        extra = "forbid"
