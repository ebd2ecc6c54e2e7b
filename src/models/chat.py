#!/usr/bin/env python3
"""
Chat models for questions about the current spot.
"""

from typing import List

from pydantic import BaseModel, Field, field_validator

CHAT_ROLES = ['user', 'assistant']


class ChatMessage(BaseModel):
    """One turn of a coaching conversation."""
    role: str = Field(..., description="Speaker (user or assistant)")
    content: str = Field(..., description="Message text")

    @field_validator('role', mode='before')
    @classmethod
    def validate_role(cls, v):
        role = str(v).lower()
        if role not in CHAT_ROLES:
            raise ValueError(f'Invalid role: {v}. Must be one of {CHAT_ROLES}')
        return role

    class Config:
        extra = "forbid"


class ChatResult(BaseModel):
    """Coach answer plus suggested next questions."""
    answer: str = Field(..., description="Answer text")
    follow_up_suggestions: List[str] = Field(default_factory=list, description="Suggested next questions")
