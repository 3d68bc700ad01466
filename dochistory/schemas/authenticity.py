"""Authenticity report schemas."""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthenticityFlag(BaseModel):
    """One suspicious interval between two consecutive history entries."""
    model_config = ConfigDict(populate_by_name=True)

    timestamp: datetime  # created_at of the later entry
    word_delta: int = Field(alias="wordDelta")
    seconds: int
    wps: float  # words per second, one decimal
    reason: Literal["paste", "high_wps"]


class AuthenticityResult(BaseModel):
    """Organic-authorship score (0-100, None when there is not enough data) and flags."""
    score: Optional[int] = None
    flags: List[AuthenticityFlag] = []
