"""
Pydantic schemas for race pipeline responses.
"""
from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

from pattern_race.core.events import RaceEventType, RacePosition


class RaceEventResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    timestamp: datetime
    type: RaceEventType
    position: RacePosition
    speed: float = Field(..., ge=0.0)
    patterns: int = Field(..., ge=0)
    momentum: float
    message: str
    data: Optional[dict[str, Any]] = None


class RaceStatsResponse(BaseModel):
    """Pull-based snapshot of the race."""

    position: RacePosition
    speed: float
    active_patterns: int
    momentum: float
    recent_events: list[RaceEventResponse] = Field(default_factory=list)


class RaceStatusResponse(BaseModel):
    status: str
