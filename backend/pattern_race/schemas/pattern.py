"""
Pydantic schemas for pattern API requests and responses.
"""
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pattern_race.core.events import (
    Impact,
    PatternStatus,
    PatternType,
    RacePosition,
    Trend,
)


class PatternMetricsResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    score: float
    trend: Trend
    impact: Impact


class PatternEventResponse(BaseModel):
    """A scored pattern observation."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    timestamp: datetime
    type: PatternType
    pattern: str
    status: PatternStatus
    data: dict[str, Any] = Field(default_factory=dict)
    metrics: PatternMetricsResponse


class StreamMetricsResponse(BaseModel):
    """Aggregate health of all tracked patterns."""

    model_config = ConfigDict(from_attributes=True)

    total_components: int
    average_score: float
    active_patterns: int = Field(..., ge=0)
    race_position: RacePosition
    momentum: float = Field(..., ge=0.0, le=1.0)
