"""
Event and metric types shared by the pattern monitor and the race pipeline.

Pattern events are immutable observations. Stream metrics are the single
mutable aggregate owned by the monitor and are only ever handed out as copies.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class PatternType(str, Enum):
    """Category inferred from a pattern name."""

    QUALITY = "quality"
    BUILD = "build"
    GIT = "git"
    COMPONENT = "component"
    PERFORMANCE = "performance"


class PatternStatus(str, Enum):
    """Health of a single observation."""

    HEALTHY = "healthy"
    WARNING = "warning"
    ERROR = "error"
    IMPROVING = "improving"


class Trend(str, Enum):
    UP = "up"
    DOWN = "down"
    STABLE = "stable"


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RacePosition(str, Enum):
    """Overall standing derived from the share of healthy patterns."""

    LEADING = "leading"
    CLOSE = "close"
    TRAILING = "trailing"


class RaceEventType(str, Enum):
    POSITION_CHANGE = "position_change"
    SPEED_UPDATE = "speed_update"
    PATTERN_BOOST = "pattern_boost"
    OBSTACLE_HIT = "obstacle_hit"


class MonitorTopic(str, Enum):
    """Notification channels published by the pattern monitor."""

    PATTERN_UPDATE = "pattern-update"
    RACE_UPDATE = "race-update"


@dataclass(frozen=True)
class PatternMetrics:
    """Scores derived from a pattern payload."""

    score: float
    trend: Trend
    impact: Impact

    def to_dict(self) -> dict:
        return {
            "score": self.score,
            "trend": self.trend.value,
            "impact": self.impact.value,
        }


@dataclass(frozen=True)
class PatternEvent:
    """One scored observation of a named pattern.

    ``data`` is a read-only view of the caller's payload as it was tracked.
    """

    id: str
    timestamp: datetime
    type: PatternType
    pattern: str
    status: PatternStatus
    data: Mapping[str, Any]
    metrics: PatternMetrics

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "pattern": self.pattern,
            "status": self.status.value,
            "data": dict(self.data),
            "metrics": self.metrics.to_dict(),
        }


@dataclass
class StreamMetrics:
    """
    Process-wide aggregate state of the pattern monitor.

    ``total_components`` and ``average_score`` are seeded from configuration
    and are not recomputed from tracked events.
    """

    total_components: int
    average_score: float
    active_patterns: int
    race_position: RacePosition
    momentum: float

    def copy(self) -> "StreamMetrics":
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "total_components": self.total_components,
            "average_score": self.average_score,
            "active_patterns": self.active_patterns,
            "race_position": self.race_position.value,
            "momentum": self.momentum,
        }


@dataclass(frozen=True)
class RaceUpdate:
    """Heartbeat summary emitted by the monitor on every tick."""

    timestamp: datetime
    position: RacePosition
    speed: float
    patterns: int
    momentum: float
    status_update: str

    def to_dict(self) -> dict:
        return {
            "timestamp": self.timestamp.isoformat(),
            "position": self.position.value,
            "speed": self.speed,
            "patterns": self.patterns,
            "momentum": self.momentum,
            "status_update": self.status_update,
        }


@dataclass(frozen=True)
class RaceEvent:
    """Display-oriented event produced by the race pipeline."""

    timestamp: datetime
    type: RaceEventType
    position: RacePosition
    speed: float
    patterns: int
    momentum: float
    message: str
    data: Optional[dict[str, Any]] = field(default=None)

    def to_dict(self) -> dict:
        result = {
            "timestamp": self.timestamp.isoformat(),
            "type": self.type.value,
            "position": self.position.value,
            "speed": self.speed,
            "patterns": self.patterns,
            "momentum": self.momentum,
            "message": self.message,
        }
        if self.data is not None:
            result["data"] = dict(self.data)
        return result
