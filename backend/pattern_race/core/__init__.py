"""
Pattern scoring core.

Shared event types, derivation rules and subscriber fan-out used by the
pattern monitor and race pipeline services.
"""
from pattern_race.core.dispatch import Broadcaster
from pattern_race.core.events import (
    Impact,
    MonitorTopic,
    PatternEvent,
    PatternMetrics,
    PatternStatus,
    PatternType,
    RaceEvent,
    RaceEventType,
    RacePosition,
    RaceUpdate,
    StreamMetrics,
    Trend,
)

__all__ = [
    "Broadcaster",
    "Impact",
    "MonitorTopic",
    "PatternEvent",
    "PatternMetrics",
    "PatternStatus",
    "PatternType",
    "RaceEvent",
    "RaceEventType",
    "RacePosition",
    "RaceUpdate",
    "StreamMetrics",
    "Trend",
]
