"""
Named tracking helpers for scripts and CI jobs.

Thin wrappers over ``PatternMonitor.track_pattern`` and
``RaceStreamPipeline.inject_pattern`` so callers can report signals by
meaning instead of raw pattern names. Each helper uses the global instances
unless one is passed explicitly.

Usage:
    track_build({"warnings": 2})
    track_component("header", {"score": 82})
    print(get_race_status())
"""
from collections.abc import Mapping
from typing import Any, Optional

from pattern_race.core.events import PatternEvent
from pattern_race.services.pattern_monitor import (
    PatternMonitor,
    get_pattern_monitor,
    reset_pattern_monitor,
)
from pattern_race.services.race_pipeline import (
    RaceStreamPipeline,
    get_race_pipeline,
    reset_race_pipeline,
)

Payload = Optional[Mapping[str, Any]]


# === Monitor-level helpers ===

def track_quality(data: Payload, monitor: Optional[PatternMonitor] = None) -> PatternEvent:
    return (monitor or get_pattern_monitor()).track_pattern("quality-check", data)


def track_build(data: Payload, monitor: Optional[PatternMonitor] = None) -> PatternEvent:
    return (monitor or get_pattern_monitor()).track_pattern("build-status", data)


def track_component(name: str, data: Payload, monitor: Optional[PatternMonitor] = None) -> PatternEvent:
    return (monitor or get_pattern_monitor()).track_pattern(f"component-{name}", data)


def track_git(data: Payload, monitor: Optional[PatternMonitor] = None) -> PatternEvent:
    return (monitor or get_pattern_monitor()).track_pattern("git-changes", data)


def track_performance(data: Payload, monitor: Optional[PatternMonitor] = None) -> PatternEvent:
    return (monitor or get_pattern_monitor()).track_pattern("performance", data)


# === Pipeline-level helpers ===

def track_quality_race(data: Payload, pipeline: Optional[RaceStreamPipeline] = None) -> PatternEvent:
    return (pipeline or get_race_pipeline()).inject_pattern("quality-sprint", data)


def track_build_race(data: Payload, pipeline: Optional[RaceStreamPipeline] = None) -> PatternEvent:
    return (pipeline or get_race_pipeline()).inject_pattern("build-sprint", data)


def track_component_race(
    name: str, data: Payload, pipeline: Optional[RaceStreamPipeline] = None
) -> PatternEvent:
    return (pipeline or get_race_pipeline()).inject_pattern(f"component-{name}", data)


def get_race_status(pipeline: Optional[RaceStreamPipeline] = None) -> str:
    return (pipeline or get_race_pipeline()).get_streamlined_status()


def reset_pipeline() -> None:
    """Tear down both global instances (test teardown, process shutdown)."""
    reset_race_pipeline()
    reset_pattern_monitor()
