"""
Root-level test fixtures shared across all tests.

This module provides:
- A controllable clock for time-window assertions
- Fresh pattern monitor / race pipeline instances per test
- A recorder that collects everything a subscriber receives
"""
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Generator

import pytest

from pattern_race.services.pattern_monitor import PatternMonitor
from pattern_race.services.race_pipeline import RaceStreamPipeline
from pattern_race.services.tracking import reset_pipeline


class FakeClock:
    """Manually advanced UTC clock."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 12, 0, tzinfo=timezone.utc)):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class Recorder:
    """Subscriber callback that keeps every event it receives."""

    def __init__(self):
        self.events = []

    def __call__(self, event) -> None:
        self.events.append(event)

    def __len__(self) -> int:
        return len(self.events)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def monitor(clock: FakeClock) -> Generator[PatternMonitor, None, None]:
    """
    Pattern monitor with default seeds and a fake clock.

    The heartbeat task is not started; tests call emit_race_update() or
    start() explicitly.
    """
    pattern_monitor = PatternMonitor(clock=clock)
    yield pattern_monitor
    pattern_monitor.destroy()


@pytest.fixture
def pipeline(monitor: PatternMonitor) -> Generator[RaceStreamPipeline, None, None]:
    """Started race pipeline bound to the test monitor."""
    race_pipeline = RaceStreamPipeline(monitor)
    race_pipeline.start()
    yield race_pipeline
    race_pipeline.stop()


@pytest.fixture
async def running_monitor(clock: FakeClock) -> AsyncGenerator[PatternMonitor, None]:
    """Monitor with a fast heartbeat running on the test event loop."""
    pattern_monitor = PatternMonitor(tick_interval_seconds=0.01, clock=clock)
    pattern_monitor.start()
    yield pattern_monitor
    pattern_monitor.destroy()


@pytest.fixture
def global_instances() -> Generator[None, None, None]:
    """Reset the lazily created global monitor and pipeline around a test."""
    reset_pipeline()
    yield
    reset_pipeline()
