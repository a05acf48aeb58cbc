"""
Unit test specific fixtures.
"""
from typing import Generator

import pytest

from pattern_race.services.session_monitor import SessionMonitor


@pytest.fixture
def session(monitor, pipeline, clock) -> Generator[SessionMonitor, None, None]:
    """Monitoring session attached to the test monitor and pipeline, no health task."""
    session_monitor = SessionMonitor(
        monitor,
        pipeline,
        health_check_interval_seconds=None,
        clock=clock,
    )
    session_monitor.start()
    yield session_monitor
    session_monitor.stop()
