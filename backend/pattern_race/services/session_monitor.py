"""
Monitoring session over the pattern monitor and race pipeline.

Attaches to both, counts every notification, keeps the messages of
obstacles (critical issues) and boosts (improvements), follows the race
position and momentum, and produces periodic health checks and one-line
reports for terminals and logs.
"""
import asyncio
import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from pattern_race.core.events import (
    MonitorTopic,
    PatternEvent,
    RaceEvent,
    RaceEventType,
    RacePosition,
    Trend,
)
from pattern_race.services.pattern_monitor import PatternMonitor
from pattern_race.services.race_pipeline import RaceStreamPipeline

logger = logging.getLogger(__name__)

SESSION_SUBSCRIBER_ID = "master-monitor"

EVENT_MARKERS = {
    RaceEventType.PATTERN_BOOST: "🚀",
    RaceEventType.OBSTACLE_HIT: "🔥",
    RaceEventType.POSITION_CHANGE: "📊",
    RaceEventType.SPEED_UPDATE: "⚡",
}

TREND_MARKERS = {
    Trend.UP: "📈",
    Trend.DOWN: "📉",
    Trend.STABLE: "➡️",
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class MonitoringSession:
    start_time: datetime
    total_events: int = 0
    critical_issues: list[str] = field(default_factory=list)
    improvements: list[str] = field(default_factory=list)
    position: RacePosition = RacePosition.LEADING
    momentum: float = 0.85

    def copy(self) -> "MonitoringSession":
        return replace(
            self,
            critical_issues=list(self.critical_issues),
            improvements=list(self.improvements),
        )


class SessionMonitor:
    """
    Observer that summarises a monitoring session.

    The session starts counting on ``start()`` and detaches on ``stop()``.
    Health checks run on an owned asyncio task when an interval is given.
    """

    def __init__(
        self,
        monitor: PatternMonitor,
        pipeline: RaceStreamPipeline,
        health_check_interval_seconds: Optional[float] = 10.0,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.monitor = monitor
        self.pipeline = pipeline
        self.health_check_interval_seconds = health_check_interval_seconds
        self._clock = clock
        self.session = MonitoringSession(start_time=clock())
        self._health_task: Optional[asyncio.Task] = None

    def start(self) -> None:
        """Attach to both streams and, inside an event loop, schedule health checks."""
        self.pipeline.subscribe(SESSION_SUBSCRIBER_ID, self._on_race_event)
        self.monitor.subscribe(
            MonitorTopic.PATTERN_UPDATE, SESSION_SUBSCRIBER_ID, self._on_pattern_update
        )

        if self.health_check_interval_seconds and self._health_task is None:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None
            if loop is not None:
                self._health_task = loop.create_task(self._run_health_checks())

        logger.info("Monitoring session started")
        logger.info(f"Initial status: {self.pipeline.get_streamlined_status()}")

    def stop(self) -> None:
        if self._health_task is not None:
            self._health_task.cancel()
            self._health_task = None
        self.pipeline.unsubscribe(SESSION_SUBSCRIBER_ID)
        self.monitor.unsubscribe(MonitorTopic.PATTERN_UPDATE, SESSION_SUBSCRIBER_ID)
        logger.info("Monitoring session stopped")

    def track_pattern(self, pattern_name: str, data: Optional[dict[str, Any]] = None) -> PatternEvent:
        return self.monitor.track_pattern(pattern_name, data)

    # === Listeners ===

    def _on_race_event(self, event: RaceEvent) -> None:
        self.session.total_events += 1

        if event.type == RaceEventType.OBSTACLE_HIT:
            self.session.critical_issues.append(event.message)
        elif event.type == RaceEventType.PATTERN_BOOST:
            self.session.improvements.append(event.message)

        self.session.position = event.position
        self.session.momentum = event.momentum

        marker = EVENT_MARKERS.get(event.type, "📈")
        logger.info(f"{marker} {event.message}", extra={"race_event_type": event.type.value})

    def _on_pattern_update(self, event: PatternEvent) -> None:
        self.session.total_events += 1
        marker = TREND_MARKERS.get(event.metrics.trend, "📊")
        logger.info(
            f"{marker} Pattern: {event.pattern} | Score: {event.metrics.score:g} | "
            f"Status: {event.status.value}"
        )

    # === Reporting ===

    async def _run_health_checks(self) -> None:
        while True:
            await asyncio.sleep(self.health_check_interval_seconds)
            try:
                self.health_check()
            except Exception as e:
                logger.error(f"Health check failed: {str(e)}", exc_info=True)

    def health_check(self) -> str:
        """Log and return a multi-line health summary."""
        metrics = self.monitor.get_current_metrics()
        report = "\n".join([
            "=== Health Check ===",
            f"🏃 {self.pipeline.get_streamlined_status()}",
            f"📊 Events: {self.session.total_events} | "
            f"Issues: {len(self.session.critical_issues)} | "
            f"Improvements: {len(self.session.improvements)}",
            f"🎯 Components: {metrics.total_components} | "
            f"Avg Score: {metrics.average_score:.1f}",
            "===================",
        ])
        logger.info(report)
        return report

    def get_current_session(self) -> MonitoringSession:
        return self.session.copy()

    def get_streamlined_report(self) -> str:
        uptime_minutes = int((self._clock() - self.session.start_time).total_seconds() // 60)
        metrics = self.monitor.get_current_metrics()
        return " | ".join([
            "🏁 PATTERN SESSION",
            f"⏱️ Uptime: {uptime_minutes}m",
            f"📊 Events: {self.session.total_events}",
            f"🎯 Quality: {metrics.average_score:.1f}/100",
            f"🏃 Position: {self.session.position.value.upper()}",
            f"⚡ Momentum: {self.session.momentum * 100:.0f}%",
            f"📈 Components: {metrics.total_components}",
            f"🚨 Critical: {len(self.session.critical_issues)}",
            f"✨ Improvements: {len(self.session.improvements)}",
        ])
