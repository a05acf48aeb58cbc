"""
Pattern Monitor - process-wide hub for development pattern telemetry.

Callers report observations with ``track_pattern(name, data)``. Each
observation is classified, scored and stored as the latest event for its
name, the aggregate stream metrics are recomputed, and a ``pattern-update``
notification is delivered synchronously to subscribers.

While started, an owned asyncio task emits a ``race-update`` heartbeat every
few seconds summarising recent activity, even when nothing new was tracked.

Usage:
    monitor = PatternMonitor()
    monitor.subscribe(MonitorTopic.PATTERN_UPDATE, "dashboard", on_event)
    monitor.start()
    monitor.track_pattern("build-status", {"warnings": 3})
"""
import asyncio
import logging
from collections.abc import Mapping
from datetime import datetime, timedelta, timezone
from types import MappingProxyType
from typing import Any, Callable, Optional, Union

from pattern_race.config import Settings, settings
from pattern_race.core.dispatch import Broadcaster
from pattern_race.core.events import (
    MonitorTopic,
    PatternEvent,
    PatternMetrics,
    PatternStatus,
    RacePosition,
    RaceUpdate,
    StreamMetrics,
)
from pattern_race.core.scoring import (
    DEFAULT_TREND_DEADBAND,
    assess_health,
    assess_impact,
    calculate_score,
    categorize_pattern,
    determine_trend,
    race_position_for,
)

logger = logging.getLogger(__name__)

# Heartbeat speed grows with the number of recently active patterns.
SPEED_PER_RECENT_EVENT = 0.1

_HEALTHY_STATUSES = (PatternStatus.HEALTHY, PatternStatus.IMPROVING)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def default_seed_metrics() -> StreamMetrics:
    return StreamMetrics(
        total_components=147,
        average_score=63.67,
        active_patterns=0,
        race_position=RacePosition.LEADING,
        momentum=0.85,
    )


def summarize_recent(recent_events: list[PatternEvent]) -> str:
    """Status line for a race-update heartbeat."""
    errors = sum(1 for e in recent_events if e.status == PatternStatus.ERROR)
    improving = sum(1 for e in recent_events if e.status == PatternStatus.IMPROVING)

    if errors > 0:
        return f"🚨 {errors} issues detected"
    if improving > 0:
        return f"📈 {improving} patterns improving"
    return "✅ All systems healthy"


class PatternMonitor:
    """
    Tracks the latest observation per pattern name and the derived health
    of the whole stream.

    Only the most recent event per name is kept. Subscriber callbacks run
    inside the call that produced the event; a failing callback is logged
    and does not affect the others.
    """

    def __init__(
        self,
        tick_interval_seconds: float = 5.0,
        recent_window_seconds: float = 30.0,
        trend_deadband: float = DEFAULT_TREND_DEADBAND,
        seed_metrics: Optional[StreamMetrics] = None,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.tick_interval_seconds = tick_interval_seconds
        self.recent_window = timedelta(seconds=recent_window_seconds)
        self.trend_deadband = trend_deadband
        self._clock = clock
        self._seed_metrics = (seed_metrics or default_seed_metrics()).copy()
        self._stream_metrics = self._seed_metrics.copy()
        self._patterns: dict[str, PatternEvent] = {}
        self._broadcasters: dict[MonitorTopic, Broadcaster] = {
            MonitorTopic.PATTERN_UPDATE: Broadcaster[PatternEvent]("pattern-update"),
            MonitorTopic.RACE_UPDATE: Broadcaster[RaceUpdate]("race-update"),
        }
        self._tick_task: Optional[asyncio.Task] = None

    @classmethod
    def from_settings(cls, config: Settings = settings) -> "PatternMonitor":
        """Build a monitor from application settings."""
        return cls(
            tick_interval_seconds=config.tick_interval_seconds,
            recent_window_seconds=config.recent_window_seconds,
            trend_deadband=config.trend_deadband,
            seed_metrics=StreamMetrics(
                total_components=config.seed_total_components,
                average_score=config.seed_average_score,
                active_patterns=0,
                race_position=RacePosition(config.seed_race_position),
                momentum=config.seed_momentum,
            ),
        )

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    # === Subscriptions ===

    def subscribe(
        self,
        topic: Union[MonitorTopic, str],
        subscriber_id: str,
        callback: Callable[[Any], None],
    ) -> None:
        """
        Register a callback for ``pattern-update`` or ``race-update``.

        Re-subscribing with the same id replaces the previous callback.
        """
        self._broadcasters[MonitorTopic(topic)].subscribe(subscriber_id, callback)

    def unsubscribe(self, topic: Union[MonitorTopic, str], subscriber_id: str) -> None:
        self._broadcasters[MonitorTopic(topic)].unsubscribe(subscriber_id)

    def subscriber_count(self, topic: Union[MonitorTopic, str]) -> int:
        return len(self._broadcasters[MonitorTopic(topic)])

    # === Tracking ===

    def track_pattern(self, pattern_name: str, data: Optional[Mapping[str, Any]] = None) -> PatternEvent:
        """
        Record one observation of a pattern.

        Args:
            pattern_name: Free-form key; substrings steer classification
            data: Opaque payload. Recognised keys: error, failed, warnings,
                  improved, score, quality, critical, blocking, important

        Returns:
            The scored PatternEvent that was stored and broadcast
        """
        if data is None:
            payload: dict[str, Any] = {}
        elif isinstance(data, Mapping):
            payload = dict(data)
        else:
            payload = {"value": data}

        now = self._clock()
        previous = self._patterns.get(pattern_name)
        score = calculate_score(payload)

        event = PatternEvent(
            id=f"{pattern_name}-{int(now.timestamp() * 1000)}",
            timestamp=now,
            type=categorize_pattern(pattern_name),
            pattern=pattern_name,
            status=assess_health(payload),
            data=MappingProxyType(payload),
            metrics=PatternMetrics(
                score=score,
                trend=determine_trend(
                    score,
                    previous.metrics.score if previous else None,
                    self.trend_deadband,
                ),
                impact=assess_impact(payload),
            ),
        )

        self._patterns[pattern_name] = event
        self._update_stream_metrics()

        logger.debug(
            f"Pattern tracked: {pattern_name} ({event.status.value}, score {score:g})",
            extra={"pattern": pattern_name, "pattern_type": event.type.value},
        )

        self._broadcasters[MonitorTopic.PATTERN_UPDATE].broadcast(event)
        return event

    def _update_stream_metrics(self) -> None:
        """Recompute active count, position and momentum from tracked events."""
        tracked = len(self._patterns)
        self._stream_metrics.active_patterns = tracked
        if tracked == 0:
            return

        healthy = sum(1 for p in self._patterns.values() if p.status in _HEALTHY_STATUSES)
        health_ratio = healthy / tracked

        self._stream_metrics.race_position = race_position_for(health_ratio)
        self._stream_metrics.momentum = health_ratio

    # === Race heartbeat ===

    def emit_race_update(self) -> RaceUpdate:
        """Emit one ``race-update`` summarising events seen in the recent window."""
        now = self._clock()
        recent = [
            p for p in self._patterns.values()
            if now - p.timestamp < self.recent_window
        ]

        update = RaceUpdate(
            timestamp=now,
            position=self._stream_metrics.race_position,
            speed=len(recent) * SPEED_PER_RECENT_EVENT,
            patterns=len(recent),
            momentum=self._stream_metrics.momentum,
            status_update=summarize_recent(recent),
        )

        self._broadcasters[MonitorTopic.RACE_UPDATE].broadcast(update)
        return update

    def start(self) -> None:
        """Start the heartbeat task on the running event loop."""
        if self.is_running:
            return
        self._tick_task = asyncio.get_running_loop().create_task(self._run_race_ticks())
        logger.info("Pattern monitor started", extra={"interval": self.tick_interval_seconds})

    def stop(self) -> None:
        """Cancel the heartbeat task. Safe to call when already stopped."""
        if self._tick_task is None:
            return
        self._tick_task.cancel()
        self._tick_task = None
        logger.info("Pattern monitor stopped")

    async def _run_race_ticks(self) -> None:
        while True:
            await asyncio.sleep(self.tick_interval_seconds)
            try:
                self.emit_race_update()
            except Exception as e:
                logger.error(
                    f"Race update failed (will retry next tick): {str(e)}",
                    exc_info=True,
                )

    # === Public API ===

    def get_current_metrics(self) -> StreamMetrics:
        return self._stream_metrics.copy()

    def get_active_patterns(self) -> list[PatternEvent]:
        return list(self._patterns.values())

    def get_pattern_history(self, pattern_name: str) -> Optional[PatternEvent]:
        """Latest event for a pattern name (only the most recent is kept)."""
        return self._patterns.get(pattern_name)

    def destroy(self) -> None:
        """
        Stop the heartbeat and drop all subscribers and tracked patterns.

        The monitor stays usable: later ``track_pattern`` calls start from an
        empty state and ``start()`` may be called again.
        """
        self.stop()
        for broadcaster in self._broadcasters.values():
            broadcaster.clear()
        self._patterns.clear()
        self._stream_metrics = self._seed_metrics.copy()


# Global monitor instance
_monitor: Optional[PatternMonitor] = None


def get_pattern_monitor() -> PatternMonitor:
    """Get the global monitor instance. Created lazily and never auto-started."""
    global _monitor
    if _monitor is None:
        _monitor = PatternMonitor.from_settings(settings)
    return _monitor


def reset_pattern_monitor() -> None:
    """Tear down and forget the global monitor."""
    global _monitor
    if _monitor is not None:
        _monitor.destroy()
    _monitor = None
