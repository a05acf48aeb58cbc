"""
Race Stream Pipeline - narrative event stream on top of the pattern monitor.

Every pattern-update from the monitor becomes a RaceEvent (boost, obstacle,
position change or speed update) that is broadcast to pipeline subscribers
and appended to a bounded history. Monitor heartbeats become speed updates
that move the current position and are broadcast without being recorded.

Consumers either poll (``get_current_stats``, ``get_race_history``) or
subscribe, directly or through ``create_event_stream`` for async iteration.
"""
import asyncio
import logging
from collections import deque
from collections.abc import AsyncIterator, Mapping
from typing import Any, Callable, Optional
from uuid import uuid4

from pattern_race.config import Settings, settings
from pattern_race.core.dispatch import Broadcaster
from pattern_race.core.events import (
    MonitorTopic,
    PatternEvent,
    PatternStatus,
    RaceEvent,
    RaceEventType,
    RacePosition,
    RaceUpdate,
    Trend,
)
from pattern_race.core.scoring import race_speed
from pattern_race.services.pattern_monitor import PatternMonitor, get_pattern_monitor

logger = logging.getLogger(__name__)

PIPELINE_SUBSCRIBER_ID = "race-pipeline"

POSITION_MARKERS = {
    RacePosition.LEADING: "🥇",
    RacePosition.CLOSE: "🥈",
    RacePosition.TRAILING: "🥉",
}

_RACE_MESSAGES = {
    PatternStatus.IMPROVING: "🚀 {pattern} pattern boosting performance!",
    PatternStatus.ERROR: "🔥 Obstacle: {pattern} needs attention",
    PatternStatus.WARNING: "⚠️ {pattern} showing resistance",
    PatternStatus.HEALTHY: "✅ {pattern} running smooth",
}


def race_event_type_for(event: PatternEvent) -> RaceEventType:
    if event.status == PatternStatus.IMPROVING:
        return RaceEventType.PATTERN_BOOST
    if event.status == PatternStatus.ERROR:
        return RaceEventType.OBSTACLE_HIT
    if event.metrics.trend == Trend.UP:
        return RaceEventType.POSITION_CHANGE
    return RaceEventType.SPEED_UPDATE


def race_message_for(event: PatternEvent) -> str:
    return _RACE_MESSAGES[event.status].format(pattern=event.pattern)


class RaceStreamPipeline:
    """
    Translates pattern monitor notifications into race events.

    The pipeline only listens to the monitor between ``start()`` and
    ``stop()``. Its own subscribers are independent of the monitor's.
    """

    def __init__(
        self,
        monitor: PatternMonitor,
        history_capacity: int = 100,
        recent_events_count: int = 10,
        initial_position: RacePosition = RacePosition.CLOSE,
        stream_buffer_size: int = 1000,
    ):
        self.monitor = monitor
        self.history_capacity = history_capacity
        self.recent_events_count = recent_events_count
        self.current_position = initial_position
        self.stream_buffer_size = stream_buffer_size
        self.is_running = False
        self._subscribers = Broadcaster[RaceEvent]("race-pipeline")
        self._history: deque[RaceEvent] = deque(maxlen=history_capacity)

    @classmethod
    def from_settings(cls, monitor: PatternMonitor, config: Settings = settings) -> "RaceStreamPipeline":
        return cls(
            monitor=monitor,
            history_capacity=config.history_capacity,
            recent_events_count=config.recent_events_count,
            initial_position=RacePosition(config.initial_race_position),
            stream_buffer_size=config.stream_buffer_size,
        )

    # === Lifecycle ===

    def start(self) -> None:
        """Attach to the monitor. Idempotent."""
        self.monitor.subscribe(
            MonitorTopic.PATTERN_UPDATE, PIPELINE_SUBSCRIBER_ID, self._process_pattern_event
        )
        self.monitor.subscribe(
            MonitorTopic.RACE_UPDATE, PIPELINE_SUBSCRIBER_ID, self._process_race_update
        )
        if not self.is_running:
            self.is_running = True
            logger.info("🏁 Race pipeline started")

    def stop(self) -> None:
        """Detach from the monitor and drop every pipeline subscriber."""
        self.monitor.unsubscribe(MonitorTopic.PATTERN_UPDATE, PIPELINE_SUBSCRIBER_ID)
        self.monitor.unsubscribe(MonitorTopic.RACE_UPDATE, PIPELINE_SUBSCRIBER_ID)
        self._subscribers.clear()
        if self.is_running:
            self.is_running = False
            logger.info("🛑 Race pipeline stopped")

    # === Translation ===

    def _process_pattern_event(self, event: PatternEvent) -> None:
        metrics = self.monitor.get_current_metrics()
        race_event = RaceEvent(
            timestamp=event.timestamp,
            type=race_event_type_for(event),
            position=self.current_position,
            speed=race_speed(event.metrics.score, event.metrics.trend),
            patterns=metrics.active_patterns,
            momentum=metrics.momentum,
            message=race_message_for(event),
            data={"pattern": event.pattern, "score": event.metrics.score},
        )

        self._subscribers.broadcast(race_event)
        self._history.append(race_event)

    def _process_race_update(self, update: RaceUpdate) -> None:
        race_event = RaceEvent(
            timestamp=update.timestamp,
            type=RaceEventType.SPEED_UPDATE,
            position=update.position,
            speed=update.speed,
            patterns=update.patterns,
            momentum=update.momentum,
            message=update.status_update,
        )

        self.current_position = update.position
        self._subscribers.broadcast(race_event)

    # === Push API ===

    def subscribe(self, subscriber_id: str, callback: Callable[[RaceEvent], None]) -> None:
        """Register a callback. The same id replaces the previous callback."""
        self._subscribers.subscribe(subscriber_id, callback)

    def unsubscribe(self, subscriber_id: str) -> None:
        self._subscribers.unsubscribe(subscriber_id)

    def has_subscriber(self, subscriber_id: str) -> bool:
        return self._subscribers.has_subscriber(subscriber_id)

    def subscriber_count(self) -> int:
        return len(self._subscribers)

    async def create_event_stream(self) -> AsyncIterator[RaceEvent]:
        """
        Async iterator over race events.

        Subscribes under a fresh id when iteration begins and unsubscribes
        when the consumer stops iterating, closes the iterator or is
        cancelled.

        Each stream buffers at most ``stream_buffer_size`` undelivered
        events; a consumer that falls further behind loses the oldest ones.

        Example:
            async for event in pipeline.create_event_stream():
                await websocket.send_json(event.to_dict())
        """
        stream_id = f"stream-{uuid4().hex}"
        queue: asyncio.Queue[RaceEvent] = asyncio.Queue(maxsize=self.stream_buffer_size)

        def enqueue(event: RaceEvent) -> None:
            if queue.full():
                queue.get_nowait()
                logger.debug(f"Event stream {stream_id} lagging, dropped oldest event")
            queue.put_nowait(event)

        self.subscribe(stream_id, enqueue)
        logger.debug(f"Event stream opened: {stream_id}")
        try:
            while True:
                yield await queue.get()
        finally:
            self.unsubscribe(stream_id)
            logger.debug(f"Event stream closed: {stream_id}")

    # === Pull API ===

    def get_current_stats(self) -> dict:
        metrics = self.monitor.get_current_metrics()
        history = list(self._history)
        return {
            "position": self.current_position,
            "speed": history[-1].speed if history else 0,
            "active_patterns": metrics.active_patterns,
            "momentum": metrics.momentum,
            "recent_events": history[-self.recent_events_count:],
        }

    def get_race_history(self) -> list[RaceEvent]:
        return list(self._history)

    def inject_pattern(self, pattern_name: str, data: Optional[Mapping[str, Any]] = None) -> PatternEvent:
        """Feed an observation straight into the monitor (manual or test input)."""
        return self.monitor.track_pattern(pattern_name, data)

    def get_streamlined_status(self) -> str:
        """One-line summary for logs and terminals."""
        stats = self.get_current_stats()
        position = stats["position"]
        marker = POSITION_MARKERS.get(position, "🏃")
        return (
            f"{marker} Position: {position.value} | "
            f"Speed: {stats['speed']:.2f} | "
            f"Patterns: {stats['active_patterns']} | "
            f"Momentum: {stats['momentum'] * 100:.0f}%"
        )


# Global pipeline instance
_pipeline: Optional[RaceStreamPipeline] = None


def get_race_pipeline() -> RaceStreamPipeline:
    """Get the global pipeline, bound to the global monitor. Never auto-started."""
    global _pipeline
    if _pipeline is None:
        _pipeline = RaceStreamPipeline.from_settings(get_pattern_monitor(), settings)
    return _pipeline


def reset_race_pipeline() -> None:
    """Stop and forget the global pipeline."""
    global _pipeline
    if _pipeline is not None:
        _pipeline.stop()
    _pipeline = None
