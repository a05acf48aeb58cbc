"""
Unit tests for the monitoring session observer.
"""
import asyncio
import logging

from pattern_race.core.events import MonitorTopic, RacePosition
from pattern_race.services.session_monitor import SESSION_SUBSCRIBER_ID, SessionMonitor


class TestSessionMonitor:
    def test_counts_issues_and_improvements(self, session):
        session.track_pattern("build-status", {"error": "tsc failed"})
        session.track_pattern("quality-check", {"score": 85})
        session.track_pattern("git-changes", {})

        current = session.get_current_session()
        # one pattern-update plus one race event per observation
        assert current.total_events == 6
        assert current.critical_issues == ["🔥 Obstacle: build-status needs attention"]
        assert current.improvements == ["🚀 quality-check pattern boosting performance!"]

    def test_follows_position_and_momentum(self, session, monitor):
        session.track_pattern("broken", {"error": True})
        monitor.emit_race_update()

        current = session.get_current_session()
        assert current.position == RacePosition.TRAILING
        assert current.momentum == 0

    def test_session_copy_is_detached(self, session):
        session.track_pattern("broken", {"error": True})
        snapshot = session.get_current_session()
        snapshot.critical_issues.clear()

        assert len(session.get_current_session().critical_issues) == 1

    def test_health_check_report(self, session, caplog):
        session.track_pattern("quality-check", {"score": 90})

        with caplog.at_level(logging.INFO, logger="pattern_race.services.session_monitor"):
            report = session.health_check()

        assert "=== Health Check ===" in report
        assert "Events: 2 | Issues: 0 | Improvements: 1" in report
        assert "Components: 147 | Avg Score: 63.7" in report
        assert "=== Health Check ===" in caplog.text

    def test_streamlined_report(self, session, clock):
        session.track_pattern("broken", {"failed": True})
        clock.advance(125)

        report = session.get_streamlined_report()

        assert "⏱️ Uptime: 2m" in report
        assert "📊 Events: 2" in report
        assert "🚨 Critical: 1" in report
        assert "✨ Improvements: 0" in report
        assert "📈 Components: 147" in report

    def test_stop_detaches(self, session, monitor, pipeline):
        session.stop()

        assert not pipeline.has_subscriber(SESSION_SUBSCRIBER_ID)
        assert monitor.subscriber_count(MonitorTopic.PATTERN_UPDATE) == 1

        monitor.track_pattern("after-stop", {})
        assert session.get_current_session().total_events == 0

    async def test_periodic_health_checks(self, monitor, pipeline, clock, caplog):
        session = SessionMonitor(monitor, pipeline, health_check_interval_seconds=0.01, clock=clock)

        with caplog.at_level(logging.INFO, logger="pattern_race.services.session_monitor"):
            session.start()
            await asyncio.sleep(0.05)
            session.stop()

        assert "=== Health Check ===" in caplog.text
