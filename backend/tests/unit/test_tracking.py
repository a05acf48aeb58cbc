"""
Unit tests for the named tracking helpers and the global instances.
"""
import pytest

from pattern_race.core.events import PatternType
from pattern_race.services import tracking
from pattern_race.services.pattern_monitor import get_pattern_monitor
from pattern_race.services.race_pipeline import get_race_pipeline


class TestMonitorHelpers:
    @pytest.mark.parametrize(
        "helper,expected_name,expected_type",
        [
            (tracking.track_quality, "quality-check", PatternType.QUALITY),
            (tracking.track_build, "build-status", PatternType.BUILD),
            (tracking.track_git, "git-changes", PatternType.GIT),
            (tracking.track_performance, "performance", PatternType.PERFORMANCE),
        ],
    )
    def test_named_helpers(self, monitor, helper, expected_name, expected_type):
        event = helper({"score": 75}, monitor=monitor)

        assert event.pattern == expected_name
        assert event.type == expected_type
        assert monitor.get_pattern_history(expected_name) == event

    def test_track_component(self, monitor):
        event = tracking.track_component("header", {"quality": 64}, monitor=monitor)

        assert event.pattern == "component-header"
        assert event.type == PatternType.QUALITY
        assert event.metrics.score == 64


class TestPipelineHelpers:
    def test_race_helpers_feed_the_pipeline(self, pipeline):
        tracking.track_quality_race({"score": 90}, pipeline=pipeline)
        tracking.track_build_race({"error": True}, pipeline=pipeline)
        tracking.track_component_race("footer", {}, pipeline=pipeline)

        patterns = [e.data["pattern"] for e in pipeline.get_race_history()]
        assert patterns == ["quality-sprint", "build-sprint", "component-footer"]

    def test_get_race_status(self, pipeline):
        assert tracking.get_race_status(pipeline=pipeline).startswith("🥈 Position: close")


class TestGlobalInstances:
    def test_lazy_singletons_are_not_started(self, global_instances):
        monitor = get_pattern_monitor()
        pipeline = get_race_pipeline()

        assert get_pattern_monitor() is monitor
        assert pipeline.monitor is monitor
        assert not monitor.is_running
        assert not pipeline.is_running

    def test_helpers_default_to_global_instances(self, global_instances):
        get_race_pipeline().start()

        tracking.track_build({"warnings": 1})
        tracking.track_quality_race({"score": 80})

        assert {p.pattern for p in get_pattern_monitor().get_active_patterns()} == {
            "build-status",
            "quality-sprint",
        }
        assert len(get_race_pipeline().get_race_history()) == 2
        assert "Patterns: 2" in tracking.get_race_status()

    def test_reset_pipeline_creates_fresh_instances(self, global_instances):
        first = get_pattern_monitor()
        first.track_pattern("x", {})

        tracking.reset_pipeline()

        assert get_pattern_monitor() is not first
        assert get_pattern_monitor().get_active_patterns() == []
