"""
Pattern scoring rules.

Pure functions that turn an opaque observation payload into the classified,
scored fields of a PatternEvent, plus the race-position and speed formulas
used downstream. Payloads are never validated: unknown keys are ignored and
missing or non-numeric values fall back to defaults.
"""
import math
from collections.abc import Mapping
from typing import Any, Optional

from pattern_race.core.events import (
    Impact,
    PatternStatus,
    PatternType,
    RacePosition,
    Trend,
)

DEFAULT_SCORE = 50.0
DEFAULT_TREND_DEADBAND = 2.0

LEADING_RATIO = 0.8
CLOSE_RATIO = 0.6

BASE_SPEED = 0.5
MIN_SPEED = 0.1
TREND_SPEED_BONUS = {
    Trend.UP: 0.3,
    Trend.DOWN: -0.2,
    Trend.STABLE: 0.0,
}

# Checked in order, first match wins.
_CATEGORY_KEYWORDS: tuple[tuple[tuple[str, ...], PatternType], ...] = (
    (("component", "quality"), PatternType.QUALITY),
    (("build", "lint"), PatternType.BUILD),
    (("git", "commit"), PatternType.GIT),
    (("perf", "speed"), PatternType.PERFORMANCE),
)


def _as_number(value: Any) -> Optional[float]:
    """Coerce a payload value to a finite float, or None when it is not numeric."""
    if not isinstance(value, (int, float, str)):
        return None
    try:
        number = float(value)
    except (ValueError, OverflowError):
        return None
    # Non-finite values count as absent.
    return number if math.isfinite(number) else None


def categorize_pattern(pattern_name: str) -> PatternType:
    """
    Infer the pattern type from substrings of its name.

    Callers steer classification through naming, e.g. "build-status" is a
    build pattern and "component-header" is a quality pattern.
    """
    for keywords, pattern_type in _CATEGORY_KEYWORDS:
        if any(keyword in pattern_name for keyword in keywords):
            return pattern_type
    return PatternType.COMPONENT


def assess_health(data: Mapping[str, Any]) -> PatternStatus:
    """Derive the observation status from error, warning and improvement flags."""
    if data.get("error") or data.get("failed"):
        return PatternStatus.ERROR

    warnings = _as_number(data.get("warnings"))
    if warnings is not None and warnings > 0:
        return PatternStatus.WARNING

    score = _as_number(data.get("score"))
    if data.get("improved") or (score is not None and score > 70):
        return PatternStatus.IMPROVING

    return PatternStatus.HEALTHY


def calculate_score(data: Mapping[str, Any]) -> float:
    """Return the payload's ``score``, else its ``quality``, else 50.

    A zero score falls through to the next candidate.
    """
    for key in ("score", "quality"):
        value = _as_number(data.get(key))
        if value:
            return value
    return DEFAULT_SCORE


def determine_trend(
    current_score: float,
    previous_score: Optional[float],
    deadband: float = DEFAULT_TREND_DEADBAND,
) -> Trend:
    """Compare against the previous score of the same pattern."""
    if previous_score is None:
        return Trend.STABLE
    if current_score > previous_score + deadband:
        return Trend.UP
    if current_score < previous_score - deadband:
        return Trend.DOWN
    return Trend.STABLE


def assess_impact(data: Mapping[str, Any]) -> Impact:
    if data.get("critical") or data.get("blocking"):
        return Impact.HIGH

    score = _as_number(data.get("score"))
    if data.get("important") or (score is not None and score < 50):
        return Impact.MEDIUM

    return Impact.LOW


def race_position_for(health_ratio: float) -> RacePosition:
    """Map the share of healthy/improving patterns to a race position."""
    if health_ratio > LEADING_RATIO:
        return RacePosition.LEADING
    if health_ratio > CLOSE_RATIO:
        return RacePosition.CLOSE
    return RacePosition.TRAILING


def race_speed(score: float, trend: Trend) -> float:
    """
    Speed of a race event derived from a pattern score and trend.

    Floored at MIN_SPEED so a race event never stalls or runs backwards.
    """
    raw = BASE_SPEED + (score - DEFAULT_SCORE) / 100 + TREND_SPEED_BONUS[trend]
    return max(MIN_SPEED, raw)
