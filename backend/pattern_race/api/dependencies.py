"""
Shared API dependencies.

The monitor and pipeline are created by the application lifespan and kept
on ``app.state``; routes receive them through these dependencies so tests
can swap in their own instances with ``app.dependency_overrides``.
"""
from fastapi import HTTPException, Request, status

from pattern_race.services.pattern_monitor import PatternMonitor
from pattern_race.services.race_pipeline import RaceStreamPipeline


def get_monitor(request: Request) -> PatternMonitor:
    return request.app.state.pattern_monitor


def get_pipeline(request: Request) -> RaceStreamPipeline:
    return request.app.state.race_pipeline


# Path segments routed to fixed endpoints under /patterns.
RESERVED_PATTERN_NAMES = frozenset({"metrics"})


def trackable_pattern_name(pattern_name: str) -> str:
    """Reject names that ``GET /patterns/{pattern_name}`` could never return."""
    if pattern_name in RESERVED_PATTERN_NAMES:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Pattern name '{pattern_name}' is reserved",
        )
    return pattern_name
