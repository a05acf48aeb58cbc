"""
Pattern tracking API Endpoints.

Lets dev scripts and CI jobs report pattern observations over HTTP and
read back the tracked events and aggregate metrics.
"""
import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, HTTPException, status

from pattern_race.api.dependencies import get_monitor, trackable_pattern_name
from pattern_race.schemas.pattern import PatternEventResponse, StreamMetricsResponse
from pattern_race.services.pattern_monitor import PatternMonitor

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/{pattern_name}",
    response_model=PatternEventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def track_pattern(
    pattern_name: str = Depends(trackable_pattern_name),
    payload: Optional[dict[str, Any]] = Body(default=None),
    monitor: PatternMonitor = Depends(get_monitor),
):
    """
    Record one observation of a pattern.

    The body is an arbitrary JSON object. Recognised keys (score, quality,
    warnings, error, failed, improved, critical, blocking, important) steer
    scoring; anything else is stored untouched. The name "metrics" is
    reserved for the aggregate endpoint and rejected with 409.
    """
    event = monitor.track_pattern(pattern_name, payload)
    return PatternEventResponse.model_validate(event)


@router.get("", response_model=list[PatternEventResponse])
async def list_patterns(monitor: PatternMonitor = Depends(get_monitor)):
    """Latest event of every tracked pattern."""
    return [PatternEventResponse.model_validate(e) for e in monitor.get_active_patterns()]


@router.get("/metrics", response_model=StreamMetricsResponse)
async def get_metrics(monitor: PatternMonitor = Depends(get_monitor)):
    """Aggregate stream metrics. Shadows a pattern named "metrics", so that name is reserved."""
    return StreamMetricsResponse.model_validate(monitor.get_current_metrics())


@router.get("/{pattern_name}", response_model=PatternEventResponse)
async def get_pattern(
    pattern_name: str,
    monitor: PatternMonitor = Depends(get_monitor),
):
    event = monitor.get_pattern_history(pattern_name)
    if event is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Pattern '{pattern_name}' is not tracked",
        )
    return PatternEventResponse.model_validate(event)
