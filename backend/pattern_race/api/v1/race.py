"""
Race pipeline API Endpoints.

Pull endpoints return snapshots of the race; ``/stream`` pushes every race
event to the client as Server-Sent Events until it disconnects.
"""
import json
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, Request, status
from fastapi.responses import StreamingResponse

from pattern_race.api.dependencies import get_pipeline, trackable_pattern_name
from pattern_race.core.events import RaceEvent
from pattern_race.schemas.pattern import PatternEventResponse
from pattern_race.schemas.race import (
    RaceEventResponse,
    RaceStatsResponse,
    RaceStatusResponse,
)
from pattern_race.services.race_pipeline import RaceStreamPipeline

logger = logging.getLogger(__name__)

router = APIRouter()


def format_sse(event: RaceEvent) -> str:
    """Encode a race event as one Server-Sent Events frame."""
    return f"event: {event.type.value}\ndata: {json.dumps(event.to_dict())}\n\n"


async def race_event_frames(
    pipeline: RaceStreamPipeline,
    is_disconnected: Callable[[], Awaitable[bool]],
    limit: Optional[int] = None,
) -> AsyncIterator[str]:
    """
    SSE frames for race events.

    Ends after ``limit`` events or once the client is gone; the underlying
    pipeline subscription is always released.
    """
    stream = pipeline.create_event_stream()
    sent = 0
    try:
        async for event in stream:
            if await is_disconnected():
                logger.debug("Race stream client disconnected")
                break
            yield format_sse(event)
            sent += 1
            if limit is not None and sent >= limit:
                break
    finally:
        await stream.aclose()


@router.get("/stats", response_model=RaceStatsResponse)
async def get_stats(pipeline: RaceStreamPipeline = Depends(get_pipeline)):
    stats = pipeline.get_current_stats()
    return RaceStatsResponse(
        position=stats["position"],
        speed=stats["speed"],
        active_patterns=stats["active_patterns"],
        momentum=stats["momentum"],
        recent_events=[RaceEventResponse.model_validate(e) for e in stats["recent_events"]],
    )


@router.get("/history", response_model=list[RaceEventResponse])
async def get_history(pipeline: RaceStreamPipeline = Depends(get_pipeline)):
    """Full race history, oldest first."""
    return [RaceEventResponse.model_validate(e) for e in pipeline.get_race_history()]


@router.get("/status", response_model=RaceStatusResponse)
async def get_status(pipeline: RaceStreamPipeline = Depends(get_pipeline)):
    return RaceStatusResponse(status=pipeline.get_streamlined_status())


@router.post(
    "/inject/{pattern_name}",
    response_model=PatternEventResponse,
    status_code=status.HTTP_201_CREATED,
)
async def inject_pattern(
    pattern_name: str = Depends(trackable_pattern_name),
    payload: Optional[dict[str, Any]] = Body(default=None),
    pipeline: RaceStreamPipeline = Depends(get_pipeline),
):
    """Manually stimulate the race with a pattern observation."""
    event = pipeline.inject_pattern(pattern_name, payload)
    return PatternEventResponse.model_validate(event)


@router.get("/stream")
async def stream_race_events(
    request: Request,
    limit: Optional[int] = Query(default=None, ge=1, description="Close after this many events"),
    pipeline: RaceStreamPipeline = Depends(get_pipeline),
):
    return StreamingResponse(
        race_event_frames(pipeline, request.is_disconnected, limit),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
