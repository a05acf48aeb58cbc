"""
Integration test specific fixtures for API endpoint testing.

The ASGI transport does not run the application lifespan, so the test
monitor and pipeline are injected through dependency overrides.
"""
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient

from pattern_race.api.dependencies import get_monitor, get_pipeline
from pattern_race.main import app


@pytest.fixture
async def api_client(monitor, pipeline) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client wired to the per-test monitor and pipeline.

    Usage:
        response = await api_client.post(
            "/api/v1/patterns/build-status",
            json={"warnings": 2},
        )
        assert response.status_code == 201
    """
    app.dependency_overrides[get_monitor] = lambda: monitor
    app.dependency_overrides[get_pipeline] = lambda: pipeline

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client

    app.dependency_overrides.clear()
