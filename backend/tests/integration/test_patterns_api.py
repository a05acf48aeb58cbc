"""
Integration tests for the pattern tracking API.
"""
from httpx import AsyncClient


class TestPatternsAPI:
    """Test suite for /api/v1/patterns endpoints."""

    async def test_track_pattern(self, api_client: AsyncClient):
        response = await api_client.post(
            "/api/v1/patterns/build-status",
            json={"warnings": 2, "score": 45, "branch": "main"},
        )

        assert response.status_code == 201
        body = response.json()
        assert body["pattern"] == "build-status"
        assert body["type"] == "build"
        assert body["status"] == "warning"
        assert body["data"]["branch"] == "main"
        assert body["metrics"] == {"score": 45.0, "trend": "stable", "impact": "medium"}

    async def test_track_pattern_without_body(self, api_client: AsyncClient):
        response = await api_client.post("/api/v1/patterns/database-check")

        assert response.status_code == 201
        body = response.json()
        assert body["type"] == "component"
        assert body["status"] == "healthy"
        assert body["metrics"]["score"] == 50.0

    async def test_trend_across_requests(self, api_client: AsyncClient):
        await api_client.post("/api/v1/patterns/quality-check", json={"score": 50})
        response = await api_client.post("/api/v1/patterns/quality-check", json={"score": 60})

        assert response.json()["metrics"]["trend"] == "up"

    async def test_list_and_get_patterns(self, api_client: AsyncClient):
        await api_client.post("/api/v1/patterns/git-changes", json={"score": 80})
        await api_client.post("/api/v1/patterns/perf-budget", json={"error": True})

        listing = await api_client.get("/api/v1/patterns")
        assert listing.status_code == 200
        assert {p["pattern"] for p in listing.json()} == {"git-changes", "perf-budget"}

        single = await api_client.get("/api/v1/patterns/perf-budget")
        assert single.status_code == 200
        assert single.json()["status"] == "error"

    async def test_unknown_pattern_returns_404(self, api_client: AsyncClient):
        response = await api_client.get("/api/v1/patterns/never-seen")

        assert response.status_code == 404
        assert "never-seen" in response.json()["detail"]

    async def test_metrics_name_is_reserved(self, api_client: AsyncClient, monitor):
        response = await api_client.post("/api/v1/patterns/metrics", json={"score": 80})

        assert response.status_code == 409
        assert "reserved" in response.json()["detail"]
        assert monitor.get_active_patterns() == []

        injected = await api_client.post("/api/v1/race/inject/metrics", json={})
        assert injected.status_code == 409

    async def test_non_finite_score_falls_back_to_default(self, api_client: AsyncClient):
        response = await api_client.post("/api/v1/patterns/build-status", json={"score": "inf"})

        assert response.status_code == 201
        assert response.json()["metrics"]["score"] == 50.0

    async def test_metrics(self, api_client: AsyncClient):
        for i in range(5):
            await api_client.post(f"/api/v1/patterns/pattern-{i}", json={"score": 90})

        response = await api_client.get("/api/v1/patterns/metrics")

        assert response.status_code == 200
        assert response.json() == {
            "total_components": 147,
            "average_score": 63.67,
            "active_patterns": 5,
            "race_position": "leading",
            "momentum": 1.0,
        }


class TestSystemEndpoints:
    async def test_health(self, api_client: AsyncClient):
        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    async def test_root(self, api_client: AsyncClient):
        response = await api_client.get("/")

        assert response.status_code == 200
        assert response.json()["health"] == "/health"
