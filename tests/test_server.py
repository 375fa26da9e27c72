"""Tests for FastAPI server."""

from unittest.mock import AsyncMock, patch

import httpx
import pytest
from fastapi import FastAPI

from digest_research.exceptions import QueryGenerationError, SummaryGenerationError
from digest_research.models import PhaseTimings, ResearchReport, ResearchResult
from digest_research.server import ResearchRequest, get_app, run


def _make_report(query: str = "test", depth: int = 1) -> ResearchReport:
    """Helper to create a valid ResearchReport for mocking."""
    return ResearchReport(
        query=query,
        depth=depth,
        generated_queries=["q"],
        results=[ResearchResult(title="T", url="https://example.org", relevance=0.8)],
        summary="S",
        total_results=1,
        relevance_score=0.8,
        timings=PhaseTimings(planning_ms=10, searching_ms=20, summary_ms=30, total_ms=60),
    )


@pytest.fixture
def app() -> FastAPI:
    return get_app()


class TestResearchRequest:
    def test__defaults_to_depth_one(self) -> None:
        assert ResearchRequest(query="observability").depth == 1

    def test__blank_query__rejected(self) -> None:
        with pytest.raises(ValueError):
            ResearchRequest(query="   ")


class TestResearchEndpoint:
    """Tests for /research endpoint."""

    @pytest.mark.asyncio
    async def test__valid_query__returns_200(self, app: FastAPI) -> None:
        workflow = AsyncMock(return_value=_make_report("test query", depth=2))
        with patch("digest_research.server.perform_research", new=workflow):
            async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post("/research", json={"query": "test query", "depth": 2})
                assert response.status_code == 200
                data = response.json()
                assert data["query"] == "test query"
                assert data["results"][0]["relevance"] == 0.8
                assert data["timings"]["total_ms"] == 60

        workflow.assert_awaited_once_with("test query", 2)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [
            {"query": ""},
            {"query": "   "},
            {"query": "x" * 1001},
            {"query": "test", "depth": 0},
            {"query": "test", "depth": 6},
        ],
    )
    async def test__invalid_request__returns_422(self, app: FastAPI, body: dict) -> None:
        workflow = AsyncMock(return_value=_make_report())
        with patch("digest_research.server.perform_research", new=workflow):
            async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post("/research", json=body)
                assert response.status_code == 422
                # FastAPI's default validation error format
                assert "detail" in response.json()

        workflow.assert_not_awaited()

    @pytest.mark.asyncio
    async def test__query_generation_error__returns_422(self, app: FastAPI) -> None:
        with patch(
            "digest_research.server.perform_research",
            new=AsyncMock(side_effect=QueryGenerationError(intent="general", topic="test", reason="model down")),
        ):
            async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post("/research", json={"query": "test query"})
                assert response.status_code == 422
                data = response.json()
                assert data["error"] == "QueryGenerationError"
                assert data["detail"] == "Unable to plan research queries. Please try a different topic."

    @pytest.mark.asyncio
    async def test__summary_generation_error__returns_422(self, app: FastAPI) -> None:
        with patch(
            "digest_research.server.perform_research",
            new=AsyncMock(side_effect=SummaryGenerationError(reason="model down")),
        ):
            async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post("/research", json={"query": "test query"})
                assert response.status_code == 422
                data = response.json()
                assert data["error"] == "SummaryGenerationError"
                assert data["detail"] == "Unable to generate research summary. Please try again."
                assert "model down" not in data["detail"]

    @pytest.mark.asyncio
    async def test__unexpected_error__returns_500(self, app: FastAPI) -> None:
        with patch(
            "digest_research.server.perform_research",
            new=AsyncMock(side_effect=RuntimeError("Unexpected error")),
        ):
            async with httpx.AsyncClient(
                transport=httpx.ASGITransport(app=app, raise_app_exceptions=False), base_url="http://test"
            ) as client:
                response = await client.post("/research", json={"query": "test query"})
                assert response.status_code == 500
                data = response.json()
                assert data["error"] == "InternalServerError"


class TestDemoMode:
    """Tests for ?demo=true on /research."""

    @pytest.mark.asyncio
    async def test__demo__runs_engine_over_canned_collaborators(
        self, app: FastAPI, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("ENVIRONMENT", "development")
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.post("/research?demo=true", json={"query": "observability", "depth": 2})
            assert response.status_code == 200
            data = response.json()
            assert data["query"] == "observability"
            assert data["total_results"] == 35
            assert data["clustering"] is not None
            assert data["summary"]

    @pytest.mark.asyncio
    async def test__demo__blocked_in_production(self, app: FastAPI, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("ENVIRONMENT", "production")
        workflow = AsyncMock(return_value=_make_report())
        with patch("digest_research.server.perform_research", new=workflow):
            async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
                response = await client.post("/research?demo=true", json={"query": "observability"})
                assert response.status_code == 403

        workflow.assert_not_awaited()


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test__health__returns_ok(self, app: FastAPI) -> None:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health")
            assert response.status_code == 200
            data = response.json()
            assert data["status"] == "ok"
            assert data["version"] == "0.1.0"

    @pytest.mark.asyncio
    async def test__liveness__returns_alive(self, app: FastAPI) -> None:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/liveness")
            assert response.status_code == 200
            assert response.json()["status"] == "alive"

    @pytest.mark.asyncio
    async def test__readiness__returns_ready(self, app: FastAPI) -> None:
        async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
            response = await client.get("/health/readiness")
            assert response.status_code == 200
            assert response.json()["status"] == "ready"


class TestAppFactory:
    """Tests for app factory function."""

    def test__get_app__has_routes(self) -> None:
        routes = [route.path for route in get_app().routes]
        assert "/research" in routes
        assert "/research/stream" in routes
        assert "/health" in routes
        assert "/health/liveness" in routes
        assert "/health/readiness" in routes

    def test__run__serves_app_on_port(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("PORT", "9090")
        monkeypatch.delenv("HOST", raising=False)
        with patch("digest_research.server.uvicorn.run") as uvicorn_run:
            run()

        args, kwargs = uvicorn_run.call_args
        assert args == ("digest_research.server:app",)
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9090
