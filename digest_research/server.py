"""FastAPI application for the research service."""

import asyncio
import os
from typing import Any, AsyncIterator

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse, StreamingResponse
from pydantic import BaseModel, Field, ValidationError, field_validator

from digest_research import __version__
from digest_research.demo import DemoSearchProvider, DemoTextGenerator, get_demo_settings, is_demo_mode_allowed
from digest_research.events import CompleteEvent, ErrorEvent, HeartbeatEvent, ResearchPhase, SSEEvent
from digest_research.exceptions import QueryGenerationError, ResearchPipelineError, SummaryGenerationError
from digest_research.logging import configure_structlog, get_logger
from digest_research.models import ResearchReport
from digest_research.workflow import perform_research

log = get_logger(__name__)

# SSE Configuration
HEARTBEAT_INTERVAL = 30  # seconds
MAX_DURATION = 600  # 10 minutes
MAX_QUEUE_SIZE = 100  # Bounded queue to prevent memory leaks

MAX_DEPTH = 5

STREAM_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",  # Disable proxy buffering
    "Connection": "keep-alive",
}


# --- Request/Response schemas ---


class ResearchRequest(BaseModel):
    """Incoming research request."""

    query: str = Field(
        min_length=1,
        max_length=1000,
        description="Research topic to investigate (1-1000 characters)",
        examples=["observability tooling for microservices"],
    )
    depth: int = Field(
        default=1,
        ge=1,
        le=MAX_DEPTH,
        description="Research depth: 1 quick, 2 adds competitive queries and clustering, 3+ adds refinement and insights",
        examples=[2],
    )

    @field_validator("query")
    @classmethod
    def _query_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("query must not be blank")
        return value


class ErrorResponse(BaseModel):
    """Structured error response."""

    error: str = Field(
        description="Error type (QueryGenerationError, SummaryGenerationError, ValidationError, InternalServerError)",
        examples=["QueryGenerationError"],
    )
    detail: str = Field(
        description="User-friendly error message explaining what went wrong",
        examples=["Unable to plan research queries. Please try a different topic."],
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(
        description="Service health status",
        examples=["ok"],
    )
    version: str = Field(
        default="",
        description="Service version (only included in /health endpoint)",
        examples=["0.1.0"],
    )


# --- Exception handlers ---

# Map domain exception types to user-friendly messages
_SAFE_ERROR_MESSAGES: dict[str, str] = {
    "QueryGenerationError": "Unable to plan research queries. Please try a different topic.",
    "SummaryGenerationError": "Unable to generate research summary. Please try again.",
}

_ERROR_PHASES: dict[type[Exception], ResearchPhase] = {
    QueryGenerationError: ResearchPhase.PLANNING,
    SummaryGenerationError: ResearchPhase.SUMMARY,
}


def _get_safe_error_message(exc: Exception) -> str:
    """Get safe error message for a failed research run."""
    return _SAFE_ERROR_MESSAGES.get(type(exc).__name__, "An error occurred processing your request.")


async def _handle_pipeline_error(request: Request, exc: ResearchPipelineError) -> JSONResponse:
    error_type = type(exc).__name__
    log.warning("request.pipeline_error", error_type=error_type, detail=str(exc))
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error=error_type, detail=_get_safe_error_message(exc)).model_dump(),
    )


async def _handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    log.warning("request.validation_error", detail=str(exc))
    return JSONResponse(
        status_code=422,
        content=ErrorResponse(error="ValidationError", detail=str(exc)).model_dump(),
    )


async def _handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.unexpected_error", error=str(exc))
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(error="InternalServerError", detail="An unexpected error occurred.").model_dump(),
    )


def _demo_overrides(demo: bool, query: str, endpoint: str) -> dict[str, Any]:
    """Workflow keyword overrides for demo runs; empty for real runs."""
    if not demo:
        return {}
    if not is_demo_mode_allowed():
        raise HTTPException(
            status_code=403,
            detail="Demo mode not available in this environment",
        )
    log.warning("request.demo_mode_active", query=query, endpoint=endpoint)
    return {
        "search_provider": DemoSearchProvider(),
        "text_generator": DemoTextGenerator(),
        "settings": get_demo_settings(),
    }


# --- App factory ---


def get_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    application = FastAPI(
        title="Digest Research Service",
        description="""
Research orchestration and relevance scoring for technology digests.

## Overview

Researches a topic in up to six phases depending on the requested depth:

1. **Planning** - General, competitive (depth 2+) and technical (depth 3+) search queries
2. **Searching** - Sequential web searches, failed queries are skipped
3. **Refinement** - Follow-up queries from the best early results (depth 3+)
4. **Clustering** - Six fixed categories with coverage gap detection (depth 2+)
5. **Insights** - Competitive, technical and strategic insights (depth 3+)
6. **Summary** - Written summary of the ranked findings
        """,
        version=__version__,
    )

    application.add_exception_handler(ResearchPipelineError, _handle_pipeline_error)  # type: ignore[arg-type]
    application.add_exception_handler(ValidationError, _handle_validation_error)  # type: ignore[arg-type]
    application.add_exception_handler(Exception, _handle_unexpected_error)

    @application.post(
        "/research",
        response_model=ResearchReport,
        status_code=status.HTTP_200_OK,
        summary="Execute Research",
        description="""
Researches a topic and returns the complete report.

## Response Structure

- Generated queries in phase order
- Ranked results with relevance scores in [0, 1]
- Clustering and coverage gaps (depth 2+)
- Actionable insights (depth 3+, omitted when synthesis fails)
- Summary and timing metrics for each phase
        """,
        tags=["Research"],
        response_description="Complete research report",
        responses={
            200: {"description": "Research completed successfully", "model": ResearchReport},
            422: {
                "description": "Research pipeline error (query planning or summary failed)",
                "model": ErrorResponse,
                "content": {
                    "application/json": {
                        "examples": {
                            "query_generation_error": {
                                "summary": "Query Generation Error",
                                "value": {
                                    "error": "QueryGenerationError",
                                    "detail": _SAFE_ERROR_MESSAGES["QueryGenerationError"],
                                },
                            },
                            "summary_generation_error": {
                                "summary": "Summary Generation Error",
                                "value": {
                                    "error": "SummaryGenerationError",
                                    "detail": _SAFE_ERROR_MESSAGES["SummaryGenerationError"],
                                },
                            },
                        }
                    }
                },
            },
            500: {"description": "Internal server error", "model": ErrorResponse},
        },
    )
    async def research(
        body: ResearchRequest,
        demo: bool = Query(default=False, description="Run the engine over canned collaborators for frontend testing"),
    ) -> ResearchReport:
        overrides = _demo_overrides(demo, body.query, "/research")
        return await perform_research(body.query, body.depth, **overrides)

    @application.post(
        "/research/stream",
        response_class=StreamingResponse,
        responses={
            200: {
                "description": "Server-Sent Events stream of research progress",
                "content": {"text/event-stream": {"example": "event: phase_complete\ndata: {...}\n\n"}},
            },
            422: {"model": ErrorResponse},
        },
        summary="Execute research with streaming progress updates",
        description="""
Execute research with real-time progress updates via SSE.

**Event Types:**
- `phase_start`: Phase beginning (planning, searching, refinement, clustering, insights, summary)
- `phase_complete`: Phase finished with duration and summary
- `search_progress`: Individual search completion (N of M)
- `phase_warning`: Non-fatal problem, the run continues
- `heartbeat`: Keep-alive comment every 30s (`: keepalive`)
- `complete`: Final ResearchReport
- `error`: The run failed

**Connection:** Automatically closes after completion or 10-minute timeout.
        """,
        tags=["Research"],
    )
    async def research_stream(
        request: Request,
        research_request: ResearchRequest,
        demo: bool = Query(default=False, description="Run the engine over canned collaborators for frontend testing"),
    ) -> StreamingResponse:
        """Execute research with SSE progress streaming."""
        overrides = _demo_overrides(demo, research_request.query, "/research/stream")

        async def event_generator() -> AsyncIterator[str]:
            """Generate SSE events from workflow execution."""
            event_queue: asyncio.Queue[SSEEvent] = asyncio.Queue(maxsize=MAX_QUEUE_SIZE)
            workflow_complete = asyncio.Event()

            async def event_callback(event: SSEEvent) -> None:
                """Callback for workflow to emit events (with backpressure)."""
                try:
                    await asyncio.wait_for(event_queue.put(event), timeout=5.0)
                except asyncio.TimeoutError:
                    log.warning("stream.event_queue_full", sse_event=event.event)

            async def run_workflow_task() -> None:
                """Background task executing the research workflow."""
                try:
                    report = await perform_research(
                        research_request.query,
                        research_request.depth,
                        event_callback=event_callback,
                        **overrides,
                    )
                    await event_queue.put(CompleteEvent(data=report.model_dump(mode="json")))
                except Exception as e:
                    log.error("stream.workflow_error", error=str(e), exc_info=True)
                    phase = _ERROR_PHASES.get(type(e))
                    await event_queue.put(
                        ErrorEvent(
                            data={
                                "error": _get_safe_error_message(e),
                                "error_type": e.__class__.__name__,
                                "phase": phase.value if phase else "unknown",
                            }
                        )
                    )
                finally:
                    workflow_complete.set()

            workflow_task = asyncio.create_task(run_workflow_task())

            loop = asyncio.get_running_loop()
            start_time = loop.time()
            next_heartbeat = start_time + HEARTBEAT_INTERVAL

            try:
                while not workflow_complete.is_set():
                    current_time = loop.time()
                    elapsed = current_time - start_time

                    if elapsed > MAX_DURATION:
                        log.warning("stream.timeout", elapsed=elapsed, max=MAX_DURATION)
                        workflow_task.cancel()
                        yield ErrorEvent(
                            data={
                                "error": "Research timeout - workflow exceeded 10 minutes",
                                "error_type": "TimeoutError",
                                "phase": "timeout",
                            }
                        ).format()
                        break

                    if await request.is_disconnected():
                        log.info("stream.client_disconnected", elapsed=elapsed)
                        workflow_task.cancel()
                        break

                    # Heartbeat schedule advances by fixed steps, no drift
                    if current_time >= next_heartbeat:
                        yield HeartbeatEvent().format()
                        next_heartbeat += HEARTBEAT_INTERVAL

                    try:
                        event = await asyncio.wait_for(event_queue.get(), timeout=0.1)
                        yield event.format()
                    except asyncio.TimeoutError:
                        continue

                while not event_queue.empty():
                    yield event_queue.get_nowait().format()

            finally:
                workflow_task.cancel()
                try:
                    await asyncio.wait_for(workflow_task, timeout=10.0)
                except asyncio.CancelledError:
                    log.info("stream.workflow_cancelled")
                except asyncio.TimeoutError:
                    log.error("stream.cancellation_timeout")
                except Exception as e:
                    log.exception("stream.cleanup_failed", error=str(e))

        return StreamingResponse(event_generator(), media_type="text/event-stream", headers=STREAM_HEADERS)

    @application.get(
        "/health",
        response_model=HealthResponse,
        status_code=status.HTTP_200_OK,
        summary="Health Check",
        description="General health check endpoint that returns service status and version.",
        tags=["Health"],
    )
    async def health() -> HealthResponse:
        return HealthResponse(status="ok", version=__version__)

    @application.get(
        "/health/liveness",
        response_model=HealthResponse,
        status_code=status.HTTP_200_OK,
        summary="Liveness Probe",
        description="Returns 200 OK if the service is running and can accept requests.",
        tags=["Health"],
    )
    async def liveness() -> HealthResponse:
        return HealthResponse(status="alive")

    @application.get(
        "/health/readiness",
        response_model=HealthResponse,
        status_code=status.HTTP_200_OK,
        summary="Readiness Probe",
        description="Returns 200 OK if the service is ready to handle research requests.",
        tags=["Health"],
    )
    async def readiness() -> HealthResponse:
        return HealthResponse(status="ready")

    return application


def run() -> None:
    """Serve the app with uvicorn. Cloud Run sets PORT; default to 8080."""
    uvicorn.run(
        "digest_research.server:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8080")),
        log_level=os.getenv("LOGGING_LEVEL", "info").lower(),
    )


load_dotenv()
configure_structlog()
app = get_app()
