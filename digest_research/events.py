"""SSE event models for research workflow streaming."""

import json
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class ResearchPhase(str, Enum):
    """Phases of one research run, in execution order."""

    PLANNING = "planning"
    SEARCHING = "searching"
    REFINEMENT = "refinement"
    CLUSTERING = "clustering"
    INSIGHTS = "insights"
    SUMMARY = "summary"


class SSEEventType(str, Enum):
    """SSE event types for research workflow."""

    PHASE_START = "phase_start"
    PHASE_COMPLETE = "phase_complete"
    SEARCH_PROGRESS = "search_progress"
    HEARTBEAT = "heartbeat"
    COMPLETE = "complete"
    ERROR = "error"
    PHASE_WARNING = "phase_warning"


class SSEEvent(BaseModel):
    """Base SSE event model."""

    event: SSEEventType = Field(description="Event type identifier")
    data: dict[str, Any] = Field(description="Event payload data")

    def format(self) -> str:
        """Format as SSE message: 'event: type\\ndata: json\\n\\n'."""
        return f"event: {self.event.value}\ndata: {json.dumps(self.data, default=str)}\n\n"


EventCallback = Callable[[SSEEvent], Awaitable[None]]


class PhaseStartEvent(SSEEvent):
    """Event emitted when a workflow phase begins."""

    event: SSEEventType = SSEEventType.PHASE_START
    data: dict[str, str] = Field(
        description="Phase identifier",
        examples=[{"phase": "planning"}],
    )


class PhaseCompleteEvent(SSEEvent):
    """Event emitted when a workflow phase completes."""

    event: SSEEventType = SSEEventType.PHASE_COMPLETE
    data: dict[str, Any] = Field(
        description="Phase completion details with duration and summary",
        examples=[
            {
                "phase": "searching",
                "duration_ms": 8200,
                "output_summary": {"results": 42, "failed_queries": 1},
            }
        ],
    )


class SearchProgressEvent(SSEEvent):
    """Event emitted after each search query, successful or not."""

    event: SSEEventType = SSEEventType.SEARCH_PROGRESS
    data: dict[str, Any] = Field(
        description="Search progress details",
        examples=[
            {
                "completed": 2,
                "total": 5,
                "current_query": "observability tooling comparison",
                "intent": "competitive",
            }
        ],
    )


class HeartbeatEvent(SSEEvent):
    """Heartbeat event to prevent proxy buffering.

    Formatted as SSE comment (': keepalive\\n\\n') instead of
    named event to avoid requiring client-side handling.
    """

    event: SSEEventType = SSEEventType.HEARTBEAT
    data: dict[str, Any] = Field(
        default_factory=dict,
        description="Empty data for heartbeat",
    )

    def format(self) -> str:
        """Format as SSE comment for compatibility."""
        return ": keepalive\n\n"


class CompleteEvent(SSEEvent):
    """Event emitted when research completes successfully."""

    event: SSEEventType = SSEEventType.COMPLETE
    data: dict[str, Any] = Field(
        description="Full ResearchReport serialized",
        examples=[
            {
                "query": "observability tooling",
                "depth": 2,
                "generated_queries": ["observability tooling overview"],
                "results": [],
                "summary": "...",
                "total_results": 0,
                "relevance_score": 0.0,
            }
        ],
    )


class ErrorEvent(SSEEvent):
    """Event emitted when an error ends the research run."""

    event: SSEEventType = SSEEventType.ERROR
    data: dict[str, str] = Field(
        description="Error details with phase context",
        examples=[
            {
                "error": "Unable to plan research queries. Please try a different topic.",
                "phase": "planning",
                "error_type": "QueryGenerationError",
            }
        ],
    )


class PhaseWarningEvent(SSEEvent):
    """Event emitted when a non-fatal issue occurs during a phase."""

    event: SSEEventType = SSEEventType.PHASE_WARNING
    data: dict[str, str] = Field(
        description="Warning details",
        examples=[
            {
                "phase": "insights",
                "warning": "Insight synthesis failed, continuing without insights",
            }
        ],
    )
