"""Structured logging for research runs.

Events are named `<component>.<action>` (`search.query_failed`,
`workflow.summary.completed`). The processor chain splits that name, lifts the
run context bound by `perform_research` into a `run` block and keeps the
remaining keyword arguments under `fields`:

    {"timestamp": ..., "level": "warning", "logger": "digest_research.search",
     "message": "search.query_failed", "component": "search",
     "run": {"correlation_id": "1f2e3d4c", "topic": "observability"},
     "fields": {"search_query": "otel vs jaeger", "intent": "competitive", "error": "503"}}

Output is JSON in production and one line per event with `testing=True`.
"""

import logging
import os
import sys
from datetime import datetime
from typing import Any

import structlog
from structlog.types import EventDict, WrappedLogger

DEFAULT_LOG_LEVEL = "INFO"

RUN_KEYS = ("correlation_id", "topic")
# Shown first, in this order, by the one-line formatter
KEY_FIELDS = ("phase", "intent", "search_query", "depth", "duration_ms", "error")

MAX_VALUE_LENGTH = 50
MAX_TOPIC_LENGTH = 30
CORRELATION_ID_DISPLAY_LENGTH = 8


def split_event_name(event: str) -> tuple[str, str]:
    """`"workflow.summary.completed"` -> `("workflow", "summary.completed")`.

    Undotted names have no component.
    """
    component, dot, action = event.partition(".")
    if not dot:
        return "", event
    return component, action


def _shorten(value: Any, limit: int = MAX_VALUE_LENGTH) -> str:
    text = str(value)
    if len(text) > limit:
        return f"{text[: limit - 3]}..."
    return text


def _structure_event(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
    message = str(event_dict.pop("event", ""))
    component, _action = split_event_name(message)

    structured: EventDict = {
        key: event_dict.pop(key) for key in ("timestamp", "level", "logger") if key in event_dict
    }
    structured["message"] = message
    if component:
        structured["component"] = component

    run = {key: event_dict.pop(key) for key in RUN_KEYS if key in event_dict}
    if run:
        structured["run"] = run
    if event_dict:
        structured["fields"] = dict(event_dict)
    return structured


class RunLineFormatter:
    """Renders `HH:MM:SS [LEVEL] message key=value ... [run:<id> <topic>]`."""

    def __call__(self, _: WrappedLogger, __: str, event_dict: EventDict) -> str:
        level = str(event_dict.get("level", "info")).upper()
        head = f"{self.format_time(event_dict.get('timestamp', ''))} [{level}] {event_dict.get('message', '')}"

        fields = event_dict.get("fields", {})
        ordered = [key for key in KEY_FIELDS if key in fields]
        ordered += [key for key in fields if key not in KEY_FIELDS]
        parts = [head, *(f"{key}={_shorten(fields[key])}" for key in ordered)]

        run = event_dict.get("run")
        if run:
            parts.append(self.format_run(run))
        return " ".join(parts)

    @staticmethod
    def format_time(timestamp: str) -> str:
        if not timestamp:
            return "--:--:--"
        try:
            return datetime.fromisoformat(timestamp.replace("Z", "+00:00")).strftime("%H:%M:%S")
        except ValueError:
            return timestamp

    @staticmethod
    def format_run(run: dict[str, Any]) -> str:
        correlation_id = str(run.get("correlation_id", "-"))[:CORRELATION_ID_DISPLAY_LENGTH]
        topic = run.get("topic")
        if topic:
            return f"[run:{correlation_id} {_shorten(topic, MAX_TOPIC_LENGTH)}]"
        return f"[run:{correlation_id}]"


def configure_structlog(testing: bool = False) -> None:
    """Configure structured logging with JSON or one-line output."""
    log_level = os.environ.get("LOGGING_LEVEL", DEFAULT_LOG_LEVEL).upper()
    level = getattr(logging, log_level, logging.INFO)

    logging.basicConfig(format="%(message)s", level=level, stream=sys.stdout)
    logging.getLogger().setLevel(level)

    processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
        _structure_event,
        RunLineFormatter() if testing else structlog.processors.JSONRenderer(default=str),
    ]

    structlog.configure(
        processors=processors,  # type: ignore[arg-type]
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )


def bind_run_context(correlation_id: str, topic: str) -> None:
    """Tag every following log line of this task with the research run."""
    structlog.contextvars.bind_contextvars(correlation_id=correlation_id, topic=topic)


def get_run_context() -> dict[str, Any]:
    return structlog.contextvars.get_contextvars()


def clear_run_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = "") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name or __name__)  # type: ignore
