"""
Edgeguard Logging - structured logging for the remote invocation layer.

Every component logs through structlog so that classification, retry and
handler events share one format: snake_case event names plus key/value
fields, rendered as JSON for log aggregation or as colored console output
during development.

Architecture:
    ::

        configure_logging(level="INFO", json_format=True, service="portal")
            │
            ▼
        structlog processor chain:
          1. TimeStamper (iso)
          2. merge_contextvars      (operation / attempt from LogContext)
          3. add_log_level
          4. service metadata
          5. ECS field names        (JSON only)
          6. JSONRenderer | ConsoleRenderer

Examples:
    >>> from edgeguard.core.logging import configure_logging, get_logger
    >>> configure_logging(level="DEBUG", json_format=False, service="portal")
    >>> logger = get_logger(__name__)
    >>> logger.warning("false_positive_detected", message="edge function quota exceeded")

    Scoping context to one logical invocation:

    >>> with LogContext(operation="book-appointment", attempt=2):
    ...     logger.info("retry_scheduled", delay=0.75)

Tags:
    logging, structlog, observability, edgeguard
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from edgeguard.core.settings import EdgeguardSettings

# Store service name for metadata
_SERVICE_NAME = "edgeguard"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")

    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")

    return event_dict


def configure_logging(
    level: str = "INFO",
    json_format: bool | None = None,
    service: str = "edgeguard",
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging for the application.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console, None for auto (JSON if not tty)
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if json_format is None:
        json_format = not sys.stdout.isatty()

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def configure_from_settings(settings: EdgeguardSettings | None = None) -> None:
    """Configure logging from ``EDGEGUARD_LOG_LEVEL`` / ``EDGEGUARD_JSON_LOGS``.

    Call once at application startup, next to
    ``ResilienceService.from_settings()``.
    """
    settings = settings or EdgeguardSettings()
    configure_logging(level=settings.log_level, json_format=settings.json_logs)


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


class LogContext:
    """Context manager for scoped logging context.

    Values bound on entry are reset to what they were before on exit, so
    nested invocations keep the outer ``operation`` afterwards.

    Example:
        with LogContext(operation="send-prescription"):
            logger.info("attempt_started")
        # Previous context restored here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs
        self._tokens: dict[str, Any] = {}

    def __enter__(self) -> "LogContext":
        self._tokens = structlog.contextvars.bind_contextvars(**self._context)
        return self

    def __exit__(self, *args) -> None:
        structlog.contextvars.reset_contextvars(**self._tokens)

    async def __aenter__(self) -> "LogContext":
        return self.__enter__()

    async def __aexit__(self, *args) -> None:
        self.__exit__(*args)


__all__ = [
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "LogContext",
]
