"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog


def _render_object_refs(_logger: Any, _method: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace Kubernetes objects bound as log values with ``namespace/name``."""
    for key, value in event_dict.items():
        metadata = getattr(value, "metadata", None)
        name = getattr(metadata, "name", None)
        if name is None:
            continue
        namespace = getattr(metadata, "namespace", "")
        event_dict[key] = f"{namespace}/{name}" if namespace else name
    return event_dict


def setup_logging(level: str = "info", stream: TextIO | None = None) -> None:
    """Configure structlog for JSON output, to stderr unless *stream* is given."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            _render_object_refs,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
