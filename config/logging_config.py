"""Structured logging for the aggregation core, built on structlog."""

import logging
import sys
from typing import TextIO

import structlog


def configure_logging(
    component: str,
    level: str = "INFO",
    json_output: bool = True,
    stream: TextIO | None = None,
) -> structlog.BoundLogger:
    """
    Configure structlog process-wide and return a logger bound to `component`.

    JSON lines go to stdout by default; pass json_output=False for the
    human-readable console renderer during local runs.
    """
    renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.format_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=stream or sys.stdout),
        cache_logger_on_first_use=True,
    )
    return structlog.get_logger(component=component)
