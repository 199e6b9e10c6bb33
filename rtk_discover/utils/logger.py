"""Structured logging utilities for rtk-discover.

This module provides structured logging using structlog. Entries are written
to stderr because stdout belongs to the hook or CLI that embeds the pipeline.
Every entry produced while one agent command line is processed can carry a
``context_id`` for correlation.
"""

import logging
import sys
import time
from contextvars import ContextVar
from typing import Any, Optional

import structlog
from structlog.types import EventDict, Processor

# Context variable for command-line correlation
context_id_var: ContextVar[Optional[str]] = ContextVar("context_id", default=None)


def add_context_id(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add context_id to log context if available."""
    context_id = context_id_var.get()
    if context_id:
        event_dict["context_id"] = context_id
    return event_dict


def add_timestamp(logger: logging.Logger, method_name: str, event_dict: EventDict) -> EventDict:
    """Add epoch timestamp to log entries."""
    event_dict["timestamp"] = time.time()
    return event_dict


def configure_logging(
    log_level: str = "WARNING",
    json_output: bool = True
) -> None:
    """Configure structured logging for the pipeline.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        json_output: If True, output JSON format. If False, use console format.
    """
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        add_context_id,
        add_timestamp,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=False),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, log_level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


def get_logger(name: str = "rtk_discover") -> structlog.stdlib.BoundLogger:
    """Get a configured logger instance.

    Args:
        name: Logger name (typically module name)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name)


def set_context_id(context_id: str) -> None:
    """Set the correlation ID for all subsequent logs in this context."""
    context_id_var.set(context_id)


def clear_context_id() -> None:
    """Clear the correlation ID from context."""
    context_id_var.set(None)


def log_duration(operation: str, start: float, logger: Optional[Any] = None) -> float:
    """Log the elapsed milliseconds since ``start`` (a perf_counter value) at DEBUG.

    Returns the elapsed duration in milliseconds.
    """
    duration_ms = (time.perf_counter() - start) * 1000
    (logger or get_logger()).debug(
        f"{operation} completed",
        operation=operation,
        duration_ms=duration_ms,
    )
    return duration_ms


# Quiet defaults: the pipeline is embedded in hooks that must not chatter.
# Reconfigured from the config file by rtk_discover.config.apply_logging().
configure_logging()
