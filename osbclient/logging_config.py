"""
Logging configuration for osbclient.

Provides centralized structured logging setup with JSON output for production
and human-readable output for development. Broker calls bind their
request identity as the correlation ID of every event they log.
"""

import logging
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

import structlog
from structlog.types import EventDict


# Context variable for correlation ID
correlation_id_var: ContextVar[Optional[str]] = ContextVar("correlation_id", default=None)


def add_correlation_id(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """
    Add correlation ID to log events if present in context.

    Args:
        logger: Logger instance
        method_name: Name of the logging method
        event_dict: Event dictionary to modify

    Returns:
        Modified event dictionary with correlation_id if available
    """
    correlation_id = correlation_id_var.get()
    if correlation_id:
        event_dict["correlation_id"] = correlation_id
    return event_dict


def get_correlation_id() -> Optional[str]:
    """Get the current correlation ID from context."""
    return correlation_id_var.get()


@contextmanager
def correlation_scope(correlation_id: str) -> Iterator[str]:
    """
    Bind a correlation ID for the duration of a block.

    The previous value is restored on exit, so scopes nest.
    """
    token = correlation_id_var.set(correlation_id)
    try:
        yield correlation_id
    finally:
        correlation_id_var.reset(token)


def setup_logging(
    level: str = "INFO",
    log_file: Optional[Path] = None,
    json_format: bool = True,
) -> None:
    """
    Configure structured logging for osbclient.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        log_file: Optional path to log file. If None, logs only to stderr.
        json_format: If True, use JSON format. If False, use human-readable format.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Clear existing handlers to avoid duplicates
    root_logger.handlers.clear()

    if log_file is not None:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(file_handler)
    else:
        stderr_handler = logging.StreamHandler(sys.stderr)
        stderr_handler.setLevel(numeric_level)
        stderr_handler.setFormatter(logging.Formatter("%(message)s"))
        root_logger.addHandler(stderr_handler)

    processors: list = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_correlation_id,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.extend([
            structlog.dev.ConsoleRenderer(colors=True),
        ])

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger instance for a specific module.

    Args:
        name: Logger name (typically __name__ of the module).

    Returns:
        Structured logger instance.
    """
    if name.startswith("osbclient"):
        return structlog.get_logger(name)
    return structlog.get_logger(f"osbclient.{name}")


# Convenience functions for common logging patterns

def log_broker_request(
    logger: structlog.stdlib.BoundLogger,
    broker: str,
    method: str,
    url: str,
    request_id: str,
    api_version: str,
    **kwargs: Any,
) -> None:
    """
    Log an outbound broker request.

    Args:
        logger: Logger instance
        broker: Configured broker name
        method: HTTP method
        url: Target URL (without query string)
        request_id: Value sent in the request identity header
        api_version: Active API version label
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "broker_request",
        "broker": broker,
        "method": method,
        "url": url,
        "request_id": request_id,
        "api_version": api_version,
    }

    log_data.update(kwargs)

    logger.debug("broker_request", **log_data)


def log_broker_response(
    logger: structlog.stdlib.BoundLogger,
    broker: str,
    operation: str,
    status_code: int,
    outcome: str,
    body: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """
    Log how a broker response was classified.

    Args:
        logger: Logger instance
        broker: Configured broker name
        operation: Operation name
        status_code: HTTP status code of the response
        outcome: Outcome kind (sync_result, async_accepted, failure)
        body: Raw response body, only passed when verbose logging is enabled
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "broker_response",
        "broker": broker,
        "operation": operation,
        "status_code": status_code,
        "outcome": outcome,
    }

    if body is not None:
        log_data["body"] = body

    log_data.update(kwargs)

    if outcome == "failure":
        logger.warning("broker_response", **log_data)
    else:
        logger.debug("broker_response", **log_data)


def log_poll_attempt(
    logger: structlog.stdlib.BoundLogger,
    operation: str,
    attempt: int,
    state: Optional[str],
    delay_seconds: Optional[float] = None,
    error: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """
    Log a single last-operation query made by the poller.

    Args:
        logger: Logger instance
        operation: Operation being polled
        attempt: 1-based query number
        state: Reported state, or None when the query failed
        delay_seconds: Wait before the next query, if any
        error: Error text when the query failed
        **kwargs: Additional context to log
    """
    log_data: Dict[str, Any] = {
        "event_type": "poll_attempt",
        "operation": operation,
        "attempt": attempt,
        "state": state,
    }

    if delay_seconds is not None:
        log_data["delay_seconds"] = delay_seconds
    if error is not None:
        log_data["error"] = error

    log_data.update(kwargs)

    if error is not None:
        logger.warning("poll_attempt", **log_data)
    else:
        logger.info("poll_attempt", **log_data)
