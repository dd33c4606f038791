"""
Shared logging configuration for the Employee Directory Access Layer.

Every log event carries the emitting service, the request ID of the HTTP
request being served and, while an upstream call is in progress, the name
of the upstream operation. Retries of a single operation therefore group
under one request ID and one operation name.
"""

import sys
import structlog
import logging
import uuid
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, Optional
from contextvars import ContextVar

# Context variables for request and upstream-call correlation
request_id_var: ContextVar[Optional[str]] = ContextVar('request_id', default=None)
operation_var: ContextVar[Optional[str]] = ContextVar('upstream_operation', default=None)

EventDict = Dict[str, Any]


def configure_logging(service_name: str, log_level: str = "info", json_logs: bool = True) -> None:
    """Configure structured logging for a service.

    ``json_logs=False`` switches to structlog's console renderer for local
    development.
    """
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            service_context(service_name),
            add_correlation_context,
            renderer
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )


def service_context(service_name: str) -> Callable[[Any, str, EventDict], EventDict]:
    """Build a processor stamping events with the service name."""

    def add_service_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("service", service_name)
        return event_dict

    return add_service_context


def add_correlation_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
    """Add request ID and in-flight upstream operation to log events."""
    request_id = request_id_var.get()
    if request_id:
        event_dict["request_id"] = request_id

    operation = operation_var.get()
    if operation:
        event_dict.setdefault("upstream_operation", operation)

    return event_dict


def set_request_id(request_id: Optional[str] = None) -> str:
    """Set request ID in context, generating one when absent."""
    if not request_id:
        request_id = str(uuid.uuid4())
    request_id_var.set(request_id)
    return request_id


@contextmanager
def upstream_operation(name: str) -> Iterator[None]:
    """Tag log events emitted inside the block with an upstream operation."""
    token = operation_var.set(name)
    try:
        yield
    finally:
        operation_var.reset(token)


def clear_context():
    """Clear all context variables."""
    request_id_var.set(None)
    operation_var.set(None)


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)
