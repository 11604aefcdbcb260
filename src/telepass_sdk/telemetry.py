"""OpenTelemetry and structlog integration for the TelePass SDK.

Spans cover request dispatch, credential refresh and social login. Log
events are structured; anything that looks like a credential is redacted
before rendering.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ParamSpec, TypeVar

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

if TYPE_CHECKING:
    from collections.abc import Generator, MutableMapping

    from .config import TelemetryConfig
    from .types import RequestDescriptor

P = ParamSpec("P")
T = TypeVar("T")

SERVICE_NAME = "telepass-admin-sdk"
SERVICE_VERSION = "0.1.0"

REDACTED = "[redacted]"
SENSITIVE_KEYS = frozenset(
    {"authorization", "token", "access_token", "accesstoken", "password", "api_key"}
)

_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def get_tracer() -> trace.Tracer:
    """Get or create the SDK tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(SERVICE_NAME, SERVICE_VERSION)
    return _tracer


def get_logger() -> structlog.BoundLogger:
    """Get or create the SDK logger."""
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(SERVICE_NAME)
    return _logger


def redact_credentials(
    _logger: Any, _method: str, event_dict: MutableMapping[str, Any]
) -> MutableMapping[str, Any]:
    """structlog processor masking credential-bearing fields."""
    for key in list(event_dict):
        if key.lower() in SENSITIVE_KEYS and event_dict[key] is not None:
            event_dict[key] = REDACTED
    return event_dict


def configure_telemetry(config: TelemetryConfig) -> None:
    """Configure logging and tracing for the SDK.

    With telemetry disabled, spans go to a no-op tracer and structlog keeps
    whatever configuration the host application installed.

    Args:
        config: Telemetry configuration.
    """
    global _tracer, _logger

    if not config.enabled:
        _tracer = trace.NoOpTracer()
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            redact_credentials,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            logging.getLevelNamesMapping().get(config.log_level.upper(), logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _tracer = trace.get_tracer(config.service_name, SERVICE_VERSION)
    _logger = structlog.get_logger(config.service_name)


@contextmanager
def request_context(request: RequestDescriptor) -> Generator[None, None, None]:
    """Bind the request's method, path and replay mark to every log event."""
    with structlog.contextvars.bound_contextvars(
        method=request.method,
        path=request.path,
        retried=request.retried,
    ):
        yield


@contextmanager
def trace_operation(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Context manager for tracing an operation.

    Args:
        name: Name of the operation.
        attributes: Optional span attributes.

    Yields:
        The active span.
    """
    tracer = get_tracer()
    with tracer.start_as_current_span(name, attributes=attributes) as span:
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def traced_async(
    name: str | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Wrap an async function in a span named ``name`` (or the function's name)."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        span_name = name or func.__name__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with trace_operation(span_name):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
