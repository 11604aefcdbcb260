"""Centralized error factory for the TelePass SDK.

Turns httpx responses and exceptions into the SDK error taxonomy with a
consistent structure and correlation IDs.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx

from ..errors import NetworkUnavailable, TelePassError, Unauthenticated, UpstreamError


class ErrorFactory:
    """Centralized error creation with consistent structure."""

    @staticmethod
    def generate_correlation_id() -> str:
        """Generate a unique correlation ID."""
        return str(uuid.uuid4())

    @staticmethod
    def from_http_response(
        response: httpx.Response,
        *,
        correlation_id: str | None = None,
    ) -> TelePassError:
        """Create SDK error from a failed HTTP response.

        Args:
            response: HTTP response with a 4xx/5xx status.
            correlation_id: Optional correlation ID for tracing.

        Returns:
            ``Unauthenticated`` for 401, ``UpstreamError`` otherwise.
        """
        correlation_id = (
            correlation_id
            or response.headers.get("X-Correlation-ID")
            or ErrorFactory.generate_correlation_id()
        )
        details = _body_details(response)

        if response.status_code == 401:
            return Unauthenticated(
                Unauthenticated.REJECTED,
                details.get("message") or "Authentication rejected by server",
                correlation_id=correlation_id,
            )

        return UpstreamError(
            response,
            details.get("message"),
            correlation_id=correlation_id,
            details=details,
        )

    @staticmethod
    def from_exception(
        exc: Exception,
        *,
        correlation_id: str | None = None,
    ) -> TelePassError:
        """Create SDK error from an exception raised while dispatching.

        Args:
            exc: Original exception.
            correlation_id: Optional correlation ID for tracing.

        Returns:
            Appropriate TelePassError subclass.
        """
        if isinstance(exc, TelePassError):
            if exc.correlation_id is None:
                exc.correlation_id = correlation_id or ErrorFactory.generate_correlation_id()
            return exc

        correlation_id = correlation_id or ErrorFactory.generate_correlation_id()

        if isinstance(exc, httpx.HTTPStatusError):
            return ErrorFactory.from_http_response(exc.response, correlation_id=correlation_id)

        if isinstance(exc, httpx.TimeoutException):
            return NetworkUnavailable(
                f"Request timed out: {exc}",
                correlation_id=correlation_id,
                cause=exc,
            )

        if isinstance(exc, httpx.TransportError):
            return NetworkUnavailable(
                f"Connection failed: {exc}",
                correlation_id=correlation_id,
                cause=exc,
            )

        return NetworkUnavailable(
            f"Unexpected error: {exc}",
            correlation_id=correlation_id,
            cause=exc,
        )


def _body_details(response: httpx.Response) -> dict[str, Any]:
    """Pull ``message``/``error`` fields out of a JSON error body, if any."""
    try:
        body = response.json()
    except ValueError:
        return {}
    if not isinstance(body, dict):
        return {}
    return {key: body[key] for key in ("message", "error", "status") if key in body}
