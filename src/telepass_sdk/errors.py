"""Error classes for the TelePass admin SDK.

Structured error hierarchy with error codes and correlation IDs.
Every error raised by the authenticated client layer derives from
:class:`TelePassError`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import httpx


class ErrorCode(StrEnum):
    """Standardized error codes for the TelePass SDK."""

    # Authentication errors (1xxx)
    MISSING_CREDENTIAL = "AUTH_1001"
    EXPIRED_CREDENTIAL = "AUTH_1002"
    UNAUTHENTICATED = "AUTH_1003"
    REFRESH_FAILED = "AUTH_1004"
    REFRESH_QUEUE_FULL = "AUTH_1005"
    SOCIAL_LOGIN_FAILED = "AUTH_1006"

    # Validation errors (2xxx)
    INVALID_CONFIG = "VAL_2001"

    # Network errors (3xxx)
    NETWORK_UNAVAILABLE = "NET_3001"

    # Upstream errors (4xxx / 5xxx)
    UPSTREAM_CLIENT_ERROR = "UPS_4001"
    UPSTREAM_SERVER_ERROR = "UPS_5001"


class TelePassError(Exception):
    """Base error for the TelePass SDK with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        status_code: int | None = None,
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if isinstance(code, str) else code.value
        self.status_code = status_code
        self.correlation_id = correlation_id
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "correlation_id": self.correlation_id,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class Unauthenticated(TelePassError):
    """No usable credential: missing, expired, or rejected by the server."""

    MISSING = "missing-credential"
    EXPIRED = "expired-credential"
    REJECTED = "rejected-credential"
    REJECTED_AFTER_REFRESH = "rejected-after-refresh"

    _codes = {
        MISSING: ErrorCode.MISSING_CREDENTIAL,
        EXPIRED: ErrorCode.EXPIRED_CREDENTIAL,
    }

    def __init__(
        self,
        reason: str = REJECTED,
        message: str | None = None,
        *,
        correlation_id: str | None = None,
    ) -> None:
        super().__init__(
            message or f"Unauthenticated: {reason}",
            self._codes.get(reason, ErrorCode.UNAUTHENTICATED),
            status_code=401,
            correlation_id=correlation_id,
            details={"reason": reason},
        )
        self.reason = reason


class RefreshFailed(TelePassError):
    """The credential refresh operation itself failed."""

    def __init__(
        self,
        message: str = "Failed to refresh credential",
        *,
        reason: str = "error",
        correlation_id: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        details: dict[str, Any] = {"reason": reason}
        if cause is not None:
            details["cause"] = str(cause)
        super().__init__(
            message,
            ErrorCode.REFRESH_FAILED,
            status_code=401,
            correlation_id=correlation_id,
            details=details,
        )
        self.reason = reason
        # Set once the local session has been invalidated for this failure.
        self.handled = False
        self.__cause__ = cause


class RefreshQueueFull(TelePassError):
    """Too many requests are already waiting on the in-flight refresh."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Refresh waiter queue is full ({limit} waiting)",
            ErrorCode.REFRESH_QUEUE_FULL,
            status_code=401,
            details={"limit": limit},
        )
        self.limit = limit


class NetworkUnavailable(TelePassError):
    """The transport could not reach the server; no response was received."""

    def __init__(
        self,
        message: str = "Service unreachable",
        *,
        correlation_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.NETWORK_UNAVAILABLE,
            correlation_id=correlation_id,
            details={"cause": str(cause)} if cause else None,
        )
        self.__cause__ = cause


class UpstreamError(TelePassError):
    """Any server-reported failure unrelated to authentication.

    The original response is kept untouched on ``response`` for the caller
    to render.
    """

    def __init__(
        self,
        response: httpx.Response,
        message: str | None = None,
        *,
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        status = response.status_code
        super().__init__(
            message or f"Request failed with status {status}",
            ErrorCode.UPSTREAM_SERVER_ERROR if status >= 500 else ErrorCode.UPSTREAM_CLIENT_ERROR,
            status_code=status,
            correlation_id=correlation_id,
            details=details,
        )
        self.response = response

    @property
    def is_client_error(self) -> bool:
        return self.status_code is not None and 400 <= self.status_code < 500


class InvalidConfigError(TelePassError):
    """Invalid SDK configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_CONFIG,
            details={"field": field} if field else None,
        )


class SocialLoginError(TelePassError):
    """A social identity provider login could not be completed."""

    def __init__(
        self,
        message: str = "Failed to authenticate with Google",
        *,
        provider: str = "google",
    ) -> None:
        super().__init__(
            message,
            ErrorCode.SOCIAL_LOGIN_FAILED,
            details={"provider": provider},
        )
        self.provider = provider
