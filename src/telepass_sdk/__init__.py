"""TelePass admin SDK: authenticated HTTP client layer."""

from .client import TelePassClient
from .config import RetryConfig, TelemetryConfig, TelePassConfig
from .core import RefreshCoordinator, RequestInterceptor, with_retry
from .errors import (
    ErrorCode,
    InvalidConfigError,
    NetworkUnavailable,
    RefreshFailed,
    RefreshQueueFull,
    SocialLoginError,
    TelePassError,
    Unauthenticated,
    UpstreamError,
)
from .models import Credential
from .session import (
    CredentialAccessor,
    InMemorySessionStore,
    RefreshTrigger,
    SessionRefresher,
    SessionStore,
)
from .signals import NavigationSignals
from .telemetry import configure_telemetry

__all__ = [
    "TelePassClient",
    "TelePassConfig",
    "RetryConfig",
    "TelemetryConfig",
    "RefreshCoordinator",
    "RequestInterceptor",
    "with_retry",
    "ErrorCode",
    "InvalidConfigError",
    "NetworkUnavailable",
    "RefreshFailed",
    "RefreshQueueFull",
    "SocialLoginError",
    "TelePassError",
    "Unauthenticated",
    "UpstreamError",
    "Credential",
    "CredentialAccessor",
    "InMemorySessionStore",
    "RefreshTrigger",
    "SessionRefresher",
    "SessionStore",
    "NavigationSignals",
    "configure_telemetry",
]

__version__ = "0.1.0"
