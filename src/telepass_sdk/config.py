"""Configuration for the TelePass admin SDK.

Uses Pydantic v2 frozen models with sensible defaults, mirroring the
environment-level options of the admin console.
"""

from __future__ import annotations

from typing import Annotated, Any, Callable, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    model_validator,
)

from .errors import InvalidConfigError

DEFAULT_BASE_URL = "http://localhost:8080"


class RetryConfig(BaseModel):
    """Bounded backoff settings for flaky external calls."""

    model_config = ConfigDict(frozen=True)

    max_attempts: Annotated[int, Field(ge=1, le=10)] = 3
    base_delay: Annotated[float, Field(ge=0, le=60)] = 1.0
    jitter_min: Annotated[float, Field(gt=0, le=1.0)] = 0.8
    jitter_max: Annotated[float, Field(ge=1.0, le=2.0)] = 1.2

    @property
    def jitter(self) -> tuple[float, float]:
        return (self.jitter_min, self.jitter_max)


class TelemetryConfig(BaseModel):
    """Logging and tracing configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "telepass-admin-sdk"
    log_level: str = "INFO"


class TelePassConfig(BaseModel):
    """Main configuration for the authenticated client layer."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    base_url: HttpUrl = DEFAULT_BASE_URL  # type: ignore[assignment]

    # HTTP settings
    default_timeout_ms: Annotated[int, Field(gt=0, le=300_000)] = 10_000
    upload_timeout_ms: Annotated[int, Field(gt=0, le=600_000)] = 30_000

    # Refresh coordination; None means unbounded / no timeout
    max_refresh_waiters: int | None = Field(default=None, gt=0)
    refresh_timeout: float | None = Field(default=30.0, gt=0, le=300)

    # Navigation targets for the UI shell
    login_path: str = "/"
    error_path: str = "/error"

    retry: RetryConfig = Field(default_factory=RetryConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @model_validator(mode="after")
    def check_paths(self) -> Self:
        """Navigation targets must be absolute paths."""
        for name in ("login_path", "error_path"):
            if not getattr(self, name).startswith("/"):
                msg = f"{name} must start with '/'"
                raise ValueError(msg)
        return self

    @property
    def base_url_str(self) -> str:
        """Get base URL as string without trailing slash."""
        return str(self.base_url).rstrip("/")

    @property
    def default_timeout(self) -> float:
        return self.default_timeout_ms / 1000

    @property
    def upload_timeout(self) -> float:
        return self.upload_timeout_ms / 1000

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "TELEPASS_") -> Self:
        """Create config from environment variables."""
        import os

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        def parse(key: str, convert: Callable[[str], Any], default: Any) -> Any:
            raw = get_env(key)
            if not raw:
                return default
            try:
                return convert(raw)
            except ValueError as e:
                msg = f"{prefix}{key} is not a valid number: {raw!r}"
                raise InvalidConfigError(msg, field=f"{prefix}{key}") from e

        return cls(
            base_url=get_env("BASE_URL", DEFAULT_BASE_URL),
            default_timeout_ms=parse("TIMEOUT_MS", int, 10_000),
            upload_timeout_ms=parse("UPLOAD_TIMEOUT_MS", int, 30_000),
            max_refresh_waiters=parse("MAX_REFRESH_WAITERS", int, None),
            refresh_timeout=parse("REFRESH_TIMEOUT", float, 30.0),
        )
