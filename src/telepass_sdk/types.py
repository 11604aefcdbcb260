"""Type definitions for the TelePass SDK."""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from .models import Credential


class ContentProfile(StrEnum):
    """Header profile applied to an outbound call."""

    JSON = "json"
    MULTIPART = "multipart"


class RefreshPhase(StrEnum):
    """Refresh coordinator states."""

    IDLE = "idle"
    REFRESHING = "refreshing"


@dataclass
class RequestDescriptor:
    """Outbound request, mutable so the interceptor can set headers."""

    method: str
    path: str
    params: dict[str, Any] | None = None
    json: Any = None
    data: Any = None
    files: Any = None
    headers: dict[str, str] = field(default_factory=dict)
    profile: ContentProfile = ContentProfile.JSON
    timeout: float | None = None
    # Set once the request has been replayed after a refresh.
    retried: bool = False

    def __post_init__(self) -> None:
        self.method = self.method.upper()


@dataclass
class PendingReplay:
    """A request waiting behind an in-flight refresh."""

    request: RequestDescriptor
    future: asyncio.Future[Credential]


@dataclass
class RetryContext:
    """Per-invocation state of a retried operation."""

    max_attempts: int
    base_delay: float
    jitter: tuple[float, float] = (0.8, 1.2)
    attempt: int = 0

    @property
    def exhausted(self) -> bool:
        return self.attempt >= self.max_attempts

    def next_delay(self) -> float:
        """Delay before the next attempt: ``base_delay * attempt * jitter``."""
        low, high = self.jitter
        return self.base_delay * self.attempt * random.uniform(low, high)  # noqa: S311
