"""Test doubles shared across the TelePass SDK test suite."""

from __future__ import annotations

import asyncio
import time
from collections.abc import Awaitable, Callable

import httpx
import jwt

from telepass_sdk.models import Credential

SIGNING_KEY = "test-secret-key-that-is-long-enough-for-hs256"


def make_token(subject: str = "admin-1", *, expires_in: int = 3600) -> str:
    """Build an HS256 JWT; the signature is irrelevant to the client layer."""
    now = int(time.time())
    return jwt.encode(
        {"sub": subject, "iat": now, "exp": now + expires_in},
        SIGNING_KEY,
        algorithm="HS256",
    )


Handler = Callable[[httpx.Request], "httpx.Response | Awaitable[httpx.Response]"]


class RecordingTransport(httpx.MockTransport):
    """Mock transport that keeps every request it handled."""

    def __init__(self, handler: Handler) -> None:
        self.requests: list[httpx.Request] = []

        async def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            result = handler(request)
            if asyncio.iscoroutine(result):
                result = await result
            return result

        super().__init__(record)

    @property
    def authorizations(self) -> list[str | None]:
        return [r.headers.get("Authorization") for r in self.requests]


class StubTrigger:
    """Refresh trigger returning a fixed credential, optionally gated."""

    def __init__(
        self,
        credential: Credential | None = None,
        *,
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
        on_refresh: Callable[[Credential], Awaitable[None]] | None = None,
    ) -> None:
        self.credential = credential
        self.error = error
        self.gate = gate
        self.on_refresh = on_refresh
        self.calls = 0

    async def refresh(self) -> Credential:
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if self.error is not None:
            raise self.error
        assert self.credential is not None
        if self.on_refresh is not None:
            await self.on_refresh(self.credential)
        return self.credential


async def wait_until(predicate: Callable[[], bool], *, rounds: int = 200) -> None:
    """Yield to the event loop until ``predicate`` holds."""
    for _ in range(rounds):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")
