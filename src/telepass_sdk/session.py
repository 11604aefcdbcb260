"""Session collaborators: credential accessors and refresh triggers.

The client layer never owns credentials. It asks a :class:`CredentialAccessor`
for the current one on every attempt and asks a :class:`RefreshTrigger` for a
fresh one when the server rejects it.
"""

from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Protocol, runtime_checkable

from .errors import RefreshFailed
from .models import Credential
from .telemetry import get_logger


@runtime_checkable
class CredentialAccessor(Protocol):
    """Supplies the current credential on demand; may perform I/O."""

    async def current_credential(self) -> Credential | None:
        ...


@runtime_checkable
class SessionStore(CredentialAccessor, Protocol):
    """Credential accessor whose local session can be replaced or cleared."""

    async def set_credential(self, credential: Credential | str) -> None:
        ...

    async def clear(self) -> None:
        ...


@runtime_checkable
class RefreshTrigger(Protocol):
    """Re-authenticates and returns a fresh credential, or raises."""

    async def refresh(self) -> Credential:
        ...


class InMemorySessionStore:
    """Process-local session store.

    Nothing is persisted across restarts.
    """

    def __init__(self, credential: Credential | str | None = None) -> None:
        self._credential = _coerce(credential) if credential is not None else None
        self._lock = asyncio.Lock()

    async def current_credential(self) -> Credential | None:
        return self._credential

    async def set_credential(self, credential: Credential | str) -> None:
        async with self._lock:
            self._credential = _coerce(credential)

    async def clear(self) -> None:
        async with self._lock:
            self._credential = None


class SessionRefresher:
    """Refresh trigger that replays a sign-in flow, then re-reads the session.

    Args:
        sign_in: Awaitable callable that re-authenticates and updates the
            session store as a side effect.
        session: The store to read the refreshed credential from.
    """

    def __init__(
        self,
        sign_in: Callable[[], Awaitable[object]],
        session: CredentialAccessor,
    ) -> None:
        self._sign_in = sign_in
        self._session = session
        self._logger = get_logger()

    async def refresh(self) -> Credential:
        await self._sign_in()
        credential = await self._session.current_credential()
        if credential is None:
            raise RefreshFailed("No token in refreshed session", reason="empty-session")
        self._logger.info("Session refreshed", subject=credential.subject)
        return credential


def _coerce(credential: Credential | str) -> Credential:
    if isinstance(credential, Credential):
        return credential
    return Credential.from_token(credential)
