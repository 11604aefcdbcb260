"""Single-flight credential refresh with a FIFO waiter queue.

States:

- ``idle``: no refresh running. The first caller to report an
  authentication failure becomes the leader and runs the refresh trigger.
- ``refreshing``: later callers are queued as :class:`PendingReplay` and
  suspend until the leader settles the refresh.

When the refresh settles, waiters are released in arrival order with the
new credential, or all rejected with the same :class:`RefreshFailed`. The
coordinator is back to ``idle`` with an empty queue after every attempt.
"""

from __future__ import annotations

import asyncio
from collections import deque
from typing import TYPE_CHECKING

from ..errors import RefreshFailed, RefreshQueueFull
from ..telemetry import get_logger, trace_operation
from ..types import PendingReplay, RefreshPhase

if TYPE_CHECKING:
    from ..models import Credential
    from ..session import RefreshTrigger
    from ..types import RequestDescriptor


class RefreshCoordinator:
    """Coordinates one credential refresh per client at a time.

    Args:
        trigger: Performs the actual re-authentication.
        max_waiters: Upper bound on queued callers; ``None`` is unbounded.
        timeout: Seconds allowed for the trigger; ``None`` waits forever.
    """

    def __init__(
        self,
        trigger: RefreshTrigger,
        *,
        max_waiters: int | None = None,
        timeout: float | None = 30.0,
    ) -> None:
        self._trigger = trigger
        self._max_waiters = max_waiters
        self._timeout = timeout
        self._phase = RefreshPhase.IDLE
        self._waiters: deque[PendingReplay] = deque()
        self._lock = asyncio.Lock()
        self._logger = get_logger()
        self.refresh_count = 0

    @property
    def phase(self) -> RefreshPhase:
        return self._phase

    @property
    def in_progress(self) -> bool:
        return self._phase is RefreshPhase.REFRESHING

    @property
    def waiter_count(self) -> int:
        return len(self._waiters)

    async def acquire(self, request: RequestDescriptor) -> Credential:
        """Obtain a fresh credential after ``request`` failed authentication.

        Either runs the refresh (first caller) or waits behind the one in
        flight. Never starts a second concurrent refresh.

        Raises:
            RefreshFailed: The refresh failed, timed out or was cancelled.
            RefreshQueueFull: ``max_waiters`` callers are already queued.
        """
        async with self._lock:
            leading = self._phase is RefreshPhase.IDLE
            if leading:
                self._phase = RefreshPhase.REFRESHING
            else:
                waiter = self._enqueue(request)

        if not leading:
            return await waiter.future
        return await self._lead()

    def _enqueue(self, request: RequestDescriptor) -> PendingReplay:
        if self._max_waiters is not None and len(self._waiters) >= self._max_waiters:
            raise RefreshQueueFull(self._max_waiters)
        waiter = PendingReplay(request, asyncio.get_running_loop().create_future())
        self._waiters.append(waiter)
        self._logger.debug(
            "Request queued behind refresh",
            method=request.method,
            path=request.path,
            position=len(self._waiters),
        )
        return waiter

    async def _lead(self) -> Credential:
        self.refresh_count += 1
        self._logger.info("Credential refresh started", refresh=self.refresh_count)
        try:
            with trace_operation("credential_refresh", attributes={"refresh": self.refresh_count}):
                credential = await self._run_trigger()
        except Exception as e:
            if isinstance(e, RefreshFailed):
                error = e
            else:
                error = RefreshFailed(str(e) or "Credential refresh failed", cause=e)
            rejected = self._release(error)
            self._logger.error(
                "Credential refresh failed",
                reason=error.reason,
                error=error.message,
                waiters=rejected,
            )
            raise error
        else:
            released = self._release(credential)
            self._logger.info("Credential refresh succeeded", waiters=released)
            return credential
        finally:
            # Leader cancelled mid-refresh: do not leave waiters hanging.
            if self._phase is RefreshPhase.REFRESHING:
                self._release(RefreshFailed("Credential refresh was cancelled", reason="cancelled"))

    async def _run_trigger(self) -> Credential:
        if self._timeout is None:
            return await self._trigger.refresh()
        try:
            return await asyncio.wait_for(self._trigger.refresh(), self._timeout)
        except TimeoutError as e:
            raise RefreshFailed(
                f"Credential refresh timed out after {self._timeout}s",
                reason="timeout",
                cause=e,
            ) from e

    def _release(self, outcome: Credential | RefreshFailed) -> int:
        """Reset to idle and settle every queued waiter in FIFO order."""
        waiters = list(self._waiters)
        self._waiters.clear()
        self._phase = RefreshPhase.IDLE

        for waiter in waiters:
            if waiter.future.done():
                continue
            if isinstance(outcome, RefreshFailed):
                waiter.future.set_exception(outcome)
            else:
                waiter.future.set_result(outcome)
        return len(waiters)
