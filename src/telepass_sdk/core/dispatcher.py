"""Response classification and dispatch.

Every authenticated call goes through :meth:`Dispatcher.dispatch`:

- network failures surface as :class:`NetworkUnavailable` and ask the UI
  shell to show the error view; they are never refreshed or retried here;
- authentication failures on a first attempt go to the refresh coordinator
  and the request is replayed once, marked as retried;
- authentication failures on a replay, and refresh failures, are terminal:
  the local session is cleared and the shell is sent back to login;
- every other failure is surfaced unchanged as :class:`UpstreamError`.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING

import httpx

from ..errors import NetworkUnavailable, RefreshFailed, Unauthenticated
from ..telemetry import get_logger, request_context, trace_operation
from .errors import ErrorFactory

if TYPE_CHECKING:
    from ..models import Credential
    from ..session import SessionStore
    from ..signals import NavigationSignals
    from ..types import RequestDescriptor
    from .interceptor import RequestInterceptor
    from .refresh import RefreshCoordinator


class FailureClass(StrEnum):
    """How a dispatch outcome is handled."""

    NONE = "none"
    NETWORK = "network"
    AUTHENTICATION = "authentication"
    UPSTREAM = "upstream"


def classify(outcome: httpx.Response | BaseException) -> FailureClass:
    """Classify a response or a dispatch exception."""
    if isinstance(outcome, httpx.Response):
        if outcome.status_code == 401:
            return FailureClass.AUTHENTICATION
        if outcome.status_code >= 400:
            return FailureClass.UPSTREAM
        return FailureClass.NONE
    if isinstance(outcome, (NetworkUnavailable, httpx.TransportError)):
        return FailureClass.NETWORK
    if isinstance(outcome, (Unauthenticated, RefreshFailed)):
        return FailureClass.AUTHENTICATION
    return FailureClass.UPSTREAM


class Dispatcher:
    """Sends intercepted requests and routes their failures.

    Args:
        http: Transport used for every attempt.
        interceptor: Attaches the credential before each attempt.
        coordinator: Shared single-flight refresh coordinator.
        session: Local session, cleared on unrecoverable auth failures.
        signals: Redirect signals for the UI shell.
        login_path: Redirect target after unrecoverable auth failures.
        error_path: Redirect target after network failures.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        interceptor: RequestInterceptor,
        coordinator: RefreshCoordinator,
        *,
        session: SessionStore,
        signals: NavigationSignals,
        login_path: str = "/",
        error_path: str = "/error",
    ) -> None:
        self._http = http
        self._interceptor = interceptor
        self._coordinator = coordinator
        self._session = session
        self._signals = signals
        self._login_path = login_path
        self._error_path = error_path
        self._logger = get_logger()

    @property
    def coordinator(self) -> RefreshCoordinator:
        return self._coordinator

    async def dispatch(
        self,
        request: RequestDescriptor,
        credential: Credential | None = None,
    ) -> httpx.Response:
        """Send ``request``, refreshing and replaying once on auth failure.

        ``credential`` overrides the session's current one; replays carry the
        credential returned by the refresh.

        Raises:
            NetworkUnavailable: No response was received.
            Unauthenticated: Still rejected after a replay.
            RefreshFailed: The refresh this request waited on failed.
            RefreshQueueFull: Too many requests already wait on a refresh.
            UpstreamError: Any other 4xx/5xx response.
        """
        with request_context(request):
            try:
                return await self._attempt(request, credential)
            except Unauthenticated as e:
                if request.retried:
                    self._logger.warning("Request rejected again after refresh")
                    await self._terminate()
                    raise Unauthenticated(
                        Unauthenticated.REJECTED_AFTER_REFRESH,
                        correlation_id=e.correlation_id,
                    ) from e
                return await self._recover(request, e)

    async def _attempt(
        self, request: RequestDescriptor, credential: Credential | None
    ) -> httpx.Response:
        await self._interceptor.intercept(request, credential)

        try:
            with trace_operation(
                "http_request",
                attributes={
                    "http.method": request.method,
                    "http.url": request.path,
                    "retried": request.retried,
                },
            ):
                response = await self._http.request(
                    request.method,
                    request.path,
                    params=request.params,
                    json=request.json,
                    data=request.data,
                    files=request.files,
                    headers=request.headers,
                    timeout=request.timeout if request.timeout is not None else httpx.USE_CLIENT_DEFAULT,
                )
        except httpx.TransportError as e:
            error = ErrorFactory.from_exception(e)
            self._logger.error("Service unreachable", error=str(e))
            self._signals.redirect_to(self._error_path)
            raise error from e

        if classify(response) is FailureClass.NONE:
            return response

        self._logger.debug("Request failed", status_code=response.status_code)
        raise ErrorFactory.from_http_response(response)

    async def _recover(self, request: RequestDescriptor, error: Unauthenticated) -> httpx.Response:
        self._logger.info("Authentication failed, refreshing credential", reason=error.reason)
        try:
            credential = await self._coordinator.acquire(request)
        except RefreshFailed as refresh_error:
            # Leader and waiters share one error instance.
            if not refresh_error.handled:
                refresh_error.handled = True
                await self._terminate()
            raise

        request.retried = True
        return await self.dispatch(request, credential)

    async def _terminate(self) -> None:
        """Clear the local session and send the shell back to login."""
        await self._session.clear()
        self._signals.redirect_to(self._login_path)
