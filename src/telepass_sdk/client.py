"""Authenticated TelePass API client.

Applies the telemetry settings, then wires the request interceptor, the
refresh coordinator and the dispatcher around one httpx client. Each client
instance owns its own coordinator, so independent clients never share
refresh state.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

import httpx

from .core.dispatcher import Dispatcher
from .core.interceptor import RequestInterceptor
from .core.refresh import RefreshCoordinator
from .http import create_async_http_client, create_public_http_client
from .services.google_admin import GoogleAdminService
from .services.payment_status import DEFAULT_CHECK_URL, PaymentStatusClient
from .signals import NavigationSignals
from .telemetry import configure_telemetry
from .types import ContentProfile, RequestDescriptor

if TYPE_CHECKING:
    from pydantic import SecretStr

    from .config import TelePassConfig
    from .session import RefreshTrigger, SessionStore


class TelePassClient:
    """Asynchronous client for the TelePass admin API.

    Args:
        config: SDK configuration.
        session: Source of the current credential; cleared on terminal
            authentication failures.
        trigger: Re-authenticates when the server rejects the credential.
        signals: Redirect signals for the UI shell.
        transport: Optional httpx transport override.
    """

    def __init__(
        self,
        config: TelePassConfig,
        *,
        session: SessionStore,
        trigger: RefreshTrigger,
        signals: NavigationSignals | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        configure_telemetry(config.telemetry)
        self.config = config
        self.session = session
        self.signals = signals or NavigationSignals()
        self._transport = transport
        self._http = create_async_http_client(config, transport=transport)
        self._public: httpx.AsyncClient | None = None

        self.coordinator = RefreshCoordinator(
            trigger,
            max_waiters=config.max_refresh_waiters,
            timeout=config.refresh_timeout,
        )
        self.interceptor = RequestInterceptor(session)
        self._dispatcher = Dispatcher(
            self._http,
            self.interceptor,
            self.coordinator,
            session=session,
            signals=self.signals,
            login_path=config.login_path,
            error_path=config.error_path,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the HTTP clients."""
        await self._http.aclose()
        if self._public is not None:
            await self._public.aclose()

    @property
    def public(self) -> httpx.AsyncClient:
        """Unauthenticated client on the same base URL."""
        if self._public is None:
            self._public = create_public_http_client(self.config, transport=self._transport)
        return self._public

    @property
    def google_admin(self) -> GoogleAdminService:
        """Google sign-in calls on the public client, under ``config.retry``."""
        return GoogleAdminService(self.public, self.config.retry)

    def payments(
        self, api_key: SecretStr | str, *, check_url: str = DEFAULT_CHECK_URL
    ) -> PaymentStatusClient:
        """Bakong payment-status checks, under ``config.retry``."""
        return PaymentStatusClient(
            self.public, api_key=api_key, check_url=check_url, retry=self.config.retry
        )

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """Send an authenticated JSON request.

        Returns:
            The successful response.

        Raises:
            TelePassError: See :meth:`Dispatcher.dispatch`.
        """
        descriptor = RequestDescriptor(
            method=method,
            path=path,
            params=params,
            json=json,
            headers=dict(headers or {}),
            profile=ContentProfile.JSON,
            timeout=timeout,
        )
        return await self._dispatcher.dispatch(descriptor)

    async def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("GET", path, **kwargs)

    async def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("POST", path, **kwargs)

    async def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PUT", path, **kwargs)

    async def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("PATCH", path, **kwargs)

    async def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return await self.request("DELETE", path, **kwargs)

    async def upload(
        self,
        path: str,
        *,
        files: Any = None,
        data: dict[str, Any] | None = None,
        method: str = "POST",
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Send an authenticated multipart request (or binary download).

        Uses the multipart header profile and the upload timeout.
        """
        descriptor = RequestDescriptor(
            method=method,
            path=path,
            params=params,
            data=data,
            files=files,
            headers=dict(headers or {}),
            profile=ContentProfile.MULTIPART,
            timeout=self.config.upload_timeout,
        )
        return await self._dispatcher.dispatch(descriptor)
