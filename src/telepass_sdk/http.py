"""HTTP client factories for the TelePass SDK."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .config import TelePassConfig

USER_AGENT = "telepass-admin-sdk/0.1.0 Python"


def create_async_http_client(
    config: TelePassConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create the configured async HTTP client.

    No default ``Content-Type`` is set here; the interceptor applies it per
    call kind so multipart uploads keep their boundary.

    Args:
        config: SDK configuration.
        transport: Optional transport override (tests, proxies).

    Returns:
        Configured httpx.AsyncClient.
    """
    return httpx.AsyncClient(
        base_url=config.base_url_str,
        timeout=httpx.Timeout(config.default_timeout),
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
        },
        follow_redirects=False,
        transport=transport,
    )


def create_public_http_client(
    config: TelePassConfig,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Create an unauthenticated JSON client on the same base URL.

    Used for calls made before a session exists, such as social-login
    account checks.
    """
    return httpx.AsyncClient(
        base_url=config.base_url_str,
        timeout=httpx.Timeout(config.default_timeout),
        headers={
            "User-Agent": USER_AGENT,
            "Accept": "application/json",
            "Content-Type": "application/json",
        },
        follow_redirects=False,
        transport=transport,
    )
