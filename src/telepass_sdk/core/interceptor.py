"""Request interceptor: attaches the bearer credential to outbound calls."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING, Callable

from ..errors import Unauthenticated
from ..telemetry import get_logger
from ..types import ContentProfile

if TYPE_CHECKING:
    from ..models import Credential
    from ..session import CredentialAccessor
    from ..types import RequestDescriptor

JSON_CONTENT_TYPE = "application/json"


def apply_profile(headers: dict[str, str], profile: ContentProfile) -> None:
    """Set the content headers for a call kind.

    JSON calls send ``application/json``. Multipart uploads must not carry
    a preset ``Content-Type``: httpx writes ``multipart/form-data`` with the
    boundary itself.
    """
    for key in [k for k in headers if k.lower() == "content-type"]:
        del headers[key]
    if profile is ContentProfile.JSON:
        headers["Content-Type"] = JSON_CONTENT_TYPE
        headers.setdefault("Accept", JSON_CONTENT_TYPE)


class RequestInterceptor:
    """Runs before every outbound call.

    Fetches the current credential, rejects locally when it is missing or
    expired, and otherwise sets ``Authorization`` and the content headers.
    Nothing is cached between calls.
    """

    def __init__(
        self,
        accessor: CredentialAccessor,
        *,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._accessor = accessor
        self._clock = clock or (lambda: datetime.now(UTC))
        self._logger = get_logger()

    async def intercept(
        self,
        request: RequestDescriptor,
        credential: Credential | None = None,
    ) -> RequestDescriptor:
        """Attach the credential to ``request``.

        Args:
            request: Outbound request; its headers are mutated in place.
            credential: Credential to use instead of the accessor's, such as
                the one a refresh just returned for a replay.

        Returns:
            The same request, ready for the transport.

        Raises:
            Unauthenticated: No credential, or its expiry claim has passed.
                No network call has been made.
        """
        if credential is None:
            credential = await self._accessor.current_credential()
        if credential is None:
            self._logger.warning(
                "No session credential, request rejected",
                method=request.method,
                path=request.path,
            )
            raise Unauthenticated(Unauthenticated.MISSING)

        self._check_expiry(credential, request)

        request.headers["Authorization"] = credential.authorization
        apply_profile(request.headers, request.profile)
        return request

    def _check_expiry(self, credential: Credential, request: RequestDescriptor) -> None:
        if credential.is_expired(self._clock()):
            self._logger.warning(
                "Credential expired, request rejected",
                method=request.method,
                path=request.path,
                expires_at=credential.expires_at.isoformat() if credential.expires_at else None,
            )
            raise Unauthenticated(Unauthenticated.EXPIRED)
