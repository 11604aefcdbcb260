"""Google sign-in for admin accounts.

Checks whether an admin account is linked to a Google identity and
registers one when it is not. Both backend calls are made without a
session (the user is not signed in yet) and are wrapped in the bounded
retry policy.
"""

from __future__ import annotations

import secrets
import string
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, ConfigDict, Field

from ..core.errors import ErrorFactory
from ..core.retry_policy import with_retry
from ..errors import SocialLoginError, UpstreamError
from ..telemetry import get_logger, traced_async

if TYPE_CHECKING:
    from ..config import RetryConfig

CHECK_ACCOUNT_PATH = "/api/v1/admin/check-google-account"
REGISTER_PATH = "/api/v1/admin/register"


class GoogleProfile(BaseModel):
    """User profile as returned by Google's userinfo endpoint."""

    model_config = ConfigDict(frozen=True, extra="allow")

    id: str
    email: str
    name: str | None = None
    picture: str | None = None
    given_name: str | None = None
    family_name: str | None = None
    locale: str | None = None


class GoogleAuthData(BaseModel):
    """Identity data sent to the backend."""

    model_config = ConfigDict(frozen=True)

    google_id: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    name: str
    image: str = ""

    @property
    def username(self) -> str:
        """Username derived from the email local part."""
        return self.email.split("@")[0] or f"google_{self.google_id}"


class GoogleAdminSession(BaseModel):
    """Backend payload for a signed-in Google admin."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    username: str | None = None
    email: str
    full_name: str | None = Field(default=None, alias="fullName")
    profile_image: str | None = Field(default=None, alias="profileImage")
    google_id: str | None = Field(default=None, alias="googleId")
    is_google_account: bool = Field(default=True, alias="isGoogleAccount")
    token: str | None = None
    access_token: str | None = Field(default=None, alias="accessToken")
    message: str | None = None


def transform_google_profile(profile: GoogleProfile) -> GoogleAuthData:
    """Map a Google profile onto the backend's identity fields."""
    return GoogleAuthData(
        google_id=profile.id,
        email=profile.email,
        name=profile.name or profile.given_name or profile.email.split("@")[0],
        image=profile.picture or "",
    )


def generate_account_password(length: int = 16) -> str:
    """Random password for Google-backed accounts; it is never shown to anyone."""
    alphabet = string.ascii_letters + string.digits
    body = "".join(secrets.choice(alphabet) for _ in range(length - 4))
    return (
        body
        + secrets.choice(string.ascii_uppercase)
        + secrets.choice(string.digits)
        + secrets.choice("!#$%")
        + secrets.choice(string.ascii_lowercase)
    )


class GoogleAdminService:
    """Backend calls behind "Sign in with Google".

    Args:
        http: Unauthenticated client on the API base URL.
        retry: Retry settings; library defaults when omitted.
    """

    def __init__(self, http: httpx.AsyncClient, retry: RetryConfig | None = None) -> None:
        self._http = http
        self._retry = retry
        self._logger = get_logger()

    async def check_account(self, data: GoogleAuthData) -> GoogleAdminSession | None:
        """Look up the admin linked to ``data``.

        Returns:
            The admin session, or None when the backend reports no account.

        Raises:
            NetworkUnavailable: The backend stayed unreachable.
        """
        self._logger.info("Checking Google admin", email=data.email)
        try:
            body = await self._post(
                CHECK_ACCOUNT_PATH,
                {"googleId": data.google_id, "email": data.email},
            )
        except UpstreamError as e:
            self._logger.info("Google admin not found", email=data.email, status_code=e.status_code)
            return None
        return _session_from(body)

    async def register_account(self, data: GoogleAuthData) -> GoogleAdminSession | None:
        """Register a new admin for ``data`` with a random password."""
        self._logger.info("Registering Google admin", email=data.email)
        body = await self._post(
            REGISTER_PATH,
            {
                "username": data.username,
                "googleId": data.google_id,
                "email": data.email,
                "fullName": data.name,
                "profileImage": data.image,
                "password": generate_account_password(),
                "isGoogleAccount": True,
            },
        )
        return _session_from(body)

    @traced_async("google_authenticate")
    async def authenticate(self, data: GoogleAuthData) -> GoogleAdminSession:
        """Sign in with Google, registering the admin on first use.

        Raises:
            SocialLoginError: Neither lookup nor registration produced a session.
        """
        existing = await self.check_account(data)
        if existing is not None:
            self._logger.info("Existing Google admin found", email=data.email)
            return existing

        try:
            registered = await self.register_account(data)
        except UpstreamError as e:
            raise SocialLoginError(f"Google admin registration rejected: {e.message}") from e
        if registered is None:
            raise SocialLoginError()
        self._logger.info("Google admin registered", email=data.email)
        return registered

    async def _post(self, path: str, body: dict[str, Any]) -> Any:
        async def send() -> Any:
            try:
                response = await self._http.post(path, json=body)
            except httpx.TransportError as e:
                raise ErrorFactory.from_exception(e) from e
            if response.is_error:
                raise ErrorFactory.from_http_response(response)
            return response.json()

        if self._retry is None:
            return await with_retry(send)
        return await with_retry(
            send,
            self._retry.max_attempts,
            base_delay=self._retry.base_delay,
            jitter=self._retry.jitter,
        )


def _session_from(body: Any) -> GoogleAdminSession | None:
    """Extract the ``payload`` envelope of a backend answer."""
    if not isinstance(body, dict) or not isinstance(body.get("payload"), dict):
        return None
    payload = dict(body["payload"])
    payload.setdefault("message", body.get("message"))
    return GoogleAdminSession.model_validate(payload)
