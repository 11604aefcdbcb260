"""Pydantic models for the TelePass SDK.

Frozen models for values that flow through the client layer unchanged.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .tokens import decode_unverified_claims, expiry_from_claims


class Credential(BaseModel):
    """Bearer credential supplied by a session store.

    Built from a token alone, the claims and expiry are derived by decoding
    the token locally. See :mod:`telepass_sdk.tokens` for why that decode
    is not a security check.
    """

    model_config = ConfigDict(frozen=True)

    token: str = Field(..., min_length=1, repr=False)
    expires_at: datetime | None = None
    claims: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def derive_claims(self) -> Self:
        """Fill claims and expiry from the token when not given explicitly."""
        # Use object.__setattr__ since model is frozen
        if not self.claims:
            object.__setattr__(self, "claims", decode_unverified_claims(self.token))
        if self.expires_at is None:
            object.__setattr__(self, "expires_at", expiry_from_claims(self.claims))
        elif self.expires_at.tzinfo is None:
            object.__setattr__(self, "expires_at", self.expires_at.replace(tzinfo=UTC))
        return self

    @classmethod
    def from_token(cls, token: str) -> Self:
        return cls(token=token)

    @property
    def subject(self) -> str | None:
        sub = self.claims.get("sub")
        return str(sub) if sub is not None else None

    def is_expired(self, now: datetime | None = None) -> bool:
        """Check the expiry claim against ``now``.

        A credential without an expiry claim is never considered expired
        locally; the server decides.
        """
        if self.expires_at is None:
            return False
        return self.expires_at < (now or datetime.now(UTC))

    @property
    def authorization(self) -> str:
        """Bearer form of the token for the ``Authorization`` header."""
        return f"Bearer {self.token}"
