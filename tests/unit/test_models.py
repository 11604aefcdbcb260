"""Unit tests for credentials and local token inspection."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from telepass_sdk.models import Credential
from telepass_sdk.tokens import decode_unverified_claims, expiry_from_claims

from helpers import make_token


class TestDecodeUnverifiedClaims:
    """Tests for unsigned claim decoding."""

    def test_decodes_jwt_payload(self) -> None:
        claims = decode_unverified_claims(make_token("admin-7"))
        assert claims["sub"] == "admin-7"
        assert "exp" in claims

    def test_ignores_signature(self) -> None:
        """A tampered signature must not stop the local decode."""
        header, payload, _ = make_token().split(".")
        claims = decode_unverified_claims(f"{header}.{payload}.c2lnbmF0dXJl")
        assert claims["sub"] == "admin-1"

    def test_expired_token_still_decodes(self) -> None:
        claims = decode_unverified_claims(make_token(expires_in=-120))
        assert claims["exp"] < datetime.now(UTC).timestamp()

    @pytest.mark.parametrize("token", ["opaque-session-token", "a.b", "x.y.z", ""])
    def test_opaque_tokens_have_no_claims(self, token: str) -> None:
        assert decode_unverified_claims(token) == {}


class TestExpiryFromClaims:
    """Tests for the exp claim conversion."""

    def test_numeric_exp(self) -> None:
        assert expiry_from_claims({"exp": 0}) == datetime(1970, 1, 1, tzinfo=UTC)

    @pytest.mark.parametrize("claims", [{}, {"exp": "soon"}, {"exp": None}, {"exp": True}])
    def test_missing_or_invalid_exp(self, claims: dict) -> None:
        assert expiry_from_claims(claims) is None


class TestCredential:
    """Tests for the Credential model."""

    def test_from_token_derives_claims_and_expiry(self) -> None:
        credential = Credential.from_token(make_token("admin-3", expires_in=600))

        assert credential.subject == "admin-3"
        assert credential.expires_at is not None
        assert credential.expires_at > datetime.now(UTC)
        assert credential.is_expired() is False

    def test_expired_token(self) -> None:
        credential = Credential.from_token(make_token(expires_in=-5))
        assert credential.is_expired() is True

    def test_explicit_expiry_wins(self) -> None:
        past = datetime.now(UTC) - timedelta(minutes=1)
        credential = Credential(token=make_token(expires_in=3600), expires_at=past)
        assert credential.is_expired() is True

    def test_naive_expiry_is_treated_as_utc(self) -> None:
        naive = datetime(2030, 1, 1)
        credential = Credential(token="opaque", expires_at=naive)
        assert credential.expires_at == datetime(2030, 1, 1, tzinfo=UTC)

    def test_opaque_token_never_expires_locally(self) -> None:
        credential = Credential.from_token("opaque-session-token")
        assert credential.claims == {}
        assert credential.expires_at is None
        assert credential.is_expired() is False

    def test_expiry_compares_against_given_instant(self) -> None:
        credential = Credential.from_token(make_token(expires_in=60))
        later = datetime.now(UTC) + timedelta(minutes=5)
        assert credential.is_expired(later) is True

    def test_authorization_header_value(self) -> None:
        credential = Credential.from_token("abc")
        assert credential.authorization == "Bearer abc"

    def test_empty_token_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Credential(token="")

    def test_token_hidden_from_repr(self) -> None:
        credential = Credential.from_token("super-secret-token")
        assert "super-secret-token" not in repr(credential)

    def test_is_frozen(self) -> None:
        credential = Credential.from_token("abc")
        with pytest.raises(ValidationError):
            credential.token = "other"  # type: ignore[misc]
