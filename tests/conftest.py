"""
Shared test fixtures for TelePass SDK tests.

Provides configuration and token fixtures; test doubles live in
``helpers``.
"""

from __future__ import annotations

import pytest
import structlog
from hypothesis import settings

from telepass_sdk import telemetry
from telepass_sdk.config import RetryConfig, TelePassConfig

from helpers import make_token

settings.register_profile("ci", max_examples=100)
settings.register_profile("dev", max_examples=50)
settings.load_profile("dev")


@pytest.fixture(autouse=True)
def isolated_telemetry(monkeypatch: pytest.MonkeyPatch):
    """Clients configure telemetry globally; undo it after each test."""
    monkeypatch.setattr(telemetry, "_tracer", None)
    monkeypatch.setattr(telemetry, "_logger", None)
    yield
    structlog.reset_defaults()


@pytest.fixture
def base_config() -> TelePassConfig:
    """Provide a basic SDK configuration for testing."""
    return TelePassConfig(base_url="https://api.telepass.test")


@pytest.fixture
def fast_retry() -> RetryConfig:
    """Retry configuration without real delays."""
    return RetryConfig(max_attempts=3, base_delay=0.0)


@pytest.fixture
def token_t1() -> str:
    return make_token("admin-1")


@pytest.fixture
def token_t2() -> str:
    return make_token("admin-1", expires_in=7200)


@pytest.fixture
def expired_token() -> str:
    return make_token("admin-1", expires_in=-60)
