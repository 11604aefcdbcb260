"""Unit tests for the bounded retry policy."""

from __future__ import annotations

import httpx
import pytest

from telepass_sdk.core.retry_policy import is_retryable, retrying, with_retry
from telepass_sdk.errors import (
    InvalidConfigError,
    NetworkUnavailable,
    RefreshFailed,
    RefreshQueueFull,
    Unauthenticated,
    UpstreamError,
)


def _response(status: int) -> httpx.Response:
    return httpx.Response(status, request=httpx.Request("GET", "https://bakong.test/"))


class Flaky:
    """Fails ``failures`` times, then returns ``"ok"``."""

    def __init__(self, failures: int, error: Exception | None = None) -> None:
        self.failures = failures
        self.error = error or NetworkUnavailable()
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.error
        return "ok"


class Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class TestIsRetryable:
    @pytest.mark.parametrize(
        "error",
        [
            NetworkUnavailable(),
            httpx.ConnectError("refused"),
            UpstreamError(_response(500)),
            UpstreamError(_response(503)),
            RuntimeError("unexpected"),
        ],
    )
    def test_retryable(self, error: BaseException) -> None:
        assert is_retryable(error) is True

    @pytest.mark.parametrize(
        "error",
        [
            Unauthenticated(),
            RefreshFailed(),
            RefreshQueueFull(3),
            UpstreamError(_response(400)),
            UpstreamError(_response(422)),
            InvalidConfigError("bad"),
        ],
    )
    def test_not_retryable(self, error: BaseException) -> None:
        assert is_retryable(error) is False

    def test_status_errors(self) -> None:
        server = _response(502)
        client = _response(404)

        assert is_retryable(httpx.HTTPStatusError("x", request=server.request, response=server))
        assert not is_retryable(httpx.HTTPStatusError("x", request=client.request, response=client))


class TestWithRetry:
    """Tests for the retry loop."""

    @pytest.mark.asyncio
    async def test_first_success(self) -> None:
        operation = Flaky(0)
        sleep = Sleeps()

        assert await with_retry(operation, sleep=sleep) == "ok"
        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self) -> None:
        operation = Flaky(2)
        sleep = Sleeps()

        assert await with_retry(operation, 3, sleep=sleep) == "ok"
        assert operation.calls == 3
        assert len(sleep.delays) == 2

    @pytest.mark.asyncio
    async def test_always_failing_runs_exactly_max_attempts(self) -> None:
        """Three attempts, two delays, strictly increasing, then the last error."""
        error = NetworkUnavailable("down")
        operation = Flaky(10, error)
        sleep = Sleeps()

        with pytest.raises(NetworkUnavailable) as exc_info:
            await with_retry(operation, 3, base_delay=1.0, sleep=sleep)

        assert exc_info.value is error
        assert operation.calls == 3
        assert len(sleep.delays) == 2
        assert 0.8 <= sleep.delays[0] <= 1.2
        assert 1.6 <= sleep.delays[1] <= 2.4
        assert sleep.delays[0] < sleep.delays[1]

    @pytest.mark.asyncio
    async def test_non_retryable_fails_immediately(self) -> None:
        operation = Flaky(10, UpstreamError(_response(400)))
        sleep = Sleeps()

        with pytest.raises(UpstreamError):
            await with_retry(operation, 5, sleep=sleep)

        assert operation.calls == 1
        assert sleep.delays == []

    @pytest.mark.asyncio
    async def test_custom_classifier(self) -> None:
        operation = Flaky(10, RuntimeError("nope"))

        with pytest.raises(RuntimeError):
            await with_retry(operation, 4, retryable=lambda e: False, sleep=Sleeps())

        assert operation.calls == 1

    @pytest.mark.asyncio
    async def test_rejects_zero_attempts(self) -> None:
        with pytest.raises(ValueError, match="max_attempts"):
            await with_retry(Flaky(0), 0)

    @pytest.mark.asyncio
    async def test_decorator(self) -> None:
        calls: list[str] = []

        @retrying(3, base_delay=0.0)
        async def check(md5: str) -> str:
            calls.append(md5)
            if len(calls) < 2:
                raise NetworkUnavailable()
            return md5.upper()

        assert await check("abc") == "ABC"
        assert calls == ["abc", "abc"]
        assert check.__name__ == "check"
