"""Bounded backoff retry policy for flaky external calls.

Used around social-login account calls and payment-status polling.
Authentication failures and client errors are never retried; transient
network and server failures are retried after
``base_delay * attempt * jitter`` seconds, with ``jitter`` drawn from a
bounded range so concurrent callers do not retry in lockstep.
"""

from __future__ import annotations

import asyncio
import functools
from typing import Awaitable, Callable, ParamSpec, TypeVar

import httpx

from ..errors import (
    NetworkUnavailable,
    RefreshFailed,
    RefreshQueueFull,
    TelePassError,
    Unauthenticated,
    UpstreamError,
)
from ..telemetry import get_logger
from ..types import RetryContext

P = ParamSpec("P")
T = TypeVar("T")

MAX_ATTEMPTS = 3
BASE_DELAY = 1.0
JITTER = (0.8, 1.2)


def is_retryable(exc: BaseException) -> bool:
    """Check if a failure is worth another attempt.

    Args:
        exc: The failure raised by the operation.

    Returns:
        False for authentication failures and 4xx answers, True for
        network failures, 5xx answers and anything unrecognised.
    """
    if isinstance(exc, (Unauthenticated, RefreshFailed, RefreshQueueFull)):
        return False
    if isinstance(exc, UpstreamError):
        return not exc.is_client_error
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500
    if isinstance(exc, (NetworkUnavailable, httpx.TransportError)):
        return True
    # Other SDK errors (configuration and the like) will not heal on retry.
    return not isinstance(exc, TelePassError)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    max_attempts: int = MAX_ATTEMPTS,
    *,
    base_delay: float = BASE_DELAY,
    jitter: tuple[float, float] = JITTER,
    retryable: Callable[[BaseException], bool] = is_retryable,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> T:
    """Run ``operation`` with bounded retries.

    Args:
        operation: Zero-argument coroutine factory; called once per attempt.
        max_attempts: Total attempts, including the first.
        base_delay: Seconds multiplied by the attempt number.
        jitter: Inclusive range of the random delay multiplier.
        retryable: Classifies failures; non-retryable ones propagate at once.
        sleep: Awaitable delay function.

    Returns:
        The first successful result.

    Raises:
        Exception: The first non-retryable failure, or the last failure once
            ``max_attempts`` is exhausted.
    """
    if max_attempts < 1:
        msg = "max_attempts must be at least 1"
        raise ValueError(msg)

    logger = get_logger()
    context = RetryContext(max_attempts=max_attempts, base_delay=base_delay, jitter=jitter)

    while True:
        context.attempt += 1
        try:
            return await operation()
        except Exception as e:
            if not retryable(e) or context.exhausted:
                raise
            delay = context.next_delay()
            logger.warning(
                "Retrying after failure",
                attempt=context.attempt,
                max_attempts=context.max_attempts,
                delay=round(delay, 3),
                error=str(e),
            )
            await sleep(delay)


def retrying(
    max_attempts: int = MAX_ATTEMPTS,
    *,
    base_delay: float = BASE_DELAY,
    jitter: tuple[float, float] = JITTER,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Decorator form of :func:`with_retry` for async functions."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            return await with_retry(
                lambda: func(*args, **kwargs),
                max_attempts,
                base_delay=base_delay,
                jitter=jitter,
            )

        return wrapper

    return decorator
