"""Unit tests for outcome classification."""

from __future__ import annotations

import httpx
import pytest

from telepass_sdk.core.dispatcher import FailureClass, classify
from telepass_sdk.errors import NetworkUnavailable, RefreshFailed, Unauthenticated


@pytest.mark.parametrize(
    ("status", "expected"),
    [
        (200, FailureClass.NONE),
        (204, FailureClass.NONE),
        (302, FailureClass.NONE),
        (401, FailureClass.AUTHENTICATION),
        (403, FailureClass.UPSTREAM),
        (422, FailureClass.UPSTREAM),
        (500, FailureClass.UPSTREAM),
    ],
)
def test_classify_response(status: int, expected: FailureClass) -> None:
    assert classify(httpx.Response(status)) is expected


@pytest.mark.parametrize(
    ("error", "expected"),
    [
        (httpx.ConnectError("refused"), FailureClass.NETWORK),
        (httpx.ReadTimeout("slow"), FailureClass.NETWORK),
        (NetworkUnavailable(), FailureClass.NETWORK),
        (Unauthenticated(), FailureClass.AUTHENTICATION),
        (RefreshFailed(), FailureClass.AUTHENTICATION),
        (RuntimeError("other"), FailureClass.UPSTREAM),
    ],
)
def test_classify_exception(error: BaseException, expected: FailureClass) -> None:
    assert classify(error) is expected
