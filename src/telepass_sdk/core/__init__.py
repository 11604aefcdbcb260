"""Core components of the authenticated client layer.

Interceptor, refresh coordinator, dispatcher and retry policy, wired
together by :class:`telepass_sdk.client.TelePassClient`.
"""

from __future__ import annotations

from .errors import ErrorFactory
from .interceptor import RequestInterceptor, apply_profile
from .refresh import RefreshCoordinator
from .dispatcher import Dispatcher, FailureClass, classify
from .retry_policy import is_retryable, retrying, with_retry

__all__ = [
    "ErrorFactory",
    "RequestInterceptor",
    "apply_profile",
    "RefreshCoordinator",
    "Dispatcher",
    "FailureClass",
    "classify",
    "is_retryable",
    "retrying",
    "with_retry",
]
