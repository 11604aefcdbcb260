"""Payment-status polling against the Bakong transaction API.

A KHQR payment is identified by the MD5 of its QR string. The status
endpoint is flaky, so each check runs under the bounded retry policy and
polling stops once the payment settles or the QR code expires.
"""

from __future__ import annotations

import asyncio
import time
from datetime import datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, TypeVar

import httpx
from pydantic import BaseModel, ConfigDict, SecretStr, TypeAdapter, ValidationError

from ..core.errors import ErrorFactory
from ..core.retry_policy import with_retry
from ..errors import Unauthenticated, UpstreamError
from ..telemetry import get_logger

if TYPE_CHECKING:
    from ..config import RetryConfig

DEFAULT_CHECK_URL = "https://api-bakong.nbc.gov.kh/v1/check_transaction_by_md5"
# KHQR codes are issued with a 15 minute lifetime.
QR_LIFETIME_SECONDS = 15 * 60

T = TypeVar("T")


class PaymentStatus(StrEnum):
    """Internal payment states."""

    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    EXPIRED = "EXPIRED"


_BAKONG_STATUSES = {
    "SUCCESS": PaymentStatus.COMPLETED,
    "COMPLETED": PaymentStatus.COMPLETED,
    "PENDING": PaymentStatus.PENDING,
    "PROCESSING": PaymentStatus.PENDING,
    "FAILED": PaymentStatus.FAILED,
    "ERROR": PaymentStatus.FAILED,
    "EXPIRED": PaymentStatus.EXPIRED,
}


_AMOUNT: TypeAdapter[float] = TypeAdapter(float)
_PAID_AT: TypeAdapter[datetime] = TypeAdapter(datetime)


def _lenient(adapter: TypeAdapter[T], value: Any) -> T | None:
    """Parse an optional answer field; unreadable values become None."""
    if value is None:
        return None
    try:
        return adapter.validate_python(value)
    except ValidationError:
        get_logger().warning("Ignoring unreadable payment field", value=repr(value))
        return None


def map_bakong_status(status: str | None) -> PaymentStatus:
    """Map a Bakong status string; unknown values count as pending."""
    return _BAKONG_STATUSES.get((status or "").upper(), PaymentStatus.PENDING)


class PaymentVerification(BaseModel):
    """Outcome of one status check."""

    model_config = ConfigDict(frozen=True)

    is_valid: bool
    transaction_id: str
    status: PaymentStatus
    amount: float | None = None
    currency: str | None = None
    paid_at: datetime | None = None

    @property
    def settled(self) -> bool:
        return self.status is not PaymentStatus.PENDING


class PaymentStatusClient:
    """Checks and polls KHQR payment status.

    Args:
        http: HTTP client used for the status endpoint.
        api_key: Bakong API token.
        check_url: Status endpoint URL.
        retry: Retry settings; library defaults when omitted.
        sleep: Awaitable delay function, used between retries and polls.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        *,
        api_key: SecretStr | str,
        check_url: str = DEFAULT_CHECK_URL,
        retry: RetryConfig | None = None,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
    ) -> None:
        self._http = http
        self._api_key = api_key if isinstance(api_key, SecretStr) else SecretStr(api_key)
        self._check_url = check_url
        self._retry = retry
        self._sleep = sleep
        self._logger = get_logger()

    async def verify_payment(self, md5_hash: str) -> PaymentVerification:
        """Check the status of one payment.

        A non-success answer from the endpoint reads as still pending; an
        unreachable endpoint reads as failed. Neither raises.
        """
        try:
            data = await self._fetch_with_retry(md5_hash)
        except (UpstreamError, Unauthenticated) as e:
            self._logger.warning("Bakong returned an error status", status_code=e.status_code)
            return PaymentVerification(
                is_valid=False, transaction_id=md5_hash, status=PaymentStatus.PENDING
            )
        except Exception as e:
            self._logger.error("Payment verification failed", error=str(e))
            return PaymentVerification(
                is_valid=False, transaction_id=md5_hash, status=PaymentStatus.FAILED
            )

        status = map_bakong_status(data.get("status"))
        return PaymentVerification(
            is_valid=status is PaymentStatus.COMPLETED,
            transaction_id=md5_hash,
            status=status,
            amount=_lenient(_AMOUNT, data.get("amount")),
            currency=str(data.get("currency") or "KHR"),
            paid_at=_lenient(_PAID_AT, data.get("paidAt")),
        )

    async def poll_until_settled(
        self,
        md5_hash: str,
        *,
        interval: float = 5.0,
        deadline: float = QR_LIFETIME_SECONDS,
    ) -> PaymentVerification:
        """Poll until the payment leaves PENDING or ``deadline`` seconds pass.

        Returns:
            The settling verification, or an EXPIRED one at the deadline.
        """
        expires_at = time.monotonic() + deadline
        while True:
            verification = await self.verify_payment(md5_hash)
            if verification.settled:
                return verification
            if time.monotonic() + interval > expires_at:
                self._logger.info("Payment QR expired while pending", transaction_id=md5_hash)
                return PaymentVerification(
                    is_valid=False, transaction_id=md5_hash, status=PaymentStatus.EXPIRED
                )
            await self._sleep(interval)

    async def _fetch_with_retry(self, md5_hash: str) -> dict[str, Any]:
        if self._retry is None:
            return await with_retry(lambda: self._fetch(md5_hash), sleep=self._sleep)
        return await with_retry(
            lambda: self._fetch(md5_hash),
            self._retry.max_attempts,
            base_delay=self._retry.base_delay,
            jitter=self._retry.jitter,
            sleep=self._sleep,
        )

    async def _fetch(self, md5_hash: str) -> dict[str, Any]:
        try:
            response = await self._http.get(
                self._check_url,
                params={"md5": md5_hash},
                headers={
                    "Authorization": f"Bearer {self._api_key.get_secret_value()}",
                    "Content-Type": "application/json",
                },
            )
        except httpx.TransportError as e:
            raise ErrorFactory.from_exception(e) from e
        if response.is_error:
            raise ErrorFactory.from_http_response(response)
        body = response.json()
        return body if isinstance(body, dict) else {}
