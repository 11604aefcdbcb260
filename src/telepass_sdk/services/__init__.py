"""Call sites of the admin console that rely on the retry policy."""

from .google_admin import (
    GoogleAdminService,
    GoogleAdminSession,
    GoogleAuthData,
    GoogleProfile,
    transform_google_profile,
)
from .payment_status import (
    PaymentStatus,
    PaymentStatusClient,
    PaymentVerification,
    map_bakong_status,
)

__all__ = [
    "GoogleAdminService",
    "GoogleAdminSession",
    "GoogleAuthData",
    "GoogleProfile",
    "transform_google_profile",
    "PaymentStatus",
    "PaymentStatusClient",
    "PaymentVerification",
    "map_bakong_status",
]
