from licensing.retry import (
    RetryExhausted,
    RetryPolicy,
    retry_call,
)
from licensing.subscription import (
    AuthenticationError,
    LicenseConnectionError,
    build_license_url,
    check_subscription,
    validate_api_key,
)

__all__ = [
    "AuthenticationError",
    "LicenseConnectionError",
    "RetryExhausted",
    "RetryPolicy",
    "build_license_url",
    "check_subscription",
    "retry_call",
    "validate_api_key",
]
