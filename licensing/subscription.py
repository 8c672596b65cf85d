import http.client
import json
import time
import urllib.error
import urllib.parse
import urllib.request

from gate.logger import log_event
from licensing.retry import RetryExhausted, RetryPolicy, retry_call

LICENSE_HOST = "license.libum.io"
LICENSE_PORT = 443
LICENSE_PATH = "/subscriptionsByApiKey"
PRODUCT_ID = "poweron-pipelines"


class AuthenticationError(Exception):
    """The license service rejected the key. Retrying will not change the answer."""

    def __init__(self, message, api_key, host):
        super().__init__(message)
        self.api_key = api_key
        self.host = host

    @property
    def masked_key(self):
        return "***" if self.api_key else "not provided"


class LicenseConnectionError(ConnectionError):
    """The license service could not be reached or answered with a non-success status."""

    def __init__(self, message, host, port, is_ssl, original_error=None):
        super().__init__(message)
        self.host = host
        self.port = port
        self.is_ssl = is_ssl
        self.original_error = original_error


def build_license_url(unit):
    query = urllib.parse.urlencode({"product": PRODUCT_ID, "unit": unit})
    return f"https://{LICENSE_HOST}{LICENSE_PATH}?{query}"


def _api_json_request(method, url, headers=None, timeout=10):
    req = urllib.request.Request(url, headers=headers or {}, method=method)
    try:
        with urllib.request.urlopen(req, timeout=timeout) as response:
            raw = response.read().decode("utf-8", errors="replace")
            return response.status, _parse_json(raw), raw
    except urllib.error.HTTPError as e:
        raw = e.read().decode("utf-8", errors="replace") if e.fp else ""
        return e.code, _parse_json(raw), raw


def _parse_json(raw):
    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return None


def _connection_error(message, original_error=None):
    return LicenseConnectionError(message, LICENSE_HOST, LICENSE_PORT, True, original_error)


def _rejection(data, api_key, host):
    """Return the AuthenticationError a response body calls for, or None."""
    if not isinstance(data, dict):
        return None
    if "isFound" in data and not data.get("isFound"):
        return AuthenticationError("API key not found", api_key, host)
    if data.get("isMaxHostsExceeded"):
        return AuthenticationError(
            "Maximum number of hosts exceeded for this API key", api_key, host
        )
    return None


def check_subscription(api_key, host, fetch=None):
    """One round trip to the license service. Raises on anything but an active subscription."""
    fetch = fetch or _api_json_request
    url = build_license_url(host)
    headers = {"Content-Type": "application/json", "X-API-Key": api_key}
    try:
        status, data, _ = fetch("GET", url, headers=headers)
    except (OSError, http.client.HTTPException) as exc:
        raise _connection_error(f"Unable to reach license server: {exc}", exc) from exc

    rejection = _rejection(data, api_key, host)
    if rejection is not None:
        raise rejection
    if not 200 <= status < 300:
        raise _connection_error(f"License server returned HTTP {status}")
    if not isinstance(data, dict):
        raise _connection_error("License server returned an unreadable response")

    subscriptions = data.get("subscriptions")
    if not isinstance(subscriptions, list) or not subscriptions:
        raise AuthenticationError("No active subscription", api_key, host)


def validate_api_key(api_key, host, *, policy=None, fetch=None, sleep=time.sleep):
    if not api_key:
        log_event("license", f"rejected host={host} reason=missing_key")
        raise AuthenticationError("PowerOn Pipelines API Key is missing", api_key, host)

    policy = policy or RetryPolicy()

    def _on_retry(attempt, exc, delay):
        log_event(
            "license",
            f"retry attempt={attempt}/{policy.max_attempts} delay={delay}s error={exc}",
        )

    try:
        retry_call(
            lambda: check_subscription(api_key, host, fetch=fetch),
            policy=policy,
            is_retryable=lambda exc: isinstance(exc, LicenseConnectionError),
            sleep=sleep,
            on_retry=_on_retry,
        )
    except AuthenticationError as exc:
        log_event("license", f"rejected host={host} reason={exc}")
        raise
    except RetryExhausted as exc:
        last = exc.last_error
        log_event("license", f"unreachable host={host} attempts={exc.attempts} error={last}")
        raise _connection_error(
            f"Connection timeout after {exc.attempts} attempt(s): {last}",
            getattr(last, "original_error", None) or last,
        ) from last
    log_event("license", f"validated host={host}")
