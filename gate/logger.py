import os
import re
from datetime import datetime, timezone


DEFAULT_LOG_PATH = "logs/poweron-gate.log"

_SECRETS = set()


def _log_path():
    return os.environ.get("POWERON_GATE_LOG_PATH", DEFAULT_LOG_PATH)


def register_secret(value):
    """Mask value in every later log line and ask the runner to mask it too."""
    if not value:
        return
    secret = str(value)
    if secret in _SECRETS:
        return
    _SECRETS.add(secret)
    print(f"::add-mask::{secret}", flush=True)


def clear_secrets():
    _SECRETS.clear()


def redact(text):
    value = str(text)
    # Longest first so a secret containing another is not half-masked.
    for secret in sorted(_SECRETS, key=len, reverse=True):
        value = value.replace(secret, "***")
    value = re.sub(r"(?i)x-api-key\s*[:=]\s*[^\s,;]+", "X-API-Key=[REDACTED]", value)
    return value


def _sanitize(text):
    value = redact(text)
    value = re.sub(r"\s+", " ", value).strip()
    return value


def log_event(component: str, message: str) -> None:
    path = _log_path()
    line = (
        f"{datetime.now(timezone.utc).strftime('%Y-%m-%dT%H:%M:%SZ')} "
        f"[{_sanitize(component)}] {_sanitize(message)}"
    )
    try:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, "a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError:
        return


def info(message: str) -> None:
    print(redact(message), flush=True)


def error(message: str) -> None:
    for line in redact(message).splitlines() or [""]:
        print(f"::error::{line}", flush=True)


def debug(message: str) -> None:
    for line in redact(message).splitlines() or [""]:
        print(f"::debug::{line}", flush=True)
