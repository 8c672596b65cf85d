"""Retry loop for transient failures, kept apart from what counts as transient."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 1.0
    multiplier: float = 2.0
    max_delay: float = 10.0

    def __post_init__(self) -> None:
        if not isinstance(self.max_attempts, int) or isinstance(self.max_attempts, bool):
            raise ValueError("retry.policy.invalid max_attempts must be an int")
        if self.max_attempts < 1:
            raise ValueError("retry.policy.invalid max_attempts must be >= 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("retry.policy.invalid delays must be >= 0")
        if self.multiplier < 1:
            raise ValueError("retry.policy.invalid multiplier must be >= 1")

    def delays(self) -> list[float]:
        """Sleep before each retry; one entry fewer than max_attempts."""
        return [
            min(self.base_delay * (self.multiplier ** attempt), self.max_delay)
            for attempt in range(self.max_attempts - 1)
        ]


class RetryExhausted(Exception):
    def __init__(self, attempts: int, last_error: BaseException):
        super().__init__(f"gave up after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


def retry_call(
    func: Callable[[], T],
    *,
    policy: RetryPolicy,
    is_retryable: Callable[[BaseException], bool],
    sleep: Callable[[float], None] = time.sleep,
    on_retry: Callable[[int, BaseException, float], None] | None = None,
) -> T:
    """Call func until it succeeds, a non-retryable error escapes, or attempts run out.

    Non-retryable exceptions propagate untouched. When the last attempt fails
    with a retryable error, RetryExhausted is raised carrying that error.
    """
    delays = policy.delays()
    for attempt in range(1, policy.max_attempts + 1):
        try:
            return func()
        except Exception as exc:
            if not is_retryable(exc):
                raise
            if attempt == policy.max_attempts:
                raise RetryExhausted(attempt, exc) from exc
            delay = delays[attempt - 1]
            if on_retry is not None:
                on_retry(attempt, exc, delay)
            sleep(delay)
    raise AssertionError("unreachable")
