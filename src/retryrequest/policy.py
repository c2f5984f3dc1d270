"""Retry decision policy for HTTP attempts."""

from __future__ import annotations

from dataclasses import dataclass

from retryrequest.cancellation import CancelContext
from retryrequest.errors import CancellationError, TransportError
from retryrequest.models import Response

STATUS_INVALID = 0
STATUS_NOT_IMPLEMENTED = 501


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 3
    delay_seconds: float = 0.5
    retry_500_status: bool = True
    retry_invalid_status: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.max_attempts, bool) or not isinstance(self.max_attempts, int):
            raise TypeError(f"max_attempts must be an int, got {type(self.max_attempts).__name__}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got {self.max_attempts}")
        if self.delay_seconds < 0:
            raise ValueError(f"delay_seconds must not be negative, got {self.delay_seconds}")


DEFAULT_POLICY = RetryPolicy()


def is_retryable_server_status(status_code: int) -> bool:
    """5xx responses are presumed transient, except 501 Not Implemented."""
    return 500 <= status_code < 600 and status_code != STATUS_NOT_IMPLEMENTED


def is_invalid_status(status_code: int) -> bool:
    # Overlaps with the server range at 599.
    return status_code == STATUS_INVALID or status_code >= 599


def is_timeout_error(error: BaseException) -> bool:
    if isinstance(error, CancellationError):
        return False
    if isinstance(error, TransportError):
        return error.timeout
    if isinstance(error, TimeoutError):
        return True
    signal = getattr(error, "timeout", None)
    if callable(signal):
        try:
            return bool(signal())
        except TypeError:
            return False
    # Numeric values are configured durations, not flags.
    return signal is True


def should_retry(
    context: CancelContext,
    response: Response | None,
    error: BaseException | None,
    policy: RetryPolicy = DEFAULT_POLICY,
) -> bool:
    """Decide whether another attempt should follow this outcome.

    A finished context always stops the sequence. Transport errors are
    retried only when they are timeouts. Responses are retried on 5xx
    (except 501) and on invalid status codes, each class behind its own
    policy toggle.
    """
    if context.done():
        return False

    if error is not None:
        return is_timeout_error(error)

    status_code = response.status_code if response is not None else STATUS_INVALID
    if policy.retry_500_status and is_retryable_server_status(status_code):
        return True
    if policy.retry_invalid_status and is_invalid_status(status_code):
        return True
    return False
