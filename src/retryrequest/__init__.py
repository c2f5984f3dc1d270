"""Retry outbound HTTP requests on timeouts and transient server errors."""

from .cancellation import BACKGROUND, CancelContext
from .errors import (
    CancellationError,
    ConfigError,
    DeadlineExceededError,
    ErrorCode,
    RequestCancelledError,
    RetryRequestError,
    TransportError,
)
from .models import AttemptOutcome, Request, Response
from .policy import DEFAULT_POLICY, RetryPolicy, should_retry
from .retry import do, execute
from .transport import Transport, UrllibTransport

__all__ = [
    "AttemptOutcome",
    "BACKGROUND",
    "CancelContext",
    "CancellationError",
    "ConfigError",
    "DEFAULT_POLICY",
    "DeadlineExceededError",
    "do",
    "ErrorCode",
    "execute",
    "Request",
    "RequestCancelledError",
    "Response",
    "RetryPolicy",
    "RetryRequestError",
    "should_retry",
    "Transport",
    "TransportError",
    "UrllibTransport",
]
