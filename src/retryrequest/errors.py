"""Deterministic error model for retried requests."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum

class ErrorCode(IntEnum):
    TRANSPORT = 1
    TIMEOUT = 2
    CANCELLED = 3
    DEADLINE_EXCEEDED = 4
    CONFIG_ERROR = 5

@dataclass(eq=False)
class RetryRequestError(Exception):
    message: str
    code: ErrorCode = ErrorCode.TRANSPORT
    hint: str = ""

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.hint:
            return f"{self.message} Hint: {self.hint}"
        return self.message

@dataclass(eq=False)
class TransportError(RetryRequestError):
    """Failure reported by the transport before a response was received."""

    timeout: bool = False

    def __post_init__(self) -> None:
        if self.timeout and self.code == ErrorCode.TRANSPORT:
            self.code = ErrorCode.TIMEOUT
        super().__post_init__()

@dataclass(eq=False)
class CancellationError(RetryRequestError):
    """The request context was cancelled or its deadline passed."""

@dataclass(eq=False)
class RequestCancelledError(CancellationError):
    message: str = "Request was cancelled."
    code: ErrorCode = ErrorCode.CANCELLED

@dataclass(eq=False)
class DeadlineExceededError(CancellationError):
    message: str = "Request deadline exceeded."
    code: ErrorCode = ErrorCode.DEADLINE_EXCEEDED

@dataclass(eq=False)
class ConfigError(RetryRequestError):
    code: ErrorCode = ErrorCode.CONFIG_ERROR
