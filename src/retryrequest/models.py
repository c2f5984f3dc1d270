"""Request, response and attempt outcome models."""

from __future__ import annotations

import io
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import BinaryIO

from retryrequest.cancellation import BACKGROUND, CancelContext


@dataclass(frozen=True)
class Request:
    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: bytes | None = None
    context: CancelContext = field(default=BACKGROUND, compare=False, repr=False)

    def with_context(self, context: CancelContext) -> Request:
        return replace(self, context=context)


@dataclass
class Response:
    """Result of one attempt. The holder must close the body."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    body: BinaryIO | None = None
    request: Request | None = field(default=None, repr=False)
    _closed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def from_bytes(
        cls,
        status_code: int,
        content: bytes = b"",
        *,
        headers: dict[str, str] | None = None,
        request: Request | None = None,
    ) -> Response:
        return cls(
            status_code=status_code,
            headers=dict(headers or {}),
            body=io.BytesIO(content),
            request=request,
        )

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400

    def read(self) -> bytes:
        if self._closed:
            raise ValueError("Response body is already closed.")
        if self.body is None:
            return b""
        return self.body.read()

    def text(self, encoding: str = "utf-8") -> str:
        return self.read().decode(encoding, errors="replace")

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.body is not None:
            self.body.close()

    def __enter__(self) -> Response:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


@dataclass(frozen=True)
class AttemptOutcome:
    attempt: int
    response: Response | None = None
    error: Exception | None = None

    def __post_init__(self) -> None:
        if (self.response is None) == (self.error is None):
            raise ValueError("An attempt outcome holds exactly one of response or error.")

    @property
    def status_code(self) -> int | None:
        if self.response is None:
            return None
        return self.response.status_code
