"""Transport protocol and a default transport built on urllib."""

from __future__ import annotations

import logging as py_logging
import socket
from collections.abc import Callable
from typing import Protocol, runtime_checkable
from urllib.error import HTTPError, URLError
from urllib.request import OpenerDirector, Request as UrllibRequest, build_opener

from retryrequest.errors import TransportError
from retryrequest.models import Request, Response

logger = py_logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


@runtime_checkable
class Transport(Protocol):
    def send(self, request: Request) -> Response: ...


SendFunction = Callable[[Request], Response]


class _CallableTransport:
    def __init__(self, send: SendFunction) -> None:
        self._send = send

    def send(self, request: Request) -> Response:
        return self._send(request)


def as_transport(candidate: Transport | SendFunction) -> Transport:
    if isinstance(candidate, Transport):
        return candidate
    if callable(candidate):
        return _CallableTransport(candidate)
    raise TypeError(f"Expected a transport or callable, got {type(candidate).__name__}")


def _is_timeout_reason(reason: object) -> bool:
    return isinstance(reason, (socket.timeout, TimeoutError))


class UrllibTransport:
    """Send requests with ``urllib.request``.

    HTTP error statuses come back as normal responses. Socket timeouts become
    ``TransportError(timeout=True)``; other network failures become
    non-timeout transport errors. The socket timeout never outlives the
    request context's deadline.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        opener: OpenerDirector | None = None,
    ) -> None:
        if timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {timeout_seconds}")
        self.timeout_seconds = timeout_seconds
        self._opener = opener or build_opener()

    def _timeout_for(self, request: Request) -> float:
        remaining = request.context.remaining()
        if remaining is None:
            return self.timeout_seconds
        return max(min(self.timeout_seconds, remaining), 0.001)

    def send(self, request: Request) -> Response:
        context_error = request.context.err()
        if context_error is not None:
            raise context_error

        outbound = UrllibRequest(
            request.url,
            data=request.body,
            headers=dict(request.headers),
            method=request.method.upper(),
        )
        try:
            raw = self._opener.open(outbound, timeout=self._timeout_for(request))  # nosec B310
        except HTTPError as exc:
            headers = {key.lower(): value for key, value in (exc.headers.items() if exc.headers else [])}
            return Response(status_code=exc.code, headers=headers, body=exc.fp, request=request)
        except URLError as exc:
            self._raise_context_error(request, exc)
            timeout = _is_timeout_reason(exc.reason)
            logger.debug("Transport failed url=%s timeout=%s reason=%s", request.url, timeout, exc.reason)
            raise TransportError(
                f"Request to {request.url} failed.",
                hint=str(exc.reason),
                timeout=timeout,
            ) from exc
        except (socket.timeout, TimeoutError) as exc:
            self._raise_context_error(request, exc)
            logger.debug("Transport timed out url=%s", request.url)
            raise TransportError(
                f"Request to {request.url} timed out.",
                hint="Increase the transport timeout or retry later.",
                timeout=True,
            ) from exc
        except OSError as exc:
            self._raise_context_error(request, exc)
            logger.debug("Transport failed url=%s error=%s", request.url, exc)
            raise TransportError(f"Request to {request.url} failed.", hint=str(exc)) from exc

        status = int(getattr(raw, "status", None) or raw.getcode() or 0)
        headers = {key.lower(): value for key, value in raw.headers.items()}
        return Response(status_code=status, headers=headers, body=raw, request=request)

    @staticmethod
    def _raise_context_error(request: Request, exc: BaseException) -> None:
        context_error = request.context.err()
        if context_error is not None:
            raise context_error from exc
