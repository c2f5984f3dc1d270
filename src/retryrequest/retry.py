"""Attempt loop that re-sends a request under a retry policy."""

from __future__ import annotations

import logging as py_logging
from dataclasses import replace
from typing import cast

from retryrequest.errors import CancellationError, TransportError
from retryrequest.models import AttemptOutcome, Request, Response
from retryrequest.policy import DEFAULT_POLICY, RetryPolicy, should_retry
from retryrequest.transport import SendFunction, Transport, as_transport

logger = py_logging.getLogger(__name__)


def _send_once(transport: Transport, request: Request, attempt: int) -> AttemptOutcome:
    try:
        response = transport.send(request)
    except Exception as exc:
        return AttemptOutcome(attempt=attempt, error=exc)
    if response is None:
        return AttemptOutcome(
            attempt=attempt,
            error=TransportError("Transport returned no response.", hint=type(transport).__name__),
        )
    return AttemptOutcome(attempt=attempt, response=response)


def execute(
    transport: Transport | SendFunction,
    request: Request,
    policy: RetryPolicy = DEFAULT_POLICY,
) -> Response:
    """Send ``request`` until the policy stops retrying or attempts run out.

    Returns the final response, which the caller must close. Raises the final
    transport error unchanged, or the context's cancellation error when the
    context finishes during the inter-attempt delay. Every superseded
    response is closed here.
    """
    sender = as_transport(transport)
    context = request.context
    outcome: AttemptOutcome | None = None

    try:
        for attempt in range(1, policy.max_attempts + 1):
            if outcome is not None and outcome.response is not None:
                outcome.response.close()

            logger.debug(
                "Sending request attempt=%s/%s method=%s url=%s",
                attempt,
                policy.max_attempts,
                request.method,
                request.url,
            )
            outcome = _send_once(sender, request, attempt)

            if not should_retry(context, outcome.response, outcome.error, policy):
                break
            if attempt >= policy.max_attempts:
                break

            logger.warning(
                "Retrying request attempt=%s status=%s error=%s delay=%ss url=%s",
                attempt,
                outcome.status_code,
                outcome.error,
                policy.delay_seconds,
                request.url,
            )
            if context.wait(policy.delay_seconds):
                if outcome.response is not None:
                    outcome.response.close()
                cancellation = cast(CancellationError, context.err())
                logger.info("Retry sequence cancelled after attempt=%s url=%s", attempt, request.url)
                raise cancellation
    except BaseException:
        if outcome is not None and outcome.response is not None:
            outcome.response.close()
        raise

    if outcome is None:
        raise RuntimeError("Retry policy exhausted without executing a request.")
    if outcome.error is not None:
        logger.debug("Request failed attempt=%s error=%s url=%s", outcome.attempt, outcome.error, request.url)
        raise outcome.error
    response = cast(Response, outcome.response)
    logger.debug(
        "Request finished attempt=%s status=%s url=%s",
        outcome.attempt,
        response.status_code,
        request.url,
    )
    return response


def do(
    transport: Transport | SendFunction,
    request: Request,
    policy: RetryPolicy | None = None,
    *,
    attempts: int | None = None,
    delay: float | None = None,
) -> Response:
    """Send ``request`` with retries, from a policy or an attempts/delay pair."""
    if policy is not None and (attempts is not None or delay is not None):
        raise TypeError("Pass either a policy or attempts/delay, not both.")
    if policy is None:
        policy = DEFAULT_POLICY
        if attempts is not None:
            policy = replace(policy, max_attempts=attempts)
        if delay is not None:
            policy = replace(policy, delay_seconds=delay)
    return execute(transport, request, policy)
