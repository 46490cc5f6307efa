"""Retry a create call while a newly created identity propagates to Resource Manager.

A service principal created through Microsoft Graph is not immediately visible
to ARM, so a cluster create that references it can fail for a short while with
a "service principal not found" error. ``create_with_retry`` repeats the call
with a fixed delay until it succeeds, fails for some other reason, or the
attempt ceiling is reached. The final error is always re-raised as-is.
"""

from __future__ import annotations

import re
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

import structlog
from tenacity import RetryCallState, Retrying, retry_if_result, stop_after_attempt, wait_fixed

log = structlog.get_logger()

T = TypeVar("T")

_SERVICE_PRINCIPAL_RE = re.compile(r"service principal|serviceprincipal", re.IGNORECASE)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class Failure:
    error: Exception


def error_message(exc: BaseException) -> str:
    """Return the human-readable message of an exception.

    Azure SDK errors carry it on ``.message``; everything else falls back to ``str()``.
    """
    message = getattr(exc, "message", None)
    if isinstance(message, str) and message:
        return message
    return str(exc)


def is_service_principal_error(exc: BaseException) -> bool:
    """True if the error looks like ARM has not yet seen a new service principal."""
    return bool(_SERVICE_PRINCIPAL_RE.search(error_message(exc)))


def _run_attempt(attempt: Callable[[], T]) -> Success[T] | Failure:
    try:
        return Success(attempt())
    except Exception as exc:
        return Failure(exc)


def _log_transient(max_attempts: int) -> Callable[[RetryCallState], None]:
    def before_sleep(retry_state: RetryCallState) -> None:
        outcome = retry_state.outcome.result()
        log.info(
            "create_retry_transient",
            attempt=retry_state.attempt_number,
            max_attempts=max_attempts,
            delay=retry_state.next_action.sleep,
            error=error_message(outcome.error),
        )

    return before_sleep


def create_with_retry(
    attempt: Callable[[], T],
    is_transient: Callable[[BaseException], bool] = is_service_principal_error,
    max_attempts: int = 20,
    delay: float = 5.0,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """Call ``attempt`` until it succeeds, retrying only errors ``is_transient`` accepts.

    Args:
        attempt: Zero-argument callable performing one create call. Any credentials
            it needs must be captured by the caller.
        is_transient: Classifier for errors worth retrying.
        max_attempts: Hard ceiling on the number of calls.
        delay: Seconds to wait between attempts.
        sleep: Blocking delay function.

    Returns:
        Whatever ``attempt`` returned on its first successful call.

    Raises:
        ValueError: If ``max_attempts`` is less than 1.
        Exception: The error from the last attempt, unchanged, when it is not
            transient or when every attempt failed transiently.
    """
    if max_attempts < 1:
        msg = f"max_attempts must be at least 1, got {max_attempts}"
        raise ValueError(msg)

    # Exception subclasses come back as Failure results; BaseException propagates
    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        retry=retry_if_result(lambda outcome: isinstance(outcome, Failure) and is_transient(outcome.error)),
        sleep=sleep,
        before_sleep=_log_transient(max_attempts),
        retry_error_callback=lambda retry_state: retry_state.outcome.result(),
    )
    outcome = retrying(_run_attempt, attempt)
    if isinstance(outcome, Success):
        return outcome.value

    if is_transient(outcome.error):
        log.warning("create_retry_exhausted", attempts=max_attempts, error=error_message(outcome.error))
    raise outcome.error
