"""Bounded retry of a unit of work.

Every network call made by the client goes through :func:`with_retry`. The
loop has no delay and no jitter; which errors end it early is decided by an
explicit ``is_retryable`` predicate.
"""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

import httpx
import structlog

from .errors import NotFoundError, RequestEncodeError

logger = structlog.get_logger(__name__)

T = TypeVar("T")

DEFAULT_MAX_ATTEMPTS = 8

# Client errors that may succeed when repeated.
_TRANSIENT_CLIENT_STATUSES = frozenset({408, 429})


def retry_always(error: Exception) -> bool:  # noqa: ARG001
    """Treat every error as retryable."""
    return True


def is_transient_error(error: Exception) -> bool:
    """Return whether repeating the request could change the outcome.

    HTTP 4xx responses (except 408 and 429), domain-absence errors and
    unserializable payloads are permanent. Connection failures, 5xx
    responses and malformed bodies are retried.
    """
    if isinstance(error, (NotFoundError, RequestEncodeError)):
        return False
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if 400 <= status < 500:  # noqa: PLR2004
            return status in _TRANSIENT_CLIENT_STATUSES
    return True


def with_retry(
    max_attempts: int,
    unit_of_work: Callable[[], T],
    *,
    is_retryable: Callable[[Exception], bool] = retry_always,
    log: Any = None,
) -> T:
    """Invoke ``unit_of_work`` until it succeeds or attempts run out.

    Args:
        max_attempts: Maximum number of invocations (at least 1).
        unit_of_work: Zero-argument callable performing one request+decode.
        is_retryable: Predicate deciding whether a failure is worth another
            attempt. Non-retryable errors are raised immediately.
        log: Optional structlog logger; defaults to the module logger.

    Returns:
        The result of the first successful invocation.

    Raises:
        ValueError: If ``max_attempts`` is smaller than 1.
        Exception: The error of the last failed attempt.
    """
    if max_attempts < 1:
        msg = "max_attempts must be at least 1"
        raise ValueError(msg)

    log = log if log is not None else logger
    for attempt in range(max_attempts):
        try:
            return unit_of_work()
        except Exception as error:
            log.warning(
                "Request attempt failed",
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(error),
            )
            if attempt == max_attempts - 1 or not is_retryable(error):
                raise
    # Unreachable: the last iteration either returns or raises.
    msg = "retry loop exited without a result"
    raise RuntimeError(msg)


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration shared by all operations of a client."""

    max_attempts: int = DEFAULT_MAX_ATTEMPTS
    is_retryable: Callable[[Exception], bool] = field(default=is_transient_error)

    def __post_init__(self):
        if self.max_attempts < 1:
            msg = "max_attempts must be at least 1"
            raise ValueError(msg)

    def run(self, unit_of_work: Callable[[], T], log: Any = None) -> T:
        """Run ``unit_of_work`` under this policy."""
        return with_retry(
            self.max_attempts,
            unit_of_work,
            is_retryable=self.is_retryable,
            log=log,
        )
