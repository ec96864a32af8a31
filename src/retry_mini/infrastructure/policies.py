"""Reusable retry policies and hooks.

Predicates here plug into ``should_retry``; ``log_retry`` plugs into
``on_retry``. They only inspect the error, so they work with any task.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Tuple, Type

import requests

logger = logging.getLogger(__name__)

# Client errors that are still worth retrying: request timeout, rate limiting
RETRYABLE_CLIENT_STATUSES = (408, 429)


def get_status_code(error: BaseException) -> Optional[int]:
    """Extract an HTTP-like status code from an error.

    Supports ``requests`` exceptions carrying a response, and errors exposing
    ``status_code``, ``status`` or ``response_code`` (python-gitlab style).
    """
    if isinstance(error, requests.exceptions.RequestException):
        response = error.response
        if response is not None:
            return response.status_code
    for attr in ("status_code", "status", "response_code"):
        value = getattr(error, attr, None)
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    return None


def is_transient_error(error: BaseException, attempt_number: int = 0) -> bool:
    """``should_retry`` predicate for HTTP-ish failures.

    Auth errors and most 4xx are permanent; 408, 429, 5xx, network errors
    and errors without a status code are retried.
    """
    if isinstance(error, (requests.exceptions.ConnectionError, requests.exceptions.Timeout)):
        return True
    status_code = get_status_code(error)
    if status_code is None:
        return True
    if status_code in (401, 403):
        return False
    if 400 <= status_code < 500 and status_code not in RETRYABLE_CLIENT_STATUSES:
        return False
    return True


def retry_on_exceptions(
    *exception_types: Type[BaseException],
) -> Callable[[BaseException, int], bool]:
    """Create a predicate retrying only the given exception types."""
    if not exception_types:
        raise ValueError("At least one exception type is required")
    types: Tuple[Type[BaseException], ...] = tuple(exception_types)

    def _should_retry(error: BaseException, attempt_number: int) -> bool:
        return isinstance(error, types)

    return _should_retry


def log_retry(
    retry_logger: Optional[logging.Logger] = None,
    level: int = logging.WARNING,
) -> Callable[[BaseException, int], None]:
    """Create an ``on_retry`` hook that logs every retried failure.

    Args:
        retry_logger: Logger to write to (defaults to this module's logger)
        level: Logging level for the message

    Returns:
        on_retry hook
    """
    target = retry_logger or logger

    def _on_retry(error: BaseException, attempt_number: int) -> None:
        target.log(level, f"Attempt {attempt_number + 1} failed: {error}. Retrying...")

    return _on_retry
