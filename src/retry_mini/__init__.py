"""retry-mini: retry sync or async callables with backoff, jitter and policy hooks."""

from retry_mini.domain.backoff import MAX_WAIT_MS, compute_wait_time
from retry_mini.domain.config import RetryOptions
from retry_mini.infrastructure.policies import (
    get_status_code,
    is_transient_error,
    log_retry,
    retry_on_exceptions,
)
from retry_mini.infrastructure.retry import execute, resolve_options, with_retry

__version__ = "1.0.8"

__all__ = [
    "execute",
    "with_retry",
    "resolve_options",
    "RetryOptions",
    "compute_wait_time",
    "MAX_WAIT_MS",
    "retry_on_exceptions",
    "is_transient_error",
    "get_status_code",
    "log_retry",
]
