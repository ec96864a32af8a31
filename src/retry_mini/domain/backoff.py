"""Wait-time computation between attempts."""

import math

from retry_mini.domain.config.retry import RetryOptions

# Largest delay (ms) a single timer accepts
MAX_WAIT_MS = 2**31 - 1


def _growth(backoff_factor: float, attempt_number: int) -> float:
    try:
        growth = backoff_factor**attempt_number
    except OverflowError:
        return math.inf
    return max(1, growth)


def compute_wait_time(attempt_number: int, options: RetryOptions) -> float:
    """Compute the pause before the attempt following ``attempt_number``.

    The raw wait is ``base_delay * max(1, backoff_factor ** attempt_number)``.
    With a positive raw wait and ``jitter > 0`` it is scaled by
    ``1 + (U * 2 - 1) * jitter`` for one draw ``U`` of ``options.random_source``
    and floored to whole milliseconds.

    Args:
        attempt_number: Zero-based index of the attempt that just failed
        options: Retry options for the current call

    Returns:
        Wait in milliseconds; 0 means no pause
    """
    wait_time = options.base_delay * _growth(options.backoff_factor, attempt_number)

    if wait_time > 0 and options.jitter > 0:
        random_factor = 1 + (options.random_source() * 2 - 1) * options.jitter
        wait_time = wait_time * random_factor
        if math.isfinite(wait_time):
            wait_time = math.floor(wait_time)

    # NaN compares false, so it falls through to "no pause" as well
    if not wait_time > 0:
        return 0.0

    cap = options.max_delay if options.max_delay is not None else MAX_WAIT_MS
    return float(min(wait_time, cap))
