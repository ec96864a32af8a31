"""Retry orchestration using tenacity.

This module drives the attempt loop: it runs the task, consults the
``should_retry`` policy, notifies ``on_retry`` and sleeps for the computed
backoff before the next attempt. tenacity's ``AsyncRetrying`` owns the loop;
the strategies below plug the retry-mini semantics into it. The backoff
pause runs inside ``before_sleep`` so that it follows ``on_retry``.
"""

from __future__ import annotations

import functools
import inspect
import logging
from typing import Any, Awaitable, Callable, Mapping, TypeVar, Union

from tenacity import AsyncRetrying, RetryCallState, stop_after_attempt

from retry_mini.domain.backoff import compute_wait_time
from retry_mini.domain.config.retry import RetryOptions

logger = logging.getLogger(__name__)

T = TypeVar("T")

OptionsLike = Union[RetryOptions, Mapping[str, Any], None]


async def _resolve(value: Any) -> Any:
    """Await ``value`` if it is awaitable, otherwise return it as is."""
    if inspect.isawaitable(value):
        return await value
    return value


def resolve_options(options: OptionsLike = None, **overrides: Any) -> RetryOptions:
    """Build the per-call options snapshot.

    Args:
        options: RetryOptions instance, mapping of option names or None
        **overrides: Individual options applied on top of ``options``

    Returns:
        Validated RetryOptions

    Raises:
        pydantic.ValidationError: If an option is unknown or invalid
    """
    if options is None:
        values: dict = {}
    elif isinstance(options, RetryOptions):
        if not overrides:
            return options
        values = dict(options)
    else:
        values = dict(options)
    values.update(overrides)
    return RetryOptions(**values)


def _attempt_index(retry_state: RetryCallState) -> int:
    # tenacity counts attempts from 1
    return retry_state.attempt_number - 1


def _build_retrying(options: RetryOptions) -> AsyncRetrying:
    """Create a tenacity controller bound to one call's options."""

    async def _retry_condition(retry_state: RetryCallState) -> bool:
        outcome = retry_state.outcome
        if outcome is None or not outcome.failed:
            return False
        error = outcome.exception()
        attempt_number = _attempt_index(retry_state)
        if not isinstance(error, Exception):
            # Cancellation and interpreter exits are never retried
            logger.debug(f"Attempt {attempt_number} interrupted by {type(error).__name__}")
            return False
        logger.debug(f"Attempt {attempt_number} failed: {error!r}")
        if options.should_retry is None:
            return True
        decision = await _resolve(options.should_retry(error, attempt_number))
        if decision is False:
            logger.debug(f"Retry vetoed by should_retry after attempt {attempt_number}")
            return False
        return True

    async def _before_sleep(retry_state: RetryCallState) -> None:
        attempt_number = _attempt_index(retry_state)
        if options.on_retry is not None:
            error = retry_state.outcome.exception() if retry_state.outcome else None
            await _resolve(options.on_retry(error, attempt_number))
        # Backoff is computed only once on_retry has returned
        wait_time = compute_wait_time(attempt_number, options)
        if wait_time <= 0:
            return
        seconds = wait_time / 1000
        logger.debug(f"Waiting {seconds:.3f}s before next attempt")
        await options.sleep(seconds)

    async def _skip_sleep(seconds: float) -> None:
        # tenacity waits are always zero; the pause happens in _before_sleep
        return None

    return AsyncRetrying(
        stop=stop_after_attempt(options.max_retries + 1),
        retry=_retry_condition,
        before_sleep=_before_sleep,
        sleep=_skip_sleep,
        reraise=True,
    )


async def execute(
    task: Callable[[int], Union[T, Awaitable[T]]],
    options: OptionsLike = None,
    **overrides: Any,
) -> T:
    """Run ``task`` and re-run it on failure.

    Args:
        task: Callable receiving the zero-based attempt number; may return a
            value or an awaitable, and fails by raising
        options: RetryOptions, mapping of option names or None for defaults
        **overrides: Individual options (snake_case or camelCase)

    Returns:
        The task's result from the first successful attempt

    Raises:
        Exception: The last task failure, unchanged, once attempts are
            exhausted or ``should_retry`` returns False; or any exception
            raised by ``should_retry`` / ``on_retry``
    """
    resolved = resolve_options(options, **overrides)
    retrying = _build_retrying(resolved)

    result: Any = None
    async for attempt in retrying:
        with attempt:
            result = await _resolve(task(_attempt_index(attempt.retry_state)))
    return result


def with_retry(
    options: OptionsLike = None,
    **overrides: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Awaitable[Any]]]:
    """Create a retry decorator.

    The decorated callable may be sync or async; the wrapper is always a
    coroutine function. Options are validated once, when the decorator is
    created.

    Args:
        options: RetryOptions, mapping of option names or None
        **overrides: Individual options applied on top of ``options``

    Returns:
        Retry decorator
    """
    resolved = resolve_options(options, **overrides)

    def decorator(func: Callable[..., Any]) -> Callable[..., Awaitable[Any]]:
        @functools.wraps(func)
        async def wrapped(*args: Any, **kwargs: Any) -> Any:
            return await execute(lambda _attempt: func(*args, **kwargs), resolved)

        return wrapped

    return decorator
