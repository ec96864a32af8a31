"""Retry options model."""

import asyncio
import random
from typing import Any, Awaitable, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator
from pydantic.alias_generators import to_camel


class RetryOptions(BaseModel):
    """Configuration for one retry orchestration.

    Every field is optional and defaulted independently; None selects the
    field default. Numeric fields other than ``max_retries`` and ``max_delay``
    are not range-checked; out-of-range values only affect the computed wait
    time, which is never negative.

    Attributes:
        max_retries: Retries after the initial attempt (total = max_retries + 1)
        base_delay: First backoff step in milliseconds
        backoff_factor: Multiplier raised to the attempt index
        jitter: Fractional randomization of the wait (0.5 = +/-50%)
        should_retry: ``(error, attempt_number)`` predicate, sync or async;
            only an explicit ``False`` stops retrying
        on_retry: ``(error, attempt_number)`` observer, sync or async,
            called before each wait
        max_delay: Optional cap for a single wait in milliseconds
        random_source: Uniform source in [0, 1) used for jitter
        sleep: Coroutine function suspending for a number of seconds
    """

    max_retries: int = Field(3, ge=0)
    base_delay: float = 0.0
    backoff_factor: float = 1.0
    jitter: float = 0.0
    should_retry: Optional[Callable[..., Any]] = None
    on_retry: Optional[Callable[..., Any]] = None
    max_delay: Optional[float] = Field(None, ge=0.0)
    random_source: Callable[[], float] = random.random
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",  # Reject unknown option names
        alias_generator=to_camel,
        populate_by_name=True,  # Accept both max_retries and maxRetries
    )

    @field_validator(
        "max_retries", "base_delay", "backoff_factor", "jitter", "random_source", "sleep", mode="before"
    )
    @classmethod
    def none_means_default(cls, value: Any, info: ValidationInfo) -> Any:
        if value is None:
            return cls.model_fields[info.field_name].default
        return value
