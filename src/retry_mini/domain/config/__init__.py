"""Configuration models with Pydantic validation."""

from retry_mini.domain.config.retry import RetryOptions

__all__ = [
    "RetryOptions",
]
