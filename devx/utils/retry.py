"""Retry utilities for transient network errors.

This module provides exponential backoff with jitter for calls to the
upstream release feed. It includes:
- RetryConfig: Retry policy (a single retry by default)
- calculate_backoff_delay: Exponential backoff with jitter calculation
- with_retry: Decorator for automatic retry logic
"""

import random
import time
from collections.abc import Callable
from dataclasses import dataclass
from functools import wraps
from typing import Any, TypeVar

import httpx

T = TypeVar("T")


@dataclass(frozen=True)
class RetryConfig:
    """Retry policy for network calls.

    Attributes:
        max_retries: Retries after the first attempt
        base_delay_seconds: Delay before the first retry
        max_delay_seconds: Upper bound for any single delay
        jitter_factor: Fraction of the delay added as random jitter
        retryable_status_codes: HTTP status codes worth retrying
    """

    max_retries: int = 1
    base_delay_seconds: float = 1.0
    max_delay_seconds: float = 10.0
    jitter_factor: float = 0.5
    retryable_status_codes: frozenset[int] = frozenset({429, 500, 502, 503, 504})


DEFAULT_RETRY_CONFIG = RetryConfig()


def calculate_backoff_delay(attempt: int, config: RetryConfig) -> float:
    """Calculate delay with exponential backoff and jitter.

    Formula: min(base * 2^attempt + jitter, max_delay)

    Args:
        attempt: Current attempt number (0-indexed)
        config: Retry configuration

    Returns:
        Delay in seconds
    """
    exponential_delay = config.base_delay_seconds * (2**attempt)
    jitter = random.uniform(0, config.jitter_factor * exponential_delay)
    delay: float = min(exponential_delay + jitter, config.max_delay_seconds)
    return delay


def is_retryable_error(error: Exception, config: RetryConfig) -> bool:
    """Check if an error should trigger a retry.

    Transport-level failures (connection refused, timeouts) and HTTP
    responses with a retryable status code are retried; everything else
    is raised immediately.
    """
    if isinstance(error, httpx.TransportError):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code in config.retryable_status_codes
    return False


def with_retry(
    config: RetryConfig = DEFAULT_RETRY_CONFIG,
    on_retry: Callable[[int, float, Exception], None] | None = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for retrying functions on transient network errors.

    Args:
        config: Retry configuration
        on_retry: Optional callback called before each retry.
                  Receives (attempt_number, delay_seconds, exception).

    Returns:
        Decorator function

    Usage:
        @with_retry(RetryConfig(max_retries=1))
        def fetch():
            ...

    Raises:
        Exception: The last error once retries are exhausted, or any
            non-retryable error immediately
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            for attempt in range(config.max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    if not is_retryable_error(e, config) or attempt >= config.max_retries:
                        raise

                    delay = calculate_backoff_delay(attempt, config)
                    if on_retry:
                        on_retry(attempt + 1, delay, e)
                    time.sleep(delay)

            raise AssertionError("unreachable")

        return wrapper

    return decorator


__all__ = [
    "RetryConfig",
    "DEFAULT_RETRY_CONFIG",
    "calculate_backoff_delay",
    "is_retryable_error",
    "with_retry",
]
