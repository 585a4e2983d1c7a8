"""Retry logic with exponential backoff and jitter

Commands read a snapshot, compute the next one and write it back with the
version they read. When another writer got there first the store raises
ConcurrencyConflict and the command is re-run against a fresh snapshot:

1. Only ConcurrencyConflict is retried; every other error propagates
2. Exponential backoff with jitter spreads out competing writers
3. After max retries the conflict surfaces to the caller ("try again")
"""

import asyncio
import random
import logging
from typing import Awaitable, Callable, Any, TypeVar
from functools import wraps

from lifequest import config
from lifequest.exceptions import ConcurrencyConflict
from lifequest.observability.metrics import record_retry

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_DELAY = 2.0  # seconds
JITTER = 0.1  # 10% random jitter


def is_retryable_error(exc: Exception) -> bool:
    """Only stale-snapshot conflicts are worth another attempt"""
    return isinstance(exc, ConcurrencyConflict)


def calculate_backoff(attempt: int, base_delay: float = config.RETRY_BASE_DELAY) -> float:
    """
    Calculate exponential backoff delay with jitter.

    Formula: delay = min(base_delay * (2 ** attempt), MAX_DELAY) +/- 10%

    Args:
        attempt: The retry attempt number (0-indexed)
        base_delay: Delay before the first retry

    Returns:
        Delay in seconds (never negative)
    """
    delay = min(base_delay * (2 ** attempt), MAX_DELAY)
    jitter_amount = random.uniform(-JITTER * delay, JITTER * delay)
    return max(delay + jitter_amount, 0.0)


async def retry_with_backoff(
    func: Callable[..., Awaitable[T]],
    *args: Any,
    max_retries: int = config.MAX_CONFLICT_RETRIES,
    base_delay: float = config.RETRY_BASE_DELAY,
    **kwargs: Any
) -> T:
    """
    Retry async function on ConcurrencyConflict.

    Args:
        func: Async function to retry (must reload its snapshot on each call)
        max_retries: Maximum number of retry attempts
        base_delay: Delay before the first retry
        *args, **kwargs: Arguments to pass to func

    Returns:
        Result from func

    Raises:
        The last ConcurrencyConflict once retries are exhausted, or any
        non-retryable error immediately
    """
    for attempt in range(max_retries + 1):
        try:
            return await func(*args, **kwargs)

        except Exception as e:
            if not is_retryable_error(e):
                raise

            if attempt == max_retries:
                logger.error(
                    f"[RETRY] All {max_retries} retries exhausted for {func.__name__}"
                )
                raise

            backoff = calculate_backoff(attempt, base_delay)
            record_retry(func.__name__)

            logger.info(
                f"[RETRY] Attempt {attempt + 1}/{max_retries} for {func.__name__} "
                f"after {backoff:.2f}s (error: {type(e).__name__})"
            )
            await asyncio.sleep(backoff)

    raise RuntimeError("Retry loop exited without a result")


def with_retry(max_retries: int = config.MAX_CONFLICT_RETRIES) -> Callable:
    """
    Decorator to add conflict retry to async functions.

    Example:
        @with_retry(max_retries=3)
        async def save_progress():
            ...
    """
    def decorator(func: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            return await retry_with_backoff(func, *args, max_retries=max_retries, **kwargs)
        return wrapper
    return decorator
