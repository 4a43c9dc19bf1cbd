"""Retry utilities for agent-relay.

Model calls are retried with exponential backoff when the failure looks
transient (connection resets, timeouts, rate limits, 5xx responses).
"""

import asyncio
import functools
import logging
import random
import re
from typing import Any, Callable

logger = logging.getLogger(__name__)

_SERVER_ERROR_PATTERN = re.compile(r"\b5\d\d\b")


def async_retry_with_exponential_backoff(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable: Callable[[Exception], bool] | None = None,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Async decorator for retry with exponential backoff.

    Args:
        max_attempts: Maximum number of attempts, including the first call
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between retries
        exponential_base: Base for exponential backoff calculation
        jitter: Whether to add random jitter to delay
        retryable: Predicate deciding whether an error is worth retrying.
            Every error is retried when omitted.

    Returns:
        Decorated async function with retry logic
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            attempt = 0
            current_delay = base_delay

            while True:
                try:
                    return await func(*args, **kwargs)
                except Exception as e:
                    attempt += 1

                    if retryable is not None and not retryable(e):
                        raise

                    if attempt >= max_attempts:
                        logger.error(
                            f"Async function {func.__name__} failed after {max_attempts} attempts: {e}"
                        )
                        raise

                    delay = min(current_delay, max_delay)
                    if jitter:
                        delay = delay * (0.5 + random.random())

                    logger.warning(
                        f"Async function {func.__name__} failed (attempt {attempt}/{max_attempts}): {e}. "
                        f"Retrying in {delay:.2f}s..."
                    )
                    await asyncio.sleep(delay)
                    current_delay *= exponential_base

        return wrapper

    return decorator


def is_retryable_error(error: Exception) -> bool:
    """Check if an error is retryable.

    Args:
        error: The exception to check

    Returns:
        True for connection, timeout, rate limit and server errors
    """
    error_type = type(error).__name__.lower()
    error_message = str(error).lower()

    if "connection" in error_type or "connect" in error_message:
        return True
    if "timeout" in error_type or "timed out" in error_message:
        return True
    if "ratelimit" in error_type or "429" in error_message or "rate limit" in error_message:
        return True
    if "internalserver" in error_type or _SERVER_ERROR_PATTERN.search(error_message):
        return True
    return "temporar" in error_message or "unavailable" in error_message
