"""
Retry helper with exponential backoff and jitter for async external calls.
"""

import asyncio
import logging
import random
from typing import Awaitable, Callable, Tuple, Type, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


async def retry_with_backoff(
    func: Callable[[], Awaitable[T]],
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    exceptions: Tuple[Type[BaseException], ...] = (Exception,),
    should_retry: Callable[[BaseException], bool] = lambda exc: True,
) -> T:
    """
    Await ``func()`` and retry it on the given exceptions.

    Args:
        func: Zero-argument coroutine function to call
        max_retries: Maximum number of retry attempts (total attempts = max_retries + 1)
        initial_delay: Initial delay between retries (seconds)
        max_delay: Maximum delay between retries (seconds)
        exponential_base: Base for exponential backoff
        jitter: Whether to add random jitter to delays
        exceptions: Exception types that trigger a retry
        should_retry: Extra predicate; returning False re-raises immediately

    Returns:
        Whatever ``func()`` returns on its first successful attempt
    """
    name = getattr(func, "__name__", "call")
    attempt = 0
    while True:
        try:
            return await func()
        except exceptions as e:
            if getattr(e, "retryable", True) is False or not should_retry(e):
                logger.warning(f"{name}: Non-retryable error: {e}")
                raise
            if attempt >= max_retries:
                logger.error(f"{name}: All {max_retries + 1} attempts failed. Last error: {e}")
                raise

            delay = min(initial_delay * (exponential_base ** attempt), max_delay)
            if jitter:
                delay = delay * (0.5 + random.random())

            logger.warning(
                f"{name}: Attempt {attempt + 1}/{max_retries + 1} failed: {e}. "
                f"Retrying in {delay:.2f}s..."
            )
            attempt += 1
            await asyncio.sleep(delay)
