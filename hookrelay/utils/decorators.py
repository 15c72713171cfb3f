"""
PURPOSE: Retry decorator with exponential backoff for outbound HTTP calls.
Used by the Binance proxy client to ride out transient network failures.
"""

import asyncio
import functools
from typing import Any, Callable, Tuple

from hookrelay.utils.logger import get_logger

logger = get_logger(__name__)


def retry(
    max_retries: int = 3,
    delay: float = 1.0,
    backoff: float = 2.0,
    exceptions: Tuple[type, ...] = (Exception,)
) -> Callable:
    """
    PURPOSE: Retry an async function on the given exceptions with exponential backoff.

    Args:
        max_retries: Maximum number of retry attempts (default 3).
        delay: Initial delay between retries in seconds (default 1.0).
        backoff: Exponential backoff multiplier (default 2.0).
        exceptions: Tuple of exception types to catch and retry on (default (Exception,)).

    Returns:
        Callable: Decorated coroutine function with retry logic.

    Raises:
        TypeError: If applied to a non-async function.
    """
    def decorator(func: Callable) -> Callable:
        if not asyncio.iscoroutinefunction(func):
            raise TypeError(f"retry() requires an async function, got {func.__name__}")

        @functools.wraps(func)
        async def wrapper(*args, **kwargs) -> Any:
            current_delay = delay

            for attempt in range(max_retries + 1):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    if attempt >= max_retries:
                        logger.error(
                            "retry_exhausted",
                            function=func.__name__,
                            attempts=attempt + 1,
                            error=str(e),
                        )
                        raise
                    logger.info(
                        "retry_scheduled",
                        function=func.__name__,
                        attempt=attempt + 1,
                        max_retries=max_retries,
                        delay=current_delay,
                        error=str(e),
                    )
                    await asyncio.sleep(current_delay)
                    current_delay *= backoff

        return wrapper

    return decorator
