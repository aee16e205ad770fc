"""Retry utility with exponential backoff for provider requests."""

import time
from functools import wraps
from typing import Any, Callable, Optional, Tuple, Type, TypeVar

from ..exceptions import NetworkError
from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar('T')

# Default retry settings
DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY = 0.5  # seconds
DEFAULT_MAX_DELAY = 5.0  # seconds
DEFAULT_BACKOFF_FACTOR = 2.0


def is_transient(error: Exception) -> bool:
    """Whether another attempt could succeed.

    A ``NetworkError`` carrying a 4xx status is the provider refusing the
    request itself; repeating it only burns time.
    """
    status = getattr(error, "status_code", None)
    return status is None or status >= 500 or status == 429


def backoff_delays(
    max_retries: int,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
):
    """Yield the wait before each retry, growing geometrically up to ``max_delay``."""
    delay = base_delay
    for _ in range(max_retries):
        yield min(delay, max_delay)
        delay *= backoff_factor


def retry_with_backoff(
    max_retries: int = DEFAULT_MAX_RETRIES,
    base_delay: float = DEFAULT_BASE_DELAY,
    max_delay: float = DEFAULT_MAX_DELAY,
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR,
    exceptions: Tuple[Type[Exception], ...] = (NetworkError,),
    on_retry: Optional[Callable[[Exception, int], None]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator that retries a function with exponential backoff.

    Only transient failures are retried: by default that is ``NetworkError``
    without a 4xx status (timeouts, refused connections, 5xx answers).
    Decode errors and client errors fail fast.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Initial delay between retries in seconds
        max_delay: Maximum delay between retries in seconds
        backoff_factor: Multiplier for delay after each retry
        exceptions: Tuple of exception types to catch and retry
        on_retry: Optional callback function called on each retry with (exception, attempt)
        sleep: Function used to wait between attempts

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            delays = backoff_delays(max_retries, base_delay, max_delay, backoff_factor)
            attempt = 0
            while True:
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    if not is_transient(e):
                        raise
                    delay = next(delays, None)
                    if delay is None:
                        logger.warning(
                            f"All {max_retries} retries exhausted for {func.__name__}: {e}"
                        )
                        raise
                    attempt += 1
                    logger.debug(f"Retry {attempt}/{max_retries} for {func.__name__} in {delay:.1f}s: {e}")
                    if on_retry:
                        on_retry(e, attempt)
                    sleep(delay)

        return wrapper
    return decorator
