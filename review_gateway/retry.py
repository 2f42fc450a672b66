"""
Retry logic with exponential backoff for handling transient failures.

Used around the completion API call, where timeouts, dropped connections
and error statuses from the provider are all worth another attempt.
"""

import time
import functools
from typing import Callable, Type, Tuple, Optional


class RetryError(Exception):
    """Raised when all retry attempts are exhausted without a captured error."""
    pass


def backoff_delay(
    attempt: int,
    base_delay: float = 1.0,
    exponential_base: float = 2.0,
    max_delay: float = 60.0,
) -> float:
    """
    Delay to wait after a failed attempt.

    Args:
        attempt: Zero-based index of the attempt that just failed
        base_delay: Delay after the first failure, in seconds
        exponential_base: Growth factor per attempt
        max_delay: Upper bound in seconds

    Returns:
        min(base_delay * exponential_base ** attempt, max_delay)
    """
    return min(base_delay * exponential_base ** attempt, max_delay)


def exponential_backoff(
    max_attempts: int = 3,
    base_delay: float = 1.0,
    max_delay: float = 60.0,
    exponential_base: float = 2.0,
    exceptions: Tuple[Type[Exception], ...] = (Exception,),
    on_retry: Optional[Callable] = None,
):
    """
    Decorator for retrying functions with exponential backoff.

    Attempts run strictly one after another. If every attempt fails, the
    last exception is re-raised as-is.

    Args:
        max_attempts: Total number of attempts, including the first one
        base_delay: Initial delay in seconds
        max_delay: Maximum delay between attempts in seconds
        exponential_base: Base for exponential calculation (delay *= base)
        exceptions: Tuple of exceptions to catch and retry
        on_retry: Optional callback function(attempt, exception, delay)

    Example:
        @exponential_backoff(max_attempts=3, base_delay=1.0)
        def call_api(payload):
            return requests.post(URL, json=payload, timeout=30)
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            last_exception = None

            for attempt in range(max_attempts):
                try:
                    return func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e

                    # Don't sleep after the last attempt
                    if attempt < max_attempts - 1:
                        current_delay = backoff_delay(
                            attempt, base_delay, exponential_base, max_delay
                        )

                        if on_retry:
                            on_retry(attempt + 1, e, current_delay)

                        time.sleep(current_delay)

            if last_exception is not None:
                raise last_exception

            raise RetryError(f"{func.__name__} failed after {max_attempts} attempts")

        return wrapper
    return decorator
