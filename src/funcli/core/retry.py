"""
Retry Module
Provides retry functionality for idempotent API calls with exponential backoff.
"""

import time
from functools import wraps
from typing import TypeVar, Callable, Optional, Tuple, Type

import requests

from funcli.logger import logger
from funcli.config import API_MAX_RETRIES, API_RETRY_BASE_DELAY


T = TypeVar('T')

RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


def _retryable_status(exc: Exception, status_codes: Tuple[int, ...]) -> bool:
    status_code = getattr(exc, "status_code", None)
    return status_code in status_codes


def retry_on_failure(
    max_retries: int = API_MAX_RETRIES,
    base_delay: float = API_RETRY_BASE_DELAY,
    retryable_exceptions: Tuple[Type[Exception], ...] = (requests.exceptions.ConnectionError,
                                                         requests.exceptions.Timeout),
    retryable_status_codes: Tuple[int, ...] = RETRYABLE_STATUS_CODES,
    sleep: Callable[[float], None] = None,
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """
    Decorator for retrying functions with exponential backoff.

    Only meant for reads: a retried mutation could be applied twice.

    Args:
        max_retries: Maximum number of retry attempts
        base_delay: Base delay in seconds (doubled on every attempt)
        retryable_exceptions: Transport exceptions to retry on
        retryable_status_codes: Status codes of exceptions carrying a
            ``status_code`` attribute (``ApiError``) that should be retried
        sleep: Sleep function, ``time.sleep`` when not given

    Returns:
        Decorated function with retry logic
    """
    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            do_sleep = sleep or time.sleep
            last_exception: Optional[Exception] = None

            for attempt in range(max_retries + 1):
                try:
                    return func(*args, **kwargs)
                except Exception as e:
                    retryable = isinstance(e, retryable_exceptions) or _retryable_status(e, retryable_status_codes)
                    if not retryable:
                        raise
                    last_exception = e

                    if attempt < max_retries:
                        delay = base_delay * (2 ** attempt)
                        logger.warning(f"{func.__name__} failed: {e}, retrying in {delay:.1f}s ({attempt + 1}/{max_retries})")
                        do_sleep(delay)
                    else:
                        logger.error(f"Giving up on {func.__name__} after {max_retries} retries: {e}")

            raise last_exception

        return wrapper
    return decorator
