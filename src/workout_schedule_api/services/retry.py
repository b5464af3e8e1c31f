"""Retry utilities for workout-data service calls with exponential backoff."""
import logging
from typing import Any, Callable, TypeVar

import requests
from tenacity import (
    Retrying,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)


logger = logging.getLogger(__name__)

T = TypeVar("T")

# Default retry configuration
DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_MIN_WAIT_SECONDS = 1
DEFAULT_MAX_WAIT_SECONDS = 10


def is_retryable_error(exception: BaseException) -> bool:
    """
    Determine if an exception is retryable.

    Retryable errors include:
    - Rate limit errors (429)
    - Server errors (5xx)
    - Timeout errors
    - Connection errors

    Non-retryable errors include:
    - Client errors (400, 401, 403, 404)
    - Envelope errors reported by the service itself
    """
    # Errors the service reported deliberately are final whatever their text says
    if getattr(exception, "retryable", True) is False:
        return False

    status_code = getattr(exception, "status_code", None)
    if isinstance(status_code, int):
        return status_code == 429 or status_code >= 500

    if isinstance(exception, (requests.Timeout, requests.ConnectionError)):
        return True

    error_str = str(exception).lower()
    exception_type = type(exception).__name__.lower()

    # Check for rate limit (429) - always retry
    if "rate" in error_str and "limit" in error_str:
        return True

    # Check for timeout errors - retry
    if "timeout" in error_str or "timed out" in error_str:
        return True
    if "timeout" in exception_type:
        return True

    # Check for connection errors - retry
    if "connection" in error_str or "connect" in exception_type:
        return True

    # Default: don't retry unknown errors
    return False


def retry_sync_call(
    func: Callable[..., T],
    *args: Any,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    min_wait_seconds: float = DEFAULT_MIN_WAIT_SECONDS,
    max_wait_seconds: float = DEFAULT_MAX_WAIT_SECONDS,
    **kwargs: Any,
) -> T:
    """
    Execute a sync function with retry logic.

    Only errors classified by ``is_retryable_error`` are retried; anything
    else propagates on the first attempt.

    Args:
        func: Sync function to execute
        *args: Positional arguments for the function
        max_attempts: Maximum number of attempts
        min_wait_seconds: Minimum wait time between retries
        max_wait_seconds: Maximum wait time between retries
        **kwargs: Keyword arguments for the function

    Returns:
        Result of the function call

    Raises:
        Exception: The last error once attempts are exhausted
    """
    retrying = Retrying(
        retry=retry_if_exception(is_retryable_error),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(
            multiplier=min_wait_seconds,
            min=min_wait_seconds,
            max=max_wait_seconds,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    return retrying(func, *args, **kwargs)
