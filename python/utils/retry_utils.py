"""Exponential backoff for GitHub API calls that fail transiently"""

import logging
import random
import time
from enum import Enum
from functools import wraps
from typing import Callable, List, Optional, Tuple, TypeVar

import requests

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Secondary rate limits and gateway hiccups from api.github.com
RETRYABLE_STATUS_CODES = (429, 500, 502, 503, 504)


class RetryableErrorType(Enum):
    """How a failed API call should be treated"""

    NETWORK = "network"  # connection reset, DNS, read timeout
    TEMPORARY = "temporary"  # rate limited or server side
    PERMANENT = "permanent"  # bad token, missing scope, not found, bad payload


def is_retryable_error(error: Exception) -> Tuple[bool, RetryableErrorType]:
    """Classify a failed API call.

    Connection problems are network errors. A status code taken from the error
    (``TransportError.status_code``) or from ``requests.HTTPError.response`` is
    temporary when listed in RETRYABLE_STATUS_CODES. Everything else is permanent.
    """
    if isinstance(error, (requests.ConnectionError, requests.Timeout)):
        return True, RetryableErrorType.NETWORK

    status_code = getattr(error, "status_code", None)
    if status_code is None and isinstance(error, requests.HTTPError) and error.response is not None:
        status_code = error.response.status_code

    if status_code in RETRYABLE_STATUS_CODES:
        return True, RetryableErrorType.TEMPORARY

    return False, RetryableErrorType.PERMANENT


def compute_delay(
    attempt: int,
    initial_delay: float,
    max_delay: float,
    exponential_base: float,
    jitter: bool,
) -> float:
    """Seconds to wait after failed attempt number ``attempt`` (0-based)"""
    delay = min(initial_delay * (exponential_base**attempt), max_delay)
    if jitter:
        spread = delay * 0.1
        delay = max(0.1, delay + random.uniform(-spread, spread))
    return delay


def retry_with_backoff(
    max_retries: int = 3,
    initial_delay: float = 1.0,
    max_delay: float = 30.0,
    exponential_base: float = 2.0,
    jitter: bool = True,
    retryable_errors: Optional[List[RetryableErrorType]] = None,
    sleep: Callable[[float], None] = time.sleep,
) -> Callable:
    """Wrap a call so transient failures are retried with exponential backoff.

    The wrapped call runs at most ``max_retries + 1`` times. Permanent errors,
    and error types not in ``retryable_errors``, propagate on the first failure.
    When attempts run out the last error propagates unchanged.

    Args:
        max_retries: Extra attempts after the first one; 0 disables retries
        initial_delay: Wait before the first retry, in seconds
        max_delay: Upper bound for any single wait, in seconds
        exponential_base: Growth factor between consecutive waits
        jitter: Spread each wait by up to 10% so parallel workers do not retry in lockstep
        retryable_errors: Error types to retry (default: network and temporary; [] never retries)
        sleep: Wait function, replaced in tests
    """
    if retryable_errors is None:
        retryable_errors = [RetryableErrorType.NETWORK, RetryableErrorType.TEMPORARY]

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @wraps(func)
        def wrapper(*args, **kwargs) -> T:
            attempts = max_retries + 1
            attempt = 0
            while True:
                try:
                    result = func(*args, **kwargs)
                except Exception as e:
                    retryable, error_type = is_retryable_error(e)
                    if not retryable or error_type not in retryable_errors:
                        raise
                    if attempt + 1 >= attempts:
                        logger.error(f"⚠️ Giving up on {func.__name__} after {attempts} attempt(s): {e}")
                        raise

                    delay = compute_delay(attempt, initial_delay, max_delay, exponential_base, jitter)
                    logger.warning(
                        f"⚠️ {func.__name__} hit a {error_type.value} error "
                        f"(attempt {attempt + 1}/{attempts}), retrying in {delay:.2f}s: {e}"
                    )
                    sleep(delay)
                    attempt += 1
                    continue

                if attempt > 0:
                    logger.info(f"{func.__name__} recovered on attempt {attempt + 1}")
                return result

        return wrapper

    return decorator
