"""Exponential backoff retry logic for source API calls."""

import asyncio
import random
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar, cast

import httpx

from ..utils.errors import (
    NetworkConnectionError,
    NetworkTimeoutError,
    ProviderRateLimitError,
    ProviderServiceError,
    ProviderTimeoutError,
)
from ..utils.logging import get_logger

logger = get_logger(__name__)

AsyncFunc = TypeVar("AsyncFunc", bound=Callable[..., Any])

# Retryable HTTP status codes
RETRYABLE_STATUS_CODES: set[int] = {
    408,  # Request Timeout
    429,  # Too Many Requests
    500,  # Internal Server Error
    502,  # Bad Gateway
    503,  # Service Unavailable
    504,  # Gateway Timeout
}

# Retryable exception types
RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.ConnectError,
    httpx.RemoteProtocolError,
    ConnectionError,
    ProviderTimeoutError,
    ProviderRateLimitError,
    NetworkConnectionError,
    NetworkTimeoutError,
)


class RetryConfig:
    """Configuration for exponential backoff retry."""

    def __init__(
        self,
        max_retries: int = 1,
        base_delay: float = 0.5,
        max_delay: float = 5.0,
        exponential_base: float = 2.0,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_retries: Maximum number of retry attempts after the first call
            base_delay: Initial delay between retries in seconds
            max_delay: Maximum delay between retries in seconds
            exponential_base: Base for exponential backoff calculation
            jitter: Whether to add randomization to delays
        """
        self.max_retries = max(0, max_retries)
        self.base_delay = base_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self.jitter = jitter

    def calculate_delay(self, attempt: int) -> float:
        """Return the delay in seconds before retry number ``attempt`` (0-indexed)."""
        delay = min(self.base_delay * (self.exponential_base**attempt), self.max_delay)

        if self.jitter:
            # +/-25% jitter
            jitter_range = delay * 0.25
            delay += random.uniform(-jitter_range, jitter_range)

        return max(0, delay)


def is_retryable_exception(exc: Exception) -> bool:
    """Check if an exception is worth another attempt."""
    if isinstance(exc, RETRYABLE_EXCEPTIONS):
        return True

    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code in RETRYABLE_STATUS_CODES

    if isinstance(exc, ProviderServiceError):
        return exc.status_code in RETRYABLE_STATUS_CODES

    return False


def format_exception_for_log(exc: Exception) -> str:
    """Format exception details for logging."""
    exception_type = type(exc).__name__
    exception_details = str(exc)

    if isinstance(exc, httpx.HTTPStatusError):
        status_code = exc.response.status_code
        reason = exc.response.reason_phrase
        exception_details = f"HTTP {status_code} {reason}: {exception_details}"

        if "retry-after" in exc.response.headers:
            exception_details += (
                f" (Retry-After: {exc.response.headers['retry-after']})"
            )
    elif getattr(exc, "provider", None):
        exception_details = f"{exception_details} [Provider: {exc.provider}]"

    return f"{exception_type}: {exception_details}"


def with_exponential_backoff(
    config: RetryConfig | None = None,
    on_retry: Callable[[Exception, int], None] | None = None,
) -> Callable[[AsyncFunc], AsyncFunc]:
    """Decorator adding exponential backoff retry to async functions.

    Cancellation is never retried: ``asyncio.CancelledError`` is not an
    ``Exception`` subclass and passes straight through, so an expiring
    deadline stops the retry loop immediately.

    Args:
        config: Retry configuration (uses defaults if None)
        on_retry: Optional callback called on each retry with (exception, attempt)

    Returns:
        Decorated function with retry logic
    """
    if config is None:
        config = RetryConfig()

    def decorator(func: AsyncFunc) -> AsyncFunc:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            start_time = time.time()

            for attempt in range(config.max_retries + 1):
                try:
                    result = await func(*args, **kwargs)
                except Exception as exc:
                    if attempt >= config.max_retries:
                        if config.max_retries:
                            logger.error(
                                f"All retry attempts exhausted for {func.__name__} "
                                f"after {time.time() - start_time:.2f}s: "
                                f"{format_exception_for_log(exc)}"
                            )
                        raise

                    if not is_retryable_exception(exc):
                        logger.debug(
                            f"Non-retryable exception in {func.__name__}: "
                            f"{format_exception_for_log(exc)}"
                        )
                        raise

                    delay = config.calculate_delay(attempt)
                    logger.warning(
                        f"Retryable error in {func.__name__} "
                        f"(attempt {attempt + 1}/{config.max_retries + 1}): "
                        f"{format_exception_for_log(exc)}; retrying after {delay:.2f}s"
                    )

                    if on_retry:
                        on_retry(exc, attempt)

                    await asyncio.sleep(delay)
                else:
                    if attempt > 0:
                        logger.info(
                            f"Successfully completed {func.__name__} after {attempt} "
                            f"retries in {time.time() - start_time:.2f}s"
                        )
                    return result

            raise RuntimeError("Retry logic error: no attempt was made")

        return cast(AsyncFunc, wrapper)

    return decorator
