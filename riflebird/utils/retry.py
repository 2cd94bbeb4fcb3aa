"""
Retry utility for transient provider errors.
"""

import asyncio

from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from riflebird.exceptions.provider import ProviderConnectionError, ProviderRateLimitError


def retry_on_transient_errors(max_attempts=3):
    """
    Decorator to retry provider calls on transient errors.

    Retries on:
    - ProviderRateLimitError: When rate limits are hit
    - ProviderConnectionError: For network failures
    - asyncio.TimeoutError: For general timeouts

    Authentication and response errors are never retried.

    Args:
        max_attempts: Maximum number of attempts (default: 3)

    Returns:
        Decorated function with exponential backoff retry logic
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type(
            (ProviderRateLimitError, ProviderConnectionError, asyncio.TimeoutError)
        ),
        reraise=True,
    )
