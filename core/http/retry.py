"""Bounded retries for Google provider calls.

Only transport-level failures are retried. Provider answers such as a 4xx
status or ``REQUEST_DENIED`` fail on the first attempt.
"""

from __future__ import annotations

import asyncio
import functools
import logging

from aiohttp import ClientError
from tenacity import (
    AsyncRetrying,
    before_sleep_log,
    retry_if_exception_type,
    stop_after_attempt,
    stop_after_delay,
    wait_exponential,
)

from config import get_provider_timeout_seconds

logger = logging.getLogger(__name__)

# aiohttp connection and disconnect errors are ClientError subclasses
TRANSIENT_EXCEPTIONS: tuple[type[BaseException], ...] = (
    ClientError,
    asyncio.TimeoutError,
)

# Retry budget, in multiples of the per-request timeout
RETRY_BUDGET_FACTOR = 2.0


def retry_budget_seconds() -> float:
    return get_provider_timeout_seconds() * RETRY_BUDGET_FACTOR


def retry_async(
    max_retries: int = 2,
    retry_delay: float = 0.5,
    backoff_factor: float = 2.0,
    retry_exceptions: tuple = TRANSIENT_EXCEPTIONS,
    total_budget: float | None = None,
):
    """Retry an async call on transient errors with exponential backoff.

    No new attempt starts after ``max_retries`` retries or once
    ``total_budget`` seconds have passed since the first attempt. The budget
    defaults to ``PROVIDER_TIMEOUT_SECONDS * RETRY_BUDGET_FACTOR``, read on
    every call. The last error is re-raised.
    """

    def decorator(fn):
        @functools.wraps(fn)
        async def wrapper(*args, **kwargs):
            budget = total_budget if total_budget is not None else retry_budget_seconds()
            retrying = AsyncRetrying(
                stop=stop_after_attempt(max_retries + 1) | stop_after_delay(budget),
                wait=wait_exponential(multiplier=retry_delay, exp_base=backoff_factor),
                retry=retry_if_exception_type(retry_exceptions),
                before_sleep=before_sleep_log(logger, logging.WARNING),
                reraise=True,
            )
            async for attempt in retrying:
                with attempt:
                    return await fn(*args, **kwargs)
            return None

        return wrapper

    return decorator
