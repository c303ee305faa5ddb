"""
Rate limiting utilities for external API calls.
"""

from aiolimiter import AsyncLimiter

from config import get_geocode_rate_limit


class RateLimiterState:
    """Process-wide geocoding limiter, rebuilt when the configured rate changes."""

    limiter: AsyncLimiter | None = None
    rate: int | None = None


def get_geocode_rate_limiter() -> AsyncLimiter:
    """Return the shared reverse-geocoding limiter (requests per second)."""
    rate = get_geocode_rate_limit()
    if RateLimiterState.limiter is None or RateLimiterState.rate != rate:
        RateLimiterState.limiter = AsyncLimiter(rate, 1)
        RateLimiterState.rate = rate
    return RateLimiterState.limiter
