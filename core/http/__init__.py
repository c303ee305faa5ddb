"""HTTP client utilities and session management."""

from core.http.circuit_breaker import (
    CircuitBreaker,
    CircuitOpen,
    geocoding_breaker,
    routes_breaker,
    with_circuit_breaker,
)
from core.http.rate_limiting import get_geocode_rate_limiter
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import cleanup_session, get_session

__all__ = [
    "CircuitBreaker",
    "CircuitOpen",
    "cleanup_session",
    "geocoding_breaker",
    "get_geocode_rate_limiter",
    "get_session",
    "request_json",
    "retry_async",
    "routes_breaker",
    "with_circuit_breaker",
]
