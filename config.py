"""Centralized configuration for environment variables and external APIs.

This module is the single source of truth for configuration used across the
application. Import getters from here rather than calling os.getenv directly
in multiple places. Getters read the environment at call time so a changed
``.env`` or test override takes effect without re-importing.
"""

from __future__ import annotations

import logging
import os
from typing import Final

from dotenv import load_dotenv

from core.constants import GOOGLE_GEOCODING_URL, GOOGLE_ROUTES_API_URL
from core.exceptions import ConfigurationException

# Load environment variables from .env if present
load_dotenv()

logger = logging.getLogger(__name__)

DEFAULT_PROVIDER_TIMEOUT_SECONDS: Final[float] = 10.0
DEFAULT_GEOCODE_CONCURRENCY: Final[int] = 8
DEFAULT_GEOCODE_RATE_LIMIT: Final[int] = 40
DEFAULT_RECENT_TRIPS_LIMIT: Final[int] = 10
MAX_RECENT_TRIPS_LIMIT: Final[int] = 100
DEFAULT_PORT: Final[int] = 8080


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except (TypeError, ValueError):
        logger.warning("Invalid %s=%r, using default %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("%s must be positive, using default %s", name, default)
        return default
    return value


# --- Google Maps Platform ---


def get_google_maps_api_key() -> str:
    return _env_str("GOOGLE_MAPS_API_KEY")


def require_google_maps_api_key() -> str:
    """Return the Google Maps API key or raise if it is not configured."""
    api_key = get_google_maps_api_key()
    if not api_key:
        msg = "Google Maps API key not found. Set GOOGLE_MAPS_API_KEY."
        raise ConfigurationException(msg, {"code": "google_key_missing"})
    return api_key


def get_google_routes_api_url() -> str:
    return _env_str("GOOGLE_ROUTES_API_URL", GOOGLE_ROUTES_API_URL)


def get_google_geocoding_url() -> str:
    return _env_str("GOOGLE_GEOCODING_URL", GOOGLE_GEOCODING_URL)


# --- Provider call tuning ---


def get_provider_timeout_seconds() -> float:
    return _env_number(
        "PROVIDER_TIMEOUT_SECONDS",
        DEFAULT_PROVIDER_TIMEOUT_SECONDS,
        float,
    )


def get_geocode_concurrency() -> int:
    """Maximum in-flight reverse geocode calls per route computation."""
    return _env_number("GEOCODE_CONCURRENCY", DEFAULT_GEOCODE_CONCURRENCY, int)


def get_geocode_rate_limit() -> int:
    """Process-wide reverse geocode requests allowed per second."""
    return _env_number("GEOCODE_RATE_LIMIT", DEFAULT_GEOCODE_RATE_LIMIT, int)


# --- Trip listing ---


def get_recent_trips_limit() -> int:
    limit = _env_number("RECENT_TRIPS_LIMIT", DEFAULT_RECENT_TRIPS_LIMIT, int)
    return min(limit, MAX_RECENT_TRIPS_LIMIT)


# --- Web server ---


def get_cors_allowed_origins() -> list[str]:
    raw = _env_str("CORS_ALLOWED_ORIGINS")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_port() -> int:
    return _env_number("PORT", DEFAULT_PORT, int)


__all__ = [
    "DEFAULT_GEOCODE_CONCURRENCY",
    "DEFAULT_GEOCODE_RATE_LIMIT",
    "DEFAULT_PROVIDER_TIMEOUT_SECONDS",
    "DEFAULT_RECENT_TRIPS_LIMIT",
    "MAX_RECENT_TRIPS_LIMIT",
    "get_cors_allowed_origins",
    "get_geocode_concurrency",
    "get_geocode_rate_limit",
    "get_google_geocoding_url",
    "get_google_maps_api_key",
    "get_google_routes_api_url",
    "get_port",
    "get_provider_timeout_seconds",
    "get_recent_trips_limit",
    "require_google_maps_api_key",
]
