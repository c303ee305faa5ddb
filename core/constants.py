"""Global constants for the core package.

This module contains shared constants used across the application core.
"""

from typing import Final

# HTTP Client Constants
HTTP_CONNECTION_LIMIT: Final[int] = 20
HTTP_TIMEOUT_CONNECT: Final[float] = 10.0
HTTP_TIMEOUT_SOCK_READ: Final[float] = 30.0
HTTP_TIMEOUT_TOTAL: Final[float] = 60.0
HTTP_USER_AGENT: Final[str] = "StateMiles/1.0"

# Distance Conversion
METERS_PER_MILE: Final[float] = 1609.34

# Google Maps Platform
GOOGLE_ROUTES_API_URL: Final[str] = (
    "https://routes.googleapis.com/directions/v2:computeRoutes"
)
GOOGLE_GEOCODING_URL: Final[str] = "https://maps.googleapis.com/maps/api/geocode/json"
GOOGLE_ROUTES_FIELD_MASK: Final[str] = ",".join(
    [
        "routes.duration",
        "routes.distanceMeters",
        "routes.polyline.encodedPolyline",
        "routes.legs.steps",
        "routes.legs.startLocation",
        "routes.legs.endLocation",
        "routes.legs.distanceMeters",
        "routes.legs.duration",
    ],
)
STATE_RESULT_TYPE: Final[str] = "administrative_area_level_1"

# User-facing messages
NO_ROUTE_MESSAGE: Final[str] = (
    "Could not calculate the route. Check the addresses entered."
)
INTERNAL_ERROR_MESSAGE: Final[str] = (
    "Internal server error. Check the Google Maps API configuration."
)
BLANK_FIELD_MESSAGE: Final[str] = "can't be blank"
INVALID_REQUEST_MESSAGE: Final[str] = "Invalid request"
