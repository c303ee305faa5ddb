"""
Google Maps provider utilizing the Google Maps Platform APIs.

Routes come from the Routes API v2 ``computeRoutes`` endpoint; state
resolution uses the Geocoding API restricted to
``administrative_area_level_1`` results.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import aiohttp

from config import (
    get_google_geocoding_url,
    get_google_routes_api_url,
    get_provider_timeout_seconds,
)
from core.constants import GOOGLE_ROUTES_FIELD_MASK, STATE_RESULT_TYPE
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import (
    CircuitOpen,
    geocoding_breaker,
    routes_breaker,
    with_circuit_breaker,
)
from core.http.rate_limiting import get_geocode_rate_limiter
from core.http.request import request_json
from core.http.retry import retry_async
from core.http.session import get_session
from core.mapping.interfaces import MappingProvider, RouteProvider, StateResolver
from core.mapping.models import Coordinate, RouteLeg, RouteResult, RouteStep

logger = logging.getLogger(__name__)


def _as_meters(value: Any) -> int:
    try:
        meters = int(value)
    except (TypeError, ValueError):
        return 0
    return max(meters, 0)


def _parse_duration(value: Any) -> int:
    """Convert a protobuf duration string such as ``"3600s"`` to seconds."""
    if value is None:
        return 0
    text = str(value).strip().removesuffix("s")
    try:
        return max(int(float(text)), 0)
    except ValueError:
        return 0


def _location(value: Any) -> Coordinate | None:
    if not isinstance(value, dict):
        return None
    return Coordinate.from_lat_lng(value.get("latLng"))


class GoogleStateResolver(StateResolver):
    def __init__(self, api_key: str, *, timeout: float | None = None) -> None:
        self._api_key = api_key
        self._url = get_google_geocoding_url()
        self._timeout = timeout if timeout is not None else get_provider_timeout_seconds()

    @staticmethod
    def _status(data: dict[str, Any] | None) -> str:
        if not isinstance(data, dict):
            return "UNKNOWN"
        return str(data.get("status") or "UNKNOWN")

    @staticmethod
    def extract_state_code(data: dict[str, Any] | None) -> str | None:
        """Return the first result's state ``short_name``, if any."""
        if not isinstance(data, dict):
            return None
        results = data.get("results") or []
        if not results or not isinstance(results[0], dict):
            return None
        for component in results[0].get("address_components") or []:
            if not isinstance(component, dict):
                continue
            if STATE_RESULT_TYPE in (component.get("types") or []):
                short_name = component.get("short_name")
                return str(short_name) if short_name else None
        return None

    @with_circuit_breaker(geocoding_breaker)
    @retry_async()
    async def _reverse(self, lat: float, lon: float) -> dict[str, Any] | None:
        session = await get_session()
        params = {
            "latlng": f"{lat},{lon}",
            "key": self._api_key,
            "result_type": STATE_RESULT_TYPE,
        }
        data = await request_json(
            "GET",
            self._url,
            session=session,
            params=params,
            service_name="Google reverse geocode",
            timeout=self._timeout,
        )
        status = self._status(data)
        if status == "ZERO_RESULTS":
            return None
        if status != "OK":
            msg = f"Google reverse geocode error: {status}"
            raise ExternalServiceException(msg, {"status": status})
        return data

    async def resolve_state(self, coord: Coordinate | None) -> str | None:
        if coord is None or not coord.is_valid:
            return None
        try:
            async with get_geocode_rate_limiter():
                data = await self._reverse(coord.latitude, coord.longitude)
        except CircuitOpen as exc:
            logger.debug("Skipping state lookup for %s: %s", coord.describe(), exc)
            return None
        except (
            ExternalServiceException,
            aiohttp.ClientError,
            asyncio.TimeoutError,
        ) as exc:
            logger.warning(
                "Error getting state from coordinates (%s): %s",
                coord.describe(),
                exc,
            )
            return None
        except Exception:
            logger.exception(
                "Unexpected error getting state from coordinates (%s)",
                coord.describe(),
            )
            return None
        return self.extract_state_code(data)


class GoogleRouteProvider(RouteProvider):
    def __init__(self, api_key: str, *, timeout: float | None = None) -> None:
        self._api_key = api_key
        self._url = get_google_routes_api_url()
        self._timeout = timeout if timeout is not None else get_provider_timeout_seconds()

    def _headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "X-Goog-Api-Key": self._api_key,
            "X-Goog-FieldMask": GOOGLE_ROUTES_FIELD_MASK,
        }

    @with_circuit_breaker(routes_breaker)
    @retry_async()
    async def _compute_routes(self, origin: str, destination: str) -> Any:
        payload = {
            "origin": {"address": origin},
            "destination": {"address": destination},
            "travelMode": "DRIVE",
            "units": "IMPERIAL",
            "computeAlternativeRoutes": False,
        }
        session = await get_session()
        return await request_json(
            "POST",
            self._url,
            session=session,
            json=payload,
            headers=self._headers(),
            service_name="Google Routes",
            timeout=self._timeout,
        )

    async def fetch_route(self, origin: str, destination: str) -> RouteResult | None:
        try:
            data = await self._compute_routes(origin, destination)
        except CircuitOpen as exc:
            raise ExternalServiceException(str(exc), {"service": exc.service}) from exc
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            msg = "Google Routes request failed"
            raise ExternalServiceException(msg, {"error": repr(exc)}) from exc

        if not isinstance(data, dict):
            msg = "Google Routes error: unexpected response"
            raise ExternalServiceException(msg, {"url": self._url})

        routes = data.get("routes") or []
        if not routes:
            logger.info("Google Routes found no route from %r to %r", origin, destination)
            return None
        return self.parse_route(routes[0])

    @staticmethod
    def parse_step(step: Any) -> RouteStep:
        if not isinstance(step, dict):
            return RouteStep(start=None, end=None, distance_meters=0)
        return RouteStep(
            start=_location(step.get("startLocation")),
            end=_location(step.get("endLocation")),
            distance_meters=_as_meters(step.get("distanceMeters")),
        )

    @staticmethod
    def parse_route(route: Any) -> RouteResult:
        if not isinstance(route, dict):
            msg = "Google Routes error: malformed route"
            raise ExternalServiceException(msg)

        legs: list[RouteLeg] = []
        for leg in route.get("legs") or []:
            if not isinstance(leg, dict):
                msg = "Google Routes error: malformed leg"
                raise ExternalServiceException(msg)
            legs.append(
                RouteLeg(
                    start_location=_location(leg.get("startLocation")),
                    end_location=_location(leg.get("endLocation")),
                    distance_meters=_as_meters(leg.get("distanceMeters")),
                    duration_seconds=_parse_duration(leg.get("duration")),
                    steps=tuple(
                        GoogleRouteProvider.parse_step(step)
                        for step in leg.get("steps") or []
                    ),
                ),
            )

        polyline = route.get("polyline") or {}
        encoded = polyline.get("encodedPolyline") if isinstance(polyline, dict) else None
        return RouteResult(
            total_distance_meters=_as_meters(route.get("distanceMeters")),
            legs=tuple(legs),
            encoded_polyline=str(encoded or ""),
            duration_seconds=_parse_duration(route.get("duration")),
        )


class GoogleProvider(MappingProvider):
    """Mapping provider utilizing Google Maps Platform APIs."""

    def __init__(self, api_key: str) -> None:
        self._state_resolver = GoogleStateResolver(api_key)
        self._route_provider = GoogleRouteProvider(api_key)

    @property
    def state_resolver(self) -> StateResolver:
        return self._state_resolver

    @property
    def route_provider(self) -> RouteProvider:
        return self._route_provider
