"""
Provider-neutral route types shared by the mapping adapters and trip services.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any

from core.constants import METERS_PER_MILE
from core.mapping.polyline import decode_polyline5


@dataclass(frozen=True)
class Coordinate:
    """WGS84 latitude/longitude pair in degrees."""

    latitude: float
    longitude: float

    @property
    def is_valid(self) -> bool:
        lat, lon = self.latitude, self.longitude
        if not (math.isfinite(lat) and math.isfinite(lon)):
            return False
        return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0

    @classmethod
    def from_lat_lng(cls, value: Any) -> Coordinate | None:
        """Build from ``{"latitude": .., "longitude": ..}``; None if incomplete."""
        if not isinstance(value, dict):
            return None
        lat = value.get("latitude")
        lon = value.get("longitude")
        if lat is None or lon is None:
            return None
        try:
            return cls(float(lat), float(lon))
        except (TypeError, ValueError):
            return None

    def describe(self) -> str:
        return f"{round(self.latitude, 6)}, {round(self.longitude, 6)}"


@dataclass(frozen=True)
class RouteStep:
    """One routing instruction segment, used only while attributing distance."""

    start: Coordinate | None
    end: Coordinate | None
    distance_meters: int = 0


@dataclass(frozen=True)
class RouteLeg:
    start_location: Coordinate | None
    end_location: Coordinate | None
    distance_meters: int = 0
    duration_seconds: int = 0
    steps: tuple[RouteStep, ...] = field(default_factory=tuple)


def format_distance(meters: float) -> str:
    return f"{round(meters / METERS_PER_MILE, 1)} mi"


def format_duration(seconds: int) -> str:
    hours, remainder = divmod(max(int(seconds), 0), 3600)
    minutes = remainder // 60
    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"


def _describe_location(location: Coordinate | None) -> str:
    if location is None:
        return "Unknown location"
    return location.describe()


@dataclass(frozen=True)
class RouteResult:
    """First route returned by the provider for an origin/destination pair."""

    total_distance_meters: int
    legs: tuple[RouteLeg, ...] = field(default_factory=tuple)
    encoded_polyline: str = ""
    duration_seconds: int = 0

    @property
    def steps(self) -> list[RouteStep]:
        """All steps flattened across legs, in travel order."""
        return [step for leg in self.legs for step in leg.steps]

    def geometry(self) -> dict[str, Any] | None:
        coords = decode_polyline5(self.encoded_polyline)
        if len(coords) < 2:
            return None
        return {"type": "LineString", "coordinates": coords}

    def to_route_data(self) -> dict[str, Any]:
        """Opaque payload persisted with the trip for later rendering."""
        return {
            "polyline": self.encoded_polyline,
            "geometry": self.geometry(),
            "legs": [
                {
                    "start_address": _describe_location(leg.start_location),
                    "end_address": _describe_location(leg.end_location),
                    "distance": {
                        "value": leg.distance_meters,
                        "text": format_distance(leg.distance_meters),
                    },
                    "duration": {
                        "value": leg.duration_seconds,
                        "text": format_duration(leg.duration_seconds),
                    },
                }
                for leg in self.legs
            ],
        }
