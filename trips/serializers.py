"""Serialization utilities for trip data."""

from __future__ import annotations

from typing import Any

from db.models import Trip


def _safe_float(value, default=0.0):
    """Safely cast values to float, returning a fallback on failure."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _round_miles(value) -> float:
    return round(_safe_float(value), 2)


def serialize_trip(trip: Trip) -> dict[str, Any]:
    """Convert a Trip document to the JSON shape returned by the API.

    Distances are reported in miles rounded to two decimals.
    """
    total_miles = trip.total_distance_miles
    return {
        "id": str(trip.id) if trip.id is not None else None,
        "origin": trip.origin,
        "destination": trip.destination,
        "total_distance_miles": (
            _round_miles(total_miles) if total_miles is not None else None
        ),
        "state_distances_miles": {
            state: _round_miles(miles)
            for state, miles in sorted(trip.state_distances_miles.items())
        },
        "route_data": trip.route_data or {},
        "created_at": trip.created_at.isoformat() if trip.created_at else None,
    }


def serialize_trips(trips: list[Trip]) -> list[dict[str, Any]]:
    return [serialize_trip(trip) for trip in trips]
