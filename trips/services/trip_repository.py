"""Persistence for computed trips.

Trips are append-only: there is no update or delete path.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

from beanie import PydanticObjectId
from bson.errors import InvalidId
from pymongo import DESCENDING

from core.constants import BLANK_FIELD_MESSAGE
from core.exceptions import ResourceNotFoundException, ValidationException
from db.models import Trip

logger = logging.getLogger(__name__)


def _blank(value: Any) -> bool:
    return not isinstance(value, str) or not value.strip()


def validate_addresses(origin: Any, destination: Any) -> dict[str, list[str]]:
    """Return per-field errors for the origin/destination pair."""
    errors: dict[str, list[str]] = {}
    if _blank(origin):
        errors["origin"] = [BLANK_FIELD_MESSAGE]
    if _blank(destination):
        errors["destination"] = [BLANK_FIELD_MESSAGE]
    return errors


def ensure_valid_addresses(origin: Any, destination: Any) -> None:
    errors = validate_addresses(origin, destination)
    if errors:
        raise ValidationException(
            "Origin and destination are required",
            {"errors": errors},
        )


class TripRepository:
    """Trip record store backed by the ``trips`` collection."""

    async def save(self, trip_data: dict[str, Any]) -> Trip:
        """Validate and insert a trip, returning it with id and timestamps.

        Raises:
            ValidationException: origin or destination is missing or blank.
        """
        ensure_valid_addresses(trip_data.get("origin"), trip_data.get("destination"))

        now = datetime.now(UTC)
        trip = Trip(
            origin=trip_data["origin"],
            destination=trip_data["destination"],
            total_distance_meters=trip_data.get("total_distance_meters"),
            state_distances=dict(trip_data.get("state_distances") or {}),
            route_data=dict(trip_data.get("route_data") or {}),
            created_at=now,
            updated_at=now,
        )
        await trip.insert()
        logger.info(
            "Saved trip %s (%s -> %s)",
            trip.id,
            trip.origin,
            trip.destination,
        )
        return trip

    async def list_recent(self, limit: int) -> list[Trip]:
        """Most recently created trips first, at most ``limit`` of them."""
        if limit <= 0:
            return []
        return (
            await Trip.find_all()
            .sort([("created_at", DESCENDING), ("_id", DESCENDING)])
            .limit(limit)
            .to_list()
        )

    async def get(self, trip_id: str) -> Trip:
        try:
            object_id = PydanticObjectId(trip_id)
        except (InvalidId, TypeError) as exc:
            raise ResourceNotFoundException(
                "Trip not found",
                {"trip_id": trip_id},
            ) from exc

        trip = await Trip.get(object_id)
        if trip is None:
            raise ResourceNotFoundException("Trip not found", {"trip_id": trip_id})
        return trip
