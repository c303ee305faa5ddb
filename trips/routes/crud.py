"""API routes for calculating and reading trips."""

import logging

from fastapi import APIRouter, Depends, Query

from config import MAX_RECENT_TRIPS_LIMIT, get_recent_trips_limit
from core.api import api_route
from trips.models import TripRequest
from trips.serializers import serialize_trip, serialize_trips
from trips.services.route_service import RouteService
from trips.services.trip_repository import TripRepository

logger = logging.getLogger(__name__)
router = APIRouter()


def get_route_service() -> RouteService:
    return RouteService()


def get_trip_repository() -> TripRepository:
    return TripRepository()


@router.post("/api/trips/calculate_route", tags=["Trips API"])
@api_route(logger)
async def calculate_route(
    payload: TripRequest,
    service: RouteService = Depends(get_route_service),
):
    """Compute the driving route between two addresses and store the trip."""
    origin, destination = payload.addresses()
    trip = await service.calculate(origin, destination)
    return {"success": True, "trip": serialize_trip(trip)}


@router.get("/api/trips", tags=["Trips API"])
@api_route(logger)
async def list_trips(
    limit: int | None = Query(None),
    repository: TripRepository = Depends(get_trip_repository),
):
    """Recently computed trips, newest first."""
    if limit is None:
        limit = get_recent_trips_limit()
    limit = min(limit, MAX_RECENT_TRIPS_LIMIT)
    trips = await repository.list_recent(limit)
    serialized = serialize_trips(trips)
    return {
        "success": True,
        "trips": serialized,
        "latest": serialized[0] if serialized else None,
    }


@router.get("/api/trips/{trip_id}", tags=["Trips API"])
@api_route(logger)
async def get_single_trip(
    trip_id: str,
    repository: TripRepository = Depends(get_trip_repository),
):
    """Get a single trip by its id."""
    trip = await repository.get(trip_id)
    return {"success": True, "trip": serialize_trip(trip)}
