"""Beanie ODM document models for MongoDB collections.

This module defines all document models using Beanie ODM, which provides:
- Automatic Pydantic validation
- Built-in async CRUD operations
- Proper ObjectId/datetime serialization
- Index definitions at the model level

Usage:
    from db.models import Trip

    # Insert a new trip
    trip = Trip(origin="Reno, NV", destination="Sacramento, CA", ...)
    await trip.insert()

    # Most recent trips first
    trips = await Trip.find_all().sort(-Trip.created_at).limit(10).to_list()
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from beanie import Document, Indexed
from pydantic import Field, field_validator
from pymongo import ASCENDING, DESCENDING, IndexModel

from core.constants import METERS_PER_MILE


class Trip(Document):
    """A computed route between two addresses with per-state distances.

    Trips are written once and never modified afterwards.
    """

    origin: str
    destination: str
    total_distance_meters: int | None = None
    # state code -> meters
    state_distances: dict[str, float] = Field(default_factory=dict)
    # polyline, geometry and leg summaries used only for rendering
    route_data: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("origin", "destination", mode="before")
    @classmethod
    def strip_address(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @property
    def total_distance_miles(self) -> float | None:
        if self.total_distance_meters is None:
            return None
        return float(self.total_distance_meters) / METERS_PER_MILE

    @property
    def state_distances_miles(self) -> dict[str, float]:
        return {
            state: float(meters) / METERS_PER_MILE
            for state, meters in (self.state_distances or {}).items()
        }

    class Settings:
        name = "trips"
        indexes = [
            IndexModel(
                [("origin", ASCENDING), ("destination", ASCENDING)],
                name="trips_origin_destination_idx",
            ),
            IndexModel([("created_at", DESCENDING)], name="trips_created_at_idx"),
        ]


class ServerLog(Document):
    """Server log document for MongoDB logging handler."""

    timestamp: Indexed(datetime, index_type=DESCENDING) | None = None
    level: str | None = None
    logger_name: str | None = None
    message: str | None = None
    module: str | None = None
    funcName: str | None = None
    lineno: int | None = None
    exc_info: str | None = None

    class Settings:
        name = "server_logs"
        indexes = [
            IndexModel([("level", ASCENDING)], name="server_logs_level_idx"),
            IndexModel(
                [("timestamp", ASCENDING)],
                name="server_logs_ttl_idx",
                expireAfterSeconds=30 * 24 * 60 * 60,
            ),
        ]


# List of all document models for Beanie initialization
ALL_DOCUMENT_MODELS = [
    Trip,
    ServerLog,
]
