"""Pydantic models for trip-related API and service operations."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class TripAddresses(BaseModel):
    """Origin/destination pair as typed by the user."""

    origin: Any | None = None
    destination: Any | None = None

    model_config = ConfigDict(extra="ignore")


class TripRequest(TripAddresses):
    """Body of a route calculation request.

    Both the flat form ``{"origin": .., "destination": ..}`` and the nested
    form ``{"trip": {"origin": .., "destination": ..}}`` are accepted. Blank
    or missing values are reported by the service, not by pydantic, so the
    caller gets per-field messages in the usual error envelope.
    """

    trip: TripAddresses | None = None

    def addresses(self) -> tuple[Any, Any]:
        origin, destination = self.origin, self.destination
        if self.trip is not None:
            if origin is None:
                origin = self.trip.origin
            if destination is None:
                destination = self.trip.destination
        return origin, destination
