"""Business logic services for trip operations."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from trips.services.route_service import RouteService
    from trips.services.state_distance import (
        StateDistances,
        accumulate_state_distances,
        attribute,
    )
    from trips.services.trip_repository import TripRepository

__all__ = [
    "RouteService",
    "StateDistances",
    "TripRepository",
    "accumulate_state_distances",
    "attribute",
]

_EXPORTS = {
    "RouteService": ("trips.services.route_service", "RouteService"),
    "StateDistances": ("trips.services.state_distance", "StateDistances"),
    "TripRepository": ("trips.services.trip_repository", "TripRepository"),
    "accumulate_state_distances": (
        "trips.services.state_distance",
        "accumulate_state_distances",
    ),
    "attribute": ("trips.services.state_distance", "attribute"),
}


def __getattr__(name: str) -> Any:
    target = _EXPORTS.get(name)
    if target is None:
        msg = f"module {__name__!r} has no attribute {name!r}"
        raise AttributeError(msg)
    from importlib import import_module

    module_name, attr = target
    value = getattr(import_module(module_name), attr)
    globals()[name] = value
    return value
