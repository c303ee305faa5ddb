"""Route calculation: fetch a driving route, attribute it to states, persist."""

from __future__ import annotations

import logging
from typing import Any

from core.constants import NO_ROUTE_MESSAGE
from core.exceptions import NoRouteFoundException
from core.mapping.factory import get_route_provider, get_state_resolver
from core.mapping.interfaces import RouteProvider, StateResolver
from db.models import Trip
from trips.services.state_distance import attribute
from trips.services.trip_repository import TripRepository, ensure_valid_addresses

logger = logging.getLogger(__name__)


class RouteService:
    """Orchestrates one route computation.

    Providers are resolved lazily from configuration unless injected, so a
    missing API key surfaces as a configuration error only once a valid
    request actually needs the provider.
    """

    def __init__(
        self,
        route_provider: RouteProvider | None = None,
        state_resolver: StateResolver | None = None,
        repository: TripRepository | None = None,
    ) -> None:
        self._route_provider = route_provider
        self._state_resolver = state_resolver
        self.repository = repository or TripRepository()

    @property
    def route_provider(self) -> RouteProvider:
        if self._route_provider is None:
            self._route_provider = get_route_provider()
        return self._route_provider

    @property
    def state_resolver(self) -> StateResolver:
        if self._state_resolver is None:
            self._state_resolver = get_state_resolver()
        return self._state_resolver

    async def calculate(self, origin: Any, destination: Any) -> Trip:
        """Compute and store the trip between ``origin`` and ``destination``.

        Raises:
            ValidationException: blank origin or destination; no provider is
                called in that case.
            NoRouteFoundException: the provider found no driving route.
            ExternalServiceException: the route provider failed.
        """
        ensure_valid_addresses(origin, destination)
        origin = origin.strip()
        destination = destination.strip()

        route = await self.route_provider.fetch_route(origin, destination)
        if route is None:
            raise NoRouteFoundException(
                NO_ROUTE_MESSAGE,
                {"origin": origin, "destination": destination},
            )

        steps = route.steps
        state_distances = await attribute(steps, self.state_resolver.resolve_state)
        logger.info(
            "Route %s -> %s: %d m over %d steps in %d states",
            origin,
            destination,
            route.total_distance_meters,
            len(steps),
            len(state_distances),
        )

        return await self.repository.save(
            {
                "origin": origin,
                "destination": destination,
                "total_distance_meters": route.total_distance_meters,
                "state_distances": dict(state_distances),
                "route_data": route.to_route_data(),
            },
        )
