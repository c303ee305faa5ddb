"""
Mapping provider interfaces for state resolution and routing abstractions.
"""

from typing import Protocol

from core.mapping.models import Coordinate, RouteResult


class StateResolver(Protocol):
    """Interface for reverse geocoding a coordinate to its U.S. state."""

    async def resolve_state(self, coord: Coordinate) -> str | None:
        """Return the state code owning ``coord`` or None when unknown.

        Implementations never raise: provider failures degrade to None.
        """
        ...


class RouteProvider(Protocol):
    """Interface for driving directions between two free-form addresses."""

    async def fetch_route(self, origin: str, destination: str) -> RouteResult | None:
        """Return the first route, or None when the provider finds no route.

        Transport, authentication and malformed-response failures raise
        ``ExternalServiceException``.
        """
        ...


class MappingProvider(Protocol):
    """Factory interface for instantiating the right mapping components."""

    @property
    def state_resolver(self) -> StateResolver: ...

    @property
    def route_provider(self) -> RouteProvider: ...
