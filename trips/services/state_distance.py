"""Per-state distance attribution for a route's steps.

Each step's endpoints are reverse geocoded to states and the step distance is
apportioned between them:

- an endpoint is missing or out of range: the whole step is skipped
- neither endpoint resolves: the step is skipped
- both resolve to the same state: the full distance goes to that state
- they resolve to different states: each gets exactly half
- only one resolves: the full distance goes to that one
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence

from config import get_geocode_concurrency
from core.mapping.models import Coordinate, RouteStep

logger = logging.getLogger(__name__)

StateCode = str | None
ResolveState = Callable[[Coordinate], Awaitable[StateCode]]


class StateDistances(dict[str, float]):
    """State code -> meters, where a missing state reads as zero."""

    def __missing__(self, state: str) -> float:
        return 0

    def add(self, state: str, meters: float) -> None:
        self[state] = self.get(state, 0) + meters

    def total(self) -> float:
        return sum(self.values())


def _usable(coord: Coordinate | None) -> bool:
    return coord is not None and coord.is_valid


def _has_coordinates(step: RouteStep) -> bool:
    return _usable(step.start) and _usable(step.end)


def accumulate_state_distances(
    steps: Sequence[RouteStep],
    endpoint_states: Sequence[tuple[StateCode, StateCode]],
) -> StateDistances:
    """Reduce steps and their resolved (start, end) states into distances."""
    if len(steps) != len(endpoint_states):
        msg = "endpoint_states must have one entry per step"
        raise ValueError(msg)

    distances = StateDistances()
    for step, (start_state, end_state) in zip(steps, endpoint_states, strict=True):
        meters = max(step.distance_meters, 0)
        if start_state and end_state:
            if start_state == end_state:
                distances.add(start_state, meters)
            else:
                half = meters / 2
                distances.add(start_state, half)
                distances.add(end_state, half)
        elif start_state:
            distances.add(start_state, meters)
        elif end_state:
            distances.add(end_state, meters)
    return distances


async def resolve_endpoint_states(
    steps: Sequence[RouteStep],
    resolve_state: ResolveState,
    *,
    concurrency: int | None = None,
) -> list[tuple[StateCode, StateCode]]:
    """Resolve every step endpoint to a state, preserving step order.

    Distinct coordinates are looked up once and lookups run concurrently up to
    ``concurrency`` at a time. A step with a missing or out-of-range endpoint
    is unresolved as a whole and none of its coordinates are looked up.
    """
    limit = concurrency if concurrency and concurrency > 0 else get_geocode_concurrency()
    semaphore = asyncio.Semaphore(limit)

    unique: list[Coordinate] = []
    seen: set[Coordinate] = set()
    for step in steps:
        if not _has_coordinates(step):
            continue
        for coord in (step.start, step.end):
            if coord not in seen:
                seen.add(coord)
                unique.append(coord)

    async def lookup(coord: Coordinate) -> StateCode:
        async with semaphore:
            try:
                return await resolve_state(coord)
            except Exception:
                logger.exception(
                    "State resolver failed for (%s); treating as unknown",
                    coord.describe(),
                )
                return None

    resolved = await asyncio.gather(*(lookup(coord) for coord in unique))
    states = dict(zip(unique, resolved, strict=True))

    endpoint_states: list[tuple[StateCode, StateCode]] = []
    for step in steps:
        if _has_coordinates(step):
            endpoint_states.append(
                (states.get(step.start) or None, states.get(step.end) or None),
            )
        else:
            endpoint_states.append((None, None))
    return endpoint_states


async def attribute(
    steps: Sequence[RouteStep],
    resolve_state: ResolveState,
    *,
    concurrency: int | None = None,
) -> StateDistances:
    """Attribute the distance of ``steps`` to the states they pass through."""
    if not steps:
        return StateDistances()

    endpoint_states = await resolve_endpoint_states(
        steps,
        resolve_state,
        concurrency=concurrency,
    )
    distances = accumulate_state_distances(steps, endpoint_states)

    unresolved = sum(1 for start, end in endpoint_states if not start and not end)
    if unresolved:
        logger.info(
            "%d of %d steps had no resolvable state and were skipped",
            unresolved,
            len(steps),
        )
    return distances
