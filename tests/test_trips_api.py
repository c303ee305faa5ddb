from datetime import UTC, datetime, timedelta

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from core.api import http_exception_handler
from core.constants import INTERNAL_ERROR_MESSAGE, NO_ROUTE_MESSAGE
from core.exceptions import ConfigurationException, ExternalServiceException
from core.mapping.models import Coordinate, RouteLeg, RouteResult, RouteStep
from db.models import Trip
from trips import router as trips_router
from trips.routes import crud
from trips.services.route_service import RouteService

SACRAMENTO = Coordinate(38.5816, -121.4944)
RENO = Coordinate(39.5296, -119.8138)


class StubRouteProvider:
    def __init__(self, route=None, error=None):
        self.route = route
        self.error = error
        self.calls = 0

    async def fetch_route(self, origin, destination):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.route


class StubStateResolver:
    async def resolve_state(self, coord):
        return {SACRAMENTO: "CA", RENO: "NV"}.get(coord)


def _route() -> RouteResult:
    return RouteResult(
        total_distance_meters=3218,
        legs=(
            RouteLeg(
                start_location=SACRAMENTO,
                end_location=RENO,
                distance_meters=3218,
                duration_seconds=240,
                steps=(RouteStep(SACRAMENTO, RENO, 3218),),
            ),
        ),
    )


def _build_app(provider: StubRouteProvider | None = None) -> FastAPI:
    app = FastAPI()
    app.include_router(trips_router)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    if provider is not None:
        app.dependency_overrides[crud.get_route_service] = lambda: RouteService(
            route_provider=provider,
            state_resolver=StubStateResolver(),
        )
    return app


@pytest.mark.asyncio
async def test_calculate_route_returns_trip_in_miles(beanie_db) -> None:
    client = TestClient(_build_app(StubRouteProvider(route=_route())))

    resp = client.post(
        "/api/trips/calculate_route",
        json={"origin": "Sacramento, CA", "destination": "Reno, NV"},
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    trip = body["trip"]
    assert trip["origin"] == "Sacramento, CA"
    assert trip["total_distance_miles"] == 2.0
    assert trip["state_distances_miles"] == {"CA": 1.0, "NV": 1.0}
    assert trip["route_data"]["legs"][0]["duration"]["text"] == "4m"
    assert trip["id"]
    assert trip["created_at"]

    assert await Trip.find_all().count() == 1


@pytest.mark.asyncio
async def test_calculate_route_accepts_nested_trip_payload(beanie_db) -> None:
    client = TestClient(_build_app(StubRouteProvider(route=_route())))

    resp = client.post(
        "/api/trips/calculate_route",
        json={"trip": {"origin": "Sacramento, CA", "destination": "Reno, NV"}},
    )

    assert resp.status_code == 200
    assert resp.json()["trip"]["destination"] == "Reno, NV"


@pytest.mark.asyncio
async def test_calculate_route_blank_fields_is_400(beanie_db) -> None:
    provider = StubRouteProvider(route=_route())
    client = TestClient(_build_app(provider))

    resp = client.post("/api/trips/calculate_route", json={"origin": " "})

    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["errors"] == {
        "origin": ["can't be blank"],
        "destination": ["can't be blank"],
    }
    assert provider.calls == 0


@pytest.mark.asyncio
async def test_calculate_route_no_route_is_422(beanie_db) -> None:
    client = TestClient(_build_app(StubRouteProvider(route=None)))

    resp = client.post(
        "/api/trips/calculate_route",
        json={"origin": "Honolulu, HI", "destination": "Reno, NV"},
    )

    assert resp.status_code == 422
    assert resp.json() == {"success": False, "error": NO_ROUTE_MESSAGE}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [
        ExternalServiceException("Google Routes error: 403", {"body": "secret"}),
        ConfigurationException("GOOGLE_MAPS_API_KEY is not configured"),
        RuntimeError("database exploded"),
    ],
)
async def test_calculate_route_internal_errors_are_generic(beanie_db, error) -> None:
    client = TestClient(_build_app(StubRouteProvider(error=error)))

    resp = client.post(
        "/api/trips/calculate_route",
        json={"origin": "Sacramento, CA", "destination": "Reno, NV"},
    )

    assert resp.status_code == 500
    assert resp.json() == {"success": False, "error": INTERNAL_ERROR_MESSAGE}


@pytest.mark.asyncio
async def test_list_trips_newest_first_with_latest(beanie_db) -> None:
    base = datetime(2024, 5, 1, tzinfo=UTC)
    for offset in range(3):
        await Trip(
            origin=f"origin {offset}",
            destination="Reno, NV",
            total_distance_meters=1609,
            state_distances={"NV": 1609.34},
            created_at=base + timedelta(minutes=offset),
        ).insert()

    client = TestClient(_build_app())
    resp = client.get("/api/trips?limit=2")

    assert resp.status_code == 200
    body = resp.json()
    assert [trip["origin"] for trip in body["trips"]] == ["origin 2", "origin 1"]
    assert body["latest"]["origin"] == "origin 2"
    assert body["latest"]["state_distances_miles"] == {"NV": 1.0}


@pytest.mark.asyncio
async def test_list_trips_empty(beanie_db) -> None:
    client = TestClient(_build_app())

    resp = client.get("/api/trips")

    assert resp.status_code == 200
    assert resp.json() == {"success": True, "trips": [], "latest": None}


@pytest.mark.asyncio
async def test_get_trip_by_id(beanie_db) -> None:
    trip = await Trip(origin="Sacramento, CA", destination="Reno, NV").insert()
    client = TestClient(_build_app())

    resp = client.get(f"/api/trips/{trip.id}")

    assert resp.status_code == 200
    assert resp.json()["trip"]["id"] == str(trip.id)


@pytest.mark.asyncio
@pytest.mark.parametrize("trip_id", ["missing", "65f1c0ffee0000000000beef"])
async def test_get_unknown_trip_is_404(beanie_db, trip_id) -> None:
    client = TestClient(_build_app())

    resp = client.get(f"/api/trips/{trip_id}")

    assert resp.status_code == 404
    assert resp.json() == {"success": False, "error": "Trip not found"}
