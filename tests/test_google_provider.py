from unittest.mock import AsyncMock

import pytest
from http_fakes import FakeResponse, FakeSession

from core.constants import GOOGLE_ROUTES_FIELD_MASK, STATE_RESULT_TYPE
from core.exceptions import ExternalServiceException
from core.http.circuit_breaker import geocoding_breaker, routes_breaker
from core.mapping import google_provider as google_provider_module
from core.mapping.google_provider import (
    GoogleProvider,
    GoogleRouteProvider,
    GoogleStateResolver,
)
from core.mapping.models import Coordinate

ENCODED_POLYLINE = "_p~iF~ps|U_ulLnnqC_mqNvxq`@"


def _geocode_payload(short_name: str) -> dict:
    return {
        "status": "OK",
        "results": [
            {
                "address_components": [
                    {
                        "long_name": "California",
                        "short_name": short_name,
                        "types": [STATE_RESULT_TYPE, "political"],
                    },
                ],
            },
        ],
    }


def _lat_lng(lat: float, lng: float) -> dict:
    return {"latLng": {"latitude": lat, "longitude": lng}}


ROUTES_PAYLOAD = {
    "routes": [
        {
            "distanceMeters": 2500,
            "duration": "5400s",
            "polyline": {"encodedPolyline": ENCODED_POLYLINE},
            "legs": [
                {
                    "distanceMeters": 2000,
                    "duration": "3660s",
                    "startLocation": _lat_lng(38.5, -120.2),
                    "endLocation": _lat_lng(39.5, -119.8),
                    "steps": [
                        {
                            "distanceMeters": 1000,
                            "startLocation": _lat_lng(38.5, -120.2),
                            "endLocation": _lat_lng(39.3, -120.1),
                        },
                        {
                            "distanceMeters": 1000,
                            "startLocation": _lat_lng(39.3, -120.1),
                            "endLocation": _lat_lng(39.5, -119.8),
                        },
                    ],
                },
                {
                    "distanceMeters": 500,
                    "duration": "1740s",
                    "startLocation": _lat_lng(39.5, -119.8),
                    "endLocation": {},
                    "steps": [
                        {
                            "distanceMeters": 500,
                            "startLocation": _lat_lng(39.5, -119.8),
                            "endLocation": _lat_lng(39.1, -119.7),
                        },
                    ],
                },
            ],
        },
    ],
}


def _patch_session(monkeypatch, session: FakeSession) -> None:
    monkeypatch.setattr(
        google_provider_module,
        "get_session",
        AsyncMock(return_value=session),
    )


@pytest.mark.asyncio
async def test_resolve_state_returns_short_name(monkeypatch) -> None:
    session = FakeSession(
        get_responses=[FakeResponse(json_data=_geocode_payload("CA"))],
    )
    _patch_session(monkeypatch, session)
    resolver = GoogleStateResolver("key-123")

    state = await resolver.resolve_state(Coordinate(38.5, -121.5))

    assert state == "CA"
    method, url, kwargs = session.last_request
    assert method == "GET"
    assert url.endswith("/geocode/json")
    assert kwargs["params"] == {
        "latlng": "38.5,-121.5",
        "key": "key-123",
        "result_type": STATE_RESULT_TYPE,
    }
    assert kwargs["timeout"].total == 10.0


@pytest.mark.asyncio
async def test_resolve_state_zero_results_is_unknown(monkeypatch) -> None:
    session = FakeSession(
        get_responses=[FakeResponse(json_data={"status": "ZERO_RESULTS", "results": []})],
    )
    _patch_session(monkeypatch, session)

    assert await GoogleStateResolver("k").resolve_state(Coordinate(26.0, -90.0)) is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(json_data={"status": "REQUEST_DENIED", "results": []}),
        FakeResponse(status=500, text_data="boom"),
        FakeResponse(status=429, headers={"Retry-After": "1"}),
        FakeResponse(json_data=ValueError("not json")),
    ],
)
async def test_resolve_state_failures_degrade_to_unknown(monkeypatch, response) -> None:
    _patch_session(monkeypatch, FakeSession(get_responses=[response]))

    assert await GoogleStateResolver("k").resolve_state(Coordinate(38.5, -121.5)) is None


@pytest.mark.asyncio
async def test_resolve_state_skips_invalid_coordinates(monkeypatch) -> None:
    session = FakeSession()
    _patch_session(monkeypatch, session)
    resolver = GoogleStateResolver("k")

    assert await resolver.resolve_state(None) is None
    assert await resolver.resolve_state(Coordinate(91.0, 0.0)) is None
    assert session.requests == []


@pytest.mark.asyncio
async def test_resolve_state_open_circuit_is_unknown(monkeypatch) -> None:
    session = FakeSession()
    _patch_session(monkeypatch, session)
    for _ in range(geocoding_breaker.failure_threshold):
        geocoding_breaker.record_failure()

    assert await GoogleStateResolver("k").resolve_state(Coordinate(38.5, -121.5)) is None
    assert session.requests == []


def test_extract_state_code_uses_first_result_only() -> None:
    payload = _geocode_payload("NV")
    payload["results"].append(_geocode_payload("CA")["results"][0])
    assert GoogleStateResolver.extract_state_code(payload) == "NV"
    assert GoogleStateResolver.extract_state_code({"results": [{}]}) is None
    assert GoogleStateResolver.extract_state_code(None) is None


@pytest.mark.asyncio
async def test_fetch_route_parses_legs_and_steps(monkeypatch) -> None:
    session = FakeSession(post_responses=[FakeResponse(json_data=ROUTES_PAYLOAD)])
    _patch_session(monkeypatch, session)
    provider = GoogleRouteProvider("key-123")

    route = await provider.fetch_route("Sacramento, CA", "Carson City, NV")

    assert route is not None
    assert route.total_distance_meters == 2500
    assert route.duration_seconds == 5400
    assert len(route.legs) == 2
    assert [step.distance_meters for step in route.steps] == [1000, 1000, 500]
    assert route.steps[0].start == Coordinate(38.5, -120.2)
    assert route.legs[1].end_location is None

    method, url, kwargs = session.last_request
    assert method == "POST"
    assert url.endswith("directions/v2:computeRoutes")
    assert kwargs["headers"]["X-Goog-Api-Key"] == "key-123"
    assert kwargs["headers"]["X-Goog-FieldMask"] == GOOGLE_ROUTES_FIELD_MASK
    assert kwargs["json"] == {
        "origin": {"address": "Sacramento, CA"},
        "destination": {"address": "Carson City, NV"},
        "travelMode": "DRIVE",
        "units": "IMPERIAL",
        "computeAlternativeRoutes": False,
    }


@pytest.mark.asyncio
async def test_fetch_route_builds_route_data(monkeypatch) -> None:
    _patch_session(
        monkeypatch,
        FakeSession(post_responses=[FakeResponse(json_data=ROUTES_PAYLOAD)]),
    )

    route = await GoogleRouteProvider("k").fetch_route("a", "b")
    route_data = route.to_route_data()

    assert route_data["polyline"] == ENCODED_POLYLINE
    assert route_data["geometry"] == {
        "type": "LineString",
        "coordinates": [[-120.2, 38.5], [-120.95, 40.7], [-126.453, 43.252]],
    }
    first_leg, second_leg = route_data["legs"]
    assert first_leg["start_address"] == "38.5, -120.2"
    assert first_leg["distance"] == {"value": 2000, "text": "1.2 mi"}
    assert first_leg["duration"] == {"value": 3660, "text": "1h 1m"}
    assert second_leg["end_address"] == "Unknown location"
    assert second_leg["duration"]["text"] == "29m"


@pytest.mark.asyncio
@pytest.mark.parametrize("payload", [{}, {"routes": []}])
async def test_fetch_route_without_routes_returns_none(monkeypatch, payload) -> None:
    _patch_session(
        monkeypatch,
        FakeSession(post_responses=[FakeResponse(json_data=payload)]),
    )

    assert await GoogleRouteProvider("k").fetch_route("nowhere", "elsewhere") is None


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "response",
    [
        FakeResponse(status=403, text_data="API key not valid"),
        FakeResponse(json_data=["not", "a", "dict"]),
        FakeResponse(json_data={"routes": ["garbage"]}),
        FakeResponse(json_data={"routes": [{"legs": ["garbage"]}]}),
    ],
)
async def test_fetch_route_provider_failures_raise(monkeypatch, response) -> None:
    _patch_session(monkeypatch, FakeSession(post_responses=[response]))

    with pytest.raises(ExternalServiceException):
        await GoogleRouteProvider("k").fetch_route("a", "b")


@pytest.mark.asyncio
async def test_fetch_route_open_circuit_raises(monkeypatch) -> None:
    session = FakeSession()
    _patch_session(monkeypatch, session)
    for _ in range(routes_breaker.failure_threshold):
        routes_breaker.record_failure()

    with pytest.raises(ExternalServiceException):
        await GoogleRouteProvider("k").fetch_route("a", "b")
    assert session.requests == []


def test_google_provider_exposes_both_adapters() -> None:
    provider = GoogleProvider("k")
    assert isinstance(provider.state_resolver, GoogleStateResolver)
    assert isinstance(provider.route_provider, GoogleRouteProvider)
