import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
from beanie import init_beanie
from mongomock_motor import AsyncMongoMockClient
from network_blocker import install_network_blocker

from core.http.circuit_breaker import geocoding_breaker, routes_breaker  # noqa: E402
from core.http.rate_limiting import RateLimiterState  # noqa: E402
from db.models import ServerLog, Trip  # noqa: E402


@pytest.fixture(autouse=True)
def _default_test_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("GOOGLE_MAPS_API_KEY", "test-google-key")
    for name in (
        "GOOGLE_ROUTES_API_URL",
        "GOOGLE_GEOCODING_URL",
        "PROVIDER_TIMEOUT_SECONDS",
        "GEOCODE_CONCURRENCY",
        "GEOCODE_RATE_LIMIT",
        "RECENT_TRIPS_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
    install_network_blocker(monkeypatch)


@pytest.fixture(autouse=True)
def _reset_provider_guards():
    routes_breaker.reset()
    geocoding_breaker.reset()
    RateLimiterState.limiter = None
    RateLimiterState.rate = None
    yield
    routes_breaker.reset()
    geocoding_breaker.reset()


@pytest.fixture
async def beanie_db():
    client = AsyncMongoMockClient()
    database = client["test_db"]
    await init_beanie(database=database, document_models=[Trip, ServerLog])
    return database
