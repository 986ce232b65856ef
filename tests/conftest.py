"""Shared test fixtures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from pathlib import Path

import httpx
import pytest

from coinview_core.db.engine import create_store_engine, init_schema, make_session_factory
from coinview_core.models import Asset
from coinview_core.network import CoinApiClient, ConnectivityStatus, RetryPolicy, StaticConnectivity
from coinview_core.store import SqlAssetStore, SqlPreferencesStore

DATA_DIR = Path(__file__).parent / "data"

BASE_URL = "https://rest.coinapi.io/v1"
API_KEY = "test-api-key"


@pytest.fixture
def payload() -> Callable[[str], bytes]:
    """Read a canned API response from tests/data."""

    def _load(name: str) -> bytes:
        return (DATA_DIR / name).read_bytes()

    return _load


@pytest.fixture
def engine():
    """In-memory SQLite engine with all tables created."""
    engine = create_store_engine("sqlite://")
    init_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def asset_store(session_factory) -> SqlAssetStore:
    return SqlAssetStore(session_factory)


@pytest.fixture
def preferences_store(session_factory) -> SqlPreferencesStore:
    return SqlPreferencesStore(session_factory)


@pytest.fixture
def connectivity() -> StaticConnectivity:
    return StaticConnectivity(ConnectivityStatus.SATISFIED)


class RecordingHandler:
    """httpx.MockTransport handler serving canned responses by path.

    Each route holds (status, body) pairs replayed in order; the last one
    repeats once the others are used up.
    """

    def __init__(self) -> None:
        self.routes: dict[str, list[tuple[int, bytes]]] = {}
        self.requests: list[httpx.Request] = []

    def add(self, path: str, *responses: tuple[int, bytes]) -> None:
        self.routes["/v1" + path] = list(responses)

    def paths(self) -> list[str]:
        return [r.url.path for r in self.requests]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if not route:
            return httpx.Response(404, json={"error": f"no route for {request.url.path}"})
        status, body = route.pop(0) if len(route) > 1 else route[0]
        return httpx.Response(status, content=body)


@pytest.fixture
def handler() -> RecordingHandler:
    return RecordingHandler()


class GatedHandler:
    """Async handler that holds each request until ``release`` is set.

    Lets a test start a second call while the first is still in flight.
    """

    def __init__(self, inner: RecordingHandler) -> None:
        self.inner = inner
        self.entered = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.calls += 1
        self.entered.set()
        await self.release.wait()
        return self.inner(request)


@pytest.fixture
def gated(handler) -> GatedHandler:
    return GatedHandler(handler)


@pytest.fixture
def make_client(handler, connectivity) -> Callable[..., CoinApiClient]:
    """Build a CoinApiClient that talks to the recording handler."""

    def _make(**overrides) -> CoinApiClient:
        kwargs = {
            "connectivity": connectivity,
            "retry": RetryPolicy(attempts=3, rate_limit_delay_s=0.0),
            "connectivity_grace_s": 0.0,
            "transport": httpx.MockTransport(handler),
        }
        kwargs.update(overrides)
        return CoinApiClient(API_KEY, BASE_URL, **kwargs)

    return _make


@pytest.fixture
def asset_factory() -> Callable[..., Asset]:
    """Build an Asset directly, bypassing the wire decoder."""

    def _make(asset_id: str, name: str | None = None, **fields) -> Asset:
        fields.setdefault("type_is_crypto", 1)
        return Asset(asset_id=asset_id, name=name, **fields)

    return _make
