"""Shared fixtures: an in-memory store, the API app, and clients for both."""

from datetime import date, timedelta

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from api.config import Settings
from api.database import EventStore
from api.main import create_app
from client.api import EventsApi

BASE_URL = "http://testserver/api"


class RecordingTransport(httpx.AsyncBaseTransport):
    """Forward to the app in-process, remembering every request.

    Set ``down`` to make every request fail as if the server were gone.
    """

    def __init__(self, app) -> None:
        self._inner = httpx.ASGITransport(app=app)
        self.requests: list[httpx.Request] = []
        self.down = False

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.down:
            raise httpx.ConnectError("Connection refused", request=request)
        return await self._inner.handle_async_request(request)

    def calls(self, method: str | None = None, path: str | None = None) -> int:
        return sum(
            1
            for request in self.requests
            if (method is None or request.method == method)
            and (path is None or request.url.path == path)
        )


@pytest.fixture
def tomorrow() -> date:
    return date.today() + timedelta(days=1)


@pytest.fixture
def settings() -> Settings:
    return Settings(DATABASE_URL="sqlite:///:memory:")


@pytest.fixture
def client(settings):
    with TestClient(create_app(settings)) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def store():
    event_store = await EventStore.open(":memory:")
    yield event_store
    await event_store.close()


@pytest_asyncio.fixture
async def transport(store, settings):
    app = create_app(settings)
    app.state.store = store
    return RecordingTransport(app)


@pytest_asyncio.fixture
async def api(transport):
    events_api = EventsApi(BASE_URL, transport=transport)
    yield events_api
    await events_api.aclose()
