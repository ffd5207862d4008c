from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from serene.crud.memory import MemoryStorage
from serene.main import create_app
from tests.helpers import FakeClock, register


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def storage(clock):
    return MemoryStorage(clock=clock)


@pytest.fixture
def app(storage):
    return create_app(storage=storage)


@pytest.fixture
def client_factory(app):
    """Make independent clients (separate cookie jars) against one app."""
    clients = []

    def _make() -> TestClient:
        client = TestClient(app)
        client.__enter__()
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.__exit__(None, None, None)


@pytest.fixture
def client(client_factory):
    return client_factory()


@pytest.fixture
def user_client(client_factory):
    """Factory returning a client already logged in as a fresh user."""

    def _make(username: str) -> TestClient:
        client = client_factory()
        response = register(client, username)
        assert response.status_code == 201, response.text
        return client

    return _make


@pytest.fixture
def alice(user_client):
    return user_client("alice")


@pytest.fixture
def bob(user_client):
    return user_client("bob")
