from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from app.db.impact_store import InMemoryImpactStore
from app.main import create_app


class FakeClock:
    """Settable UTC clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def set(self, *args) -> None:
        self.now = datetime(*args, tzinfo=timezone.utc)


@pytest.fixture
def clock():
    # Wednesday
    return FakeClock(datetime(2026, 2, 18, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def store():
    return InMemoryImpactStore()


@pytest.fixture
def app(store, clock):
    return create_app(store=store, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def service(app):
    return app.state.impact_service
