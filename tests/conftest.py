"""
Pytest configuration and fixtures.

The environment is configured before any fencemark module is imported:
settings are cached on first use and the engine is created at import time.
Every test gets a fresh schema on an in-memory SQLite database.
"""
import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["REDIS_ENABLED"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SEED_SAMPLE_DATA_ON_REGISTER"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient

from fencemark.database import Base, engine, SessionLocal
from fencemark.main import app
import fencemark.models  # noqa: F401

PASSWORD = "correct-horse-battery"


@pytest.fixture(autouse=True)
def database():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    # Not used as a context manager: the lifespan would run the startup
    # schema creation against the same database.
    return TestClient(app)


def register(client: TestClient, email: str, organization_name: str, password: str = PASSWORD) -> dict:
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "organization_name": organization_name},
    )
    assert response.status_code == 200, response.text
    return response.json()


def bearer(auth: dict) -> dict:
    return {"Authorization": f"Bearer {auth['access_token']}"}


@pytest.fixture
def org_a(client):
    """Owner of Acme Fencing, as the register response."""
    auth = register(client, "owner@acme-fencing.com", "Acme Fencing")
    client.cookies.clear()
    return auth


@pytest.fixture
def org_b(client):
    """Owner of Birchwood Fence Co."""
    auth = register(client, "dana@birchwood-fence.com", "Birchwood Fence Co")
    client.cookies.clear()
    return auth


@pytest.fixture
def headers_a(org_a):
    return bearer(org_a)


@pytest.fixture
def headers_b(org_b):
    return bearer(org_b)


class FakeRedis:
    """In-memory stand-in for the few redis commands the app uses."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def setex(self, key, ttl, value):
        self.store[key] = str(value)
        self.ttls[key] = ttl
        return True

    def exists(self, key):
        return int(key in self.store)

    def ping(self):
        return True


@pytest.fixture
def fake_redis():
    return FakeRedis()
