"""
Shared pytest fixtures — isolated apps per test, in-memory and SQLite backends.
"""
import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.database import Base, make_session_factory
from app.main import create_app
from app.models import DonationModel  # noqa: F401  — register model
from app.stores import BoundedDonationStore, SqlDonationStore

API_SECRET = "test-secret"
AUTH = {"X-API-Key": API_SECRET}


def make_settings(**overrides) -> Settings:
    values = {
        "API_SECRET": API_SECRET,
        "STORE_BACKEND": "memory",
        "DATABASE_URL": "sqlite://",
        "MAX_STORED_DONATIONS": 100,
    }
    values.update(overrides)
    return Settings(**values)


@pytest.fixture()
def session_factory():
    factory = make_session_factory("sqlite://")
    engine = factory.kw["bind"]
    Base.metadata.create_all(bind=engine)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture()
def memory_store():
    return BoundedDonationStore(capacity=5)


@pytest.fixture()
def sql_store(session_factory):
    return SqlDonationStore(session_factory)


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Runs a test against both store variants."""
    if request.param == "memory":
        return BoundedDonationStore(capacity=100)
    return SqlDonationStore(request.getfixturevalue("session_factory"))


@pytest.fixture(params=["memory", "sql"])
def client(request):
    app = create_app(make_settings(STORE_BACKEND=request.param))
    with TestClient(app) as c:
        yield c


@pytest.fixture()
def memory_client():
    app = create_app(make_settings(MAX_STORED_DONATIONS=3))
    with TestClient(app) as c:
        yield c
