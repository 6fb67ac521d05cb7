import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from splitter.database import Base, get_db
from splitter.dependencies import get_normalizer, get_session_store
from splitter.errors import NetworkError
from splitter.main import app
from splitter.services.currency import CurrencyNormalizer
from splitter.services.rate_cache import RateCache
from splitter.services.rate_source import fetch_with_retry
from splitter.services.session_store import SessionStore

SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


class FakeRateSource:
    """Serves canned tables per base; a base mapped to an exception raises it."""

    def __init__(self, tables=None):
        self.tables = tables or {}
        self.calls = []

    def fetch(self, base):
        self.calls.append(base)
        result = self.tables.get(base)
        if result is None:
            raise NetworkError(f"no route to {base}")
        if isinstance(result, Exception):
            raise result
        return result


class FakeClock:
    def __init__(self, now=1_000_000.0):
        self.now = now

    def __call__(self):
        return self.now


def no_sleep_fetch(source, base):
    return fetch_with_retry(source, base, sleep=lambda _: None)


@pytest.fixture(autouse=True)
def setup_db():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session_factory():
    return TestingSessionLocal


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rate_cache():
    return RateCache()


@pytest.fixture
def rate_source():
    return FakeRateSource()


@pytest.fixture
def normalizer(rate_cache, rate_source, clock):
    return CurrencyNormalizer(rate_cache, rate_source, ttl=1800, clock=clock, fetch=no_sleep_fetch)


@pytest.fixture
def client(normalizer):
    store = SessionStore(clock_ms=lambda: 1_700_000_000_000)
    app.dependency_overrides[get_normalizer] = lambda: normalizer
    app.dependency_overrides[get_session_store] = lambda: store
    yield TestClient(app)
    app.dependency_overrides.pop(get_normalizer, None)
    app.dependency_overrides.pop(get_session_store, None)


@pytest.fixture
def people():
    return [
        {"id": 1, "name": "Alice"},
        {"id": 2, "name": "Bob"},
        {"id": 3, "name": "Charlie"},
    ]
