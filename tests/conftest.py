"""
Shared pytest fixtures for all test modules.

Uses an in-memory SQLite database (StaticPool) so every test
function gets a clean, isolated database with no disk I/O and no state leakage.
The mock service is built with zero latency and no random failures unless a
test asks otherwise.
"""
import random
import pytest
from datetime import datetime, timezone
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from upi_sim.config import Settings
from upi_sim.database import Base, get_db
from upi_sim.dependencies import get_settings
from upi_sim.demo_data import build_demo_snapshot
from upi_sim.services.mock_api import MockApiService
from upi_sim.store import SqlSnapshotPort, WalletStore
from upi_sim import models  # noqa: F401  registers the snapshots table


# ---------------------------------------------------------------------------
# In-memory database engine shared across all fixtures in a test session.
# StaticPool forces all SQLAlchemy connections to reuse the same underlying
# sqlite3 connection, which is required for in-memory SQLite.
# ---------------------------------------------------------------------------
TEST_ENGINE = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=TEST_ENGINE)

FIXED_NOW = datetime(2024, 3, 20, 10, 0, 0, tzinfo=timezone.utc)

QUIET_SETTINGS = Settings(failure_rate=0.0, min_delay_ms=0, max_delay_ms=0)


class FakeSleep:
    """Records requested delays instead of waiting."""

    def __init__(self):
        self.delays = []

    async def __call__(self, seconds):
        self.delays.append(seconds)


@pytest.fixture(autouse=True)
def reset_db():
    """Drop and recreate all tables before each test for full isolation."""
    Base.metadata.drop_all(bind=TEST_ENGINE)
    Base.metadata.create_all(bind=TEST_ENGINE)
    yield
    Base.metadata.drop_all(bind=TEST_ENGINE)


@pytest.fixture
def db(reset_db):
    """Yield a SQLAlchemy session backed by the in-memory test database."""
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db):
    """
    FastAPI TestClient with the DB and settings dependencies overridden.
    The TestClient is NOT used as a context manager so the lifespan hook
    (which seeds the on-disk DB) is skipped.
    """
    from upi_sim.main import app

    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: QUIET_SETTINGS
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def fake_sleep():
    return FakeSleep()


@pytest.fixture
def service(fake_sleep):
    """Deterministic service: seeded rng, fixed clock, never fails on its own."""
    return make_service(sleep=fake_sleep)


# ---------------------------------------------------------------------------
# Helpers (not fixtures) so any test file can import and call them directly.
# ---------------------------------------------------------------------------
def make_service(**overrides) -> MockApiService:
    options = dict(
        failure_rate=0.0,
        rng=random.Random(42),
        sleep=FakeSleep(),
        clock=lambda: FIXED_NOW,
    )
    options.update(overrides)
    return MockApiService(**options)


def seed_store(db) -> WalletStore:
    store = WalletStore(SqlSnapshotPort(db))
    store.initialize(build_demo_snapshot())
    return store
