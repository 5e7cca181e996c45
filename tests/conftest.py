"""Pytest configuration and fixtures for housekeeping tests.

Every test gets its own in-memory SQLite database with the seed collections
written at a fixed clock.
"""

from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from housekeeping.app import create_app
from housekeeping.database import build_engine, get_db, init_db
from housekeeping.metrics import MetricsSampler
from housekeeping.seed import seed_defaults


@pytest.fixture
def now() -> datetime:
    """Fixed clock the seed data is written against."""
    return datetime(2025, 10, 12, 9, 0, tzinfo=timezone.utc)


@pytest.fixture
def engine():
    engine = build_engine("sqlite://")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture
def db(session_factory, now):
    """Session over a freshly seeded database."""
    session = session_factory()
    seed_defaults(session, now=now)
    yield session
    session.close()


@pytest.fixture
def empty_db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def app(db, session_factory):
    """App wired to the test database, with the background sampler disabled."""
    test_app = create_app(sampler=MetricsSampler(session_factory, interval=0), use_lifespan=False)

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    test_app.dependency_overrides[get_db] = override_get_db
    return test_app


@pytest.fixture
def client(app):
    return TestClient(app)
