"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Callable, Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from tally_gateway.api.dependencies import get_as_of
from tally_gateway.api.main import create_app
from tally_gateway.domain.models import RecurringObligation
from tally_gateway.infrastructure.database.migrate import run_migrations
from tally_gateway.infrastructure.database.models import Base
from tally_gateway.infrastructure.database.session import get_db


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Fixed evaluation date so duration-based figures are stable
AS_OF = date(2024, 4, 1)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    run_migrations(engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database and a pinned evaluation date"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_as_of] = lambda: AS_OF
    return TestClient(app)


@pytest.fixture
def make_obligation() -> Callable[..., RecurringObligation]:
    """Factory for obligations with sensible defaults"""

    def _make(**overrides) -> RecurringObligation:
        fields = {
            "id": "sub_1",
            "amount": 10.0,
            "recurrence": "monthly",
            "start_date": date(2024, 1, 1),
            "name": "Test Subscription",
        }
        fields.update(overrides)
        return RecurringObligation(**fields)

    return _make


@pytest.fixture
def sample_subscriptions() -> list[dict]:
    """Subscription payloads for a user with overlapping streaming services"""
    return [
        {
            "user_id": "user_1",
            "name": "Netflix",
            "service_provider": "Netflix",
            "category": "Streaming",
            "amount": 15.99,
            "recurrence": "monthly",
            "start_date": "2024-01-01",
            "next_payment_date": "2024-04-05",
        },
        {
            "user_id": "user_1",
            "name": "Hulu",
            "service_provider": "Hulu",
            "category": "Streaming",
            "amount": 120.0,
            "recurrence": "annual",
            "start_date": "2023-04-01",
            "next_payment_date": "2024-04-05",
            "roi_expected": 30.0,
        },
        {
            "user_id": "user_1",
            "name": "Gym",
            "service_provider": "FitCo",
            "category": "Fitness",
            "amount": 10.0,
            "recurrence": "weekly",
            "start_date": "2024-02-01",
            "next_payment_date": "2024-04-20",
        },
    ]
