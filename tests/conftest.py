"""Pytest fixtures for testing"""

import pytest
from typing import Generator, List, Tuple
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from lending_pool.api.main import create_app
from lending_pool.api.dependencies import get_event_client, get_payout_client
from lending_pool.infrastructure.database.models import Base
from lending_pool.infrastructure.database.session import get_db, get_session_factory
from lending_pool.domain.engine import AccountingEngine
from lending_pool.domain.ledger import Ledger
from lending_pool.domain.loan_book import LoanBook


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

NOW = 1_700_000_000


class FakePayout:
    """Stand-in for the value-transfer primitive that records every call"""

    def __init__(self, succeed: bool = True):
        self.succeed = succeed
        self.calls: List[Tuple[str, int]] = []

    def transfer(self, destination: str, amount: int) -> bool:
        self.calls.append((destination, amount))
        return self.succeed


class RecordingEventClient:
    """Collects delivered event payloads instead of posting them"""

    def __init__(self):
        self.payloads: List[dict] = []

    async def send_event(self, payload: dict, target_url: str | None = None) -> None:
        self.payloads.append(payload)


@pytest.fixture
def payout() -> FakePayout:
    return FakePayout()


@pytest.fixture
def event_sink() -> RecordingEventClient:
    return RecordingEventClient()


@pytest.fixture
def engine_under_test(payout: FakePayout) -> AccountingEngine:
    """Engine over empty in-memory state with a fixed clock"""
    return AccountingEngine(Ledger(), LoanBook(), payout.transfer, clock=lambda: NOW)


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create test database and session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def session_factory(db: Session) -> sessionmaker:
    """Factory for sessions outside the request, on the same test database"""
    return TestingSessionLocal


@pytest.fixture
def client(db: Session, payout: FakePayout, event_sink: RecordingEventClient) -> TestClient:
    """Create FastAPI test client with test database and fake payouts"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_payout_client] = lambda: payout
    app.dependency_overrides[get_event_client] = lambda: event_sink
    return TestClient(app)
