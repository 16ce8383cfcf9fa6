"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from dental_ledger.api.dependencies import get_audit_client
from dental_ledger.api.main import create_app
from dental_ledger.domain.models import Installment, InstallmentStatus
from dental_ledger.infrastructure.clients.audit import AuditClient
from dental_ledger.infrastructure.database.models import Base
from dental_ledger.infrastructure.database.session import get_db
from dental_ledger.infrastructure.ratelimit import RateLimiter


# Test database: one shared in-memory connection
TEST_DATABASE_URL = "sqlite://"
engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

CLINIC_ID = "clinic-a"
OTHER_CLINIC_ID = "clinic-b"


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
def app(db: Session):
    """FastAPI app bound to the test database with audit delivery disabled"""
    app = create_app(rate_limiter=RateLimiter(window_seconds=60, max_requests=10_000))

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_audit_client] = lambda: AuditClient(enabled=False)
    return app


@pytest.fixture
def client(app) -> TestClient:
    """Test client acting on behalf of CLINIC_ID"""
    return TestClient(app, headers={"X-Clinic-ID": CLINIC_ID})


@pytest.fixture
def other_client(app) -> TestClient:
    """Test client acting on behalf of a different clinic"""
    return TestClient(app, headers={"X-Clinic-ID": OTHER_CLINIC_ID})


@pytest.fixture
def open_installments() -> list[Installment]:
    """Three open installments of 100.00, the second partially paid"""
    return [
        Installment(
            sequence_number=n,
            total_in_plan=3,
            due_date=date(2024, n, 10),
            amount_cents=10000,
            paid_amount_cents=4000 if n == 2 else 0,
            status=InstallmentStatus.OPEN,
        )
        for n in range(1, 4)
    ]
