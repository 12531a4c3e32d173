"""Pytest fixtures for testing"""

import pytest
from datetime import date
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from loan_engine.api.main import create_app
from loan_engine.infrastructure.database.models import Base
from loan_engine.infrastructure.database.repositories import LoanRepository
from loan_engine.infrastructure.database.session import get_db
from loan_engine.domain.loans import LoanPolicy, LoanService


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FixedClock:
    """Clock pinned to a known date"""

    def __init__(self, today: date):
        self._today = today

    def today(self) -> date:
        return self._today


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
def repository(db: Session) -> LoanRepository:
    return LoanRepository(db)


@pytest.fixture
def loan_service(repository: LoanRepository) -> LoanService:
    """Loan service over the test database with the default policy"""
    return LoanService(repository, policy=LoanPolicy(), clock=FixedClock(date(2024, 2, 1)))


@pytest.fixture
def client(db: Session) -> TestClient:
    """Create FastAPI test client with test database"""
    app = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    return TestClient(app)
