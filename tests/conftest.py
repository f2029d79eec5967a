"""Pytest fixtures for testing"""

import pytest
from decimal import Decimal
from typing import Generator
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from payment_analyzer.api.main import create_app
from payment_analyzer.infrastructure.database.models import Base
from payment_analyzer.infrastructure.database.session import get_db
from payment_analyzer.domain.models import DailyRecord, PaymentRules


# Test database
TEST_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(TEST_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


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


@pytest.fixture
def rules() -> PaymentRules:
    """Standard rate table: £2 weekday, £3 Saturday, £30/£25/£50 bonuses"""
    return PaymentRules(
        weekday_rate=Decimal("2.00"),
        saturday_rate=Decimal("3.00"),
        unloading_bonus=Decimal("30"),
        attendance_bonus=Decimal("25"),
        early_bonus=Decimal("50"),
    )


@pytest.fixture
def sample_week() -> list[DailyRecord]:
    """Mon 3 Mar 2025 - Sun 9 Mar 2025, paid exactly what the rules expect except Friday"""
    return [
        DailyRecord(date="2025-03-03", consignments=5, paid_amount=Decimal("85.00")),    # Mon: 10 + 25 + 50
        DailyRecord(date="2025-03-04", consignments=10, paid_amount=Decimal("125.00")),  # Tue: 20 + 30 + 25 + 50
        DailyRecord(date="2025-03-05", consignments=10, paid_amount=Decimal("125.00")),
        DailyRecord(date="2025-03-06", consignments=10, paid_amount=Decimal("125.00")),
        DailyRecord(date="2025-03-07", consignments=10, paid_amount=Decimal("115.00")),  # Fri: £10 short
        DailyRecord(date="2025-03-08", consignments=10, paid_amount=Decimal("60.00")),   # Sat: 30 + 30
        DailyRecord(date="2025-03-09", consignments=0, paid_amount=Decimal("0")),        # Sun: rest day
    ]


@pytest.fixture
def sample_entries() -> list[dict]:
    """Same week as sample_week in API request shape"""
    return [
        {"date": "2025-03-03", "consignments": 5, "paid_amount": 85},
        {"date": "2025-03-04", "consignments": 10, "paid_amount": 125},
        {"date": "2025-03-05", "consignments": 10, "paid_amount": 125},
        {"date": "2025-03-06", "consignments": 10, "paid_amount": 125},
        {"date": "2025-03-07", "consignments": 10, "paid_amount": 115},
        {"date": "2025-03-08", "consignments": 10, "paid_amount": 60},
        {"date": "2025-03-09", "consignments": 0, "paid_amount": 0},
    ]
