"""
Pytest configuration and fixtures for ledger_service tests.
"""
import os

# Point the module-level engine at a throwaway database before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from decimal import Decimal
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from ledger_service.db.database import Base, get_db
from ledger_service.models import groups, expenses, settlements, currencies  # noqa: F401
from ledger_service.schemas.balance_schema import Balance
from ledger_service.services.auth.jwt_handler import create_access_token
from ledger_service.utils.ledger import SplitRow, PaymentRow


@pytest.fixture
def three_way_rows():
    """A paid 300, split equally between A, B and C."""
    return {
        "expense_splits": [
            SplitRow("e1", "A", Decimal("100")),
            SplitRow("e1", "B", Decimal("100")),
            SplitRow("e1", "C", Decimal("100")),
        ],
        "expense_payments": [PaymentRow("e1", "A", Decimal("300"))],
        "settlements": [],
        "member_ids": ["A", "B", "C"],
    }


@pytest.fixture
def sample_balances():
    """A owes 150, B is owed 100, C is owed 50, D is exactly balanced."""
    return [
        Balance(user_id="A", amount_owed=Decimal("150")),
        Balance(user_id="B", amount_paid=Decimal("100")),
        Balance(user_id="C", amount_paid=Decimal("50")),
        Balance(user_id="D", amount_paid=Decimal("20"), amount_owed=Decimal("20")),
    ]


@pytest.fixture
def db_session():
    """In-memory SQLite session with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def client(db_session):
    """API client sharing the test session."""
    from ledger_service.main import app

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Build request headers carrying a valid token for a user."""
    def _headers(user_id: str):
        return {"access-token": create_access_token(user_id)}
    return _headers
