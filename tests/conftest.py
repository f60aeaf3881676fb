"""Pytest configuration and fixtures."""

from datetime import date

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from components.core.database import DatabaseManager
from components.loan.models import Loan
from components.payment.models import Payment
from restapi.router import create_app


@pytest.fixture
def anyio_backend() -> str:
    """Run async tests on asyncio only."""
    return "asyncio"


@pytest.fixture
def db_manager() -> DatabaseManager:
    """Database manager over a fresh in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    return DatabaseManager(engine=engine)


@pytest.fixture
async def session(db_manager: DatabaseManager):
    """Session on a database with all tables created."""
    await db_manager.create_all()
    async with db_manager.get_db() as session:
        yield session
    await db_manager.dispose()


@pytest.fixture
def client(db_manager: DatabaseManager):
    """API client bound to the in-memory database."""
    app = create_app(db_manager)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def loan() -> Loan:
    """Loan of 10,000 issued 2025-01-01, due 2025-01-11."""
    return Loan(
        id="loan-test-001",
        member_id="M-001",
        member_name="Test Member",
        amount=10000.0,
        issued_date=date(2025, 1, 1),
        due_date=date(2025, 1, 11),
        total_interest=1000.0,
        status="active",
        revision=1,
    )


@pytest.fixture
def make_payment():
    """Factory for payments against the sample loan."""
    def factory(amount: float, on: date, loan_id: str = "loan-test-001") -> Payment:
        return Payment(loan_id=loan_id, amount=amount, date=on)
    return factory
