"""
Shared test fixtures.

Sets up an isolated test database so tests never touch
the real database. Every test starts with freshly created
tables, which are dropped again afterwards.
"""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from family_finance.database import Database, get_db
from family_finance.main import app
from family_finance.models import Base
from family_finance.models.enums import AccountType
from family_finance.schemas.account import AccountCreate
from family_finance.services.account_service import AccountService


# Use SQLite for tests — no external database needed.
# SQLite ignores FOR UPDATE, so locking is only exercised
# for real against PostgreSQL.
TEST_DATABASE_URL = "sqlite:///./test.db"

database = Database(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
)

OWNER = "user-1"


@pytest.fixture(autouse=True)
def setup_database():
    """
    Create all tables before each test, drop them after.

    autouse=True means every test gets this automatically.
    """
    database.create_all()
    yield
    Base.metadata.drop_all(bind=database.engine)


@pytest.fixture
def db_session():
    """Provide a database session for direct service testing."""
    session = database.session()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client(db_session):
    """
    Provide a test client with the test database.

    We override the get_db dependency so the FastAPI app
    uses our test session instead of the real database.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_account(db_session):
    """Factory fixture: create and commit an account for OWNER."""
    def _make(
        name="Checking",
        balance="0.00",
        account_type=AccountType.CHECKING,
        credit_limit=None,
        owner_id=OWNER,
        dashboard_id=None,
        currency="BRL",
    ):
        account = AccountService(db_session).create_account(
            AccountCreate(
                name=name,
                account_type=account_type,
                initial_balance=Decimal(balance),
                credit_limit=Decimal(credit_limit) if credit_limit else None,
                currency=currency,
            ),
            owner_id,
            dashboard_id,
        )
        db_session.commit()
        return account

    return _make
