"""Pytest configuration and fixtures."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.plaid import _get_plaid_client
from database import Base, _enable_sqlite_foreign_keys, get_db
from main import app
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    account,
    credit_account,
    item,
    loan_account,
    second_item,
    transaction,
)
from tests.fixtures.mocks import (
    SAMPLE_ACCESS_TOKEN,
    SAMPLE_ACCOUNTS,
    SAMPLE_LIABILITIES,
    MockPlaidClient,
)


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    _enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="mock_plaid_client")
def mock_plaid_client_fixture():
    """Create a mock Plaid client with sample accounts and liabilities."""
    return MockPlaidClient(
        accounts={SAMPLE_ACCESS_TOKEN: SAMPLE_ACCOUNTS},
        balances={SAMPLE_ACCESS_TOKEN: SAMPLE_ACCOUNTS},
        liabilities={SAMPLE_ACCESS_TOKEN: SAMPLE_LIABILITIES},
        exchange_result={"access_token": SAMPLE_ACCESS_TOKEN, "item_id": "item-linked"},
    )


@pytest.fixture(name="client")
def client_fixture(db, mock_plaid_client):
    """Create a test client with the test database and mock Plaid client."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[_get_plaid_client] = lambda: mock_plaid_client
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
