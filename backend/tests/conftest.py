"""Pytest configuration and fixtures."""

from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from api.market_data import set_price_service_override
from database import Base, get_db
from integrations.market_data_protocol import SymbolMatch
from main import app
from services.price_service import PriceService
# Pytest fixtures - imported to make them available to tests
from tests.fixtures import (  # noqa: F401
    USER_ID,
    brokerage,
    budget,
    checking,
    credit_card,
    house,
)
from tests.fixtures.mocks import FakeClock, MockQuoteProvider, RecordingSleep


@pytest.fixture(name="db")
def db_fixture():
    """Create an in-memory SQLite database for testing."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="stock_provider")
def stock_provider_fixture():
    return MockQuoteProvider(
        prices={"AAPL": Decimal("190.00"), "MSFT": Decimal("400.00")},
        matches=[SymbolMatch("AAPL", "Apple Inc.", "NASDAQ")],
        name="mock-stocks",
    )


@pytest.fixture(name="crypto_provider")
def crypto_provider_fixture():
    return MockQuoteProvider(
        prices={"BTC": Decimal("65000"), "ETH": Decimal("3200")},
        matches=[SymbolMatch("BTC", "Bitcoin")],
        name="mock-crypto",
    )


@pytest.fixture(name="clock")
def clock_fixture():
    return FakeClock()


@pytest.fixture(name="sleep")
def sleep_fixture():
    return RecordingSleep()


@pytest.fixture(name="price_service")
def price_service_fixture(stock_provider, crypto_provider, clock, sleep):
    """PriceService wired to mock providers, a fake clock and a no-op sleep."""
    return PriceService(
        stock_provider=stock_provider,
        crypto_provider=crypto_provider,
        retries=2,
        backoff_seconds=0.5,
        sleep=sleep,
        clock=clock,
    )


@pytest.fixture(name="client")
def client_fixture(db, price_service):
    """Create a test client with the test database, acting as USER_ID."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    set_price_service_override(price_service)
    client = TestClient(app, headers={"X-User-Id": USER_ID})
    yield client
    app.dependency_overrides.clear()
    set_price_service_override(None)
