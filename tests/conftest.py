"""
Shared test fixtures for SchemeFlow.

Provides literal SchemeRecord fixtures for the rule engine, ORM scheme
factories, an async test client, and database/Redis mocks.
"""

import uuid
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.database import get_db
from app.redis_client import get_redis
from app.models.payment_scheme import PaymentScheme
from app.scheme_engine.record import (
    AmountLimits,
    FeeStructure,
    OperatingHours,
    SchemeKind,
    SchemeRecord,
)

WEEKDAYS_ONLY = ("monday", "tuesday", "wednesday", "thursday", "friday")
ALL_DAYS = WEEKDAYS_ONLY + ("saturday", "sunday")


# --- Rule-engine record fixtures ---


def _make_record(**overrides) -> SchemeRecord:
    """SEPA-style fiat EUR scheme: mon-fri 08:00-18:00 UTC, 0.50 + 0.1%."""
    defaults = {
        "id": "scheme-sepa",
        "name": "SEPA Credit Transfer",
        "kind": SchemeKind.FIAT,
        "currency": "EUR",
        "country_scope": "EU",
        "available_days": WEEKDAYS_ONLY,
        "operating_hours": OperatingHours("08:00", "18:00", "UTC"),
        "settlement_time": "T+1",
        "cut_off_time": "16:00",
        "fees": FeeStructure(
            flat_fee=Decimal("0.5"), percentage_fee=Decimal("0.001"), currency="EUR",
        ),
        "limits": AmountLimits(
            min_amount=Decimal("0.01"), max_amount=Decimal("1000000"), currency="EUR",
        ),
        "supports_fx": False,
    }
    defaults.update(overrides)
    return SchemeRecord(**defaults)


@pytest.fixture
def make_record():
    """Factory fixture for SchemeRecord instances."""
    return _make_record


@pytest.fixture
def fiat_record():
    return _make_record()


@pytest.fixture
def crypto_record():
    return _make_record(
        id="scheme-btc",
        name="Bitcoin Network",
        kind=SchemeKind.CRYPTO,
        currency="BTC",
        country_scope="global",
        available_days=ALL_DAYS,
        operating_hours=OperatingHours("09:00", "17:00", "UTC"),
        settlement_time="instant",
        cut_off_time=None,
        fees=FeeStructure(percentage_fee=Decimal("0.001")),
        limits=AmountLimits(),
    )


@pytest.fixture
def fx_record():
    return _make_record(
        id="scheme-fx",
        name="EUR/USD FX Desk",
        kind=SchemeKind.FX,
        currency="EUR",
        target_currency="USD",
        country_scope="global",
        settlement_time="T+2",
        cut_off_time=None,
        fees=FeeStructure(),
        spread=Decimal("0.0025"),
        supports_fx=True,
    )


# --- ORM fixtures ---


def _make_scheme(**overrides) -> PaymentScheme:
    """Create a PaymentScheme row via the normal constructor."""
    defaults = {
        "id": uuid.uuid4(),
        "name": "SEPA Credit Transfer",
        "kind": SchemeKind.FIAT,
        "currency": "EUR",
        "country_scope": "EU",
        "available_days": list(WEEKDAYS_ONLY),
        "hours_start": "08:00",
        "hours_end": "18:00",
        "hours_timezone": "UTC",
        "holiday_calendar": [date(2025, 12, 25)],
        "cut_off_time": "16:00",
        "settlement_time": "T+1",
        "flat_fee": Decimal("0.50"),
        "percentage_fee": Decimal("0.001"),
        "fee_currency": "EUR",
        "min_amount": Decimal("0.01"),
        "max_amount": Decimal("1000000"),
        "limit_currency": "EUR",
        "supports_fx": False,
    }
    defaults.update(overrides)
    return PaymentScheme(**defaults)


@pytest.fixture
def make_scheme():
    """Factory fixture for PaymentScheme instances."""
    return _make_scheme


# --- Mock Redis ---


@pytest.fixture
def mock_redis():
    """AsyncMock Redis client with the methods the scheme cache uses."""
    redis = AsyncMock()
    redis.setex = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.delete = AsyncMock()
    return redis


# --- Mock Database Session ---


@pytest.fixture
def mock_db():
    """AsyncMock database session."""
    db = AsyncMock()

    # Mock the result object returned by db.execute()
    mock_result = MagicMock()
    mock_result.scalar_one_or_none = MagicMock(return_value=None)
    mock_result.scalars = MagicMock(return_value=MagicMock(all=MagicMock(return_value=[])))
    db.execute = AsyncMock(return_value=mock_result)
    db.flush = AsyncMock()
    db.add = MagicMock()
    db.delete = AsyncMock()
    db.commit = AsyncMock()
    db.rollback = AsyncMock()

    return db


def _setup_scheme_lookup(mock_db, scheme) -> None:
    """Configure mock_db.execute to return *scheme* for every query."""
    mock_result = MagicMock()
    mock_result.scalar_one_or_none = MagicMock(return_value=scheme)
    mock_result.scalars = MagicMock(
        return_value=MagicMock(all=MagicMock(return_value=[scheme] if scheme else []))
    )
    mock_db.execute = AsyncMock(return_value=mock_result)


@pytest.fixture
def scheme_lookup(mock_db):
    """Call with a PaymentScheme (or None) to stub the DB lookup."""
    return lambda scheme: _setup_scheme_lookup(mock_db, scheme)


# --- Dependency Override Helpers ---


@pytest_asyncio.fixture
async def client(mock_db, mock_redis):
    """
    Async HTTP test client with get_db and get_redis overridden
    to use test doubles.
    """
    from app.main import app

    async def override_get_db():
        yield mock_db

    async def override_get_redis():
        return mock_redis

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_redis] = override_get_redis

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
