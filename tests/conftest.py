"""
Pytest configuration and shared fixtures.
"""

import pytest

from voldash.data.series import VolatilityObservation
from voldash.database.connection import Database


@pytest.fixture
def db():
    """In-memory database with schema."""
    db = Database(":memory:")
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def sample_observations():
    """Three observations spanning two dates."""
    return [
        VolatilityObservation(date="2024-01-01", symbol="VIX", close=20.0),
        VolatilityObservation(date="2024-01-02", symbol="VIX", close=22.0),
        VolatilityObservation(date="2024-01-01", symbol="NIKKEI_VI", close=18.0),
    ]


@pytest.fixture
def price_rows():
    """Rows for volatility_prices covering early 2024."""
    return [
        {"date": "2023-12-29", "symbol": "VIX", "close": 12.45},
        {"date": "2023-12-29", "symbol": "NIKKEI_VI", "close": 17.1},
        {"date": "2024-01-31", "symbol": "VIX", "close": 14.35},
        {"date": "2024-01-31", "symbol": "NIKKEI_VI", "close": 19.8},
        {"date": "2024-02-29", "symbol": "VIX", "close": 13.4},
        {"date": "2024-03-01", "symbol": "NIKKEI_VI", "close": 21.02},
        {"date": "2024-03-01", "symbol": "SPX", "close": 5137.08},
    ]


@pytest.fixture
def seeded_db(db, price_rows):
    """Database with price rows loaded."""
    db.insert("volatility_prices", price_rows)
    return db
