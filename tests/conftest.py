"""
pytest configuration and fixtures for Forex Quote API tests
"""

import os
from datetime import date
from decimal import Decimal

import pytest

# Keep the app from reaching for a database at import time.
os.environ.setdefault("ENSURE_INDEXES", "0")

from api import main  # noqa: E402

STORED_RATES = {
    date(2022, 12, 30): {
        "USD": Decimal("1.0666"),
        "GBP": Decimal("0.88693"),
        "JPY": Decimal("140.66"),
    },
    date(2023, 1, 2): {
        "USD": Decimal("1.0683"),
        "GBP": Decimal("0.88365"),
        "JPY": Decimal("141.23"),
    },
}


class InMemoryRateRepository:
    """Stands in for RateRepository with a dict of stored rates."""

    def __init__(self, rates=None):
        self.rates = STORED_RATES if rates is None else rates

    def current_date_for(self, day):
        candidates = [stored for stored in self.rates if stored <= day]
        return max(candidates) if candidates else None

    def rates_for(self, day):
        return dict(self.rates.get(day, {}))


@pytest.fixture
def repository():
    """In-memory repository with two stored dates"""
    return InMemoryRateRepository()


@pytest.fixture
def client(monkeypatch, repository):
    """Flask test client backed by the in-memory repository"""
    monkeypatch.setattr(main, "rate_repository", repository)
    main.app.config["TESTING"] = True
    with main.app.test_client() as client:
        yield client
