"""
Database models for the Forex Quote API.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

# Constants
CURRENCIES_TABLE = "currencies"

# Stored rates are quoted against the euro, as published in the reference feed.
REFERENCE_CURRENCY = "EUR"


@dataclass(frozen=True)
class CurrencyRate:
    """Data model for a single stored reference rate."""

    date: date
    iso_code: str
    rate: Decimal

    @classmethod
    def from_db_row(cls, row) -> "CurrencyRate":
        """Create CurrencyRate instance from database row."""
        return cls(
            date=row[0],
            iso_code=row[1],
            rate=row[2] if isinstance(row[2], Decimal) else Decimal(str(row[2])),
        )

    def __repr__(self) -> str:
        return f"CurrencyRate(iso_code={self.iso_code!r}, date={self.date!r}, rate={self.rate!r})"
