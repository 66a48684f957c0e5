"""
Utility functions for the API.
"""

from datetime import date, datetime
from typing import FrozenSet, Mapping, Optional


class DateValidator:
    """Utility class for date validation."""

    DATE_FORMAT = "%Y-%m-%d"

    @staticmethod
    def validate_date_format(date_str: str) -> date:
        """
        Validate date string in YYYY-MM-DD format.

        Args:
            date_str: Date string to validate

        Returns:
            date object if valid

        Raises:
            ValueError: If date format is invalid
        """
        try:
            return datetime.strptime(date_str, DateValidator.DATE_FORMAT).date()
        except (TypeError, ValueError):
            raise ValueError("Date must be in YYYY-MM-DD format")


def first_param(params: Mapping[str, str], *names: str) -> Optional[str]:
    """Return the first non-empty value among the given parameter names."""
    for name in names:
        value = params.get(name)
        if value:
            return value
    return None


def parse_symbols(params: Mapping[str, str]) -> Optional[FrozenSet[str]]:
    """
    Read the requested currency codes from ``symbols`` or ``to``.

    Returns None when neither parameter is given, so callers can tell
    "no filter" apart from a filter that matches nothing.
    """
    raw = first_param(params, "symbols", "to")
    if raw is None:
        return None
    return frozenset(code.strip().upper() for code in raw.split(",") if code.strip())
