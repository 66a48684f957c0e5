"""
Service layer for quote lookup.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional

from api.config import settings
from api.core.database import DatabaseManager, db_manager
from api.models import CURRENCIES_TABLE, REFERENCE_CURRENCY, CurrencyRate
from api.utils import DateValidator, first_param

logger = logging.getLogger(__name__)

# First business day of the euro reference rates.
EARLIEST_DATE = date(1999, 1, 4)

RATE_PRECISION = Decimal("0.00001")


class Invalid(ValueError):
    """Raised when a quote cannot be built from the request parameters."""


class RateRepository:
    """Read access to stored reference rates."""

    def __init__(self, manager: DatabaseManager = None):
        self.manager = manager or db_manager

    def current_date_for(self, day: date) -> Optional[date]:
        """Return the latest date with stored rates on or before ``day``."""
        query = f"SELECT MAX(date) FROM {CURRENCIES_TABLE} WHERE date <= %s"

        with self.manager.get_cursor() as cursor:
            cursor.execute(query, (day,))
            row = cursor.fetchone()
            return row[0] if row else None

    def rates_for(self, day: date) -> Dict[str, Decimal]:
        """Return ``{iso_code: rate}`` for one stored date."""
        query = f"""
            SELECT date, iso_code, rate
            FROM {CURRENCIES_TABLE}
            WHERE date = %s
        """

        with self.manager.get_cursor() as cursor:
            cursor.execute(query, (day,))
            rows = [CurrencyRate.from_db_row(row) for row in cursor.fetchall()]
            return {rate.iso_code: rate.rate for rate in rows}


def rebase(rates: Mapping[str, Decimal], base: str) -> Dict[str, Decimal]:
    """
    Convert reference (EUR based) rates to rates against ``base``.

    Raises:
        Invalid: If ``base`` has no stored rate.
    """
    if base == REFERENCE_CURRENCY:
        return dict(rates)

    denominator = rates.get(base)
    if not denominator:
        raise Invalid("Invalid base")

    rebased = {
        iso_code: (rate / denominator).quantize(RATE_PRECISION, ROUND_HALF_UP)
        for iso_code, rate in rates.items()
        if iso_code != base
    }
    rebased[REFERENCE_CURRENCY] = (Decimal(1) / denominator).quantize(
        RATE_PRECISION, ROUND_HALF_UP
    )
    return rebased


@dataclass(frozen=True)
class Quote:
    """A dated snapshot of exchange rates relative to a base currency."""

    date: date
    base: str
    rates: Mapping[str, Decimal] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "rates", MappingProxyType(dict(self.rates)))

    @classmethod
    def from_params(
        cls, params: Mapping[str, str], repository: RateRepository = None
    ) -> "Quote":
        """
        Build a quote from request parameters.

        Args:
            params: Request parameters (``date``, ``base``/``from``)
            repository: Source of stored rates

        Returns:
            Quote for the latest stored date on or before the requested one

        Raises:
            Invalid: If the date or base is malformed or out of range
        """
        repository = repository or RateRepository()
        base = (first_param(params, "base", "from") or settings.DEFAULT_BASE).upper()
        requested = cls._requested_date(params.get("date"))

        current = repository.current_date_for(requested)
        if current is None:
            raise Invalid(f"No rates available for {requested.isoformat()}")

        logger.debug("Resolved %s to stored date %s", requested, current)
        rates = rebase(repository.rates_for(current), base)
        return cls(date=current, base=base, rates=rates)

    @staticmethod
    def _requested_date(value: Optional[str]) -> date:
        if not value:
            return date.today()
        try:
            requested = DateValidator.validate_date_format(value)
        except ValueError as e:
            raise Invalid(str(e)) from e
        if requested < EARLIEST_DATE:
            raise Invalid("Date too old")
        return requested

    def attributes(self) -> dict:
        """Return a fresh, JSON-ready dict of the quote."""
        return {
            "base": self.base,
            "date": self.date.isoformat(),
            "rates": {code: float(rate) for code, rate in sorted(self.rates.items())},
        }

    def filtered(self, symbols: Optional[Iterable[str]]) -> dict:
        """Return attributes with ``rates`` limited to ``symbols`` when given."""
        data = self.attributes()
        if symbols is not None:
            wanted = set(symbols)
            data["rates"] = {
                code: rate for code, rate in data["rates"].items() if code in wanted
            }
        return data
