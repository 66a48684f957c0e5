"""Service layer for the API."""

from .quote_service import Invalid, Quote, RateRepository

__all__ = ["Invalid", "Quote", "RateRepository"]
