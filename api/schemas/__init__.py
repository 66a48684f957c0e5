"""
Response schemas for API endpoints.
"""

from dataclasses import asdict, dataclass


@dataclass
class ServiceDetails:
    """Response model for the service root."""

    details: str
    version: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class ErrorResponse:
    """Response model for errors."""

    error: str

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
