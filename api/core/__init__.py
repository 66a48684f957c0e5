"""Core functionality for the API."""

from api.config import settings

from .database import DatabaseManager, db_manager

__all__ = ["settings", "DatabaseManager", "db_manager"]
