"""Database layer for donortrack application."""

from donortrack.database.base import Database
from donortrack.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
