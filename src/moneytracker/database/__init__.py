"""Database layer for moneytracker application."""

from moneytracker.database.base import Database
from moneytracker.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
