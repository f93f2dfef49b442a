"""Database factory functions for creating database instances."""

from typing import Optional

from moneytracker.config import settings
from moneytracker.database.sqlalchemy_db import SQLAlchemyDatabase


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, uses
            MONEYTRACKER_DATABASE_PATH, then ~/.moneytracker/moneytracker.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        database_path = settings.resolve_database_path()

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
