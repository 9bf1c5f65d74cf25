"""Database factory functions for creating database instances."""

import os
from pathlib import Path
from typing import Optional

from settlekit.database.sqlalchemy_db import SQLAlchemyDatabase

DB_PATH_ENV_VAR = "SETTLEKIT_DB_PATH"


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite database instance.

    Args:
        database_path: Path to SQLite database file. If None, checks SETTLEKIT_DB_PATH
            environment variable, then defaults to ~/.settlekit/settlekit.db

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    if database_path is None:
        # Check environment variable
        database_path = os.environ.get(DB_PATH_ENV_VAR)

    if database_path is None:
        # Default to ~/.settlekit/settlekit.db
        home = Path.home()
        db_dir = home / ".settlekit"
        db_dir.mkdir(exist_ok=True)
        database_path = str(db_dir / "settlekit.db")

    database_url = f"sqlite:///{database_path}"
    return SQLAlchemyDatabase(database_url)
