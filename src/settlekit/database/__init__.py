"""Database layer for settlekit application."""

from settlekit.database.base import Database
from settlekit.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
