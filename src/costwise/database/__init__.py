"""Database layer for costwise application."""

from costwise.database.base import Database
from costwise.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
