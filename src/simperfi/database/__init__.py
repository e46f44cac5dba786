"""Database layer for simperfi application."""

from simperfi.database.base import Database
from simperfi.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
