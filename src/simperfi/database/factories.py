"""Database factory functions."""

import logging
from pathlib import Path
from typing import Optional

from simperfi.database.sqlalchemy_db import SQLAlchemyDatabase

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_PATH = Path.home() / ".simperfi" / "simperfi.db"


def resolve_database_path(database_path: Optional[str] = None) -> Path:
    """Pick the SQLite file to use.

    An explicit path wins, otherwise ~/.simperfi/simperfi.db. ``~`` is
    expanded and the parent directory is created if missing.
    """
    path = Path(database_path).expanduser() if database_path else DEFAULT_DATABASE_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Create a SQLite-backed database.

    Args:
        database_path: Path to the SQLite file (see resolve_database_path)

    Returns:
        SQLAlchemyDatabase instance configured for SQLite
    """
    path = resolve_database_path(database_path)
    logger.debug("Using database %s", path)
    return SQLAlchemyDatabase(f"sqlite:///{path}")
