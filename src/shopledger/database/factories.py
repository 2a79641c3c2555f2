"""Database factory functions for creating ledger store instances."""

import os
from pathlib import Path
from typing import Optional

from shopledger.database.memory import MemoryDatabase
from shopledger.database.sqlalchemy_db import SQLAlchemyDatabase
from shopledger.database.storage import JSONFileStorage, KeyValueStorage


DB_PATH_ENV = "SHOPLEDGER_DB_PATH"
DEFAULT_DB_FILE = Path("~/.shopledger/shopledger.db")


def default_database_path() -> Path:
    """Return the per-user ledger file, creating its folder if missing."""
    path = DEFAULT_DB_FILE.expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def create_sqlite_database(database_path: Optional[str] = None) -> SQLAlchemyDatabase:
    """Open the SQLite ledger store.

    The file is chosen from ``database_path``, then ``$SHOPLEDGER_DB_PATH``,
    then the per-user default.
    """
    path = database_path or os.environ.get(DB_PATH_ENV) or default_database_path()
    return SQLAlchemyDatabase(f"sqlite:///{path}")


def create_memory_database(
    storage: Optional[KeyValueStorage] = None,
    storage_dir: Optional[str] = None,
) -> MemoryDatabase:
    """Create an in-memory database, optionally persisted to JSON files.

    Args:
        storage: Key-value collaborator to persist through
        storage_dir: Directory for JSON file storage (ignored if storage is given)

    Returns:
        MemoryDatabase instance; call initialize_schema() to load persisted data
    """
    if storage is None and storage_dir is not None:
        storage = JSONFileStorage(storage_dir)
    return MemoryDatabase(storage=storage)
