"""Ledger store layer for shopledger application."""

from shopledger.database.base import Database
from shopledger.database.factories import create_memory_database, create_sqlite_database

__all__ = ["Database", "create_memory_database", "create_sqlite_database"]
