"""Database layer for dreledger application."""

from dreledger.database.base import Database
from dreledger.database.factories import create_sqlite_database

__all__ = ["Database", "create_sqlite_database"]
