"""
Storage abstractions.

- Database → SQLite (one connection per process)
"""

from spaced.storage.base import (
    Database,
    Row,
    StorageError,
    ConstraintViolation,
)
from spaced.storage.sqlite import SqliteDatabase, create_sqlite_database

__all__ = [
    "Database",
    "Row",
    "StorageError",
    "ConstraintViolation",
    "SqliteDatabase",
    "create_sqlite_database",
]
