"""
Storage abstraction layer.

All persistence goes through this narrow row-store interface: run one
statement, fetch one row, fetch all rows. Stores above it never see the
driver, its connection or its exceptions.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any


# =============================================================================
# Errors
# =============================================================================


class StorageError(Exception):
    """The storage backend failed to run a statement."""
    pass


class ConstraintViolation(StorageError):
    """A statement violated a uniqueness or foreign key constraint."""
    pass


# =============================================================================
# Interface
# =============================================================================


Row = dict[str, Any]


class Database(ABC):
    """
    Storage for structured rows.

    Every write is a single atomic statement; there are no
    multi-statement transactions.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Open the connection and make sure the schema exists."""
        pass

    @abstractmethod
    async def close(self) -> None:
        pass

    @abstractmethod
    async def execute(self, sql: str, *params: Any) -> int:
        """Run a statement, return the number of affected rows."""
        pass

    @abstractmethod
    async def fetch_one(self, sql: str, *params: Any) -> Row | None:
        pass

    @abstractmethod
    async def fetch_all(self, sql: str, *params: Any) -> list[Row]:
        pass

    @abstractmethod
    async def reset(self) -> None:
        """Drop every table and recreate the schema."""
        pass