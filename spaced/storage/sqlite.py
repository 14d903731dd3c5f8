"""
SQLite storage.

One connection per process. Statements run in a worker thread so the
event loop keeps serving other requests, and an asyncio lock keeps the
connection to one statement at a time.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from pathlib import Path
from typing import Any

from spaced.core.utils import generate_id
from spaced.storage.base import ConstraintViolation, Database, Row, StorageError


SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id CHAR(36) NOT NULL,
    username TEXT NOT NULL UNIQUE,
    pwhash TEXT NOT NULL,
    salt TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'AVAILABLE',
    PRIMARY KEY (id)
);
CREATE TABLE IF NOT EXISTS privileges (
    id CHAR(36) NOT NULL,
    name TEXT NOT NULL UNIQUE,
    PRIMARY KEY (id)
);
CREATE TABLE IF NOT EXISTS users_privileges (
    user_id CHAR(36) NOT NULL REFERENCES users (id),
    privilege_id CHAR(36) NOT NULL REFERENCES privileges (id),
    PRIMARY KEY (user_id, privilege_id)
);
CREATE TABLE IF NOT EXISTS sessions (
    id CHAR(36) NOT NULL,
    user_id CHAR(36) NOT NULL REFERENCES users (id),
    status TEXT NOT NULL,
    token TEXT NOT NULL UNIQUE,
    created_at TEXT NOT NULL,
    PRIMARY KEY (id)
);
CREATE TABLE IF NOT EXISTS questions (
    id CHAR(36) NOT NULL,
    status TEXT NOT NULL,
    question TEXT NOT NULL,
    answer TEXT NOT NULL,
    PRIMARY KEY (id)
);
CREATE TABLE IF NOT EXISTS users_questions (
    user_id CHAR(36) NOT NULL REFERENCES users (id),
    question_id CHAR(36) NOT NULL REFERENCES questions (id),
    nb_correct INTEGER NOT NULL DEFAULT 0,
    nb_wrong INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (user_id, question_id)
);
"""

DROP = """
DROP TABLE IF EXISTS users_questions;
DROP TABLE IF EXISTS sessions;
DROP TABLE IF EXISTS users_privileges;
DROP TABLE IF EXISTS questions;
DROP TABLE IF EXISTS privileges;
DROP TABLE IF EXISTS users;
"""

DEFAULT_PRIVILEGES = ("admin", "user")


class SqliteDatabase(Database):
    """SQLite-backed row store."""

    def __init__(self, path: str = "data/data.sqlite", logger: logging.Logger | None = None):
        self.path = path
        self.log = logger or logging.getLogger(__name__)
        self._conn: sqlite3.Connection | None = None
        self._lock: asyncio.Lock | None = None

    @property
    def loaded(self) -> bool:
        return self._conn is not None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        if self._conn is not None:
            return
        if self.path != ":memory:":
            Path(self.path).parent.mkdir(parents=True, exist_ok=True)

        self.log.info(f"Opening database {self.path}")
        self._lock = asyncio.Lock()
        self._conn = await asyncio.to_thread(self._open)
        await self._create_schema()
        self.log.info("Database loaded")

    def _open(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.path, check_same_thread=False, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    async def close(self) -> None:
        if self._conn is None:
            return
        conn, self._conn = self._conn, None
        await asyncio.to_thread(conn.close)
        self.log.info("Database closed")

    async def reset(self) -> None:
        await self._run(lambda conn: conn.executescript(DROP))
        self.log.debug("Tables dropped")
        await self._create_schema()
        self.log.info("Database reset complete")

    async def _create_schema(self) -> None:
        await self._run(lambda conn: conn.executescript(SCHEMA))
        for name in DEFAULT_PRIVILEGES:
            await self.execute(
                "INSERT OR IGNORE INTO privileges (id, name) VALUES (?, ?);",
                generate_id(), name,
            )

    # -------------------------------------------------------------------------
    # Statements
    # -------------------------------------------------------------------------

    async def execute(self, sql: str, *params: Any) -> int:
        cursor = await self._run(lambda conn: conn.execute(sql, params))
        return cursor.rowcount

    async def fetch_one(self, sql: str, *params: Any) -> Row | None:
        row = await self._run(lambda conn: conn.execute(sql, params).fetchone())
        return dict(row) if row is not None else None

    async def fetch_all(self, sql: str, *params: Any) -> list[Row]:
        rows = await self._run(lambda conn: conn.execute(sql, params).fetchall())
        return [dict(row) for row in rows]

    async def _run(self, fn):
        if self._conn is None or self._lock is None:
            raise StorageError("Database is not connected")

        conn = self._conn
        async with self._lock:
            try:
                return await asyncio.to_thread(fn, conn)
            except sqlite3.IntegrityError as e:
                self.log.debug(f"Constraint violation: {e}")
                raise ConstraintViolation(str(e)) from e
            except sqlite3.Error as e:
                self.log.error(f"Statement failed: {e}")
                raise StorageError(str(e)) from e


def create_sqlite_database(path: str, logger: logging.Logger | None = None) -> SqliteDatabase:
    """Create (but do not open) the SQLite database."""
    return SqliteDatabase(path, logger=logger)
