"""
Identity store - users and their privileges.

The self-or-admin rule for reading a user lives here, so every caller
gets the same answer.
"""

from __future__ import annotations

import logging
from typing import Iterable

from spaced.auth.context import ADMIN, USER, AuthContext
from spaced.auth.hashing import derive_async
from spaced.core.errors import (
    AuthorizationError,
    IntegrityError,
    NotFoundError,
    ValidationError,
)
from spaced.core.models import Privilege, Status, User
from spaced.core.utils import b64encode
from spaced.storage import ConstraintViolation, Database


class IdentityStore:
    """CRUD for user and privilege rows."""

    def __init__(self, db: Database, logger: logging.Logger | None = None):
        self.db = db
        self.log = logger or logging.getLogger(__name__)

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    async def create_user(
        self,
        username: str,
        password: str,
        privileges: Iterable[str] = (USER,),
    ) -> User:
        """
        Register a new user.

        Raises:
            ValidationError: empty credentials, username already taken or
                unknown privilege (the account is not kept)
        """
        if not username or not username.strip():
            raise ValidationError("Username must not be empty")
        if not password:
            raise ValidationError("Password must not be empty")

        salt, pwhash = await derive_async(password)
        user = User(username=username, salt=salt, pwhash=pwhash)
        self.log.debug(f"Adding {user}")

        try:
            await self.db.execute(
                "INSERT INTO users (id, username, pwhash, salt, status) VALUES (?, ?, ?, ?, ?);",
                user.id,
                user.username,
                b64encode(user.pwhash),
                b64encode(user.salt),
                Status.AVAILABLE.value,
            )
        except ConstraintViolation:
            self.log.info(f"Username {username!r} already taken")
            raise ValidationError(f"Username {username} is already taken")

        try:
            for name in privileges:
                await self.grant_privilege(user.id, name)
        except Exception:
            self.log.error(f"Granting privileges to {user} failed, removing the account")
            await self.db.execute("DELETE FROM users_privileges WHERE user_id = ?;", user.id)
            await self.db.execute("DELETE FROM users WHERE id = ?;", user.id)
            raise

        self.log.info(f"User inserted: {user}")
        return user

    async def get_user(self, user_id: str, ctx: AuthContext) -> User:
        """
        Fetch a user by id on behalf of `ctx`.

        Only the user themself or an admin may read a user.
        """
        if ctx.is_anonymous:
            raise AuthorizationError("No credentials found")
        if not ctx.is_self_or_admin(user_id):
            self.log.error(f"User {ctx.user_id} attempting to read user {user_id}")
            raise AuthorizationError("Unauthorized")

        row = await self.db.fetch_one(
            "SELECT * FROM users WHERE id = ? AND status = ?;",
            user_id, Status.AVAILABLE.value,
        )
        if row is None:
            raise NotFoundError(f"User {user_id} not found")
        return User.from_row(row)

    async def get_user_by_username(self, username: str) -> User:
        self.log.debug(f"Getting info for {username}")
        row = await self.db.fetch_one(
            "SELECT * FROM users WHERE username = ? AND status = ?;",
            username, Status.AVAILABLE.value,
        )
        if row is None:
            raise NotFoundError(f"User {username} not found")
        return User.from_row(row)

    async def list_users(self) -> list[User]:
        self.log.debug("Getting all users")
        rows = await self.db.fetch_all(
            "SELECT * FROM users WHERE status = ? ORDER BY username;",
            Status.AVAILABLE.value,
        )
        return [User.from_row(row) for row in rows]

    async def delete_user(self, user_id: str) -> None:
        """Soft-delete a user. Exactly one live row must change."""
        changes = await self.db.execute(
            "UPDATE users SET status = ? WHERE id = ? AND status = ?;",
            Status.DELETED.value, user_id, Status.AVAILABLE.value,
        )
        self.log.debug(f"Delete: {changes} row(s) marked as deleted ({user_id})")

        if changes == 0:
            raise NotFoundError(f"User {user_id} not found")
        if changes > 1:
            self.log.error(f"Delete: {changes} user rows marked as deleted ({user_id})")
            raise IntegrityError(f"Delete affected {changes} rows")

    # -------------------------------------------------------------------------
    # Privileges
    # -------------------------------------------------------------------------

    async def get_privileges(self, user_id: str) -> set[Privilege]:
        rows = await self.db.fetch_all(
            """
            SELECT p.* FROM privileges p
            INNER JOIN users_privileges up ON p.id = up.privilege_id
            WHERE up.user_id = ?;
            """,
            user_id,
        )
        return {Privilege.from_row(row) for row in rows}

    async def grant_privilege(self, user_id: str, name: str) -> Privilege:
        row = await self.db.fetch_one("SELECT * FROM privileges WHERE name = ?;", name)
        if row is None:
            raise ValidationError(f"Unknown privilege {name}")
        privilege = Privilege.from_row(row)

        await self.db.execute(
            "INSERT OR IGNORE INTO users_privileges (user_id, privilege_id) VALUES (?, ?);",
            user_id, privilege.id,
        )
        self.log.debug(f"Granted {privilege} to {user_id}")
        return privilege

    async def ensure_admin(self, username: str, password: str) -> User:
        """Create the bootstrap administrator unless it already exists."""
        try:
            user = await self.get_user_by_username(username)
        except NotFoundError:
            user = await self.create_user(username, password, privileges=(ADMIN, USER))
            self.log.info(f"Bootstrap administrator created: {user}")
            return user

        for name in (ADMIN, USER):
            await self.grant_privilege(user.id, name)
        return user
