"""
Session/token issuer.

Exchanges credentials for an opaque bearer token and resolves tokens
back to users. A token is 16 random bytes, hex-encoded, stored in the
sessions table.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta

from spaced.auth.hashing import verify_async
from spaced.auth.identity import IdentityStore
from spaced.core.errors import AuthenticationError, NotFoundError
from spaced.core.models import Session, Status, User
from spaced.core.utils import utc_now
from spaced.storage import Database

TOKEN_BYTES = 16


class SessionIssuer:
    """Validates credentials, mints bearer tokens, records sessions."""

    def __init__(
        self,
        db: Database,
        identities: IdentityStore,
        session_ttl_minutes: int | None = None,
        logger: logging.Logger | None = None,
    ):
        self.db = db
        self.identities = identities
        self.session_ttl = (
            timedelta(minutes=session_ttl_minutes) if session_ttl_minutes else None
        )
        self.log = logger or logging.getLogger(__name__)

    async def login(self, username: str, password: str) -> User:
        """
        Authenticate by username and password and open a session.

        Unknown usernames and wrong passwords fail identically.
        """
        try:
            user = await self.identities.get_user_by_username(username)
        except NotFoundError:
            self.log.info(f"Login refused: unknown user {username!r}")
            raise AuthenticationError("Invalid credentials")

        self.log.debug(f"{user} trying to log in")
        if not await verify_async(password, user.salt, user.pwhash):
            self.log.info(f"Login refused: bad password for {user}")
            raise AuthenticationError("Invalid credentials")

        session = Session(
            user_id=user.id,
            token=secrets.token_hex(TOKEN_BYTES),
            created_at=utc_now().isoformat(),
        )
        await self.db.execute(
            "INSERT INTO sessions (id, user_id, status, token, created_at) VALUES (?, ?, ?, ?, ?);",
            session.id, session.user_id, session.status.value, session.token, session.created_at,
        )
        self.log.info(f"Session {session.id} created for {user}")

        privileges = await self.identities.get_privileges(user.id)
        return user.with_token(session.token).with_privileges(privileges)

    async def resolve_token(self, token: str) -> User:
        """Find the live user behind a live session token."""
        row = await self.db.fetch_one(
            """
            SELECT users.*, sessions.created_at AS session_created_at FROM sessions
            INNER JOIN users ON (users.id = sessions.user_id)
            WHERE users.status = ?
            AND sessions.status = ?
            AND sessions.token = ?;
            """,
            Status.AVAILABLE.value, Status.AVAILABLE.value, token,
        )
        if row is None:
            raise AuthenticationError("Token not found")
        if self._expired(row["session_created_at"]):
            self.log.info("Token refused: session expired")
            raise AuthenticationError("Session expired")

        user = User.from_row(row)
        self.log.debug(f"{user} authenticated by token")
        privileges = await self.identities.get_privileges(user.id)
        return user.with_token(token).with_privileges(privileges)

    async def logout(self, token: str) -> None:
        """Close the session behind a token."""
        changes = await self.db.execute(
            "UPDATE sessions SET status = ? WHERE token = ? AND status = ?;",
            Status.DELETED.value, token, Status.AVAILABLE.value,
        )
        if changes == 0:
            raise AuthenticationError("Token not found")
        self.log.info("Session closed")

    def _expired(self, created_at: str) -> bool:
        if self.session_ttl is None:
            return False
        return utc_now() - datetime.fromisoformat(created_at) > self.session_ttl
