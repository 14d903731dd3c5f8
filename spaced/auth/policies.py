"""
Policies - the clean interface for route authorization.

Just use: `ctx: AuthContext = Depends(require("admin"))`

Design:
- `require()` returns a FastAPI Depends that resolves to AuthContext
- No privilege means no scheme runs and the context is anonymous
- The scheme (basic or bearer) turns the request's credentials into a user
- The user must hold the required privilege, or the request is refused
  with 401 and a challenge header
"""

from __future__ import annotations

from enum import Enum
from typing import Callable

from fastapi import Depends, HTTPException, Request
from fastapi.security import (
    HTTPAuthorizationCredentials,
    HTTPBasic,
    HTTPBasicCredentials,
    HTTPBearer,
)

from spaced.auth.context import AuthContext
from spaced.auth.sessions import SessionIssuer
from spaced.core.errors import (
    AuthenticationError,
    AuthorizationError,
    DomainError,
    challenge,
)
from spaced.core.models import User


LOGIN_HINT = "Log in with POST /api/users/login to obtain a bearer token"


class AuthScheme(str, Enum):
    """How a route reads credentials from the request."""

    BASIC = "basic"
    BEARER = "bearer"


DEFAULT_SCHEME = AuthScheme.BEARER


# Optional security schemes (don't fail if the header is missing)
optional_basic = HTTPBasic(auto_error=False)
optional_bearer = HTTPBearer(auto_error=False)


def get_sessions(request: Request) -> SessionIssuer:
    return request.app.state.sessions


def realm_of(request: Request) -> str:
    return request.url.hostname or "localhost"


async def read_basic(request: Request, realm: str) -> HTTPBasicCredentials | None:
    """Parse the Basic header; undecodable headers are refused with our realm."""
    try:
        return await optional_basic(request)
    except HTTPException:
        raise AuthenticationError(
            "Invalid authentication credentials",
            headers=challenge("Basic", realm),
        )


# =============================================================================
# Schemes
# =============================================================================


async def authenticate_basic(
    credentials: HTTPBasicCredentials | None,
    sessions: SessionIssuer,
    realm: str,
) -> User:
    """Exchange username/password for a freshly logged-in user."""
    headers = challenge("Basic", realm)
    if credentials is None:
        raise AuthenticationError("Missing credentials", headers=headers)
    try:
        return await sessions.login(credentials.username, credentials.password)
    except AuthenticationError as e:
        raise AuthenticationError(e.message, headers=headers)


async def authenticate_bearer(
    credentials: HTTPAuthorizationCredentials | None,
    sessions: SessionIssuer,
    realm: str,
) -> User:
    """Resolve a bearer token to its user."""
    headers = challenge("Bearer", realm)
    if credentials is None or not credentials.credentials:
        raise AuthenticationError(f"Missing bearer token. {LOGIN_HINT}", headers=headers)
    try:
        return await sessions.resolve_token(credentials.credentials)
    except AuthenticationError as e:
        raise AuthenticationError(f"{e.message}. {LOGIN_HINT}", headers=headers)


def check_privilege(user: User, privilege: str, scheme: AuthScheme, realm: str) -> AuthContext:
    """Build the context for `user`, refusing it if `privilege` is missing."""
    if not user.has_privilege(privilege):
        raise AuthorizationError(
            f"Missing privilege: {privilege}",
            headers=challenge(scheme.value.capitalize(), realm),
        )
    return AuthContext.for_user(user)


# =============================================================================
# Main Interface - the require() function
# =============================================================================


def require(
    privilege: str | None = None,
    scheme: AuthScheme = DEFAULT_SCHEME,
) -> Callable:
    """
    Require a privilege to access a route.

    Usage:
        @router.delete("/questions/{id}")
        async def delete_question(
            id: str,
            ctx: AuthContext = Depends(require("admin")),
        ):
            ...

    Args:
        privilege: Privilege name the user must hold; None for open routes
        scheme: How credentials are read (basic or bearer)

    Returns:
        FastAPI Depends that resolves to AuthContext
    """
    if privilege is None:
        async def anonymous() -> AuthContext:
            return AuthContext.anonymous()
        return anonymous

    if scheme == AuthScheme.BASIC:
        async def basic(request: Request) -> AuthContext:
            realm = realm_of(request)
            try:
                credentials = await read_basic(request, realm)
                user = await authenticate_basic(credentials, get_sessions(request), realm)
                return check_privilege(user, privilege, scheme, realm)
            except DomainError as e:
                raise e.to_http()
        return basic

    async def bearer(
        request: Request,
        credentials: HTTPAuthorizationCredentials | None = Depends(optional_bearer),
    ) -> AuthContext:
        realm = realm_of(request)
        try:
            user = await authenticate_bearer(credentials, get_sessions(request), realm)
            return check_privilege(user, privilege, scheme, realm)
        except DomainError as e:
            raise e.to_http()
    return bearer

