"""
Domain errors.

Every error raised by the stores and the auth layer carries a message
and an HTTP status code. The router boundary turns them into
`HTTPException`s; anything else becomes a generic 400.
"""

from __future__ import annotations

from fastapi import HTTPException


class DomainError(Exception):
    """Base class for errors that map onto an HTTP response."""

    status_code: int = 400

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        self.headers = headers or {}

    def to_http(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail=self.message,
            headers=self.headers or None,
        )

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, {self.status_code})"


class ValidationError(DomainError):
    """Malformed input."""
    status_code = 400


class NotFoundError(DomainError):
    """Missing or soft-deleted entity."""
    status_code = 404


class AuthenticationError(DomainError):
    """Missing or invalid credentials."""
    status_code = 401


class AuthorizationError(DomainError):
    """
    Valid identity, insufficient privilege.

    Answered with 401 like authentication failures, so both carry a
    challenge header.
    """
    status_code = 401


class IntegrityError(DomainError):
    """An update or delete affected an unexpected number of rows."""
    status_code = 400


def challenge(scheme: str, realm: str) -> dict[str, str]:
    """Build a `WWW-Authenticate` header for the given scheme."""
    return {"WWW-Authenticate": f'{scheme} realm="{realm}"'}
