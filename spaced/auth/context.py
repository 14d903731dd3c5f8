"""
Auth context - the "who can do what" for each request.

This is the lightweight object passed to route handlers.
It contains everything needed to make authorization decisions.
"""

from __future__ import annotations

from dataclasses import dataclass

from spaced.core.models import User


ADMIN = "admin"
USER = "user"


@dataclass(frozen=True)
class AuthContext:
    """
    Authorization context for a request.

    Anonymous when `user` is None, otherwise carries the authenticated
    user with its privileges attached.

    Usage in routes:
        async def my_route(ctx: AuthContext = Depends(require("admin"))):
            print(f"User {ctx.user_id} is an admin")
    """

    user: User | None = None

    @property
    def is_anonymous(self) -> bool:
        return self.user is None

    @property
    def user_id(self) -> str | None:
        return self.user.id if self.user else None

    @property
    def privileges(self) -> set[str]:
        return self.user.privilege_names if self.user else set()

    @property
    def is_admin(self) -> bool:
        return self.can(ADMIN)

    def can(self, privilege: str) -> bool:
        """Check if the user holds a named privilege."""
        return privilege in self.privileges

    def is_self_or_admin(self, user_id: str) -> bool:
        return self.user_id == user_id or self.is_admin

    @classmethod
    def anonymous(cls) -> AuthContext:
        """Create an anonymous context (no user)."""
        return cls()

    @classmethod
    def for_user(cls, user: User) -> AuthContext:
        return cls(user=user)
