"""
Authentication and authorization.

Design principles:
1. One dependency for all auth needs: `Depends(require("admin"))`
2. Two schemes, chosen per route: basic (username/password) and bearer
3. Privileges are named and attached to the user on every request
4. Handlers receive an AuthContext, anonymous or authenticated
"""

from spaced.auth.context import ADMIN, USER, AuthContext
from spaced.auth.hashing import derive, verify
from spaced.auth.identity import IdentityStore
from spaced.auth.sessions import SessionIssuer
from spaced.auth.policies import (
    AuthScheme,
    DEFAULT_SCHEME,
    require,
)

__all__ = [
    # Main interface
    "require",
    "AuthContext",
    "AuthScheme",
    "DEFAULT_SCHEME",
    "ADMIN",
    "USER",
    # Stores
    "IdentityStore",
    "SessionIssuer",
    # Hashing
    "derive",
    "verify",
]
