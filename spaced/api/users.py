# =============================================================================
# User API Routes
# =============================================================================
#
# Endpoints:
#   GET    /api/users          - List users (admin)
#   GET    /api/users/{id}     - Get a user (self or admin)
#   POST   /api/users          - Register
#   DELETE /api/users/{id}     - Soft-delete a user (admin)
#   POST   /api/users/login    - Basic credentials -> bearer token
#   POST   /api/users/logout   - Close the current bearer session
#
# =============================================================================

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel, Field

from spaced.api.resources import Operation, Resource, build_router, call_handler
from spaced.auth import ADMIN, USER, AuthContext, AuthScheme, require
from spaced.auth.identity import IdentityStore
from spaced.auth.sessions import SessionIssuer
from spaced.core.models import User, UserView


class UserCreate(BaseModel):
    """User registration data."""
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1)


def users_resource(identities: IdentityStore) -> Resource:
    async def list_users(ctx: AuthContext) -> list[User]:
        return await identities.list_users()

    async def get_user(ctx: AuthContext, user_id: str) -> User:
        return await identities.get_user(user_id, ctx)

    async def create_user(ctx: AuthContext, body: UserCreate) -> User:
        return await identities.create_user(body.username, body.password)

    async def delete_user(ctx: AuthContext, user_id: str) -> None:
        await identities.delete_user(user_id)

    return Resource(
        name="users",
        present=User.present,
        list=list_users,
        get=get_user,
        create=create_user,
        delete=delete_user,
        create_schema=UserCreate,
        permissions={
            Operation.LIST: ADMIN,
            Operation.GET: USER,
            Operation.DELETE: ADMIN,
        },
    )


def build_users_router(identities: IdentityStore, sessions: SessionIssuer) -> APIRouter:
    router = build_router(users_resource(identities))

    @router.post("/users/login", response_model=UserView)
    async def login(ctx: AuthContext = Depends(require(USER, AuthScheme.BASIC))):
        """
        Exchange basic credentials for a bearer token.

        The returned identity carries the token to use on every other route.
        """
        return ctx.user.present()

    @router.post("/users/logout", status_code=204)
    async def logout(ctx: AuthContext = Depends(require(USER, AuthScheme.BEARER))):
        await call_handler("users", sessions.logout, ctx.user.token)
        return Response(status_code=204)

    return router
