"""
Generic resource router.

Describe a resource once (its handlers, the privilege each operation
needs and the scheme that reads credentials) and get the standard
endpoints:

    GET    /api/{name}              list
    GET    /api/{name}/{id}         get
    POST   /api/{name}              create
    PUT    /api/{name}/{id}         update
    DELETE /api/{name}/{id}         delete
    GET    /api/{privilege}/{name}  extra list (e.g. "my questions")

Handlers are async callables receiving the request's AuthContext first:

    list(ctx)               -> list[entity]
    get(ctx, id)            -> entity
    create(ctx, body)       -> entity
    update(ctx, id, body)   -> entity
    delete(ctx, id)         -> None
    extra_list(ctx)         -> list[entity]

Results go out through `present`; domain errors keep their status code,
anything else is reported and answered with a plain 400.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable

from fastapi import APIRouter, Depends, HTTPException, Response
from pydantic import BaseModel

from spaced.auth.context import AuthContext
from spaced.auth.policies import DEFAULT_SCHEME, AuthScheme, require
from spaced.core.errors import DomainError, IntegrityError
from spaced.integrations.sentry import capture_exception

logger = logging.getLogger(__name__)

GENERIC_ERROR = "Bad request"


class Operation(str, Enum):
    LIST = "list"
    GET = "get"
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    EXTRA_LIST = "extra_list"


MANDATORY_CRUD = (Operation.LIST, Operation.GET, Operation.CREATE, Operation.DELETE)


Handler = Callable[..., Awaitable[Any]]


@dataclass
class Resource:
    """A named resource and everything needed to route it."""

    name: str
    present: Callable[[Any], BaseModel]

    list: Handler | None = None
    get: Handler | None = None
    create: Handler | None = None
    update: Handler | None = None
    delete: Handler | None = None
    extra_list: Handler | None = None

    create_schema: type[BaseModel] | None = None
    update_schema: type[BaseModel] | None = None

    # Operation -> privilege name; absent means no auth
    permissions: dict[Operation, str] = field(default_factory=dict)
    # Operation -> scheme; absent means DEFAULT_SCHEME
    schemes: dict[Operation, AuthScheme] = field(default_factory=dict)

    crud: bool = True

    def handler(self, op: Operation) -> Handler | None:
        return getattr(self, op.value)

    def privilege_for(self, op: Operation) -> str | None:
        return self.permissions.get(op)

    def scheme_for(self, op: Operation) -> AuthScheme:
        return self.schemes.get(op, DEFAULT_SCHEME)

    def dependency(self, op: Operation) -> Callable:
        return require(self.privilege_for(op), self.scheme_for(op))

    def validate(self) -> None:
        if self.crud:
            missing = [op.value for op in MANDATORY_CRUD if self.handler(op) is None]
            if missing:
                raise ValueError(f"Resource {self.name!r} is missing handlers: {missing}")
        if self.extra_list is not None and not self.privilege_for(Operation.EXTRA_LIST):
            raise ValueError(f"Resource {self.name!r}: extra list needs a privilege")


# =============================================================================
# Dispatch
# =============================================================================


async def call_handler(resource_name: str, handler: Handler, *args: Any) -> Any:
    """
    Invoke a handler and translate its failures into HTTP errors.
    """
    try:
        return await handler(*args)
    except DomainError as e:
        if isinstance(e, IntegrityError):
            logger.error(f"{resource_name}: {e.message}")
        else:
            logger.debug(f"{resource_name}: {e!r}")
        raise e.to_http()
    except HTTPException:
        raise
    except Exception as e:
        capture_exception(e, resource=resource_name)
        raise HTTPException(status_code=400, detail=GENERIC_ERROR)


# =============================================================================
# Router Factory
# =============================================================================


def build_router(resource: Resource, prefix: str = "/api") -> APIRouter:
    """Register the endpoints for every handler the resource supplies."""
    resource.validate()

    router = APIRouter(prefix=prefix, tags=[resource.name])
    path = f"/{resource.name}"
    name = resource.name
    present = resource.present

    if resource.list is not None:
        list_handler = resource.list

        @router.get(path, name=f"list_{name}")
        async def list_items(ctx: AuthContext = Depends(resource.dependency(Operation.LIST))):
            items = await call_handler(name, list_handler, ctx)
            return [present(item) for item in items]

    if resource.extra_list is not None:
        extra_handler = resource.extra_list
        privilege = resource.privilege_for(Operation.EXTRA_LIST)

        @router.get(f"/{privilege}{path}", name=f"list_{privilege}_{name}")
        async def list_own_items(ctx: AuthContext = Depends(resource.dependency(Operation.EXTRA_LIST))):
            items = await call_handler(name, extra_handler, ctx)
            return [present(item) for item in items]

    if resource.get is not None:
        get_handler = resource.get

        @router.get(f"{path}/{{id}}", name=f"get_{name}")
        async def get_item(id: str, ctx: AuthContext = Depends(resource.dependency(Operation.GET))):
            return present(await call_handler(name, get_handler, ctx, id))

    if resource.create is not None:
        create_handler = resource.create
        create_schema = resource.create_schema or dict

        @router.post(path, name=f"create_{name}")
        async def create_item(
            body: create_schema,
            ctx: AuthContext = Depends(resource.dependency(Operation.CREATE)),
        ):
            return present(await call_handler(name, create_handler, ctx, body))

    if resource.update is not None:
        update_handler = resource.update
        update_schema = resource.update_schema or dict

        @router.put(f"{path}/{{id}}", name=f"update_{name}")
        async def update_item(
            id: str,
            body: update_schema,
            ctx: AuthContext = Depends(resource.dependency(Operation.UPDATE)),
        ):
            return present(await call_handler(name, update_handler, ctx, id, body))

    if resource.delete is not None:
        delete_handler = resource.delete

        @router.delete(f"{path}/{{id}}", status_code=204, name=f"delete_{name}")
        async def delete_item(id: str, ctx: AuthContext = Depends(resource.dependency(Operation.DELETE))):
            await call_handler(name, delete_handler, ctx, id)
            return Response(status_code=204)

    return router
