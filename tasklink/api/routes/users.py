"""Users Routes: /users list, fetch, create, replace, delete.

Invariants:
    - List answers {"message": "OK", "data": [users] | count}
    - POST answers 201, DELETE answers 204 with an empty body
    - Relationship side effects happen in UserOperations, never here
"""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tasklink.api.routes.route_helpers import (
    item_projection, list_query_spec, render_many, server_error_boundary,
)
from tasklink.core.query_params import Projection, QuerySpec, apply_projection
from tasklink.infrastructure.database import get_db
from tasklink.schemas.envelope import envelope
from tasklink.schemas.user import UserDocument, UserWrite
from tasklink.services.user_operations import UserOperations

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/users", tags=["users"])


def _render(user) -> dict:
    return UserDocument.model_validate(user).render()


@router.get("")
async def list_users(
    spec: QuerySpec = Depends(list_query_spec),
    db: AsyncSession = Depends(get_db),
):
    """List users, or count them with ?count=true."""
    with server_error_boundary("fetching users"):
        result = await UserOperations(db).list(spec)
        if isinstance(result, int):
            return envelope("OK", result)
        return envelope("OK", render_many(result, _render, spec.projection))


@router.get("/{user_id}")
async def get_user(
    user_id: str,
    projection: Projection = Depends(item_projection),
    db: AsyncSession = Depends(get_db),
):
    with server_error_boundary("fetching user"):
        user = await UserOperations(db).get(user_id)
        return envelope("OK", apply_projection(_render(user), projection))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_user(body: UserWrite, db: AsyncSession = Depends(get_db)):
    """Create a user, optionally taking over the tasks in pendingTasks."""
    with server_error_boundary("creating user"):
        user = await UserOperations(db).create(body)
        return envelope("User created", _render(user))


@router.put("/{user_id}")
async def replace_user(
    user_id: str, body: UserWrite, db: AsyncSession = Depends(get_db),
):
    with server_error_boundary("updating user"):
        user = await UserOperations(db).replace(user_id, body)
        return envelope("User updated", _render(user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: str, db: AsyncSession = Depends(get_db)):
    """Delete a user and unassign every task that referenced it."""
    with server_error_boundary("deleting user"):
        await UserOperations(db).delete(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
