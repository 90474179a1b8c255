"""Tasks Routes: /tasks list, fetch, create, replace, delete.

Invariants:
    - List answers {"message": "OK", "data": [tasks] | count}
    - POST answers 201, DELETE answers 204 with an empty body
    - Owner bookkeeping happens in TaskOperations, never here
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
from tasklink.schemas.task import TaskDocument, TaskWrite
from tasklink.services.task_operations import TaskOperations

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/tasks", tags=["tasks"])


def _render(task) -> dict:
    return TaskDocument.model_validate(task).render()


@router.get("")
async def list_tasks(
    spec: QuerySpec = Depends(list_query_spec),
    db: AsyncSession = Depends(get_db),
):
    with server_error_boundary("fetching tasks"):
        result = await TaskOperations(db).list(spec)
        if isinstance(result, int):
            return envelope("OK", result)
        return envelope("OK", render_many(result, _render, spec.projection))


@router.get("/{task_id}")
async def get_task(
    task_id: str,
    projection: Projection = Depends(item_projection),
    db: AsyncSession = Depends(get_db),
):
    with server_error_boundary("fetching task"):
        task = await TaskOperations(db).get(task_id)
        return envelope("OK", apply_projection(_render(task), projection))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_task(body: TaskWrite, db: AsyncSession = Depends(get_db)):
    """Create a task; an uncompleted assigned task joins its owner's pendingTasks."""
    with server_error_boundary("creating task"):
        task = await TaskOperations(db).create(body)
        return envelope("Task created", _render(task))


@router.put("/{task_id}")
async def replace_task(
    task_id: str, body: TaskWrite, db: AsyncSession = Depends(get_db),
):
    """Replace a task and move it between owners' pending sets as needed."""
    with server_error_boundary("updating task"):
        task = await TaskOperations(db).replace(task_id, body)
        return envelope("Task updated", _render(task))


@router.delete("/{task_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_task(task_id: str, db: AsyncSession = Depends(get_db)):
    with server_error_boundary("deleting task"):
        await TaskOperations(db).delete(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
