"""Task Operations: list, get, create, replace, delete with owner bookkeeping.

Invariants:
    - A task created completed cannot be created assigned
    - A completed task cannot change owner; a write that completes a task cannot give it a new owner
    - An explicit assignedUser must reference an existing user; an omitted one keeps the current owner
    - assignedUserName is always derived from the owner; a caller value is only cross-checked
    - Owner changes are applied as core.plan_owner_change deltas after the task write
    - Exactly one commit per successful write
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from tasklink.core.domain_types import NO_OWNER, canonical_id
from tasklink.core.enforce_relationships import (
    check_assigned_user_name,
    check_completed_reassignment,
    plan_owner_change,
    resolve_assigned_user_name,
)
from tasklink.core.errors import (
    ErrorContext, MalformedIdError, RequiredFieldError,
    ResourceNotFoundError, UnknownAssignedUserError,
)
from tasklink.core.query_params import QuerySpec
from tasklink.core.repository_protocols import TaskStore, UserStore
from tasklink.models.task import Task
from tasklink.models.user import User
from tasklink.schemas.task import TaskWrite
from tasklink.services.document_store import SqlTaskStore, SqlUserStore

logger = logging.getLogger(__name__)


def parse_task_id(raw: str) -> str:
    task_id = canonical_id(raw)
    if task_id is None:
        raise MalformedIdError("Bad Request: invalid task id", raw)
    return task_id


def _parse_requested_owner(raw: str | None) -> str | None:
    """None = not sent, "" = explicitly unassigned, otherwise a canonical user id."""
    if raw is None or raw == NO_OWNER:
        return raw
    owner_id = canonical_id(raw)
    if owner_id is None:
        raise MalformedIdError("Bad Request: invalid assignedUser id", raw)
    return owner_id


class TaskOperations:
    """Resource operations for /tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users: UserStore = SqlUserStore(db)
        self.tasks: TaskStore = SqlTaskStore(db)

    async def list(self, spec: QuerySpec) -> list[Task] | int:
        if spec.count:
            return await self.tasks.count(spec)
        return await self.tasks.find(spec)

    async def get(self, raw_id: str) -> Task:
        task = await self.tasks.find_by_id(parse_task_id(raw_id))
        if task is None:
            raise ResourceNotFoundError("Task not found")
        return task

    async def create(self, body: TaskWrite) -> Task:
        _require_name_and_deadline(body)
        requested_owner = _parse_requested_owner(body.assigned_user)
        check_completed_reassignment(
            currently_completed=False,
            current_owner=NO_OWNER,
            requested_owner=requested_owner,
            will_be_completed=body.completed,
        )
        owner = await self._resolve_owner(requested_owner, strict=True)
        check_assigned_user_name(body.assigned_user_name, owner)

        task = await self.tasks.insert(
            name=body.name,
            description=body.description,
            deadline=body.deadline,
            completed=body.completed,
            assigned_user=owner.id if owner else NO_OWNER,
            assigned_user_name=resolve_assigned_user_name(owner),
        )
        await self._apply_owner_change(task, NO_OWNER)
        await self.db.commit()

        logger.info(
            f"Task {task.id} created",
            extra={"task_id": task.id, "user_id": task.assigned_user or None,
                   "operation": "create_task"},
        )
        return task

    async def replace(self, raw_id: str, body: TaskWrite) -> Task:
        _require_name_and_deadline(body)
        task = await self.get(raw_id)
        previous_owner = task.assigned_user or NO_OWNER

        requested_owner = _parse_requested_owner(body.assigned_user)
        check_completed_reassignment(
            currently_completed=task.completed,
            current_owner=previous_owner,
            requested_owner=requested_owner,
            will_be_completed=body.completed,
        )
        if requested_owner is None:
            owner = await self._resolve_owner(previous_owner, strict=False)
        else:
            owner = await self._resolve_owner(requested_owner, strict=True)
        check_assigned_user_name(body.assigned_user_name, owner)

        await self.tasks.replace(
            task,
            name=body.name,
            description=body.description,
            deadline=body.deadline,
            completed=body.completed,
            assigned_user=owner.id if owner else NO_OWNER,
            assigned_user_name=resolve_assigned_user_name(owner),
        )
        await self._apply_owner_change(task, previous_owner)
        await self.db.commit()

        logger.info(
            f"Task {task.id} updated (owner {previous_owner or '-'} -> "
            f"{task.assigned_user or '-'})",
            extra={"task_id": task.id, "operation": "replace_task"},
        )
        return task

    async def delete(self, raw_id: str) -> None:
        task = await self.get(raw_id)
        owner = task.assigned_user
        await self.tasks.delete(task)
        # new owner "" -> only the removal from the former owner is planned
        for delta in plan_owner_change(task.id, owner, NO_OWNER, task.completed):
            await self.users.apply_pending(delta)
        await self.db.commit()
        logger.info(
            f"Task {task.id} deleted",
            extra={"task_id": task.id, "user_id": owner or None,
                   "operation": "delete_task"},
        )

    # ─── Helpers ─────────────────────────────────────────────────

    async def _resolve_owner(self, owner_id: str, *, strict: bool) -> User | None:
        """Load the owner. strict: a missing user is an error, otherwise it means unassigned."""
        if not owner_id:
            return None
        owner = await self.users.find_by_id(owner_id)
        if owner is None and strict:
            raise UnknownAssignedUserError(owner_id, ErrorContext(user_id=owner_id))
        if owner is None:
            logger.warning(
                f"Task owner {owner_id} no longer exists, task becomes unassigned",
                extra={"user_id": owner_id},
            )
        return owner

    async def _apply_owner_change(self, task: Task, previous_owner: str) -> None:
        for delta in plan_owner_change(
            task.id, previous_owner, task.assigned_user, task.completed,
        ):
            await self.users.apply_pending(delta)


def _require_name_and_deadline(body: TaskWrite) -> None:
    if not body.name or body.deadline is None:
        raise RequiredFieldError(["name", "deadline"])
