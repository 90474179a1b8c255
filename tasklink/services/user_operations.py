"""User Operations: list, get, create, replace, delete with pending-task bookkeeping.

Invariants:
    - Every validation runs BEFORE the first write; a rejected request persists nothing
    - Tasks listed in pendingTasks must exist, be well-formed ids, and (when newly added) be uncompleted
    - Taking over a task pulls it from its previous owner first (steal)
    - Tasks dropped from pendingTasks are unassigned only if still owned by this user
    - After a replace, every task owned by the user carries the user's current name
    - Deleting a user unassigns every task that referenced it
    - Exactly one commit per successful write

Design Decisions:
    - Silent steal over conflict error: assigning a task owned by someone else reassigns it
      (ADR: keeps the behaviour existing clients rely on)
    - Single commit per request gives the relationship updates all-or-nothing semantics
      on stores with transactions (ADR: no partial relationship writes)
"""

import logging
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from tasklink.core.domain_types import canonical_id
from tasklink.core.enforce_relationships import (
    dedupe_ids, diff_assignment, plan_steal, validate_assignable,
)
from tasklink.core.errors import (
    DuplicateEmailError, ErrorContext, MalformedIdError,
    RequiredFieldError, ResourceNotFoundError,
)
from tasklink.core.query_params import QuerySpec
from tasklink.core.repository_protocols import TaskLike, TaskStore, UserStore
from tasklink.models.user import User
from tasklink.schemas.user import UserWrite
from tasklink.services.document_store import SqlTaskStore, SqlUserStore

logger = logging.getLogger(__name__)


def parse_user_id(raw: str) -> str:
    user_id = canonical_id(raw)
    if user_id is None:
        raise MalformedIdError("Bad Request: invalid user id", raw)
    return user_id


class UserOperations:
    """Resource operations for /users."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.users: UserStore = SqlUserStore(db)
        self.tasks: TaskStore = SqlTaskStore(db)

    # ─── Reads ───────────────────────────────────────────────────

    async def list(self, spec: QuerySpec) -> list[User] | int:
        """Filtered page of users, or the filtered count when spec.count."""
        if spec.count:
            return await self.users.count(spec)
        return await self.users.find(spec)

    async def get(self, raw_id: str) -> User:
        user = await self.users.find_by_id(parse_user_id(raw_id))
        if user is None:
            raise ResourceNotFoundError("User not found")
        return user

    # ─── Writes ──────────────────────────────────────────────────

    async def create(self, body: UserWrite) -> User:
        _require_name_and_email(body)
        if await self.users.find_by_email(body.email):
            raise DuplicateEmailError(body.email)

        requested, tasks = await _load_requested_tasks(
            self.tasks, body.pending_tasks or [],
        )
        validate_assignable(tasks.values())

        user = await self.users.insert(body.name, body.email, requested)
        await _take_over(
            self.users, self.tasks, user.id, body.name,
            [tasks[tid] for tid in requested],
        )
        await self.db.commit()

        logger.info(
            f"User {user.id} created with {len(requested)} pending task(s)",
            extra={"user_id": user.id, "operation": "create_user"},
        )
        return user

    async def replace(self, raw_id: str, body: UserWrite) -> User:
        _require_name_and_email(body)
        user = await self.get(raw_id)
        if await self.users.find_by_email(body.email, exclude_id=user.id):
            raise DuplicateEmailError(body.email, ErrorContext(user_id=user.id))

        current = dedupe_ids(user.pending_tasks or [])
        incoming = body.pending_tasks if body.pending_tasks is not None else current
        requested, tasks = await _load_requested_tasks(self.tasks, incoming)

        to_assign, to_unassign = diff_assignment(current, requested)
        validate_assignable(
            (tasks[tid] for tid in to_assign),
            "Cannot add completed tasks to pendingTasks",
        )

        released = await self.tasks.unassign_owned_by(user.id, sorted(to_unassign))
        await _take_over(
            self.users, self.tasks, user.id, body.name,
            [tasks[tid] for tid in requested if tid in to_assign],
        )
        await self.users.replace(user, body.name, body.email, requested)
        await self.tasks.rename_owner(user.id, body.name)
        await self.db.commit()

        logger.info(
            f"User {user.id} updated: +{len(to_assign)} / -{released} pending task(s)",
            extra={"user_id": user.id, "operation": "replace_user"},
        )
        return user

    async def delete(self, raw_id: str) -> None:
        user = await self.get(raw_id)
        await self.users.delete(user)
        released = await self.tasks.unassign_owned_by(user.id)
        await self.db.commit()
        logger.info(
            f"User {user.id} deleted, {released} task(s) unassigned",
            extra={"user_id": user.id, "operation": "delete_user"},
        )


def _require_name_and_email(body: UserWrite) -> None:
    if not body.name or not body.email:
        raise RequiredFieldError(["name", "email"])


# ─── Relationship helpers ────────────────────────────────────────
# Module level: inside UserOperations the name "list" is the list() method.

async def _load_requested_tasks(
    tasks: TaskStore, raw_ids: Iterable[object],
) -> tuple[list[str], dict[str, TaskLike]]:
    """Canonicalize, de-duplicate and load the tasks named in pendingTasks."""
    requested = []
    for raw in dedupe_ids(raw_ids):
        task_id = canonical_id(raw)
        if task_id is None:
            raise MalformedIdError(
                "Bad Request: pendingTasks contains invalid task id", raw,
            )
        requested.append(task_id)
    requested = dedupe_ids(requested)

    found = {t.id: t for t in await tasks.find_by_ids(requested)}
    if len(found) != len(requested):
        raise ResourceNotFoundError(
            "One or more tasks in pendingTasks do not exist",
        )
    return requested, found


async def _take_over(
    users: UserStore, tasks: TaskStore,
    user_id: str, name: str, owned: list[TaskLike],
) -> None:
    """Assign each task to user_id, pulling it from its previous owner first."""
    for task in owned:
        steal = plan_steal(task, user_id)
        if steal is not None:
            logger.debug(
                f"Task {task.id} taken from user {steal.user_id}",
                extra={"user_id": user_id, "task_id": task.id},
            )
            await users.apply_pending(steal)
        await tasks.assign(task, user_id, name)
