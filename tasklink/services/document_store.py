"""Document Store: SQLAlchemy implementations of the UserStore and TaskStore protocols.

Invariants:
    - Stores flush but NEVER commit; the calling operation commits once per request
    - pending_tasks is always reassigned through core.apply_pending_delta
    - A delta addressed to a missing user is a no-op (update-one semantics, no upsert)
    - Bulk task updates synchronize the session identity map
    - A users.email unique-index violation surfaces as DuplicateEmailError, not a driver error

Design Decisions:
    - Thin classes over one AsyncSession, created per operation (ADR: unit of work per request)
    - Bulk UPDATE for cascades instead of load-then-save: one statement per cascade
"""

import logging
from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from tasklink.core.domain_types import NO_OWNER, UNASSIGNED_NAME, PendingDelta
from tasklink.core.enforce_relationships import apply_pending_delta
from tasklink.core.errors import DuplicateEmailError
from tasklink.core.query_params import QuerySpec
from tasklink.models.task import Task
from tasklink.models.user import User
from tasklink.services.query_translator import (
    TASKS, USERS, build_count, build_select,
)

logger = logging.getLogger(__name__)


class SqlUserStore:
    """users collection."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(self, spec: QuerySpec) -> list[User]:
        result = await self.db.execute(build_select(USERS, spec))
        return list(result.scalars().all())

    async def count(self, spec: QuerySpec) -> int:
        result = await self.db.execute(build_count(USERS, spec))
        return result.scalar_one()

    async def find_by_id(self, user_id: str) -> User | None:
        return await self.db.get(User, user_id)

    async def find_by_email(
        self, email: str, exclude_id: str | None = None,
    ) -> User | None:
        query = select(User).where(User.email == email)
        if exclude_id is not None:
            query = query.where(User.id != exclude_id)
        result = await self.db.execute(query)
        return result.scalars().first()

    async def insert(
        self, name: str, email: str, pending_tasks: list[str],
    ) -> User:
        user = User(name=name, email=email, pending_tasks=list(pending_tasks))
        self.db.add(user)
        await self._flush_unique_email(email)
        return user

    async def replace(
        self, user: User, name: str, email: str, pending_tasks: list[str],
    ) -> None:
        user.name = name
        user.email = email
        user.pending_tasks = list(pending_tasks)
        await self._flush_unique_email(email)

    async def _flush_unique_email(self, email: str) -> None:
        """Flush; a unique-index violation means a concurrent request took the email."""
        try:
            await self.db.flush()
        except IntegrityError:
            raise DuplicateEmailError(email)

    async def delete(self, user: User) -> None:
        await self.db.delete(user)
        await self.db.flush()

    async def apply_pending(self, delta: PendingDelta) -> None:
        user = await self.find_by_id(delta.user_id)
        if user is None:
            logger.debug(
                f"Pending delta for missing user skipped: {delta}",
                extra={"user_id": delta.user_id, "task_id": delta.task_id},
            )
            return
        user.pending_tasks = apply_pending_delta(user.pending_tasks or [], delta)
        await self.db.flush()


class SqlTaskStore:
    """tasks collection."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(self, spec: QuerySpec) -> list[Task]:
        result = await self.db.execute(build_select(TASKS, spec))
        return list(result.scalars().all())

    async def count(self, spec: QuerySpec) -> int:
        result = await self.db.execute(build_count(TASKS, spec))
        return result.scalar_one()

    async def find_by_id(self, task_id: str) -> Task | None:
        return await self.db.get(Task, task_id)

    async def find_by_ids(self, task_ids: Sequence[str]) -> list[Task]:
        if not task_ids:
            return []
        result = await self.db.execute(
            select(Task).where(Task.id.in_(list(task_ids))),
        )
        return list(result.scalars().all())

    async def insert(self, **fields: object) -> Task:
        task = Task(**fields)
        self.db.add(task)
        await self.db.flush()
        return task

    async def replace(self, task: Task, **fields: object) -> None:
        for key, value in fields.items():
            setattr(task, key, value)
        await self.db.flush()

    async def delete(self, task: Task) -> None:
        await self.db.delete(task)
        await self.db.flush()

    async def assign(self, task: Task, owner_id: str, owner_name: str) -> None:
        task.assigned_user = owner_id
        task.assigned_user_name = owner_name
        await self.db.flush()

    async def unassign_owned_by(
        self, owner_id: str, task_ids: Sequence[str] | None = None,
    ) -> int:
        """Clear the owner on tasks still pointing at owner_id (optionally only task_ids)."""
        stmt = update(Task).where(Task.assigned_user == owner_id)
        if task_ids is not None:
            if not task_ids:
                return 0
            stmt = stmt.where(Task.id.in_(list(task_ids)))
        result = await self.db.execute(
            stmt.values(assigned_user=NO_OWNER, assigned_user_name=UNASSIGNED_NAME)
            .execution_options(synchronize_session="fetch"),
        )
        return result.rowcount or 0

    async def rename_owner(self, owner_id: str, name: str) -> int:
        result = await self.db.execute(
            update(Task)
            .where(Task.assigned_user == owner_id)
            .values(assigned_user_name=name)
            .execution_options(synchronize_session="fetch"),
        )
        return result.rowcount or 0
