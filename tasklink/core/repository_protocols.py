"""Boundary Protocols: contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All store IO is accessed through Protocol types
    - Implementations provided by shell (services/document_store.py)

Design Decisions:
    - Protocol over ABC: structural subtyping, ORM models satisfy TaskLike/UserLike as-is
    - Store methods mirror document-store verbs (find, find_by_id, update-many, add-to-set, pull)
      so the relationship protocol reads the same regardless of backend
    - Store methods never commit; the resource operation owns the unit of work
"""

from datetime import datetime
from typing import Protocol, Sequence, TYPE_CHECKING

from tasklink.core.domain_types import PendingDelta

if TYPE_CHECKING:
    from tasklink.core.query_params import QuerySpec


class UserLike(Protocol):
    """Structural contract for a user as seen by the relationship rules."""
    id: str
    name: str
    email: str
    pending_tasks: list


class TaskLike(Protocol):
    """Structural contract for a task as seen by the relationship rules."""
    id: str
    name: str
    description: str
    deadline: datetime
    completed: bool
    assigned_user: str
    assigned_user_name: str


class UserStore(Protocol):
    """Contract for the users collection."""
    async def find(self, spec: "QuerySpec") -> list[UserLike]: ...
    async def count(self, spec: "QuerySpec") -> int: ...
    async def find_by_id(self, user_id: str) -> UserLike | None: ...
    async def find_by_email(
        self, email: str, exclude_id: str | None = None,
    ) -> UserLike | None: ...
    async def insert(
        self, name: str, email: str, pending_tasks: list[str],
    ) -> UserLike: ...
    async def replace(
        self, user: UserLike, name: str, email: str, pending_tasks: list[str],
    ) -> None: ...
    async def delete(self, user: UserLike) -> None: ...
    async def apply_pending(self, delta: PendingDelta) -> None: ...


class TaskStore(Protocol):
    """Contract for the tasks collection."""
    async def find(self, spec: "QuerySpec") -> list[TaskLike]: ...
    async def count(self, spec: "QuerySpec") -> int: ...
    async def find_by_id(self, task_id: str) -> TaskLike | None: ...
    async def find_by_ids(self, task_ids: Sequence[str]) -> list[TaskLike]: ...
    async def insert(self, **fields: object) -> TaskLike: ...
    async def replace(self, task: TaskLike, **fields: object) -> None: ...
    async def delete(self, task: TaskLike) -> None: ...
    async def assign(self, task: TaskLike, owner_id: str, owner_name: str) -> None: ...
    async def unassign_owned_by(
        self, owner_id: str, task_ids: Sequence[str] | None = None,
    ) -> int: ...
    async def rename_owner(self, owner_id: str, name: str) -> int: ...
