"""Service test fixtures: seeded users and tasks written straight through the ORM.

Design Decisions:
    - Seeds bypass the operations so each test controls the starting state,
      including deliberately inconsistent states
    - fetch() uses populate_existing: identity-map objects are refreshed
      in place, never expired (expired attributes would lazy-load outside a greenlet)
"""

from datetime import datetime, timezone

import pytest

from tasklink.models.task import Task
from tasklink.models.user import User


DEADLINE = datetime(2025, 1, 1, tzinfo=timezone.utc)


@pytest.fixture
def fetch(test_db):
    """Reload one row into the session, refreshing the cached object."""
    async def _fetch(model, entity_id):
        return await test_db.get(model, entity_id, populate_existing=True)
    return _fetch


@pytest.fixture
def make_user(test_db):
    async def _make(name="Ann", email=None, pending_tasks=None):
        user = User(
            name=name,
            email=email or f"{name.lower()}@x.com",
            pending_tasks=list(pending_tasks or []),
        )
        test_db.add(user)
        await test_db.commit()
        return user
    return _make


@pytest.fixture
def make_task(test_db):
    async def _make(name="T1", owner=None, completed=False, pending=True):
        """Seed a task; an uncompleted owned task also joins owner.pending_tasks."""
        task = Task(
            name=name,
            deadline=DEADLINE,
            completed=completed,
            assigned_user=owner.id if owner else "",
            assigned_user_name=owner.name if owner else "unassigned",
        )
        test_db.add(task)
        await test_db.flush()
        if owner is not None and pending and not completed:
            owner.pending_tasks = [*owner.pending_tasks, task.id]
        await test_db.commit()
        return task
    return _make
