"""Resource Schemas: request normalization and rendered document shape.

Invariants:
    - email is trimmed and lower-cased, name is trimmed
    - omitted pendingTasks / assignedUser stay None (distinct from empty)
    - rendered documents use wire names (_id, pendingTasks, assignedUser, assignedUserName)
"""

from datetime import datetime, timezone
from types import SimpleNamespace

import pytest
from pydantic import ValidationError

from tasklink.schemas.envelope import envelope
from tasklink.schemas.task import TaskDocument, TaskWrite
from tasklink.schemas.user import UserDocument, UserWrite


# --- UserWrite ----------------------------------------------------------------

def test_user_write_normalizes_name_and_email():
    body = UserWrite.model_validate({"name": "  Ann ", "email": " Ann@X.com "})
    assert body.name == "Ann"
    assert body.email == "ann@x.com"


def test_user_write_pending_tasks_omitted_is_none():
    assert UserWrite.model_validate({"name": "Ann"}).pending_tasks is None


def test_user_write_pending_tasks_empty_list_is_kept():
    body = UserWrite.model_validate({"name": "Ann", "pendingTasks": []})
    assert body.pending_tasks == []


def test_user_write_rejects_non_list_pending_tasks():
    with pytest.raises(ValidationError):
        UserWrite.model_validate({"name": "Ann", "pendingTasks": "t1"})


# --- TaskWrite ----------------------------------------------------------------

def test_task_write_defaults():
    body = TaskWrite.model_validate({"name": "T1", "deadline": "2025-01-01"})
    assert body.description == ""
    assert body.completed is False
    assert body.assigned_user is None
    assert body.assigned_user_name is None


def test_task_write_date_only_deadline_is_utc_midnight():
    body = TaskWrite.model_validate({"name": "T1", "deadline": "2025-01-01"})
    assert body.deadline == datetime(2025, 1, 1, tzinfo=timezone.utc)


def test_task_write_explicit_empty_assigned_user_is_kept():
    body = TaskWrite.model_validate(
        {"name": "T1", "deadline": "2025-01-01", "assignedUser": ""},
    )
    assert body.assigned_user == ""


def test_task_write_rejects_unparseable_deadline():
    with pytest.raises(ValidationError):
        TaskWrite.model_validate({"name": "T1", "deadline": "someday"})


# --- Documents ----------------------------------------------------------------

def test_user_document_uses_wire_names():
    user = SimpleNamespace(id="u1", name="Ann", email="a@x.com", pending_tasks=["t1"])
    assert UserDocument.model_validate(user).render() == {
        "_id": "u1", "name": "Ann", "email": "a@x.com", "pendingTasks": ["t1"],
    }


def test_task_document_renders_naive_deadline_as_utc():
    task = SimpleNamespace(
        id="t1", name="T1", description="", deadline=datetime(2025, 1, 1),
        completed=False, assigned_user="", assigned_user_name="unassigned",
    )
    assert TaskDocument.model_validate(task).render() == {
        "_id": "t1",
        "name": "T1",
        "description": "",
        "deadline": "2025-01-01T00:00:00Z",
        "completed": False,
        "assignedUser": "",
        "assignedUserName": "unassigned",
    }


def test_envelope_shape():
    assert envelope("OK", [1]) == {"message": "OK", "data": [1]}
    assert envelope("Task not found") == {"message": "Task not found", "data": None}
