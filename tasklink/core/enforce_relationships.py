"""Relationship Enforcement: pure rules keeping User.pendingTasks and Task.assignedUser consistent.

Invariants:
    - Every function here is PURE: returns deltas or raises, never touches the store
    - Shell applies the returned PendingDelta list in order
    - An owner change always yields the removal from the old owner before the
      addition to the new one (a task id is never left in two pending sets)
    - A completed task is never the target of an ADD delta

Design Decisions:
    - Deltas (domain_types.PendingDelta) over ad-hoc dicts: one vocabulary for core and store
    - apply_pending_delta lives here rather than in the store so that
      $addToSet/$pull semantics have one definition (ADR: single source of truth)
"""

from typing import Iterable

from tasklink.core.domain_types import (
    NO_OWNER, UNASSIGNED_NAME, PendingAction, PendingDelta,
)
from tasklink.core.errors import (
    AssignedUserNameMismatchError,
    CompletedTaskAssignmentError,
)
from tasklink.core.repository_protocols import TaskLike, UserLike


# ─── Set arithmetic ──────────────────────────────────────────────

def dedupe_ids(ids: Iterable[object]) -> list[str]:
    """Stringify and de-duplicate, keeping first-seen order."""
    return list(dict.fromkeys(str(i) for i in ids))


def diff_assignment(
    previous: Iterable[str], requested: Iterable[str],
) -> tuple[set[str], set[str]]:
    """Return (to_assign, to_unassign) between two pending sets."""
    prev, req = set(previous), set(requested)
    return req - prev, prev - req


def apply_pending_delta(pending: list[str], delta: PendingDelta) -> list[str]:
    """Apply one delta to a pending list. ADD is add-to-set, REMOVE is pull."""
    if delta.action is PendingAction.ADD:
        if delta.task_id in pending:
            return list(pending)
        return [*pending, delta.task_id]
    return [tid for tid in pending if tid != delta.task_id]


# ─── Validation ──────────────────────────────────────────────────

def validate_assignable(
    tasks: Iterable[TaskLike],
    message: str = "Cannot assign completed tasks to user",
) -> None:
    """Raise if any task is completed."""
    completed = [t.id for t in tasks if t.completed]
    if completed:
        raise CompletedTaskAssignmentError(message, completed)


def resolve_assigned_user_name(user: UserLike | None) -> str:
    return user.name if user is not None else UNASSIGNED_NAME


def check_assigned_user_name(supplied: str | None, user: UserLike | None) -> None:
    """Reject a caller-supplied assignedUserName that disagrees with the resolved user.

    None means the caller did not send the field. The sentinel "unassigned" is
    only accepted when there is no user.
    """
    if supplied is None:
        return
    expected = resolve_assigned_user_name(user)
    if supplied != expected:
        raise AssignedUserNameMismatchError(supplied, expected)


def check_completed_reassignment(
    *,
    currently_completed: bool,
    current_owner: str,
    requested_owner: str | None,
    will_be_completed: bool,
) -> None:
    """Enforce that completed tasks cannot gain or change an owner.

    requested_owner None means the caller did not send assignedUser.
    """
    if requested_owner is None or requested_owner == current_owner:
        return
    if currently_completed:
        raise CompletedTaskAssignmentError(
            "Cannot reassign a task that is already completed",
        )
    if will_be_completed and requested_owner != NO_OWNER:
        raise CompletedTaskAssignmentError(
            "Cannot assign a completed task to a user",
        )


# ─── Ownership transfer ──────────────────────────────────────────

def plan_owner_change(
    task_id: str, previous_owner: str, new_owner: str, completed: bool,
) -> list[PendingDelta]:
    """Deltas required after a task write.

    - previous owner loses the task when the owner changed
    - new owner gains the task while it is pending
    - new owner loses the task once it is completed
    """
    deltas: list[PendingDelta] = []
    if previous_owner and previous_owner != new_owner:
        deltas.append(PendingDelta(previous_owner, task_id, PendingAction.REMOVE))
    if new_owner:
        action = PendingAction.REMOVE if completed else PendingAction.ADD
        deltas.append(PendingDelta(new_owner, task_id, action))
    return deltas


def plan_steal(task: TaskLike, new_owner: str) -> PendingDelta | None:
    """Removal needed before new_owner takes over a task someone else holds."""
    if task.assigned_user and task.assigned_user != new_owner:
        return PendingDelta(task.assigned_user, task.id, PendingAction.REMOVE)
    return None
