"""Relationship Enforcement: tests for the pure pending-set rules.

Tests cover:
    - diff_assignment is disjoint and reconstructs the requested set
    - apply_pending_delta has add-to-set / pull semantics
    - validate_assignable rejects completed tasks
    - assignedUserName resolution and cross-check
    - completed-task reassignment rules
    - ownership transfer and steal planning
"""

from dataclasses import dataclass

import pytest

from tasklink.core.domain_types import PendingAction, PendingDelta
from tasklink.core.enforce_relationships import (
    apply_pending_delta,
    check_assigned_user_name,
    check_completed_reassignment,
    dedupe_ids,
    diff_assignment,
    plan_owner_change,
    plan_steal,
    resolve_assigned_user_name,
    validate_assignable,
)
from tasklink.core.errors import (
    AssignedUserNameMismatchError,
    CompletedTaskAssignmentError,
)


@dataclass
class _User:
    id: str
    name: str
    email: str = "u@x.com"
    pending_tasks: list = None


@dataclass
class _Task:
    id: str
    completed: bool = False
    assigned_user: str = ""
    assigned_user_name: str = "unassigned"
    name: str = "task"


# ─── diff_assignment ─────────────────────────────────────────────

def test_diff_assignment_splits_both_directions():
    to_assign, to_unassign = diff_assignment(["a", "b"], ["b", "c"])
    assert to_assign == {"c"}
    assert to_unassign == {"a"}


def test_diff_assignment_results_are_disjoint_and_reconstruct_requested():
    previous, requested = {"a", "b", "c"}, {"c", "d", "e"}
    to_assign, to_unassign = diff_assignment(previous, requested)
    assert not to_assign & to_unassign
    assert (previous - to_unassign) | to_assign == requested


def test_diff_assignment_of_identical_sets_is_empty():
    assert diff_assignment(["a"], ["a"]) == (set(), set())


def test_dedupe_ids_keeps_first_seen_order():
    assert dedupe_ids(["b", "a", "b", "c", "a"]) == ["b", "a", "c"]


# ─── apply_pending_delta ─────────────────────────────────────────

def test_add_delta_appends_once():
    delta = PendingDelta("u1", "t2", PendingAction.ADD)
    assert apply_pending_delta(["t1"], delta) == ["t1", "t2"]
    assert apply_pending_delta(["t1", "t2"], delta) == ["t1", "t2"]


def test_remove_delta_pulls_every_occurrence():
    delta = PendingDelta("u1", "t1", PendingAction.REMOVE)
    assert apply_pending_delta(["t1", "t2", "t1"], delta) == ["t2"]


def test_remove_delta_on_absent_id_is_noop():
    delta = PendingDelta("u1", "t9", PendingAction.REMOVE)
    assert apply_pending_delta(["t1"], delta) == ["t1"]


def test_apply_pending_delta_does_not_mutate_input():
    pending = ["t1"]
    apply_pending_delta(pending, PendingDelta("u1", "t2", PendingAction.ADD))
    assert pending == ["t1"]


# ─── validate_assignable ─────────────────────────────────────────

def test_validate_assignable_accepts_open_tasks():
    validate_assignable([_Task("t1"), _Task("t2")])


def test_validate_assignable_rejects_any_completed_task():
    with pytest.raises(CompletedTaskAssignmentError) as exc:
        validate_assignable([_Task("t1"), _Task("t2", completed=True)])
    assert exc.value.task_ids == ["t2"]
    assert exc.value.http_status == 400


def test_validate_assignable_uses_custom_message():
    with pytest.raises(CompletedTaskAssignmentError, match="pendingTasks"):
        validate_assignable(
            [_Task("t1", completed=True)],
            "Cannot add completed tasks to pendingTasks",
        )


# ─── assignedUserName ────────────────────────────────────────────

def test_resolve_name_of_user():
    assert resolve_assigned_user_name(_User("u1", "Ann")) == "Ann"


def test_resolve_name_without_user_is_unassigned():
    assert resolve_assigned_user_name(None) == "unassigned"


def test_name_check_ignores_omitted_value():
    check_assigned_user_name(None, _User("u1", "Ann"))


def test_name_check_accepts_matching_value():
    check_assigned_user_name("Ann", _User("u1", "Ann"))
    check_assigned_user_name("unassigned", None)


def test_name_check_rejects_mismatch():
    with pytest.raises(AssignedUserNameMismatchError) as exc:
        check_assigned_user_name("Bob", _User("u1", "Ann"))
    assert exc.value.expected == "Ann"


def test_name_check_rejects_name_without_user():
    with pytest.raises(AssignedUserNameMismatchError):
        check_assigned_user_name("Ann", None)


# ─── check_completed_reassignment ────────────────────────────────

def test_completed_task_cannot_change_owner():
    with pytest.raises(CompletedTaskAssignmentError, match="already completed"):
        check_completed_reassignment(
            currently_completed=True, current_owner="u1",
            requested_owner="u2", will_be_completed=True,
        )


def test_completed_task_cannot_be_cleared_by_task_write():
    with pytest.raises(CompletedTaskAssignmentError):
        check_completed_reassignment(
            currently_completed=True, current_owner="u1",
            requested_owner="", will_be_completed=True,
        )


def test_completed_task_keeps_owner_when_omitted_or_same():
    for requested in (None, "u1"):
        check_completed_reassignment(
            currently_completed=True, current_owner="u1",
            requested_owner=requested, will_be_completed=True,
        )


def test_completing_write_cannot_establish_new_owner():
    with pytest.raises(CompletedTaskAssignmentError, match="Cannot assign a completed task"):
        check_completed_reassignment(
            currently_completed=False, current_owner="",
            requested_owner="u1", will_be_completed=True,
        )


def test_completing_write_may_keep_or_clear_owner():
    check_completed_reassignment(
        currently_completed=False, current_owner="u1",
        requested_owner="u1", will_be_completed=True,
    )
    check_completed_reassignment(
        currently_completed=False, current_owner="u1",
        requested_owner="", will_be_completed=True,
    )


def test_reopened_task_may_change_owner_only_if_it_was_open():
    check_completed_reassignment(
        currently_completed=False, current_owner="u1",
        requested_owner="u2", will_be_completed=False,
    )


# ─── plan_owner_change ───────────────────────────────────────────

def test_transfer_removes_from_old_and_adds_to_new():
    deltas = plan_owner_change("t1", "a", "b", completed=False)
    assert deltas == [
        PendingDelta("a", "t1", PendingAction.REMOVE),
        PendingDelta("b", "t1", PendingAction.ADD),
    ]


def test_same_owner_open_task_is_readded_idempotently():
    assert plan_owner_change("t1", "a", "a", completed=False) == [
        PendingDelta("a", "t1", PendingAction.ADD),
    ]


def test_completing_evicts_from_owner_without_unassigning():
    assert plan_owner_change("t1", "a", "a", completed=True) == [
        PendingDelta("a", "t1", PendingAction.REMOVE),
    ]


def test_unassign_only_removes_from_previous_owner():
    assert plan_owner_change("t1", "a", "", completed=False) == [
        PendingDelta("a", "t1", PendingAction.REMOVE),
    ]


def test_unowned_to_unowned_plans_nothing():
    assert plan_owner_change("t1", "", "", completed=False) == []


def test_transfer_never_leaves_task_in_both_sets():
    pending = {"a": ["t1"], "b": []}
    for delta in plan_owner_change("t1", "a", "b", completed=False):
        pending[delta.user_id] = apply_pending_delta(pending[delta.user_id], delta)
    assert pending == {"a": [], "b": ["t1"]}


# ─── plan_steal ──────────────────────────────────────────────────

def test_steal_from_other_owner():
    task = _Task("t1", assigned_user="a")
    assert plan_steal(task, "b") == PendingDelta("a", "t1", PendingAction.REMOVE)


def test_no_steal_from_self_or_from_nobody():
    assert plan_steal(_Task("t1", assigned_user="b"), "b") is None
    assert plan_steal(_Task("t1"), "b") is None
