from datetime import datetime, timezone

import pytest

from app.core.task_rules import APPROVED, PENDING, REJECTED, apply_status, is_locked
from app.models.task import Task

NOW = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)


def make_task(status=PENDING):
    return Task(project_id=1, employee_id=7, task_name="Write report", status=status)


def test_approve_stamps_approver():
    task = make_task()
    task.rejection_reason = "old"

    assert apply_status(task, APPROVED, actor_id=1, now=NOW) is True
    assert task.status == APPROVED
    assert task.approved_by == 1
    assert task.approved_at == NOW
    assert task.rejection_reason is None


def test_reject_keeps_reason():
    task = make_task()

    apply_status(task, REJECTED, actor_id=2, rejection_reason="  hours look wrong ", now=NOW)
    assert task.status == REJECTED
    assert task.approved_by == 2
    assert task.approved_at == NOW
    assert task.rejection_reason == "hours look wrong"


def test_back_to_pending_clears_metadata():
    task = make_task()
    apply_status(task, REJECTED, actor_id=2, rejection_reason="no", now=NOW)

    assert apply_status(task, PENDING, actor_id=2) is True
    assert task.approved_by is None
    assert task.approved_at is None
    assert task.rejection_reason is None


def test_same_status_reports_unchanged():
    task = make_task(status=APPROVED)
    assert apply_status(task, APPROVED, actor_id=1, now=NOW) is False


def test_unknown_status_rejected():
    with pytest.raises(ValueError):
        apply_status(make_task(), "done", actor_id=1)


def test_is_locked():
    assert not is_locked(make_task(PENDING))
    assert is_locked(make_task(APPROVED))
    assert is_locked(make_task(REJECTED))
