from datetime import datetime, timezone

from ..models.task import Task

PENDING = "pending"
APPROVED = "approved"
REJECTED = "rejected"

ALLOWED_STATUS = (PENDING, APPROVED, REJECTED)

# Fields the owning employee may change while the task is pending
EDITABLE_FIELDS = ("task_name", "description", "expected_hours", "actual_hours")
# Columns that cannot be cleared to null
REQUIRED_FIELDS = ("task_name", "actual_hours")


def is_locked(task: Task) -> bool:
    """Approved and rejected tasks are only editable by admins."""
    return task.status != PENDING


def apply_status(
    task: Task,
    status: str,
    *,
    actor_id: int,
    rejection_reason: str | None = None,
    now: datetime | None = None,
) -> bool:
    """Move ``task`` to ``status`` and stamp or clear the approval metadata.

    Returns True when the status actually changed.
    """
    if status not in ALLOWED_STATUS:
        raise ValueError(f"Invalid status: {status}")

    changed = task.status != status
    now = now or datetime.now(timezone.utc)
    task.status = status

    if status == APPROVED:
        task.approved_by = actor_id
        task.approved_at = now
        task.rejection_reason = None
    elif status == REJECTED:
        task.approved_by = actor_id
        task.approved_at = now
        if rejection_reason is not None:
            task.rejection_reason = rejection_reason.strip() or None
    else:
        task.approved_by = None
        task.approved_at = None
        task.rejection_reason = None

    return changed
