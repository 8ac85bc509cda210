import logging
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from sqlalchemy import delete

from ..db import get_session
from ..core.current_user import get_current_user
from ..core.errors import NotFound, ValidationError
from ..core.permissions import Capability, authorize
from ..core.task_rules import EDITABLE_FIELDS, PENDING, REQUIRED_FIELDS, apply_status, is_locked
from ..models.project import Project
from ..models.task import Task
from ..models.task_review import TaskReview
from ..models.user import User
from ..schemas.common import MessageOut
from ..schemas.task import TaskCreateIn, TaskOut, TaskResponse, TaskUpdateIn

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = logging.getLogger(__name__)

OWNER_OR_ADMIN = {Capability.ADMIN, Capability.SELF}


def get_task_or_404(session: Session, task_id: int) -> Task:
    t = session.get(Task, task_id)
    if not t:
        raise NotFound("Task not found")
    return t


@router.post("", response_model=TaskResponse, status_code=201)
def create_task(
    payload: TaskCreateIn,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    project = session.get(Project, payload.project_id)
    if not project or not project.is_active:
        raise ValidationError("Project not found")

    # new tasks always start pending, whatever the client sent
    t = Task(
        project_id=project.id,
        employee_id=user.id,
        task_name=payload.task_name,
        description=payload.description or None,
        expected_hours=payload.expected_hours,
        actual_hours=payload.actual_hours,
        status=PENDING,
    )
    session.add(t)
    session.commit()
    session.refresh(t)
    return TaskResponse(task=TaskOut.model_validate(t))


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(
    task_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    t = get_task_or_404(session, task_id)
    authorize(user, OWNER_OR_ADMIN, owner_id=t.employee_id)
    return TaskResponse(task=TaskOut.model_validate(t))


@router.put("/{task_id}", response_model=TaskResponse)
def update_task(
    task_id: int,
    payload: TaskUpdateIn,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    t = get_task_or_404(session, task_id)
    authorize(user, OWNER_OR_ADMIN, owner_id=t.employee_id)

    fields = payload.model_fields_set
    status_requested = "status" in fields and payload.status is not None
    if status_requested:
        authorize(user, {Capability.ADMIN}, detail="Only admins can change task status")
    if is_locked(t):
        authorize(user, {Capability.ADMIN}, detail="Cannot edit approved/rejected tasks")

    for name in EDITABLE_FIELDS:
        if name not in fields:
            continue
        value = getattr(payload, name)
        if value is None and name in REQUIRED_FIELDS:
            continue
        setattr(t, name, value)

    if status_requested:
        from_status = t.status
        changed = apply_status(
            t,
            payload.status,
            actor_id=user.id,
            rejection_reason=payload.rejection_reason,
        )
        if changed:
            logger.info("task status changed (task_id=%s, %s -> %s, by=%s)", t.id, from_status, t.status, user.id)

    session.commit()
    session.refresh(t)
    return TaskResponse(task=TaskOut.model_validate(t))


@router.delete("/{task_id}", response_model=MessageOut)
def delete_task(
    task_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    t = get_task_or_404(session, task_id)
    authorize(user, OWNER_OR_ADMIN, owner_id=t.employee_id)

    session.execute(delete(TaskReview).where(TaskReview.task_id == t.id))
    session.delete(t)
    session.commit()
    return MessageOut(message="Task deleted successfully")
