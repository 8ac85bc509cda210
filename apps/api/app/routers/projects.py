from datetime import datetime, timezone
import logging
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session
from sqlalchemy import select, desc

from ..db import get_session
from ..core.current_user import get_current_user
from ..core.errors import AccessDenied, NotFound
from ..core.permissions import Capability, authorize, is_admin, require_admin
from ..models.project import Project
from ..models.project_assignment import ProjectAssignment
from ..models.task import Task
from ..models.user import User
from ..schemas.common import MessageOut
from ..schemas.project import (
    AssignmentAddIn,
    AssignmentAddOut,
    AssignmentListOut,
    AssignmentOut,
    AssignmentRemoveOut,
    ProjectCreateIn,
    ProjectListOut,
    ProjectOut,
    ProjectResponse,
    ProjectUpdateIn,
)
from ..schemas.task import EmployeeSummaryOut, ProjectDetailOut, SummaryOut, TaskLineOut
from ..schemas.user import UserOut, UserSummaryOut
from ..services.aggregation import summarize_tasks
from ..services.assignment_service import (
    add_assignments,
    ensure_users_exist,
    get_assigned_project_ids,
    get_assigned_user_ids,
    load_assignment_map,
    remove_assignment,
    unique_ids,
)

router = APIRouter(prefix="/projects", tags=["projects"])
logger = logging.getLogger(__name__)


def get_project_or_404(session: Session, project_id: int) -> Project:
    p = session.get(Project, project_id)
    if not p:
        raise NotFound("Project not found")
    return p


def build_user_map(session: Session, ids: set[int]) -> dict[int, User]:
    if not ids:
        return {}
    stmt = select(User).where(User.id.in_(ids))
    users = session.scalars(stmt).all()
    return {u.id: u for u in users}


def serialize_assignment(assignment: ProjectAssignment, user: User | None) -> AssignmentOut:
    return AssignmentOut(
        id=assignment.id,
        project_id=assignment.project_id,
        user_id=assignment.user_id,
        assigned_by=assignment.assigned_by,
        assigned_at=assignment.assigned_at,
        user=UserOut.model_validate(user) if user else None,
    )


def serialize_projects(session: Session, projects: list[Project]) -> list[ProjectOut]:
    assignment_map = load_assignment_map(session, [p.id for p in projects])
    creators = build_user_map(session, {p.created_by for p in projects})
    items = []
    for p in projects:
        creator = creators.get(p.created_by)
        items.append(
            ProjectOut(
                id=p.id,
                project_name=p.project_name,
                description=p.description,
                created_by=p.created_by,
                is_active=p.is_active,
                created_at=p.created_at,
                updated_at=p.updated_at,
                creator=UserSummaryOut.model_validate(creator) if creator else None,
                assignments=[serialize_assignment(a, u) for a, u in assignment_map.get(p.id, [])],
            )
        )
    return items


def load_task_lines(session: Session, project_id: int, employee_id: int | None = None) -> list[TaskLineOut]:
    stmt = (
        select(Task, User)
        .outerjoin(User, Task.employee_id == User.id)
        .where(Task.project_id == project_id)
    )
    if employee_id is not None:
        stmt = stmt.where(Task.employee_id == employee_id)
    stmt = stmt.order_by(desc(Task.created_at), desc(Task.id))

    return [
        TaskLineOut(
            task_id=t.id,
            task_name=t.task_name,
            description=t.description,
            expected_hours=t.expected_hours,
            actual_hours=t.actual_hours,
            status=t.status,
            approved_at=t.approved_at,
            created_at=t.created_at,
            employee_id=t.employee_id,
            employee_name=u.name if u else None,
            employee_email=u.email if u else None,
        )
        for t, u in session.execute(stmt).all()
    ]


def build_detail(session: Session, project: Project, lines: list[TaskLineOut]) -> ProjectDetailOut:
    aggregate = summarize_tasks(lines)
    return ProjectDetailOut(
        project=serialize_projects(session, [project])[0],
        tasks=lines,
        summary=SummaryOut.model_validate(aggregate.summary),
        employees=[EmployeeSummaryOut.model_validate(e) for e in aggregate.employees],
    )


def assert_project_access(session: Session, user: User, project: Project) -> None:
    authorize(
        user,
        {Capability.ADMIN, Capability.MEMBER},
        member_ids=get_assigned_user_ids(session, project.id),
        error=AccessDenied,
    )


@router.get("", response_model=ProjectListOut)
def list_projects(
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
    include_inactive: bool = Query(default=False, alias="includeInactive"),
):
    stmt = select(Project)
    if is_admin(user):
        if not include_inactive:
            stmt = stmt.where(Project.is_active.is_(True))
    else:
        project_ids = get_assigned_project_ids(session, user.id)
        if not project_ids:
            return ProjectListOut(projects=[])
        stmt = stmt.where(Project.id.in_(project_ids), Project.is_active.is_(True))
    stmt = stmt.order_by(desc(Project.created_at), desc(Project.id))

    projects = list(session.scalars(stmt).all())
    return ProjectListOut(projects=serialize_projects(session, projects))


@router.post("", response_model=ProjectResponse, status_code=201)
def create_project(
    payload: ProjectCreateIn,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    member_ids = unique_ids(payload.assigned_user_ids)
    ensure_users_exist(session, member_ids)

    project = Project(
        project_name=payload.project_name,
        description=payload.description or None,
        created_by=user.id,
        is_active=True,
    )
    session.add(project)
    session.flush()

    # project row and its assignments commit together
    add_assignments(session, project.id, member_ids, assigned_by=user.id)
    session.commit()
    session.refresh(project)

    logger.info("project created (project_id=%s, assigned=%d)", project.id, len(member_ids))
    return ProjectResponse(project=serialize_projects(session, [project])[0])


@router.get("/{project_id}", response_model=ProjectDetailOut)
def get_project(
    project_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    project = get_project_or_404(session, project_id)
    assert_project_access(session, user, project)
    return build_detail(session, project, load_task_lines(session, project.id))


@router.get("/{project_id}/my-tasks", response_model=ProjectDetailOut)
def get_my_project_tasks(
    project_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    project = get_project_or_404(session, project_id)
    assert_project_access(session, user, project)
    return build_detail(session, project, load_task_lines(session, project.id, employee_id=user.id))


@router.put("/{project_id}", response_model=ProjectResponse)
def update_project(
    project_id: int,
    payload: ProjectUpdateIn,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    project = get_project_or_404(session, project_id)

    fields = payload.model_fields_set
    if "project_name" in fields and payload.project_name is not None:
        project.project_name = payload.project_name
    if "description" in fields:
        project.description = payload.description or None
    if "is_active" in fields and payload.is_active is not None:
        project.is_active = payload.is_active
    project.updated_at = datetime.now(timezone.utc)

    session.commit()
    session.refresh(project)
    return ProjectResponse(project=serialize_projects(session, [project])[0])


@router.delete("/{project_id}", response_model=MessageOut)
def delete_project(
    project_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    project = get_project_or_404(session, project_id)

    # soft delete: tasks and assignments stay in place
    project.is_active = False
    project.updated_at = datetime.now(timezone.utc)
    session.commit()

    logger.info("project soft-deleted (project_id=%s, by=%s)", project_id, user.id)
    return MessageOut(message="Project deleted successfully")


@router.get("/{project_id}/assignments", response_model=AssignmentListOut)
def list_assignments(
    project_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    get_project_or_404(session, project_id)
    rows = load_assignment_map(session, [project_id]).get(project_id, [])
    return AssignmentListOut(assignments=[serialize_assignment(a, u) for a, u in rows])


@router.post("/{project_id}/assignments", response_model=AssignmentAddOut, status_code=201)
def create_assignments(
    project_id: int,
    payload: AssignmentAddIn,
    response: Response,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    get_project_or_404(session, project_id)

    user_ids = unique_ids(payload.user_ids)
    ensure_users_exist(session, user_ids)

    created = add_assignments(session, project_id, user_ids, assigned_by=user.id)
    if not created:
        response.status_code = 200
        return AssignmentAddOut(message="All users are already assigned to this project")

    session.commit()
    for a in created:
        session.refresh(a)

    logger.info("assignments added (project_id=%s, user_ids=%s)", project_id, [a.user_id for a in created])
    users = build_user_map(session, {a.user_id for a in created})
    return AssignmentAddOut(assignments=[serialize_assignment(a, users.get(a.user_id)) for a in created])


@router.delete("/{project_id}/assignments/{user_id}", response_model=AssignmentRemoveOut)
def delete_assignment(
    project_id: int,
    user_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    get_project_or_404(session, project_id)

    removed = remove_assignment(session, project_id, user_id)
    session.commit()

    if not removed:
        return AssignmentRemoveOut(message="User is not assigned to this project", removed=False)
    return AssignmentRemoveOut(message="Assignment removed successfully", removed=True)
