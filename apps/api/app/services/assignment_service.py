import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.errors import ValidationError
from ..models.project_assignment import ProjectAssignment
from ..models.user import User

logger = logging.getLogger(__name__)


def unique_ids(ids: list[int]) -> list[int]:
    """Drop repeated ids, keeping first-seen order."""
    return list(dict.fromkeys(ids))


def ensure_users_exist(session: Session, user_ids: list[int]) -> None:
    """All-or-nothing check: raise if any id does not resolve to a user."""
    wanted = set(user_ids)
    if not wanted:
        return
    found = set(session.scalars(select(User.id).where(User.id.in_(wanted))).all())
    missing = sorted(wanted - found)
    if missing:
        raise ValidationError(f"One or more users not found: {', '.join(str(m) for m in missing)}")


def get_assigned_user_ids(session: Session, project_id: int) -> set[int]:
    stmt = select(ProjectAssignment.user_id).where(ProjectAssignment.project_id == project_id)
    return set(session.scalars(stmt).all())


def get_assigned_project_ids(session: Session, user_id: int) -> list[int]:
    stmt = select(ProjectAssignment.project_id).where(ProjectAssignment.user_id == user_id)
    return list(session.scalars(stmt).all())


def load_assignment_map(session: Session, project_ids: list[int]) -> dict[int, list[tuple[ProjectAssignment, User]]]:
    """Assignments with their user, grouped by project id."""
    if not project_ids:
        return {}
    stmt = (
        select(ProjectAssignment, User)
        .join(User, ProjectAssignment.user_id == User.id)
        .where(ProjectAssignment.project_id.in_(project_ids))
        .order_by(ProjectAssignment.assigned_at.asc(), ProjectAssignment.id.asc())
    )
    grouped: dict[int, list[tuple[ProjectAssignment, User]]] = {}
    for assignment, user in session.execute(stmt).all():
        grouped.setdefault(assignment.project_id, []).append((assignment, user))
    return grouped


def add_assignments(
    session: Session,
    project_id: int,
    user_ids: list[int],
    assigned_by: int,
) -> list[ProjectAssignment]:
    """Stage assignments for ids not yet assigned to the project.

    Ids already assigned (or repeated in ``user_ids``) are skipped, including
    a pair inserted by a concurrent request after the lookup. Callers check
    the ids with ``ensure_users_exist`` first. Nothing is committed here so
    the caller controls the transaction.
    """
    existing = get_assigned_user_ids(session, project_id)
    created: list[ProjectAssignment] = []
    for user_id in unique_ids(user_ids):
        if user_id in existing:
            continue
        assignment = ProjectAssignment(project_id=project_id, user_id=user_id, assigned_by=assigned_by)
        try:
            with session.begin_nested():
                session.add(assignment)
        except IntegrityError:
            logger.info("assignment already present (project_id=%s, user_id=%s)", project_id, user_id)
            continue
        created.append(assignment)
    return created


def remove_assignment(session: Session, project_id: int, user_id: int) -> bool:
    result = session.execute(
        delete(ProjectAssignment).where(
            ProjectAssignment.project_id == project_id,
            ProjectAssignment.user_id == user_id,
        )
    )
    removed = bool(result.rowcount)
    if removed:
        logger.info("assignment removed (project_id=%s, user_id=%s)", project_id, user_id)
    return removed
