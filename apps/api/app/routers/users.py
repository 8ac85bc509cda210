from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from ..core.permissions import USER_ROLE, require_admin
from ..db import get_session
from ..models.user import User
from ..schemas.user import UserListOut, UserOut

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=UserListOut)
def list_users(
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    # assignment candidates: every non-admin account
    stmt = (
        select(User)
        .where(User.role == USER_ROLE)
        .order_by(User.name.asc(), User.id.asc())
    )
    return UserListOut(users=[UserOut.model_validate(u) for u in session.scalars(stmt).all()])
