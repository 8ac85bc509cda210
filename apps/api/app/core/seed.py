import logging
from sqlalchemy.orm import Session
from sqlalchemy import select

from ..models.user import User
from .config import settings
from .permissions import ADMIN_ROLE
from .security import hash_password

logger = logging.getLogger(__name__)


def seed_admin(session: Session) -> None:
    """Create the dev admin account, or re-promote it if it already exists.

    The password is only set when the account is first created.
    """
    email = settings.admin_email
    exists = session.scalar(select(User).where(User.email == email))

    if exists:
        exists.role = ADMIN_ROLE
        exists.is_active = True
        session.commit()
        return

    session.add(
        User(
            name=settings.admin_name,
            email=email,
            password_hash=hash_password(settings.admin_password),
            role=ADMIN_ROLE,
            is_active=True,
        )
    )
    session.commit()
    logger.info("seeded admin account: %s", email)
