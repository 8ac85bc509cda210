import pytest

from app.core.errors import AccessDenied, Forbidden
from app.core.permissions import (
    ADMIN_ROLE,
    USER_ROLE,
    Capability,
    authorize,
    capabilities_of,
)
from app.models.user import User


def user(user_id: int, role: str = USER_ROLE) -> User:
    return User(id=user_id, name=f"u{user_id}", email=f"u{user_id}@example.com", role=role)


def test_capabilities():
    admin = user(1, ADMIN_ROLE)
    employee = user(2)

    assert capabilities_of(admin) == {Capability.ADMIN}
    assert capabilities_of(employee, owner_id=2) == {Capability.SELF}
    assert capabilities_of(employee, member_ids=[2, 3]) == {Capability.MEMBER}
    assert capabilities_of(employee, owner_id=3) == set()


def test_authorize_owner_or_admin():
    allowed = {Capability.ADMIN, Capability.SELF}
    authorize(user(1, ADMIN_ROLE), allowed, owner_id=9)
    authorize(user(9), allowed, owner_id=9)
    with pytest.raises(Forbidden):
        authorize(user(8), allowed, owner_id=9)


def test_authorize_custom_error_and_detail():
    with pytest.raises(AccessDenied) as exc:
        authorize(user(5), {Capability.ADMIN, Capability.MEMBER}, member_ids=[6], error=AccessDenied)
    assert exc.value.status_code == 403
    assert exc.value.detail == "Access denied"

    with pytest.raises(Forbidden) as exc:
        authorize(user(5), {Capability.ADMIN}, detail="Only admins can change task status")
    assert exc.value.detail == "Only admins can change task status"


def test_excluded_capability_vetoes_access():
    admin_owner = user(1, ADMIN_ROLE)
    with pytest.raises(Forbidden):
        authorize(admin_owner, {Capability.SELF}, owner_id=1, excluded={Capability.ADMIN})
    authorize(user(2), {Capability.SELF}, owner_id=2, excluded={Capability.ADMIN})
