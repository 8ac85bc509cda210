"""Capability based access checks.

A caller holds a set of capabilities relative to a resource:

* ``ADMIN``  - the caller's role is ``platform_admin``
* ``SELF``   - the caller owns the resource (``owner_id``)
* ``MEMBER`` - the caller is assigned to the project (``member_ids``)

Routes declare the capabilities they accept. Admin-only routes use the
``requires`` dependency, and resource-level checks call ``authorize`` once
the resource has been loaded.
"""
from collections.abc import Iterable
from enum import Enum

from fastapi import Depends

from ..models.user import User
from .current_user import get_current_user
from .errors import Forbidden

ADMIN_ROLE = "platform_admin"
USER_ROLE = "USER"


class Capability(str, Enum):
    ADMIN = "admin"
    SELF = "self"
    MEMBER = "member"


def is_admin(user: User) -> bool:
    return user.role == ADMIN_ROLE


def capabilities_of(
    user: User,
    *,
    owner_id: int | None = None,
    member_ids: Iterable[int] = (),
) -> set[Capability]:
    caps: set[Capability] = set()
    if is_admin(user):
        caps.add(Capability.ADMIN)
    if owner_id is not None and user.id == owner_id:
        caps.add(Capability.SELF)
    if user.id in set(member_ids):
        caps.add(Capability.MEMBER)
    return caps


def authorize(
    user: User,
    allowed: Iterable[Capability],
    *,
    owner_id: int | None = None,
    member_ids: Iterable[int] = (),
    excluded: Iterable[Capability] = (),
    error: type[Forbidden] = Forbidden,
    detail: str | None = None,
) -> None:
    """Raise ``error`` unless the caller holds one of ``allowed``.

    Holding any capability in ``excluded`` refuses access even when an
    allowed capability is also held.
    """
    caps = capabilities_of(user, owner_id=owner_id, member_ids=member_ids)
    if caps & set(excluded) or not caps & set(allowed):
        raise error(detail)


def requires(*allowed: Capability, detail: str | None = None):
    """Route dependency resolving the current user and checking ``allowed``."""

    def dependency(user: User = Depends(get_current_user)) -> User:
        authorize(user, allowed, detail=detail)
        return user

    return dependency


require_admin = requires(Capability.ADMIN)
