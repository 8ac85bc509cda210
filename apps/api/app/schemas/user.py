from .common import CamelModel


class UserSummaryOut(CamelModel):
    id: int
    name: str | None = None
    email: str | None = None


class UserOut(CamelModel):
    id: int
    name: str | None = None
    email: str | None = None
    role: str
    profile_pic: str | None = None
    is_active: bool = True


class UserListOut(CamelModel):
    users: list[UserOut]
