from datetime import datetime
from pydantic import Field, field_validator

from .common import CamelModel, strip_required
from .user import UserOut, UserSummaryOut


class ProjectCreateIn(CamelModel):
    project_name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    assigned_user_ids: list[int] = Field(default_factory=list)

    @field_validator("project_name")
    @classmethod
    def project_name_required(cls, v: str) -> str:
        return strip_required(v, "Project name is required")


class ProjectUpdateIn(CamelModel):
    project_name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=1000)
    is_active: bool | None = None

    @field_validator("project_name")
    @classmethod
    def project_name_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return strip_required(v, "Project name is required")


class AssignmentOut(CamelModel):
    id: int
    project_id: int
    user_id: int
    assigned_by: int
    assigned_at: datetime | None = None
    user: UserOut | None = None


class ProjectOut(CamelModel):
    id: int
    project_name: str
    description: str | None = None
    created_by: int
    is_active: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    creator: UserSummaryOut | None = None
    assignments: list[AssignmentOut] = Field(default_factory=list)


class ProjectResponse(CamelModel):
    project: ProjectOut


class ProjectListOut(CamelModel):
    projects: list[ProjectOut]


class AssignmentAddIn(CamelModel):
    user_ids: list[int] = Field(min_length=1)


class AssignmentAddOut(CamelModel):
    message: str | None = None
    assignments: list[AssignmentOut] = Field(default_factory=list)


class AssignmentListOut(CamelModel):
    assignments: list[AssignmentOut]


class AssignmentRemoveOut(CamelModel):
    message: str
    removed: bool
