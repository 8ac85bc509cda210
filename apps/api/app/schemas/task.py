from datetime import datetime
from decimal import Decimal
from typing import Literal
from pydantic import Field, field_validator

from .common import CamelModel, strip_required
from .project import ProjectOut

TaskStatus = Literal["pending", "approved", "rejected"]


class TaskCreateIn(CamelModel):
    project_id: int
    task_name: str = Field(min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    expected_hours: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    actual_hours: Decimal = Field(ge=0, max_digits=10, decimal_places=2)

    @field_validator("task_name")
    @classmethod
    def task_name_required(cls, v: str) -> str:
        return strip_required(v, "Task name is required")


class TaskUpdateIn(CamelModel):
    task_name: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = Field(default=None, max_length=5000)
    expected_hours: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    actual_hours: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    status: TaskStatus | None = None
    rejection_reason: str | None = Field(default=None, max_length=2000)

    @field_validator("task_name")
    @classmethod
    def task_name_not_blank(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return strip_required(v, "Task name is required")

    @field_validator("description")
    @classmethod
    def description_blank_to_none(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return v.strip() or None


class TaskOut(CamelModel):
    id: int
    project_id: int
    employee_id: int
    task_name: str
    description: str | None = None
    expected_hours: Decimal | None = None
    actual_hours: Decimal | None = None
    status: str
    approved_by: int | None = None
    approved_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class TaskResponse(CamelModel):
    task: TaskOut


class TaskLineOut(CamelModel):
    task_id: int
    task_name: str
    description: str | None = None
    expected_hours: Decimal | None = None
    actual_hours: Decimal | None = None
    status: str
    approved_at: datetime | None = None
    created_at: datetime | None = None
    employee_id: int | None = None
    employee_name: str | None = None
    employee_email: str | None = None


class SummaryOut(CamelModel):
    total_tasks: int
    total_expected_hours: str
    total_actual_hours: str
    variance: str
    variance_percentage: str


class EmployeeSummaryOut(CamelModel):
    employee_id: int | None = None
    employee_name: str
    employee_email: str
    total_tasks: int
    total_expected_hours: float
    total_actual_hours: float
    pending_tasks: int
    approved_tasks: int
    rejected_tasks: int


class ProjectDetailOut(CamelModel):
    project: ProjectOut
    tasks: list[TaskLineOut]
    summary: SummaryOut
    employees: list[EmployeeSummaryOut]
