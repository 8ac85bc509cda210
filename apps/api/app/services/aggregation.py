"""Hour totals and per-employee breakdowns for a list of tasks.

Everything here is a pure function of its input. Hours are ``Decimal``
values validated at the API boundary, so the arithmetic is exact and
``variance`` always equals ``actual - expected``.
"""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Protocol

from ..core.task_rules import APPROVED, PENDING, REJECTED

ZERO = Decimal("0")
CENT = Decimal("0.01")

STATUS_BUCKETS = {
    PENDING: "pending_tasks",
    APPROVED: "approved_tasks",
    REJECTED: "rejected_tasks",
}


class TaskLine(Protocol):
    employee_id: int | None
    employee_name: str | None
    employee_email: str | None
    expected_hours: Any
    actual_hours: Any
    status: str


@dataclass
class Summary:
    total_tasks: int
    total_expected_hours: str
    total_actual_hours: str
    variance: str
    variance_percentage: str


@dataclass
class EmployeeSummary:
    employee_id: int | None
    employee_name: str
    employee_email: str
    total_tasks: int = 0
    total_expected_hours: Decimal = ZERO
    total_actual_hours: Decimal = ZERO
    pending_tasks: int = 0
    approved_tasks: int = 0
    rejected_tasks: int = 0


@dataclass
class TaskAggregate:
    summary: Summary
    employees: list[EmployeeSummary] = field(default_factory=list)


def to_hours(value: Any) -> Decimal:
    """Null counts as zero. Anything else must be a valid decimal."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def format_fixed(value: Decimal) -> str:
    return str(value.quantize(CENT, rounding=ROUND_HALF_UP))


def variance_percentage(variance: Decimal, expected: Decimal) -> str:
    if expected == ZERO:
        return "0"
    return format_fixed(variance / expected * 100)


def summarize_tasks(tasks: Sequence[TaskLine]) -> TaskAggregate:
    total_expected = ZERO
    total_actual = ZERO
    employees: dict[Any, EmployeeSummary] = {}

    for task in tasks:
        expected = to_hours(task.expected_hours)
        actual = to_hours(task.actual_hours)
        total_expected += expected
        total_actual += actual

        emp = employees.get(task.employee_id)
        if emp is None:
            emp = EmployeeSummary(
                employee_id=task.employee_id,
                employee_name=task.employee_name or "Unknown",
                employee_email=task.employee_email or "N/A",
            )
            employees[task.employee_id] = emp

        emp.total_tasks += 1
        emp.total_expected_hours += expected
        emp.total_actual_hours += actual

        bucket = STATUS_BUCKETS.get(task.status)
        if bucket:
            setattr(emp, bucket, getattr(emp, bucket) + 1)

    variance = total_actual - total_expected
    summary = Summary(
        total_tasks=len(tasks),
        total_expected_hours=format_fixed(total_expected),
        total_actual_hours=format_fixed(total_actual),
        variance=format_fixed(variance),
        variance_percentage=variance_percentage(variance, total_expected),
    )
    return TaskAggregate(summary=summary, employees=list(employees.values()))


@dataclass
class ReviewSummary:
    total_reviews: int
    average_rating: str
    admin_reviews: int


def summarize_reviews(reviews: Iterable[Any]) -> ReviewSummary:
    reviews = list(reviews)
    if not reviews:
        return ReviewSummary(total_reviews=0, average_rating="0", admin_reviews=0)

    total = sum((Decimal(r.rating or 0) for r in reviews), ZERO)
    return ReviewSummary(
        total_reviews=len(reviews),
        average_rating=format_fixed(total / len(reviews)),
        admin_reviews=sum(1 for r in reviews if r.reviewer_type == "admin"),
    )
