from datetime import datetime
from pydantic import Field, field_validator

from .common import CamelModel, strip_required


class ReviewCreateIn(CamelModel):
    task_id: int
    rating: int = Field(ge=1, le=5)
    feedback: str | None = Field(default=None, max_length=2000)


class ReviewUpdateIn(CamelModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    feedback: str | None = Field(default=None, max_length=2000)


class ReplyIn(CamelModel):
    reply: str = Field(min_length=1, max_length=2000)

    @field_validator("reply")
    @classmethod
    def reply_not_blank(cls, v: str) -> str:
        return strip_required(v, "Reply cannot be empty")


class ReviewOut(CamelModel):
    id: int
    task_id: int
    reviewer_id: int
    reviewer_type: str
    rating: int
    feedback: str | None = None
    reply: str | None = None
    replied_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    reviewer_name: str | None = None
    reviewer_email: str | None = None


class ReviewResponse(CamelModel):
    review: ReviewOut


class ReviewSummaryOut(CamelModel):
    total_reviews: int
    average_rating: str
    admin_reviews: int


class ReviewListOut(CamelModel):
    reviews: list[ReviewOut]
    summary: ReviewSummaryOut


class ReplyDeleteOut(CamelModel):
    message: str
    review: ReviewOut
