from datetime import datetime, timezone
import logging
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from sqlalchemy import select, desc

from ..db import get_session
from ..core.current_user import get_current_user
from ..core.errors import NotFound, ValidationError
from ..core.permissions import Capability, authorize, require_admin
from ..models.task import Task
from ..models.task_review import TaskReview
from ..models.user import User
from ..schemas.common import MessageOut
from ..schemas.review import (
    ReplyDeleteOut,
    ReplyIn,
    ReviewCreateIn,
    ReviewListOut,
    ReviewOut,
    ReviewResponse,
    ReviewSummaryOut,
    ReviewUpdateIn,
)
from ..services.aggregation import summarize_reviews

router = APIRouter(prefix="/reviews", tags=["reviews"])
logger = logging.getLogger(__name__)

REPLY_DENIED = "Only the employee who owns the task can reply to its reviews"


def get_task_or_404(session: Session, task_id: int) -> Task:
    t = session.get(Task, task_id)
    if not t:
        raise NotFound("Task not found")
    return t


def get_review_or_404(session: Session, review_id: int) -> TaskReview:
    r = session.get(TaskReview, review_id)
    if not r:
        raise NotFound("Review not found")
    return r


def serialize_review(review: TaskReview, reviewer: User | None) -> ReviewOut:
    return ReviewOut(
        id=review.id,
        task_id=review.task_id,
        reviewer_id=review.reviewer_id,
        reviewer_type=review.reviewer_type,
        rating=review.rating,
        feedback=review.feedback,
        reply=review.reply,
        replied_at=review.replied_at,
        created_at=review.created_at,
        updated_at=review.updated_at,
        reviewer_name=reviewer.name if reviewer else None,
        reviewer_email=reviewer.email if reviewer else None,
    )


def review_out(session: Session, review: TaskReview) -> ReviewOut:
    return serialize_review(review, session.get(User, review.reviewer_id))


def assert_task_owner_reply(session: Session, user: User, review: TaskReview) -> None:
    # admins are refused even on their own tasks
    task = get_task_or_404(session, review.task_id)
    authorize(
        user,
        {Capability.SELF},
        owner_id=task.employee_id,
        excluded={Capability.ADMIN},
        detail=REPLY_DENIED,
    )


@router.get("", response_model=ReviewListOut)
def list_reviews(
    task_id: int = Query(alias="taskId"),
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    task = get_task_or_404(session, task_id)
    authorize(user, {Capability.ADMIN, Capability.SELF}, owner_id=task.employee_id)

    stmt = (
        select(TaskReview, User)
        .outerjoin(User, TaskReview.reviewer_id == User.id)
        .where(TaskReview.task_id == task_id)
        .order_by(desc(TaskReview.created_at), desc(TaskReview.id))
    )
    rows = session.execute(stmt).all()
    reviews = [serialize_review(r, u) for r, u in rows]
    return ReviewListOut(
        reviews=reviews,
        summary=ReviewSummaryOut.model_validate(summarize_reviews(r for r, _ in rows)),
    )


@router.get("/{review_id}", response_model=ReviewResponse)
def get_review(
    review_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    review = get_review_or_404(session, review_id)
    task = get_task_or_404(session, review.task_id)
    authorize(user, {Capability.ADMIN, Capability.SELF}, owner_id=task.employee_id)
    return ReviewResponse(review=review_out(session, review))


@router.post("", response_model=ReviewResponse, status_code=201)
def create_review(
    payload: ReviewCreateIn,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    get_task_or_404(session, payload.task_id)

    existing = session.scalar(
        select(TaskReview.id).where(
            TaskReview.task_id == payload.task_id,
            TaskReview.reviewer_id == user.id,
        )
    )
    if existing:
        raise ValidationError("You have already reviewed this task")

    review = TaskReview(
        task_id=payload.task_id,
        reviewer_id=user.id,
        reviewer_type="admin",
        rating=payload.rating,
        feedback=payload.feedback or None,
    )
    session.add(review)
    session.commit()
    session.refresh(review)

    logger.info("review created (review_id=%s, task_id=%s)", review.id, review.task_id)
    return ReviewResponse(review=serialize_review(review, user))


@router.put("/{review_id}", response_model=ReviewResponse)
def update_review(
    review_id: int,
    payload: ReviewUpdateIn,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    review = get_review_or_404(session, review_id)
    authorize(user, {Capability.SELF}, owner_id=review.reviewer_id, detail="You can only update your own reviews")

    if payload.rating is not None:
        review.rating = payload.rating
    if "feedback" in payload.model_fields_set:
        review.feedback = payload.feedback or None
    review.updated_at = datetime.now(timezone.utc)

    session.commit()
    session.refresh(review)
    return ReviewResponse(review=serialize_review(review, user))


@router.delete("/{review_id}", response_model=MessageOut)
def delete_review(
    review_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(require_admin),
):
    review = get_review_or_404(session, review_id)
    authorize(user, {Capability.SELF}, owner_id=review.reviewer_id, detail="You can only delete your own reviews")

    session.delete(review)
    session.commit()
    return MessageOut(message="Review deleted successfully")


@router.post("/{review_id}/reply", response_model=ReviewResponse)
def reply_to_review(
    review_id: int,
    payload: ReplyIn,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    review = get_review_or_404(session, review_id)
    assert_task_owner_reply(session, user, review)

    now = datetime.now(timezone.utc)
    review.reply = payload.reply
    review.replied_at = now
    review.updated_at = now

    session.commit()
    session.refresh(review)
    return ReviewResponse(review=review_out(session, review))


@router.delete("/{review_id}/reply", response_model=ReplyDeleteOut)
def delete_reply(
    review_id: int,
    session: Session = Depends(get_session),
    user: User = Depends(get_current_user),
):
    review = get_review_or_404(session, review_id)
    assert_task_owner_reply(session, user, review)

    review.reply = None
    review.replied_at = None
    review.updated_at = datetime.now(timezone.utc)

    session.commit()
    session.refresh(review)
    return ReplyDeleteOut(message="Reply deleted successfully", review=review_out(session, review))
