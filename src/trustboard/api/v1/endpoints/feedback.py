# src/trustboard/api/v1/endpoints/feedback.py
"""Feedback submission and retrieval endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from trustboard.models import Feedback
from trustboard.schemas.feedback import FeedbackCreate, FeedbackResponse
from trustboard.services.feedback_service import FeedbackRejectedError, FeedbackService

from .deps import NotifierDep, PipelineDep, SessionDep

router = APIRouter(prefix="/feedback", tags=["feedback"])


@router.post("", response_model=FeedbackResponse, status_code=status.HTTP_201_CREATED)
async def submit_feedback(
    payload: FeedbackCreate,
    db: SessionDep,
    pipeline: PipelineDep,
    notifier: NotifierDep,
) -> Feedback:
    """Moderate and store a new piece of feedback.

    Args:
        payload: Feedback submission
        db: Database session
        pipeline: Moderation pipeline
        notifier: Email notifier for the admin notification

    Returns:
        The stored feedback

    Raises:
        HTTPException: 422 if the message was flagged by moderation
    """
    service = FeedbackService(db, pipeline=pipeline, notifier=notifier)
    try:
        return await service.submit(payload)
    except FeedbackRejectedError as err:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={
                "message": "Feedback rejected by moderation",
                "moderation": err.result.to_dict(),
            },
        ) from err


@router.get("", response_model=list[FeedbackResponse])
async def list_feedback(
    db: SessionDep,
    limit: int = Query(50, ge=1, le=100, description="Maximum number of entries to return"),
) -> list[Feedback]:
    """List the most recent accepted feedback, newest first."""
    return FeedbackService(db).list_recent(limit)


@router.get("/{feedback_id}", response_model=FeedbackResponse)
async def get_feedback(
    feedback_id: int,
    db: SessionDep,
) -> Feedback:
    """Return a single feedback entry.

    Raises:
        HTTPException: 404 if the feedback does not exist
    """
    feedback = FeedbackService(db).get(feedback_id)
    if feedback is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Feedback not found",
        )
    return feedback
