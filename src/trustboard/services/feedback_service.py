"""FeedbackService: moderate, persist and announce user feedback.

This module provides the service layer behind the feedback endpoints. It
coordinates the moderation pipeline, the database and the email notifier.
"""

from __future__ import annotations

import html
import logging

from sqlalchemy import desc
from sqlalchemy.orm import Session

from trustboard.core.settings import settings
from trustboard.models import Feedback
from trustboard.schemas.feedback import FeedbackCreate
from trustboard.services.email_notifier import (
    EmailDeliveryError,
    EmailNotifier,
    get_email_notifier,
)
from trustboard.services.moderation import ModerationPipeline, get_moderation_pipeline
from trustboard.services.moderation_result import ModerationResult

logger = logging.getLogger(__name__)


class FeedbackRejectedError(Exception):
    """Raised when the moderation pipeline flags a submission."""

    def __init__(self, result: ModerationResult) -> None:
        self.result = result
        super().__init__(result.reason)


class FeedbackService:
    """Orchestrates the feedback submission workflow.

    1. Moderate the message (rules, then AI when configured)
    2. Persist accepted feedback
    3. Notify the configured recipient by email
    """

    def __init__(
        self,
        db: Session,
        pipeline: ModerationPipeline | None = None,
        notifier: EmailNotifier | None = None,
        notify_email: str | None = None,
    ) -> None:
        self.db = db
        self.pipeline = pipeline or get_moderation_pipeline()
        self.notifier = notifier or get_email_notifier()
        self.notify_email = notify_email if notify_email is not None else settings.feedback_notify_email

    async def submit(self, payload: FeedbackCreate) -> Feedback:
        """Moderate and store a feedback submission.

        Args:
            payload: Validated submission

        Returns:
            The persisted Feedback row

        Raises:
            FeedbackRejectedError: If moderation flags the message
        """
        result = await self.pipeline.moderate(payload.message)
        if result.flagged:
            logger.info("Rejected feedback (provider=%s): %s", result.provider, result.reason)
            raise FeedbackRejectedError(result)

        feedback = Feedback(
            name=payload.name,
            email=payload.email,
            message=payload.message,
            rating=payload.rating,
            moderation_provider=result.provider,
            moderation_reason=result.reason,
        )
        self.db.add(feedback)
        self.db.commit()
        self.db.refresh(feedback)
        logger.info("Stored feedback %s (provider=%s)", feedback.id, result.provider)

        await self.notify(feedback)
        return feedback

    async def notify(self, feedback: Feedback) -> bool:
        """Email the feedback to the configured recipient.

        A delivery failure is recorded on the row instead of failing the
        submission, since the feedback has already been stored.

        Returns:
            True if an email was sent
        """
        if not self.notify_email:
            logger.debug("No notification recipient configured; skipping email for %s", feedback.id)
            return False

        subject, text, html_body = self._build_notification(feedback)
        try:
            await self.notifier.send(self.notify_email, subject, text=text, html=html_body)
        except EmailDeliveryError as exc:
            logger.warning("Notification failed for feedback %s: %s", feedback.id, exc)
            feedback.notification_error = str(exc)
            self.db.commit()
            return False

        feedback.notified = True
        feedback.notification_error = None
        self.db.commit()
        return True

    @staticmethod
    def _build_notification(feedback: Feedback) -> tuple[str, str, str]:
        author = feedback.name or "Anonymous"
        rating = f"{feedback.rating}/5" if feedback.rating else "n/a"
        subject = f"New feedback #{feedback.id} from {author}"
        text = (
            f"New feedback received\n\n"
            f"From: {author}\n"
            f"Email: {feedback.email or 'n/a'}\n"
            f"Rating: {rating}\n\n"
            f"{feedback.message}\n"
        )
        html_body = (
            f"<h2>New feedback received</h2>"
            f"<p><strong>From:</strong> {html.escape(author)}<br>"
            f"<strong>Email:</strong> {html.escape(feedback.email or 'n/a')}<br>"
            f"<strong>Rating:</strong> {rating}</p>"
            f"<p>{html.escape(feedback.message)}</p>"
        )
        return subject, text, html_body

    def list_recent(self, limit: int = 50) -> list[Feedback]:
        """Return the most recent feedback, newest first."""
        return (
            self.db.query(Feedback)
            .order_by(desc(Feedback.created_at), desc(Feedback.id))
            .limit(limit)
            .all()
        )

    def get(self, feedback_id: int) -> Feedback | None:
        """Return a single feedback row or None."""
        return self.db.get(Feedback, feedback_id)
