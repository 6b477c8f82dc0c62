# src/trustboard/models/feedback.py
"""SQLAlchemy model for submitted feedback."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Integer, SmallInteger, Text
from sqlalchemy.orm import Mapped, mapped_column

from trustboard.db.session import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Feedback(Base):
    """Feedback accepted by the moderation pipeline.

    Rejected submissions are never stored; the moderation columns record
    which check let the text through.
    """

    __tablename__ = "feedback"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str | None] = mapped_column(Text, nullable=True)
    email: Mapped[str | None] = mapped_column(Text, nullable=True)
    message: Mapped[str] = mapped_column(Text, nullable=False)
    # 1-5 stars, optional.
    rating: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    moderation_provider: Mapped[str] = mapped_column(Text, nullable=False)
    moderation_reason: Mapped[str] = mapped_column(Text, nullable=False)

    notified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    notification_error: Mapped[str | None] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=_utcnow,
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Feedback(id={self.id}, provider={self.moderation_provider})>"
