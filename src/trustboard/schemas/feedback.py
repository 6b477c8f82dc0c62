# src/trustboard/schemas/feedback.py
"""Feedback-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FeedbackCreate(BaseModel):
    """Schema for submitting new feedback."""

    name: str | None = Field(None, max_length=200, description="Optional display name")
    email: str | None = Field(None, max_length=320, description="Optional contact address")
    message: str = Field(..., min_length=1, max_length=5000, description="Feedback text")
    rating: int | None = Field(None, ge=1, le=5, description="Optional 1-5 star rating")

    @field_validator("message")
    @classmethod
    def _message_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("message must not be blank")
        return value

    @field_validator("name")
    @classmethod
    def _blank_name_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        return value or None


class FeedbackResponse(BaseModel):
    """Schema for stored feedback returned by the API."""

    id: int
    name: str | None
    email: str | None
    message: str
    rating: int | None
    moderation_provider: str
    moderation_reason: str
    notified: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
