# src/trustboard/schemas/moderation.py
"""Moderation-related Pydantic schemas."""

from pydantic import BaseModel, Field


class ModerationCheckRequest(BaseModel):
    """Schema for previewing the moderation verdict on a piece of text."""

    text: str = Field(..., description="Text to run through the moderation pipeline")


class ModerationResultResponse(BaseModel):
    """Schema for a moderation verdict returned by the API."""

    flagged: bool
    provider: str
    reason: str
    details: dict[str, bool] | None = None
