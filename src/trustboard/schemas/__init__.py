# src/trustboard/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .feedback import FeedbackCreate, FeedbackResponse
from .moderation import ModerationCheckRequest, ModerationResultResponse

__all__ = [
    "FeedbackCreate",
    "FeedbackResponse",
    "ModerationCheckRequest",
    "ModerationResultResponse",
]
