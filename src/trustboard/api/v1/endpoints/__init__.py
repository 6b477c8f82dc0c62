# src/trustboard/api/v1/endpoints/__init__.py
"""API endpoint modules for version 1."""

from .feedback import router as feedback_router
from .moderation import router as moderation_router
from .system import router as system_router

__all__ = [
    "feedback_router",
    "moderation_router",
    "system_router",
]
