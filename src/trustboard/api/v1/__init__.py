# src/trustboard/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import (
    feedback_router,
    moderation_router,
    system_router,
)

__all__ = [
    "feedback_router",
    "moderation_router",
    "system_router",
]
