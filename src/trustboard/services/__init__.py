# src/trustboard/services/__init__.py
"""Business logic services for the Trustboard application."""

from .email_notifier import EmailDeliveryError, EmailNotifier
from .gemini import GeminiModerationClient, ModerationProviderError
from .moderation import ModerationPipeline, moderate_feedback
from .moderation_result import ModerationResult

__all__ = [
    "EmailDeliveryError",
    "EmailNotifier",
    "GeminiModerationClient",
    "ModerationPipeline",
    "ModerationProviderError",
    "ModerationResult",
    "moderate_feedback",
]
