# src/trustboard/api/v1/endpoints/system.py
"""System and transparency endpoints for the Trustboard API."""

from fastapi import APIRouter

from trustboard.core.settings import settings
from trustboard.services.rule_filter import BLOCKED_TERMS, MAX_TEXT_LENGTH

router = APIRouter(prefix="/system", tags=["system"])


@router.get("/config")
async def get_public_config() -> dict[str, object]:
    """Return a sanitized snapshot of public runtime configuration.

    Excludes secrets and connection strings; suitable for transparency UIs.

    Returns:
        Dictionary containing app metadata, moderation settings and
        email notification status
    """
    return {
        "app": {
            "name": settings.app_name,
            "version": settings.app_version,
            "environment": settings.environment,
            "debug": settings.debug,
        },
        "moderation": {
            "ai_enabled": settings.gemini_configured,
            "ai_model": settings.gemini_model,
            "timeout_ms": settings.moderation_timeout_ms,
            "max_length": MAX_TEXT_LENGTH,
            "blocked_term_count": len(BLOCKED_TERMS),
        },
        "email": {
            "enabled": settings.email_configured,
            "notifications": bool(settings.feedback_notify_email),
        },
    }
