# src/trustboard/api/v1/endpoints/deps.py
"""Shared FastAPI dependencies for v1 endpoints."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from trustboard.db.session import get_db
from trustboard.services.email_notifier import EmailNotifier, get_email_notifier
from trustboard.services.moderation import ModerationPipeline, get_moderation_pipeline


def get_moderation_pipeline_dep() -> ModerationPipeline:
    """Return the shared moderation pipeline."""
    return get_moderation_pipeline()


def get_email_notifier_dep() -> EmailNotifier:
    """Return the shared email notifier."""
    return get_email_notifier()


SessionDep = Annotated[Session, Depends(get_db)]
PipelineDep = Annotated[ModerationPipeline, Depends(get_moderation_pipeline_dep)]
NotifierDep = Annotated[EmailNotifier, Depends(get_email_notifier_dep)]
