# src/trustboard/models/__init__.py
"""SQLAlchemy models for the Trustboard application."""

from .feedback import Feedback

__all__ = ["Feedback"]
