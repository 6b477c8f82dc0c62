# src/trustboard/services/moderation.py
"""Moderation pipeline for submitted feedback.

Order of checks (fast to slow):
1) Rule-based filter (local): bad words and simple spam patterns.
2) Google Gemini (remote), only when an API key is configured.

Any AI-side failure resolves to a non-flagged result.
"""

from __future__ import annotations

import logging
from typing import Protocol

from trustboard.services import rule_filter
from trustboard.services.gemini import get_gemini_client
from trustboard.services.moderation_result import ModerationResult

logger = logging.getLogger(__name__)

PROVIDER_VALIDATION = "validation"
PROVIDER_RULES_ONLY = "Rule-based only"
PROVIDER_AI_FALLBACK = "Gemini Failure Fallback"
PROVIDER_ALL_PASSED = "All Checks Passed"


class TextClassifier(Protocol):
    """Remote classifier consulted after the local rules pass."""

    @property
    def configured(self) -> bool: ...

    async def classify(self, text: str) -> ModerationResult: ...


class ModerationPipeline:
    """Runs the rule filter, then the AI classifier, first flag wins."""

    def __init__(self, classifier: TextClassifier | None = None) -> None:
        self._classifier = classifier

    @property
    def classifier(self) -> TextClassifier:
        if self._classifier is None:
            return get_gemini_client()
        return self._classifier

    async def moderate(self, text: str | None) -> ModerationResult:
        """Moderate *text* and return a verdict. Never raises.

        Args:
            text: Feedback text supplied by the caller

        Returns:
            ModerationResult from the first check that flagged, or a clean result
        """
        if not text or not text.strip():
            return ModerationResult(flagged=False, provider=PROVIDER_VALIDATION, reason="Empty text")

        rule_result = rule_filter.evaluate(text)
        if rule_result.flagged:
            logger.info("Feedback flagged by rule filter: %s", dict(rule_result.details or {}))
            return rule_result

        classifier = self.classifier
        if not classifier.configured:
            return ModerationResult(flagged=False, provider=PROVIDER_RULES_ONLY, reason="Clean")

        try:
            ai_result = await classifier.classify(text)
        except Exception as exc:
            logger.warning("Moderation provider failed (geminiModeration): %s", exc)
            return ModerationResult(
                flagged=False,
                provider=PROVIDER_AI_FALLBACK,
                reason="Clean (AI check failed)",
            )

        if ai_result.flagged:
            logger.info("Feedback flagged by %s: %s", ai_result.provider, ai_result.reason)
            return ai_result

        return ModerationResult(flagged=False, provider=PROVIDER_ALL_PASSED, reason="Clean")


_default_pipeline = ModerationPipeline()


def get_moderation_pipeline() -> ModerationPipeline:
    """Return the shared moderation pipeline."""
    return _default_pipeline


async def moderate_feedback(text: str | None) -> ModerationResult:
    """Run *text* through the shared moderation pipeline."""
    return await _default_pipeline.moderate(text)
