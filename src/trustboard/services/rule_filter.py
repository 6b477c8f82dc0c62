# src/trustboard/services/rule_filter.py
"""Local rule-based moderation filter.

Scans text against a fixed blocklist and a handful of spam heuristics.
Every check runs on every call so the ``details`` breakdown is complete.
"""

from __future__ import annotations

import re

from trustboard.services.moderation_result import ModerationResult

PROVIDER = "Rule-based Filter"
REASON_FLAGGED = "Content flagged by automated rules"
REASON_CLEAN = "Clean"

MAX_TEXT_LENGTH = 2000

BLOCKED_TERMS: tuple[str, ...] = (
    "spam", "scam", "hate", "abuse", "threat", "violence",
    "die", "stupid", "idiot", "moron", "loser", "ugly",
    "fat", "racist",
)

# Any character except line terminators (LF, CR, LS, PS).
_CHAR = r"[^\n\r\u2028\u2029]"

SUSPICIOUS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(rf"({_CHAR})\1{{5,}}"),  # 6+ repeated characters
    re.compile(r"[A-Z]{15,}"),  # 15+ consecutive uppercase letters
    re.compile(r"\b\d{10,}\b", re.ASCII),  # very long ASCII numbers
    re.compile(rf"({_CHAR}{{1,3}})\1{{4,}}"),  # short chunk repeated 5+ times
)

# Overlaps the first suspicious pattern; kept as its own detail flag.
SPAM_PATTERN = re.compile(rf"({_CHAR})\1{{8,}}")


def contains_blocked_term(text: str) -> bool:
    """Return True if any blocked term occurs in *text*, ignoring case."""
    lowered = text.lower()
    return any(term in lowered for term in BLOCKED_TERMS)


def matches_suspicious_pattern(text: str) -> bool:
    """Return True if any spam heuristic matches *text*."""
    return any(pattern.search(text) for pattern in SUSPICIOUS_PATTERNS)


def evaluate(text: str) -> ModerationResult:
    """Run every local check against *text* and combine the results.

    Args:
        text: Submitted feedback text

    Returns:
        ModerationResult flagged if any check fired, with a per-check breakdown
    """
    bad_words = contains_blocked_term(text)
    suspicious = matches_suspicious_pattern(text)
    too_long = len(text) > MAX_TEXT_LENGTH
    spam = SPAM_PATTERN.search(text) is not None

    flagged = bad_words or suspicious or too_long or spam

    return ModerationResult(
        flagged=flagged,
        provider=PROVIDER,
        reason=REASON_FLAGGED if flagged else REASON_CLEAN,
        details={
            "badWords": bad_words,
            "suspicious": suspicious,
            "tooLong": too_long,
            "spam": spam,
        },
    )
