"""Value object returned by every moderation check."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any


@dataclass(frozen=True)
class ModerationResult:
    """Verdict produced by a single moderation check or the whole pipeline.

    Attributes:
        flagged: True if the text should be rejected.
        provider: Label of the check that produced the verdict.
        reason: Human-readable explanation.
        details: Optional per-check breakdown (check name -> fired).
    """

    flagged: bool
    provider: str
    reason: str
    details: Mapping[str, bool] | None = None

    def __post_init__(self) -> None:
        if self.details is not None:
            object.__setattr__(self, "details", MappingProxyType(dict(self.details)))

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-friendly representation, omitting empty details."""
        data: dict[str, Any] = {
            "flagged": self.flagged,
            "provider": self.provider,
            "reason": self.reason,
        }
        if self.details is not None:
            data["details"] = dict(self.details)
        return data
