"""Value types shared by the verification engine."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

REASON_UNAVAILABLE = "Image verification unavailable"
REASON_FAILED = "Verification failed - please try again"
REASON_TIMEOUT = "Verification timed out - please try again"


class IssueCategory(str, Enum):
    road_damage = "road_damage"
    sanitation  = "sanitation"
    lighting    = "lighting"
    graffiti    = "graffiti"
    sidewalk    = "sidewalk"
    vegetation  = "vegetation"
    other       = "other"

    @classmethod
    def parse(cls, value: Optional[Any]) -> "IssueCategory":
        """Map any input onto the taxonomy; unknown values become ``other``."""
        if isinstance(value, cls):
            return value
        key = str(value or "").strip().lower()
        try:
            return cls(key)
        except ValueError:
            return cls.other


class LifecycleState(str, Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING  = "initializing"
    READY         = "ready"
    FAILED        = "failed"


@dataclass(frozen=True)
class LabelScore:
    """One classifier output row."""
    label: str
    score: float


@dataclass(frozen=True)
class VerificationResult:
    is_valid:   bool
    confidence: int
    reason:     str

    @classmethod
    def rejected(cls, reason: str) -> "VerificationResult":
        return cls(is_valid=False, confidence=0, reason=reason)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "isValid": self.is_valid,
            "confidence": self.confidence,
            "reason": self.reason,
        }

    def summary(self) -> str:
        status = "✅ ACCEPT" if self.is_valid else "❌ REJECT"
        return f"{status} ({self.confidence}%) {self.reason}"
