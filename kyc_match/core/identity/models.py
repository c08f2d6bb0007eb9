"""
Domain models for identity name matching.

These are pure data models with no dependencies.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any


class MatchReason(str, Enum):
    """Human-readable outcome of a name comparison."""

    MISSING_DATA = "Missing name data"
    EXACT = "Exact match"
    HIGH_SIMILARITY = "High similarity match"
    PARTIAL = "Partial match - manual review needed"
    NO_MATCH = "No significant match found"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class MatchThresholds:
    """
    Cut-off values used by the name matcher.

    The defaults reproduce the behaviour of the upload screen and should only
    be overridden through configuration.
    """
    match: float = 0.8
    """Confidence at or above which the names are considered the same person"""

    review: float = 0.5
    """Confidence at or above which a mismatch is sent for manual review"""

    fuzzy_token: float = 0.8
    """Token similarity that must be exceeded for a fuzzy token match"""

    min_fuzzy_length: int = 3
    """Both tokens need at least this many characters to be compared fuzzily"""


@dataclass(frozen=True, slots=True)
class NameComparisonResult:
    """
    Result of comparing an OCR-extracted name with a profile name.

    Example:
        NameComparisonResult(is_match=False, confidence=0.5,
                             reason=MatchReason.PARTIAL)
    """
    is_match: bool
    """Whether the names are considered to refer to the same person"""

    confidence: float
    """Confidence score (0.0 to 1.0)"""

    reason: MatchReason
    """Which classification band the confidence fell into"""

    @property
    def percent(self) -> int:
        """Confidence as shown to the owner, rounded half up to a whole percentage."""
        return int(math.floor(self.confidence * 100 + 0.5))

    def to_record(self) -> dict[str, Any]:
        return {
            "isMatch": self.is_match,
            "confidence": self.confidence,
            "reason": self.reason.value,
        }
