"""
Name matching for KYC identity documents.

Compares the name an OCR service read from an identity document with the
name stored on the user's profile. The comparison tolerates:
- Case and surrounding whitespace differences
- Reordered name parts ("SMITH JOHN" vs "JOHN SMITH")
- Small OCR typos in longer name parts

Token pairing is greedy: each extracted token takes the first profile token
that matches, and a profile token may be claimed more than once.

All functions are pure and have no I/O dependencies.
"""

from __future__ import annotations

import re
from typing import Optional, Sequence

from .distance import similarity_score
from .models import MatchReason, MatchThresholds, NameComparisonResult

_WHITESPACE = re.compile(r"\s+")

DEFAULT_THRESHOLDS = MatchThresholds()


def normalize_name(value: str) -> str:
    """
    Normalize a name for comparison: uppercase, then trim.

    Examples:
        "  john smith " → "JOHN SMITH"
    """
    return value.upper().strip()


def tokenize_name(value: str) -> list[str]:
    """
    Split a normalized name into its parts, dropping empty tokens.

    Examples:
        "JOHN   A  SMITH" → ["JOHN", "A", "SMITH"]
        "" → []
    """
    return [part for part in _WHITESPACE.split(value) if part]


def match_token(
    token: str,
    candidates: Sequence[str],
    thresholds: MatchThresholds = DEFAULT_THRESHOLDS,
) -> float:
    """
    Score one extracted token against the profile tokens.

    Candidates are tried in order and the first acceptable one wins:
    1. Exact equality scores 1.0
    2. If both tokens are long enough, a similarity above the fuzzy threshold
       scores that similarity

    Args:
        token: Normalized token from the extracted name
        candidates: Normalized tokens from the profile name
        thresholds: Fuzzy threshold and minimum token length

    Returns:
        1.0, the fuzzy similarity, or 0.0 when nothing matched
    """
    for candidate in candidates:
        if token == candidate:
            return 1.0
        if len(token) >= thresholds.min_fuzzy_length and len(candidate) >= thresholds.min_fuzzy_length:
            similarity = similarity_score(token, candidate)
            if similarity > thresholds.fuzzy_token:
                return similarity
    return 0.0


class NameMatcher:
    """
    Decides whether an OCR name and a profile name belong to the same person.

    Usage:
        matcher = NameMatcher()
        result = matcher.compare("SMITH JOHN", "John Smith")
        if result.is_match:
            print(f"{result.reason} ({result.percent}%)")
    """

    def __init__(self, thresholds: Optional[MatchThresholds] = None) -> None:
        self.thresholds = thresholds or DEFAULT_THRESHOLDS

    def compare(self, extracted_name: Optional[str], profile_name: Optional[str]) -> NameComparisonResult:
        """
        Compare an extracted name with a profile name.

        Steps are applied in order:
        1. Missing name on either side (confidence: 0)
        2. Exact match after normalization (confidence: 1.0)
        3. Token matching, confidence = matched parts / max part count

        Never raises; missing data is a classified outcome.

        Args:
            extracted_name: Name read from the document, may be None or empty
            profile_name: Name on the user's profile, may be None or empty

        Returns:
            NameComparisonResult with verdict, confidence and reason
        """
        if not extracted_name or not profile_name:
            return NameComparisonResult(is_match=False, confidence=0.0, reason=MatchReason.MISSING_DATA)

        normalized_extracted = normalize_name(extracted_name)
        normalized_profile = normalize_name(profile_name)

        if normalized_extracted == normalized_profile:
            return NameComparisonResult(is_match=True, confidence=1.0, reason=MatchReason.EXACT)

        extracted_parts = tokenize_name(normalized_extracted)
        profile_parts = tokenize_name(normalized_profile)

        total_parts = max(len(extracted_parts), len(profile_parts))
        if total_parts == 0:
            return self._classify(0.0)

        match_count = sum(match_token(part, profile_parts, self.thresholds) for part in extracted_parts)
        return self._classify(match_count / total_parts)

    def _classify(self, confidence: float) -> NameComparisonResult:
        if confidence >= self.thresholds.match:
            return NameComparisonResult(is_match=True, confidence=confidence, reason=MatchReason.HIGH_SIMILARITY)
        if confidence >= self.thresholds.review:
            return NameComparisonResult(is_match=False, confidence=confidence, reason=MatchReason.PARTIAL)
        return NameComparisonResult(is_match=False, confidence=confidence, reason=MatchReason.NO_MATCH)


_default_matcher = NameMatcher()


def compare_names(extracted_name: Optional[str], profile_name: Optional[str]) -> NameComparisonResult:
    """Compare two names with the default thresholds."""
    return _default_matcher.compare(extracted_name, profile_name)
