"""
Identity name matching for KYC documents.

This module handles:
- Name normalization and tokenization
- Edit distance and similarity scoring
- Token-level matching of an OCR name against a profile name
- Classification into match / manual review / no match

All functions are pure and safe to call from any thread.
"""

from __future__ import annotations

from .distance import edit_distance, similarity_score
from .matching import (
    NameMatcher,
    compare_names,
    match_token,
    normalize_name,
    tokenize_name,
)
from .models import MatchReason, MatchThresholds, NameComparisonResult

__all__ = [
    "MatchReason",
    "MatchThresholds",
    "NameComparisonResult",
    "NameMatcher",
    "compare_names",
    "edit_distance",
    "match_token",
    "normalize_name",
    "similarity_score",
    "tokenize_name",
]
