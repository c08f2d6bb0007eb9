"""
String distance primitives used by the name matcher.

All functions are pure and have no I/O dependencies.
"""

from __future__ import annotations


def edit_distance(a: str, b: str) -> int:
    """
    Levenshtein distance between two strings.

    Counts the single-character insertions, deletions and substitutions needed
    to turn ``a`` into ``b``. Comparison is case-sensitive; callers normalize
    case beforehand.

    The full table is kept: row ``i`` covers the first ``i`` characters of
    ``b`` and column ``j`` the first ``j`` characters of ``a``.

    Examples:
        edit_distance("JON", "JOHN") → 1
        edit_distance("", "ABC") → 3

    Args:
        a: First string
        b: Second string

    Returns:
        Non-negative edit distance
    """
    matrix = [[0] * (len(a) + 1) for _ in range(len(b) + 1)]

    for i in range(len(b) + 1):
        matrix[i][0] = i
    for j in range(len(a) + 1):
        matrix[0][j] = j

    for i in range(1, len(b) + 1):
        for j in range(1, len(a) + 1):
            if b[i - 1] == a[j - 1]:
                matrix[i][j] = matrix[i - 1][j - 1]
            else:
                matrix[i][j] = 1 + min(
                    matrix[i - 1][j - 1],  # substitution
                    matrix[i][j - 1],  # insertion
                    matrix[i - 1][j],  # deletion
                )

    return matrix[len(b)][len(a)]


def similarity_score(a: str, b: str) -> float:
    """
    Case-insensitive similarity ratio in [0, 1] derived from edit distance.

    Computed as ``(len(longer) - distance) / len(longer)``. Two empty strings
    are fully similar.

    Examples:
        similarity_score("smith", "SMITH") → 1.0
        similarity_score("JON", "JOHN") → 0.75
    """
    upper_a = a.upper()
    upper_b = b.upper()

    if len(upper_a) > len(upper_b):
        longer, shorter = upper_a, upper_b
    else:
        longer, shorter = upper_b, upper_a

    if not longer:
        return 1.0

    distance = edit_distance(longer, shorter)
    return (len(longer) - distance) / len(longer)
