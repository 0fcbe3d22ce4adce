"""Bounded Damerau-Levenshtein matching for command tokens."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchResult:
    """A candidate within the distance bound."""

    candidate: str
    distance: int


def normalize_token(value: str | None) -> str:
    """Lower-case a token for comparison."""
    return (value or "").lower()


def distance(a: str, b: str, max_distance: int = 2) -> int:
    """Case-insensitive optimal string alignment distance, capped at a bound.

    Insertions, deletions, substitutions and adjacent transpositions each
    cost one edit. As soon as no alignment can stay within ``max_distance``
    the search stops and ``max_distance + 1`` is returned.

    Args:
        a: First token
        b: Second token
        max_distance: Largest distance worth computing exactly

    Returns:
        The edit distance, or ``max_distance + 1`` if it exceeds the bound
    """
    a_norm = normalize_token(a)
    b_norm = normalize_token(b)
    if a_norm == b_norm:
        return 0

    over = max_distance + 1
    if abs(len(a_norm) - len(b_norm)) > max_distance:
        return over

    # rows[i][j] is the distance between a_norm[:i] and b_norm[:j]
    rows = [[0] * (len(b_norm) + 1) for _ in range(len(a_norm) + 1)]
    for i in range(len(a_norm) + 1):
        rows[i][0] = i
    for j in range(len(b_norm) + 1):
        rows[0][j] = j

    for i in range(1, len(a_norm) + 1):
        row_min = over
        for j in range(1, len(b_norm) + 1):
            cost = 0 if a_norm[i - 1] == b_norm[j - 1] else 1
            value = min(
                rows[i - 1][j] + 1,  # deletion
                rows[i][j - 1] + 1,  # insertion
                rows[i - 1][j - 1] + cost,  # substitution
            )
            if (
                i > 1
                and j > 1
                and a_norm[i - 1] == b_norm[j - 2]
                and a_norm[i - 2] == b_norm[j - 1]
            ):
                value = min(value, rows[i - 2][j - 2] + 1)  # transposition
            rows[i][j] = value
            if value < row_min:
                row_min = value
        if row_min > max_distance:
            return over

    return min(rows[len(a_norm)][len(b_norm)], over)


def find_best_match(
    pool: Iterable[str] | None,
    target: str | None,
    max_distance: int = 1,
    priority: Iterable[str] = (),
) -> MatchResult | None:
    """Find the single closest candidate to ``target`` within the bound.

    Ties at the minimum distance are broken only when exactly one of the
    tied candidates is in ``priority``; otherwise the match is ambiguous
    and nothing is returned.

    Args:
        pool: Candidate names
        target: The mistyped token
        max_distance: Largest accepted edit distance
        priority: Names preferred when several candidates tie

    Returns:
        The best match, or None when no unambiguous candidate is in range
    """
    if not pool or not target:
        return None

    best_distance = max_distance + 1
    ties: list[str] = []
    for candidate in set(pool):
        dist = distance(candidate, target, max_distance)
        if dist < best_distance:
            best_distance = dist
            ties = [candidate]
        elif dist == best_distance and dist <= max_distance:
            ties.append(candidate)

    if not ties:
        return None

    if len(ties) > 1:
        preferred_names = {normalize_token(name) for name in priority}
        preferred = [name for name in ties if normalize_token(name) in preferred_names]
        if len(preferred) == 1:
            return MatchResult(candidate=preferred[0], distance=best_distance)
        logger.debug(f"Ambiguous match for {target!r}: {sorted(ties)}")
        return None

    return MatchResult(candidate=ties[0], distance=best_distance)
