"""Edit-distance matching against candidate pools."""

from .distance import MatchResult, distance, find_best_match, normalize_token

__all__ = ["MatchResult", "distance", "find_best_match", "normalize_token"]
