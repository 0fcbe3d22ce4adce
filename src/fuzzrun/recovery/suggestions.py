"""Extract a tool's own "did you mean" hint from its output."""

from __future__ import annotations

import re

# Earlier patterns take precedence
SUGGESTION_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"The most similar command is\s+(\S+)", re.IGNORECASE),
    re.compile(r"The most similar commands are:\s*\n\s*(\S+)", re.IGNORECASE),
    re.compile(r"Did you mean\s+['\"]?([A-Za-z0-9:_-]+)['\"]?\??", re.IGNORECASE),
    re.compile(r"Unknown command\s+['\"]?([A-Za-z0-9:_-]+)['\"]?\??", re.IGNORECASE),
    re.compile(r"Perhaps you meant\s+['\"]?([A-Za-z0-9:_-]+)['\"]?\??", re.IGNORECASE),
)

SCRIPT_ERROR_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"missing script", re.IGNORECASE),
    re.compile(r"unknown script", re.IGNORECASE),
    re.compile(r"script.*not found", re.IGNORECASE),
    re.compile(r"couldn'?t find.*script", re.IGNORECASE),
    re.compile(r"command \".*\" not found", re.IGNORECASE),
)

PATHSPEC_PATTERN = re.compile(r"pathspec .* did not match", re.IGNORECASE)


def parse_suggestion(text: str | None) -> str | None:
    """Return the token suggested by the first matching phrase, if any.

    Args:
        text: Combined stderr and stdout of the failed command

    Returns:
        Suggested token or None
    """
    if not text:
        return None
    for pattern in SUGGESTION_PATTERNS:
        match = pattern.search(text)
        if match and match.group(1):
            return match.group(1)
    return None


def is_script_error(text: str) -> bool:
    """Whether the output reports an unknown project script."""
    return any(pattern.search(text) for pattern in SCRIPT_ERROR_PATTERNS)


def is_pathspec_error(text: str) -> bool:
    """Whether git reported that a pathspec matched nothing."""
    return bool(PATHSPEC_PATTERN.search(text))
