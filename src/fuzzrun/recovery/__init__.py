"""Correction strategies and output-suggestion parsing."""

from .strategies import (
    FOLLOW_UP_STRATEGIES,
    BaseCommandStrategy,
    BranchNameStrategy,
    CorrectionContext,
    CorrectionProposal,
    CorrectionStrategy,
    ScriptNameStrategy,
    SubcommandStrategy,
)
from .suggestions import is_pathspec_error, is_script_error, parse_suggestion

__all__ = [
    "FOLLOW_UP_STRATEGIES",
    "BaseCommandStrategy",
    "BranchNameStrategy",
    "CorrectionContext",
    "CorrectionProposal",
    "CorrectionStrategy",
    "ScriptNameStrategy",
    "SubcommandStrategy",
    "is_pathspec_error",
    "is_script_error",
    "parse_suggestion",
]
