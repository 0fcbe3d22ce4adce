"""Candidate pools: PATH executables, known subcommands and project names."""

from .dynamic import (
    CandidateSources,
    SourceError,
    find_manifest,
    list_git_branches,
    load_package_scripts,
    read_package_scripts,
)
from .path import list_path_commands
from .subcommands import (
    BRANCH_SUBCOMMANDS,
    COMMON_SUBCOMMANDS,
    DEFAULT_PRIORITY_BASES,
    SCRIPT_RUNNERS,
    SUBCOMMAND_BASES,
    VCS_BASES,
    subcommands_for,
)

__all__ = [
    "CandidateSources",
    "SourceError",
    "find_manifest",
    "list_git_branches",
    "load_package_scripts",
    "read_package_scripts",
    "list_path_commands",
    "BRANCH_SUBCOMMANDS",
    "COMMON_SUBCOMMANDS",
    "DEFAULT_PRIORITY_BASES",
    "SCRIPT_RUNNERS",
    "SUBCOMMAND_BASES",
    "VCS_BASES",
    "subcommands_for",
]
