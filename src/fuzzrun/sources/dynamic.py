"""Candidate pools discovered on demand: project scripts and git branches."""

from __future__ import annotations

import json
import logging
import subprocess
from collections.abc import Callable, Iterable
from pathlib import Path

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"


class SourceError(Exception):
    """A collaborator could not produce its candidate pool."""


def find_manifest(start_dir: str | Path) -> Path | None:
    """Search ``start_dir`` and its parents for a package manifest."""
    current = Path(start_dir).resolve()
    for directory in (current, *current.parents):
        candidate = directory / MANIFEST_NAME
        if candidate.is_file():
            return candidate
    return None


def load_package_scripts(start_dir: str | Path) -> list[str]:
    """Script names from the nearest manifest.

    Raises:
        SourceError: If the manifest is missing, unreadable or malformed
    """
    manifest = find_manifest(start_dir)
    if manifest is None:
        raise SourceError(f"No {MANIFEST_NAME} found above {start_dir}")

    try:
        data = json.loads(manifest.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
        raise SourceError(f"Failed to read {manifest}: {e}") from e

    scripts = data.get("scripts") if isinstance(data, dict) else None
    if scripts is None:
        return []
    if not isinstance(scripts, dict):
        raise SourceError(f"'scripts' in {manifest} is not an object")
    return list(scripts)


def read_package_scripts(start_dir: str | Path) -> list[str]:
    """Like :func:`load_package_scripts` but empty on any failure."""
    try:
        return load_package_scripts(start_dir)
    except SourceError as e:
        logger.debug(str(e))
        return []


def list_git_branches(cwd: str | Path | None = None) -> list[str]:
    """Local branch names, or an empty list if git cannot list them."""
    try:
        result = subprocess.run(
            ["git", "branch", "--format=%(refname:short)"],
            cwd=cwd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as e:
        logger.debug(f"Could not run git to list branches: {e}")
        return []

    if result.returncode != 0:
        logger.debug(f"git branch exited with {result.returncode}")
        return []

    return [line.strip() for line in result.stdout.splitlines() if line.strip()]


class CandidateSources:
    """Candidate pools for a single run.

    The PATH snapshot is taken once and shared by every strategy. Script and
    branch pools are fetched lazily and cached per working directory.
    """

    def __init__(
        self,
        path_commands: Iterable[str],
        script_reader: Callable[[Path], Iterable[str]] = read_package_scripts,
        branch_lister: Callable[[Path], Iterable[str]] = list_git_branches,
    ) -> None:
        """Initialize sources.

        Args:
            path_commands: Executable names found on the search path
            script_reader: Returns script names for a working directory
            branch_lister: Returns branch names for a working directory
        """
        self.path_commands = frozenset(path_commands)
        self._script_reader = script_reader
        self._branch_lister = branch_lister
        self._scripts: dict[Path, frozenset[str]] = {}
        self._branches: dict[Path, frozenset[str]] = {}

    def scripts(self, cwd: str | Path) -> frozenset[str]:
        """Script names for the manifest governing ``cwd``."""
        key = Path(cwd)
        if key not in self._scripts:
            self._scripts[key] = self._fetch("scripts", self._script_reader, key)
        return self._scripts[key]

    def branches(self, cwd: str | Path) -> frozenset[str]:
        """Branch names of the repository containing ``cwd``."""
        key = Path(cwd)
        if key not in self._branches:
            self._branches[key] = self._fetch("branches", self._branch_lister, key)
        return self._branches[key]

    def _fetch(
        self,
        kind: str,
        reader: Callable[[Path], Iterable[str]],
        cwd: Path,
    ) -> frozenset[str]:
        try:
            pool = frozenset(reader(cwd))
        except Exception as e:
            logger.debug(f"Failed to collect {kind} for {cwd}: {e}")
            return frozenset()
        logger.debug(f"Collected {len(pool)} {kind} for {cwd}")
        return pool
