"""Executable names reachable on the search path."""

from __future__ import annotations

import logging
import os
import sys

logger = logging.getLogger(__name__)

DEFAULT_PATHEXT = ".COM;.EXE;.BAT;.CMD"


def list_path_commands(
    path: str | None = None,
    pathext: str | None = None,
    windows: bool | None = None,
) -> frozenset[str]:
    """Collect command names from every directory on ``PATH``.

    On Windows only files with an executable extension count, and the
    extension is stripped. Elsewhere every non-directory entry is a name.

    Args:
        path: Search path to scan (defaults to ``$PATH``)
        pathext: Allowed extensions (defaults to ``$PATHEXT``)
        windows: Force the Windows convention on or off

    Returns:
        Snapshot of command names
    """
    if path is None:
        path = os.environ.get("PATH", "")
    if pathext is None:
        pathext = os.environ.get("PATHEXT") or DEFAULT_PATHEXT
    if windows is None:
        windows = sys.platform.startswith("win")

    separator = ";" if windows else os.pathsep
    allowed_exts = {ext for ext in pathext.lower().split(";") if ext}

    names: set[str] = set()
    for entry in filter(None, path.split(separator)):
        try:
            with os.scandir(entry) as items:
                for item in items:
                    if item.is_dir():
                        continue
                    if windows:
                        stem, ext = os.path.splitext(item.name)
                        if not stem:
                            continue
                        if ext and ext.lower() not in allowed_exts:
                            continue
                        names.add(stem)
                    else:
                        names.add(item.name)
        except OSError as e:
            logger.debug(f"Skipping unreadable PATH entry {entry}: {e}")

    logger.debug(f"Collected {len(names)} commands from PATH")
    return frozenset(names)
