"""Runtime configuration for the correction engine."""

from __future__ import annotations

import logging
import math
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, field

from fuzzrun.sources.subcommands import DEFAULT_PRIORITY_BASES

logger = logging.getLogger(__name__)

ENV_MAX_DISTANCE = "FUZZRUN_MAX_DISTANCE"
ENV_PREFER_BASES = "FUZZRUN_PREFER_BASES"
ENV_ALLOW_ANY_SUBCOMMANDS = "FUZZRUN_ALLOW_ANY_SUBCOMMANDS"

DEFAULT_MAX_DISTANCE = 1


def parse_max_distance(raw: str | None) -> int:
    """Coerce a max-distance setting to an integer of at least 1.

    Anything that is not a finite number falls back to the default.
    """
    if raw is None:
        return DEFAULT_MAX_DISTANCE
    try:
        value = float(raw.strip() or 0)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {ENV_MAX_DISTANCE}={raw!r}")
        return DEFAULT_MAX_DISTANCE
    if not math.isfinite(value):
        return DEFAULT_MAX_DISTANCE
    return max(1, int(value))


def parse_priority_bases(raw: str | None) -> frozenset[str]:
    """Split a comma-separated list of preferred base names."""
    if not raw:
        return frozenset()
    return frozenset(
        token.strip().lower() for token in raw.split(",") if token.strip()
    )


@dataclass(frozen=True)
class FuzzRunConfig:
    """Settings threaded through every correction attempt."""

    # Edit distance bound
    max_distance: int = DEFAULT_MAX_DISTANCE

    # Tie-break preference set used by the matcher
    priority_bases: frozenset[str] = field(default_factory=lambda: DEFAULT_PRIORITY_BASES)

    # Attempt subcommand fixes for bases missing from the static dictionary
    allow_any_subcommand: bool = False

    platform: str = sys.platform

    def __post_init__(self) -> None:
        if self.max_distance < 1:
            object.__setattr__(self, "max_distance", 1)

    @property
    def windows(self) -> bool:
        """Whether the PowerShell and PATHEXT conventions apply."""
        return self.platform.startswith("win")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> FuzzRunConfig:
        """Build a configuration from ``FUZZRUN_*`` environment variables.

        Args:
            environ: Mapping to read instead of ``os.environ``

        Returns:
            Populated configuration
        """
        env = os.environ if environ is None else environ
        extra = parse_priority_bases(env.get(ENV_PREFER_BASES))
        return cls(
            max_distance=parse_max_distance(env.get(ENV_MAX_DISTANCE)),
            priority_bases=DEFAULT_PRIORITY_BASES | extra,
            allow_any_subcommand=env.get(ENV_ALLOW_ANY_SUBCOMMANDS) == "1",
        )
