"""Correction strategies - each proposes at most one replacement command."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

from fuzzrun.config import FuzzRunConfig
from fuzzrun.execution.runner import Invocation
from fuzzrun.matching.distance import distance, find_best_match
from fuzzrun.policy.gate import SafetyGate
from fuzzrun.recovery.suggestions import is_pathspec_error, is_script_error, parse_suggestion
from fuzzrun.sources.dynamic import CandidateSources
from fuzzrun.sources.subcommands import (
    BRANCH_SUBCOMMANDS,
    SCRIPT_RUNNERS,
    SUBCOMMAND_BASES,
    VCS_BASES,
    subcommands_for,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorrectionProposal:
    """A replacement invocation suggested by a strategy, not yet executed."""

    invocation: Invocation
    original: Invocation
    strategy: str = ""
    position: int = 0  # argv index of the corrected token

    def __post_init__(self) -> None:
        if self.invocation == self.original:
            raise ValueError(f"Correction of '{self.original}' does not change anything")

    def describe(self) -> tuple[str, str]:
        """The corrected prefix before and after, e.g. ``("git commmit", "git commit")``."""
        end = self.position + 1
        return (
            " ".join(self.original.argv[:end]),
            " ".join(self.invocation.argv[:end]),
        )


@dataclass
class CorrectionContext:
    """Everything a strategy may consult besides the failed command itself."""

    config: FuzzRunConfig
    sources: CandidateSources
    gate: SafetyGate = field(default_factory=SafetyGate)
    cwd: Path = field(default_factory=Path.cwd)


class CorrectionStrategy(ABC):
    """Base class for correction strategies."""

    name: str = "strategy"

    def propose(
        self,
        invocation: Invocation,
        output: str,
        context: CorrectionContext,
    ) -> CorrectionProposal | None:
        """Propose a corrected invocation that the safety gate accepts.

        Args:
            invocation: The command that failed
            output: Its combined stderr and stdout
            context: Configuration, candidate pools and gate

        Returns:
            A proposal, or None when this strategy has no confident fix
        """
        proposal = self._propose(invocation, output, context)
        if proposal is None:
            return None
        if not context.gate.permits(proposal):
            return None
        return proposal

    @abstractmethod
    def _propose(
        self,
        invocation: Invocation,
        output: str,
        context: CorrectionContext,
    ) -> CorrectionProposal | None:
        pass


class BaseCommandStrategy(CorrectionStrategy):
    """Replace a base command that was not found with a close PATH entry."""

    name = "base"

    def _propose(self, invocation, output, context):
        if context.gate.has_risky_args(invocation.args):
            return None
        config = context.config
        match = find_best_match(
            context.sources.path_commands,
            invocation.base,
            config.max_distance,
            config.priority_bases,
        )
        if match is None or match.candidate == invocation.base:
            return None
        if context.gate.is_denied_base(match.candidate):
            logger.debug(f"Refusing to correct '{invocation.base}' to '{match.candidate}'")
            return None
        return CorrectionProposal(
            invocation=invocation.with_base(match.candidate),
            original=invocation,
            strategy=self.name,
            position=0,
        )


class SubcommandStrategy(CorrectionStrategy):
    """Fix a mistyped subcommand, trusting the tool's own suggestion first."""

    name = "subcommand"

    def _propose(self, invocation, output, context):
        config = context.config
        if invocation.base not in SUBCOMMAND_BASES and not config.allow_any_subcommand:
            return None
        if not invocation.args:
            return None
        attempted = invocation.args[0]
        if attempted.startswith("-"):
            return None
        if context.gate.has_risky_args(invocation.args):
            return None

        limit = config.max_distance
        from_output = parse_suggestion(output)
        # A suggested flag is never a subcommand
        if (
            from_output
            and not from_output.startswith("-")
            and distance(from_output, attempted, limit) <= limit
        ):
            choice = from_output
        else:
            match = find_best_match(
                subcommands_for(invocation.base),
                attempted,
                limit,
                config.priority_bases,
            )
            choice = match.candidate if match else None

        if not choice or choice == attempted or choice.startswith("-"):
            return None
        if distance(choice, attempted, limit) > limit:
            return None
        return CorrectionProposal(
            invocation=invocation.with_arg(0, choice),
            original=invocation,
            strategy=self.name,
            position=1,
        )


class ScriptNameStrategy(CorrectionStrategy):
    """Fix ``<runner> run <script>`` against the scripts in package.json."""

    name = "script"

    def _propose(self, invocation, output, context):
        if invocation.base not in SCRIPT_RUNNERS:
            return None
        args = invocation.args
        if len(args) < 2 or args[0] != "run":
            return None
        script = args[1]
        if not script or script.startswith("-"):
            return None
        if not is_script_error(output):
            return None
        if context.gate.has_risky_args(args):
            return None

        config = context.config
        match = find_best_match(
            context.sources.scripts(context.cwd),
            script,
            config.max_distance,
            config.priority_bases,
        )
        if match is None or match.candidate == script:
            return None
        return CorrectionProposal(
            invocation=invocation.with_arg(1, match.candidate),
            original=invocation,
            strategy=self.name,
            position=2,
        )


class BranchNameStrategy(CorrectionStrategy):
    """Fix the branch in ``git checkout|switch <branch>`` when git finds no match."""

    name = "branch"

    def _propose(self, invocation, output, context):
        if invocation.base not in VCS_BASES:
            return None
        args = invocation.args
        if len(args) < 2 or args[0] not in BRANCH_SUBCOMMANDS:
            return None
        branch = args[1]
        if not branch or branch.startswith("-"):
            return None
        if not is_pathspec_error(output):
            return None
        if context.gate.has_risky_args(args):
            return None

        config = context.config
        match = find_best_match(
            context.sources.branches(context.cwd),
            branch,
            config.max_distance,
            config.priority_bases,
        )
        if match is None or match.candidate == branch:
            return None
        return CorrectionProposal(
            invocation=invocation.with_arg(1, match.candidate),
            original=invocation,
            strategy=self.name,
            position=2,
        )


# Tried in this order after a non-zero exit
FOLLOW_UP_STRATEGIES: tuple[CorrectionStrategy, ...] = (
    SubcommandStrategy(),
    ScriptNameStrategy(),
    BranchNameStrategy(),
)
