"""Decision pipeline: run a command once, then attempt a single correction."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from fuzzrun.config import FuzzRunConfig
from fuzzrun.execution.runner import CommandExecutor, ExecutionResult, Invocation
from fuzzrun.matching.distance import find_best_match
from fuzzrun.policy.gate import SafetyGate
from fuzzrun.recovery.strategies import (
    FOLLOW_UP_STRATEGIES,
    BaseCommandStrategy,
    CorrectionContext,
    CorrectionProposal,
    CorrectionStrategy,
)
from fuzzrun.sources.dynamic import CandidateSources

logger = logging.getLogger(__name__)

POWERSHELL_GET_PREFIX = "get-"


class PipelineState(Enum):
    """States of a single top-level run."""

    INIT = "init"
    RAN_ORIGINAL = "ran_original"
    SUCCESS = "success"
    FAILED_NOT_FOUND = "failed_not_found"
    FAILED_OTHER = "failed_other"
    CORRECTING = "correcting"
    DONE = "done"


class FailureKind(Enum):
    """Why the original command failed."""

    SPAWN_NOT_FOUND = "spawn_not_found"
    NON_ZERO_EXIT = "non_zero_exit"


@dataclass
class PipelineOutcome:
    """What happened during a run and which result is final."""

    final: ExecutionResult
    executions: list[tuple[Invocation, ExecutionResult]] = field(default_factory=list)
    corrections: list[CorrectionProposal] = field(default_factory=list)
    states: list[PipelineState] = field(default_factory=list)
    failure: FailureKind | None = None
    not_found: bool = False

    @property
    def exit_code(self) -> int:
        return self.final.exit_code

    @property
    def corrected(self) -> bool:
        return bool(self.corrections)


def normalize_powershell_alias(
    base: str,
    path_commands: frozenset[str],
    max_distance: int = 1,
    priority: frozenset[str] = frozenset(),
) -> str:
    """Strip a PowerShell ``Get-`` prefix when the remainder is a real command.

    ``Get-Foo`` is kept as-is if it is itself on PATH.
    """
    if not base:
        return base
    lowered = base.lower()
    if not lowered.startswith(POWERSHELL_GET_PREFIX):
        return base
    if base in path_commands or lowered in path_commands:
        return base
    stripped = base[len(POWERSHELL_GET_PREFIX):]
    if not stripped:
        return base
    if stripped in path_commands:
        return stripped
    if find_best_match(path_commands, stripped, max_distance, priority):
        return stripped
    return base


class CorrectionPipeline:
    """State machine that runs an invocation and applies at most one fix.

    The only chained correction is a base-command fix followed by one
    follow-up fix when the corrected command itself exits non-zero.
    """

    def __init__(
        self,
        config: FuzzRunConfig,
        sources: CandidateSources,
        executor: Callable[[Invocation], ExecutionResult] | None = None,
        gate: SafetyGate | None = None,
        cwd: str | Path | None = None,
        on_correction: Callable[[CorrectionProposal], None] | None = None,
        base_strategy: CorrectionStrategy | None = None,
        follow_up_strategies: Sequence[CorrectionStrategy] = FOLLOW_UP_STRATEGIES,
    ) -> None:
        """Initialize the pipeline.

        Args:
            config: Engine settings
            sources: Candidate pools for this run
            executor: Runs an invocation and captures its result
            gate: Safety gate applied to every proposal
            cwd: Working directory used for dynamic pools
            on_correction: Called just before a corrected command runs
            base_strategy: Strategy used when the command was not found
            follow_up_strategies: Strategies tried after a non-zero exit, in order
        """
        self.config = config
        self.sources = sources
        self.cwd = Path(cwd) if cwd else Path.cwd()
        self.executor = executor or CommandExecutor(cwd=self.cwd, windows=config.windows)
        self.gate = gate or SafetyGate()
        self.on_correction = on_correction
        self.base_strategy = base_strategy or BaseCommandStrategy()
        self.follow_up_strategies = tuple(follow_up_strategies)

        self._handlers: dict[PipelineState, Callable[[], PipelineState]] = {
            PipelineState.INIT: self._on_init,
            PipelineState.RAN_ORIGINAL: self._on_ran_original,
            PipelineState.SUCCESS: self._on_success,
            PipelineState.FAILED_NOT_FOUND: self._on_failed_not_found,
            PipelineState.FAILED_OTHER: self._on_failed_other,
            PipelineState.CORRECTING: self._on_correcting,
        }
        self._reset(None)

    @property
    def context(self) -> CorrectionContext:
        return CorrectionContext(
            config=self.config,
            sources=self.sources,
            gate=self.gate,
            cwd=self.cwd,
        )

    def run(self, invocation: Invocation) -> PipelineOutcome:
        """Execute ``invocation`` and correct it if it fails.

        Args:
            invocation: The user's command

        Returns:
            Outcome holding the final result and every execution performed
        """
        self._reset(invocation)
        state = PipelineState.INIT
        while state is not PipelineState.DONE:
            self._states.append(state)
            state = self._handlers[state]()
        self._states.append(PipelineState.DONE)

        return PipelineOutcome(
            final=self._final,
            executions=list(self._executions),
            corrections=list(self._corrections),
            states=list(self._states),
            failure=self._failure,
            not_found=self._not_found,
        )

    def _reset(self, invocation: Invocation | None) -> None:
        self._invocation = invocation
        self._target: tuple[Invocation, ExecutionResult] | None = None
        self._final: ExecutionResult | None = None
        self._executions: list[tuple[Invocation, ExecutionResult]] = []
        self._corrections: list[CorrectionProposal] = []
        self._states: list[PipelineState] = []
        self._failure: FailureKind | None = None
        self._not_found = False

    def _execute(self, invocation: Invocation) -> ExecutionResult:
        result = self.executor(invocation)
        self._executions.append((invocation, result))
        return result

    def _apply(self, proposal: CorrectionProposal) -> ExecutionResult:
        before, after = proposal.describe()
        logger.info(f"Auto-correcting '{before}' -> '{after}' ({proposal.strategy})")
        if self.on_correction:
            self.on_correction(proposal)
        self._corrections.append(proposal)
        return self._execute(proposal.invocation)

    def _propose(
        self,
        strategy: CorrectionStrategy,
        invocation: Invocation,
        output: str,
    ) -> CorrectionProposal | None:
        # Correction must never replace the user's own result with a crash
        try:
            return strategy.propose(invocation, output, self.context)
        except Exception:
            logger.exception(f"{strategy.name} correction failed for '{invocation}'")
            return None

    # State handlers

    def _on_init(self) -> PipelineState:
        if self.config.windows:
            base = normalize_powershell_alias(
                self._invocation.base,
                self.sources.path_commands,
                self.config.max_distance,
                self.config.priority_bases,
            )
            if base != self._invocation.base:
                logger.debug(f"Normalized PowerShell alias '{self._invocation.base}' -> '{base}'")
                self._invocation = self._invocation.with_base(base)
        return PipelineState.RAN_ORIGINAL

    def _on_ran_original(self) -> PipelineState:
        result = self._execute(self._invocation)
        self._final = result
        self._target = (self._invocation, result)
        if result.ok:
            return PipelineState.SUCCESS
        if result.not_found:
            self._failure = FailureKind.SPAWN_NOT_FOUND
            return PipelineState.FAILED_NOT_FOUND
        self._failure = FailureKind.NON_ZERO_EXIT
        return PipelineState.FAILED_OTHER

    def _on_success(self) -> PipelineState:
        return PipelineState.DONE

    def _on_failed_not_found(self) -> PipelineState:
        proposal = self._propose(self.base_strategy, self._invocation, "")
        if proposal is None:
            self._not_found = True
            return PipelineState.DONE

        result = self._apply(proposal)
        self._final = result
        if result.ok or result.spawn_error is not None:
            return PipelineState.DONE
        self._target = (proposal.invocation, result)
        return PipelineState.CORRECTING

    def _on_failed_other(self) -> PipelineState:
        return PipelineState.CORRECTING

    def _on_correcting(self) -> PipelineState:
        invocation, result = self._target
        output = result.combined_output
        for strategy in self.follow_up_strategies:
            proposal = self._propose(strategy, invocation, output)
            if proposal is not None:
                self._final = self._apply(proposal)
                break
        return PipelineState.DONE
