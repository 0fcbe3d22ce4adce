"""Tests for the correction pipeline."""

from pathlib import Path

import pytest

from fuzzrun.config import FuzzRunConfig
from fuzzrun.core import (
    CorrectionPipeline,
    FailureKind,
    PipelineState,
    normalize_powershell_alias,
)
from fuzzrun.execution.runner import ExecutionResult, Invocation
from fuzzrun.recovery.strategies import CorrectionStrategy
from fuzzrun.sources.dynamic import CandidateSources

PATH_COMMANDS = frozenset({"git", "npm", "ls", "rm", "python3"})


def ok(stdout: str = "") -> ExecutionResult:
    return ExecutionResult(exit_code=0, stdout=stdout)


def failed(stderr: str = "", exit_code: int = 1, stdout: str = "") -> ExecutionResult:
    return ExecutionResult(exit_code=exit_code, stdout=stdout, stderr=stderr)


def not_found(base: str) -> ExecutionResult:
    return ExecutionResult(
        exit_code=1,
        spawn_error=FileNotFoundError(2, "No such file or directory", base),
    )


class FakeExecutor:
    """Returns canned results by argv and records every call."""
    
    def __init__(self, responses: dict[tuple[str, ...], ExecutionResult]) -> None:
        self.responses = responses
        self.calls: list[Invocation] = []
    
    def __call__(self, invocation: Invocation) -> ExecutionResult:
        self.calls.append(invocation)
        argv = tuple(invocation.argv)
        if argv in self.responses:
            return self.responses[argv]
        if invocation.base in PATH_COMMANDS:
            return failed(f"unexpected call: {invocation}")
        return not_found(invocation.base)


class RaisingStrategy(CorrectionStrategy):
    """Strategy that always blows up."""
    
    name = "raising"
    
    def _propose(self, invocation, output, context):
        raise RuntimeError("boom")


def make_pipeline(executor, config=None, scripts=(), branches=(), **kwargs) -> tuple[CorrectionPipeline, list]:
    announced = []
    sources = CandidateSources(
        PATH_COMMANDS,
        script_reader=lambda cwd: list(scripts),
        branch_lister=lambda cwd: list(branches),
    )
    pipeline = CorrectionPipeline(
        config or FuzzRunConfig(platform="linux"),
        sources,
        executor=executor,
        cwd=Path("."),
        on_correction=announced.append,
        **kwargs,
    )
    return pipeline, announced


class TestSuccessPath:
    """Test commands that succeed first time."""
    
    def test_success_is_final(self) -> None:
        """Test that a successful run is returned untouched."""
        executor = FakeExecutor({("git", "status"): ok("On branch main\n")})
        pipeline, announced = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("git", ("status",)))
        
        assert outcome.exit_code == 0
        assert outcome.final.stdout == "On branch main\n"
        assert len(outcome.executions) == 1
        assert outcome.corrections == []
        assert announced == []
        assert outcome.states == [
            PipelineState.INIT,
            PipelineState.RAN_ORIGINAL,
            PipelineState.SUCCESS,
            PipelineState.DONE,
        ]


class TestNotFound:
    """Test base command correction."""
    
    def test_base_correction(self) -> None:
        """Test gti status running git status."""
        executor = FakeExecutor({("git", "status", "-s"): ok(" M README.md\n")})
        pipeline, announced = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("gti", ("status", "-s")))
        
        assert executor.calls == [
            Invocation("gti", ("status", "-s")),
            Invocation("git", ("status", "-s")),
        ]
        assert outcome.exit_code == 0
        assert outcome.final.stdout == " M README.md\n"
        assert outcome.failure is FailureKind.SPAWN_NOT_FOUND
        assert [p.strategy for p in announced] == ["base"]
        assert outcome.not_found is False
    
    def test_no_correction_reports_not_found(self) -> None:
        """Test that an uncorrectable command surfaces the spawn error."""
        executor = FakeExecutor({})
        pipeline, announced = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("zzzzzz"))
        
        assert len(executor.calls) == 1
        assert outcome.not_found is True
        assert outcome.exit_code == 1
        assert outcome.final.not_found is True
        assert announced == []
    
    def test_denylisted_base_not_corrected(self) -> None:
        """Test that rn is never corrected to rm."""
        executor = FakeExecutor({})
        pipeline, announced = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("rn", ("notes.txt",)))
        
        assert executor.calls == [Invocation("rn", ("notes.txt",))]
        assert outcome.not_found is True
        assert announced == []
    
    def test_risky_args_not_corrected(self) -> None:
        """Test that destructive flags block base correction."""
        executor = FakeExecutor({})
        pipeline, _ = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("gti", ("push", "--force")))
        
        assert len(executor.calls) == 1
        assert outcome.corrections == []
    
    def test_chained_subcommand_fix(self) -> None:
        """Test a base fix followed by one subcommand fix."""
        executor = FakeExecutor({
            ("git", "comit", "-m", "msg"): failed("git: 'comit' is not a git command.", exit_code=1),
            ("git", "commit", "-m", "msg"): ok("[main abc123] msg\n"),
        })
        pipeline, announced = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("gti", ("comit", "-m", "msg")))
        
        assert len(executor.calls) == 3
        assert executor.calls[-1] == Invocation("git", ("commit", "-m", "msg"))
        assert [p.strategy for p in outcome.corrections] == ["base", "subcommand"]
        assert outcome.exit_code == 0
        assert PipelineState.CORRECTING in outcome.states
        assert len(announced) == 2
    
    def test_chain_without_follow_up_fix(self) -> None:
        """Test that the corrected base result is final when nothing else applies."""
        executor = FakeExecutor({
            ("git", "push"): failed("rejected", exit_code=1),
        })
        pipeline, _ = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("gti", ("push",)))
        
        assert len(executor.calls) == 2
        assert outcome.final.stderr == "rejected"
        assert outcome.exit_code == 1
    
    def test_chained_fix_is_not_corrected_again(self) -> None:
        """Test that a failing chained fix is final."""
        executor = FakeExecutor({
            ("npm", "run", "biuld"): failed('npm ERR! Missing script: "biuld"'),
            ("npm", "run", "build"): failed("tsc: error TS2304", exit_code=2),
        })
        pipeline, _ = make_pipeline(executor, scripts=["build", "bundle"])
        
        outcome = pipeline.run(Invocation("nmp", ("run", "biuld")))
        
        assert len(executor.calls) == 3
        assert outcome.exit_code == 2
        assert outcome.final.stderr == "tsc: error TS2304"


class TestNonZeroExit:
    """Test follow-up strategies after an ordinary failure."""
    
    def test_subcommand_fix(self) -> None:
        """Test git commmit becoming git commit."""
        executor = FakeExecutor({
            ("git", "commmit", "-m", "msg"): failed("git: 'commmit' is not a git command."),
            ("git", "commit", "-m", "msg"): ok("committed\n"),
        })
        pipeline, announced = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("git", ("commmit", "-m", "msg")))
        
        assert len(executor.calls) == 2
        assert outcome.final.stdout == "committed\n"
        assert outcome.failure is FailureKind.NON_ZERO_EXIT
        assert announced[0].describe() == ("git commmit", "git commit")
    
    def test_script_fix(self) -> None:
        """Test npm run biuld becoming npm run build."""
        executor = FakeExecutor({
            ("npm", "run", "biuld", "--prod"): failed('npm ERR! Missing script: "biuld"'),
            ("npm", "run", "build", "--prod"): ok("built\n"),
        })
        pipeline, _ = make_pipeline(executor, scripts=["build", "test"])
        
        outcome = pipeline.run(Invocation("npm", ("run", "biuld", "--prod")))
        
        assert executor.calls[-1] == Invocation("npm", ("run", "build", "--prod"))
        assert outcome.exit_code == 0
        assert [p.strategy for p in outcome.corrections] == ["script"]
    
    def test_branch_fix(self) -> None:
        """Test git checkout mian becoming git checkout main."""
        executor = FakeExecutor({
            ("git", "checkout", "mian"): failed(
                "error: pathspec 'mian' did not match any file(s) known to git"
            ),
            ("git", "checkout", "main"): ok("Switched to branch 'main'\n"),
        })
        pipeline, _ = make_pipeline(executor, branches=["main", "develop"])
        
        outcome = pipeline.run(Invocation("git", ("checkout", "mian")))
        
        assert outcome.exit_code == 0
        assert [p.strategy for p in outcome.corrections] == ["branch"]
    
    def test_no_fix_returns_original(self) -> None:
        """Test that an uncorrectable failure is returned unchanged."""
        original = failed("fatal: remote error", exit_code=128, stdout="partial\n")
        executor = FakeExecutor({("git", "push"): original})
        pipeline, announced = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("git", ("push",)))
        
        assert outcome.final is original
        assert outcome.exit_code == 128
        assert len(executor.calls) == 1
        assert announced == []
    
    def test_single_retry(self) -> None:
        """Test that a failing correction is not corrected again."""
        executor = FakeExecutor({
            ("git", "stauts"): failed("The most similar command is\n\tstatus"),
            ("git", "status"): failed("The most similar command is\n\tstash", exit_code=3),
        })
        pipeline, _ = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("git", ("stauts",)))
        
        assert len(executor.calls) == 2
        assert outcome.exit_code == 3
    
    def test_risky_args_suppress_fix(self) -> None:
        """Test that destructive flags keep the original failure."""
        executor = FakeExecutor({("git", "rest", "--hard"): failed("not a git command")})
        pipeline, _ = make_pipeline(executor)
        
        outcome = pipeline.run(Invocation("git", ("rest", "--hard")))
        
        assert len(executor.calls) == 1
        assert outcome.corrections == []
    
    def test_strategy_errors_fail_soft(self) -> None:
        """Test that an exception inside a strategy means no correction."""
        executor = FakeExecutor({("git", "commmit"): failed("boom")})
        pipeline, _ = make_pipeline(executor, follow_up_strategies=[RaisingStrategy()])
        
        outcome = pipeline.run(Invocation("git", ("commmit",)))
        
        assert len(executor.calls) == 1
        assert outcome.exit_code == 1
        assert outcome.corrections == []


class TestPowerShellAlias:
    """Test Get- prefix normalization."""
    
    def test_normalized_on_windows(self) -> None:
        """Test that Get-git runs git on Windows."""
        executor = FakeExecutor({("git", "status"): ok()})
        pipeline, _ = make_pipeline(executor, config=FuzzRunConfig(platform="win32"))
        
        outcome = pipeline.run(Invocation("Get-git", ("status",)))
        
        assert executor.calls == [Invocation("git", ("status",))]
        assert outcome.exit_code == 0
        assert outcome.corrections == []
    
    def test_ignored_elsewhere(self) -> None:
        """Test that the prefix is kept on other platforms."""
        executor = FakeExecutor({})
        pipeline, _ = make_pipeline(executor, config=FuzzRunConfig(platform="linux"))
        
        pipeline.run(Invocation("Get-git", ("status",)))
        
        assert executor.calls[0].base == "Get-git"
    
    @pytest.mark.parametrize("base,path,expected", [
        ("Get-git", {"git"}, "git"),
        ("get-gti", {"git"}, "gti"),  # remainder close to a PATH entry
        ("Get-Content", {"Get-Content", "Content"}, "Get-Content"),
        ("Get-zzzz", {"git"}, "Get-zzzz"),
        ("Get-", {"git"}, "Get-"),
        ("git", {"git"}, "git"),
    ])
    def test_normalize(self, base: str, path: set[str], expected: str) -> None:
        """Test the normalization rules."""
        assert normalize_powershell_alias(base, frozenset(path), 1) == expected
