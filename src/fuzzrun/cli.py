"""Command-line interface for FuzzRun."""

from __future__ import annotations

import logging
import sys
from dataclasses import replace

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from thefuzz import fuzz, process

from fuzzrun.config import FuzzRunConfig, parse_priority_bases
from fuzzrun.core import CorrectionPipeline, PipelineOutcome
from fuzzrun.execution.runner import ExecutionResult, Invocation
from fuzzrun.matching.distance import distance, find_best_match
from fuzzrun.policy.gate import SafetyGate
from fuzzrun.recovery.strategies import CorrectionProposal
from fuzzrun.sources.dynamic import CandidateSources
from fuzzrun.sources.path import list_path_commands
from fuzzrun.sources.subcommands import subcommands_for

logger = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)

USAGE = "Usage: fuzzrun <command> [args...]"


class PassthroughGroup(click.Group):
    """Group that hands any unknown first token to the ``run`` command."""

    default_command = "run"

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        """Treat ``fuzzrun gti status`` as ``fuzzrun run gti status``."""
        if args and args[0] not in self.commands:
            args = [self.default_command, *args]
        return super().resolve_command(ctx, args)


def _configure_logging(verbose: bool) -> None:
    package_logger = logging.getLogger("fuzzrun")
    package_logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        package_logger.addHandler(RichHandler(console=err_console, show_path=False))


def _announce(proposal: CorrectionProposal) -> None:
    before, after = proposal.describe()
    err_console.print(
        f'fuzzrun: auto-correcting "{before}" -> "{after}"',
        style="yellow",
        markup=False,
        highlight=False,
        soft_wrap=True,
    )


def _forward(result: ExecutionResult) -> None:
    """Write a captured result to the real streams unchanged."""
    if result.stdout:
        sys.stdout.write(result.stdout)
        sys.stdout.flush()
    if result.stderr:
        sys.stderr.write(result.stderr)
        sys.stderr.flush()


def _report(outcome: PipelineOutcome) -> None:
    final = outcome.final
    _forward(final)
    if final.spawn_error is None:
        return

    invocation = outcome.executions[-1][0]
    if final.not_found:
        message = f"fuzzrun: command not found: {invocation.base}"
    else:
        reason = final.spawn_error.strerror or str(final.spawn_error)
        message = f"fuzzrun: {invocation.base}: {reason}"
    err_console.print(message, markup=False, highlight=False, soft_wrap=True)


@click.group(cls=PassthroughGroup, invoke_without_command=True)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(package_name="fuzzrun", prog_name="fuzzrun")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """FuzzRun - run a command and auto-correct high-confidence typos.

    Any command that is not one of the sub-commands below is run as-is:
    `fuzzrun gti status` behaves like `fuzzrun run gti status`.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose)

    if ctx.invoked_subcommand is None:
        click.echo(USAGE, err=True)
        ctx.exit(1)


@cli.command(
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False}
)
@click.option("--max-distance", type=int, help="Largest edit distance to correct")
@click.option("--prefer", multiple=True, help="Base name preferred when matches tie")
@click.option(
    "--allow-any-subcommand",
    is_flag=True,
    help="Use output suggestions for tools without a known subcommand list",
)
@click.argument("command", nargs=-1, required=True, type=click.UNPROCESSED)
@click.pass_context
def run(
    ctx: click.Context,
    max_distance: int | None,
    prefer: tuple[str, ...],
    allow_any_subcommand: bool,
    command: tuple[str, ...],
) -> None:
    """Run COMMAND, correcting it once if it fails."""
    config = FuzzRunConfig.from_env()
    overrides = {}
    if max_distance is not None:
        overrides["max_distance"] = max(1, max_distance)
    if prefer:
        overrides["priority_bases"] = config.priority_bases | parse_priority_bases(",".join(prefer))
    if allow_any_subcommand:
        overrides["allow_any_subcommand"] = True
    config = replace(config, **overrides)

    sources = CandidateSources(list_path_commands(windows=config.windows))
    pipeline = CorrectionPipeline(config, sources, on_correction=_announce)
    outcome = pipeline.run(Invocation.from_argv(command))

    logger.debug(f"Pipeline: {' -> '.join(state.value for state in outcome.states)}")

    _report(outcome)
    ctx.exit(outcome.exit_code)


@cli.command()
@click.option("--base", help="Rank known subcommands of BASE instead of PATH commands")
@click.option("--limit", default=5, show_default=True, help="Number of candidates to show")
@click.argument("token")
def suggest(base: str | None, limit: int, token: str) -> None:
    """Show the closest candidates for TOKEN without running anything."""
    config = FuzzRunConfig.from_env()
    if base:
        pool = sorted(subcommands_for(base))
        if not pool:
            console.print(f"[yellow]No known subcommands for '{base}'.[/yellow]")
            return
    else:
        pool = sorted(list_path_commands(windows=config.windows))
        if not pool:
            console.print("[yellow]No commands found on PATH.[/yellow]")
            return

    ranked = process.extract(token, pool, scorer=fuzz.ratio, limit=limit)
    best = find_best_match(pool, token, config.max_distance, config.priority_bases)

    table = Table(title=f"Candidates for '{token}'")
    table.add_column("Candidate", style="cyan")
    table.add_column("Similarity", style="green", justify="right")
    table.add_column("Distance", style="blue", justify="right")
    table.add_column("Auto-correct", style="yellow")

    for match in ranked:
        name, score = match[0], match[1]
        dist = distance(name, token, config.max_distance)
        table.add_row(
            name,
            f"{score}%",
            str(dist) if dist <= config.max_distance else f">{config.max_distance}",
            "yes" if best and best.candidate == name and name != token else "",
        )

    console.print(table)

    if best and best.candidate != token:
        console.print(f"[green]Would auto-correct to:[/green] {best.candidate}")
    else:
        console.print(
            f"[yellow]No unambiguous correction within distance {config.max_distance}.[/yellow]"
        )


@cli.command()
def rules() -> None:
    """List the safety rules that block automatic correction."""
    gate = SafetyGate()

    table = Table(title="Risky Arguments")
    table.add_column("Name", style="cyan")
    table.add_column("Pattern", style="white")
    table.add_column("Case", style="green")
    table.add_column("Description", style="yellow")

    for rule in gate.list_rules():
        table.add_row(
            rule.name,
            rule.pattern,
            "insensitive" if rule.ignore_case else "exact",
            rule.description,
        )

    console.print(table)
    console.print(
        f"\n[red]Never corrected to:[/red] {', '.join(sorted(gate.dangerous_bases))}"
    )


def main() -> None:
    """Entry point."""
    cli()


if __name__ == "__main__":
    main()
