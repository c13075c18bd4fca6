# src/testatpoint/cli/run_cmds.py

import asyncio
import shlex
from collections.abc import Callable
from pathlib import Path

import click
import structlog

from testatpoint.cli.utils import (
    config_option,
    exit_code_for,
    load_session,
    logging_options,
    setup_command_logging,
)
from testatpoint.config import CWD_STRATEGIES, OUTPUT_MODES
from testatpoint.exceptions import BuildError, ConfigurationError
from testatpoint.execution import RunMode, build_command
from testatpoint.session import Session, read_buffer
from testatpoint.state import ExecutionOptions, Job
from testatpoint.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.run")

MODE_CHOICES = click.Choice([m.value for m in RunMode])


def execution_options(f):
    """Decorator adding the per-invocation execution overrides."""
    f = click.option(
        "-m", "--mode", type=MODE_CHOICES, default=RunMode.NORMAL.value, show_default=True,
        help="Which command template list to use.",
    )(f)
    f = click.option(
        "-o", "--output", "output_mode", type=click.Choice(OUTPUT_MODES), default=None,
        help="Result presentation (overrides config).",
    )(f)
    f = click.option(
        "--cwd-strategy", type=click.Choice(CWD_STRATEGIES), default=None,
        help="Working directory for the test process (overrides config).",
    )(f)
    f = click.option(
        "--timeout", type=click.IntRange(min=1), default=None,
        help="Timeout in milliseconds (overrides config).",
    )(f)
    return f


def _dispatch_and_wait(session: Session, dispatch: Callable[[], list[Job]]) -> list[Job]:
    """Runs `dispatch` inside an event loop and waits for every job it started."""

    async def _main() -> list[Job]:
        jobs = dispatch()
        await session.engine.wait_all(jobs)
        return jobs

    try:
        return asyncio.run(_main())
    except KeyboardInterrupt:
        log.warning("Test run interrupted by KeyboardInterrupt (CTRL-C).")
        raise click.exceptions.Exit(130) from None


@click.command(name="run")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path))
@click.option(
    "-n", "--line", type=click.IntRange(min=1), default=None,
    help="Cursor line (1-based). Defaults to the end of the file.",
)
@click.option("--language", default=None, help="File type tag (guessed from the extension by default).")
@click.option("--dry-run", is_flag=True, help="Print the command instead of running it.")
@execution_options
@config_option
@logging_options
@click.pass_context
def run_cli(
    ctx: click.Context,
    file: Path,
    line: int | None,
    language: str | None,
    dry_run: bool,
    mode: str,
    output_mode: str | None,
    cwd_strategy: str | None,
    timeout: int | None,
    config_path: Path | None,
    **kwargs,
):
    """Run the test nearest to a line of FILE."""
    setup_command_logging(ctx, kwargs)
    session = load_session(ctx, config_path)
    lines = read_buffer(file)
    cursor = line or max(len(lines), 1)

    try:
        test_info = session.locate(file, lines, cursor, language)
    except ConfigurationError as e:
        click.echo(f"Error: {e}", err=True)
        ctx.exit(1)
    if test_info is None:
        click.echo(f"No test found at or above line {cursor} of {file}", err=True)
        ctx.exit(1)

    if dry_run:
        try:
            command = build_command(session.registry.get(test_info.language), test_info, mode)
        except (ConfigurationError, BuildError) as e:
            click.echo(f"Error: {e}", err=True)
            ctx.exit(1)
        click.echo(shlex.join(command))
        return

    options = ExecutionOptions(mode=mode, output_mode=output_mode, cwd_strategy=cwd_strategy, timeout=timeout)
    jobs = _dispatch_and_wait(session, lambda: [j for j in [session.run_test(test_info, options)] if j])
    if not jobs:
        click.echo(f"Error: could not run test '{test_info.name}'", err=True)
        ctx.exit(1)
    ctx.exit(exit_code_for(jobs))


def _parse_target(target: str) -> tuple[Path, int]:
    path_str, sep, line_str = target.rpartition(":")
    if not sep or not line_str.isdigit() or int(line_str) < 1:
        raise click.BadParameter(f"'{target}' is not of the form FILE:LINE", param_hint="TARGETS")
    return Path(path_str), int(line_str)


@click.command(name="batch")
@click.argument("targets", nargs=-1, required=True)
@click.option("--language", default=None, help="File type tag (guessed from the extension by default).")
@execution_options
@config_option
@logging_options
@click.pass_context
def batch_cli(
    ctx: click.Context,
    targets: tuple[str, ...],
    language: str | None,
    mode: str,
    output_mode: str | None,
    cwd_strategy: str | None,
    timeout: int | None,
    config_path: Path | None,
    **kwargs,
):
    """Select the tests at each FILE:LINE target and run them concurrently."""
    setup_command_logging(ctx, kwargs)
    parsed = [_parse_target(t) for t in targets]
    session = load_session(ctx, config_path)

    for path, line in parsed:
        if not path.is_file():
            click.echo(f"Warning: skipping missing file {path}", err=True)
            continue
        if session.select_test_at_point(path, None, line, language) is None:
            click.echo(f"Warning: no test found at {path}:{line}", err=True)

    if not session.selected_tests:
        click.echo("No tests selected", err=True)
        ctx.exit(1)

    click.echo(f"Running {len(session.selected_tests)} selected test(s)")
    options = ExecutionOptions(mode=mode, output_mode=output_mode, cwd_strategy=cwd_strategy, timeout=timeout)
    jobs = _dispatch_and_wait(session, lambda: session.run_selected_tests(options))
    ctx.exit(exit_code_for(jobs) if jobs else 1)

# 🔼⚙️
