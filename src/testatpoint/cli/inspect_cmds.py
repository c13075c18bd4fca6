# src/testatpoint/cli/inspect_cmds.py

from pathlib import Path

import click
import structlog

from testatpoint.cli.utils import config_option, load_session, logging_options, setup_command_logging
from testatpoint.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.inspect")


@click.command(name="list")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, readable=True, path_type=Path))
@click.option("--language", default=None, help="File type tag (guessed from the extension by default).")
@config_option
@logging_options
@click.pass_context
def list_cli(ctx: click.Context, file: Path, language: str | None, config_path: Path | None, **kwargs):
    """List every test found in FILE."""
    setup_command_logging(ctx, kwargs)
    session = load_session(ctx, config_path)

    tests = session.find_all_tests(file, language=language)
    if not tests:
        click.echo(f"No tests found in {file}", err=True)
        ctx.exit(1)

    for test in tests:
        context = test.context.describe if test.context else "-"
        click.echo(f"{test.line}:{test.column}\t{test.name}\t{context}")


@click.command(name="switch")
@click.argument("file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@config_option
@logging_options
@click.pass_context
def switch_cli(ctx: click.Context, file: Path, config_path: Path | None, **kwargs):
    """Print the test file for a source FILE, or the source file for a test FILE."""
    setup_command_logging(ctx, kwargs)
    session = load_session(ctx, config_path)

    counterpart = session.switch_file(file)
    if counterpart is None:
        click.echo(f"No counterpart found for {file}", err=True)
        ctx.exit(1)
    click.echo(str(counterpart))

# 🔼⚙️
