# src/testatpoint/cli/main.py

"""
Main CLI entry point for test-at-point using Click.
Handles global options like logging level.
"""

from importlib.metadata import PackageNotFoundError, version

import click
import structlog

from testatpoint.cli.config_cmds import config_cli
from testatpoint.cli.inspect_cmds import list_cli, switch_cli
from testatpoint.cli.run_cmds import batch_cli, run_cli
from testatpoint.cli.utils import logging_options, setup_logging_from_context
from testatpoint.telemetry import StructLogger

try:
    __version__ = version("test-at-point")
except PackageNotFoundError:
    __version__ = "0.0.0-dev"

log: StructLogger = structlog.get_logger("cli.main")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(__version__, "-V", "--version", package_name="test-at-point")
@logging_options
@click.pass_context
def cli(
    ctx: click.Context,
    log_level: str | None,
    log_file: str | None,
    json_logs: bool | None,
):
    """
    test-at-point: run the test nearest to a line of a source file.

    Configuration precedence: CLI options > Environment Variables > Config File > Defaults.
    """
    ctx.ensure_object(dict)

    ctx.obj["LOG_LEVEL"] = log_level
    ctx.obj["LOG_FILE"] = log_file
    ctx.obj["JSON_LOGS"] = json_logs if json_logs is not None else False

    setup_logging_from_context(ctx)
    log.debug(
        "Main CLI group initialized",
        log_level=log_level,
        log_file=log_file,
        json_logs=json_logs,
    )


cli.add_command(config_cli)
cli.add_command(run_cli)
cli.add_command(batch_cli)
cli.add_command(list_cli)
cli.add_command(switch_cli)

if __name__ == "__main__":
    cli()

# 🖥️⚙️
