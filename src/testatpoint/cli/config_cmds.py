# src/testatpoint/cli/config_cmds.py

from pathlib import Path

import click
import structlog
from rich.pretty import pretty_repr

from testatpoint.cli.utils import config_option, logging_options, resolve_config_path, setup_command_logging
from testatpoint.config import load_config
from testatpoint.exceptions import ConfigurationError
from testatpoint.telemetry import StructLogger

log: StructLogger = structlog.get_logger("cli.config")


# Create a command group for config-related commands
@click.group(name="config")
def config_cli():
    """Commands for inspecting and validating configuration."""
    pass


@config_cli.command(name="show")
@config_option
@logging_options
@click.pass_context
def show_config(ctx: click.Context, config_path: Path | None, **kwargs):
    """Load, validate, and display the configuration."""
    setup_command_logging(ctx, kwargs)
    path = resolve_config_path(config_path)
    log.info("Executing 'config show' command", config_path=str(path) if path else "<defaults>")

    try:
        config = load_config(path)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem in '{path}':\n{e}", err=True)
        ctx.exit(1)

    output = {
        "global": {"log_level": config.global_config.log_level},
        "output": {"mode": config.output.mode},
        "execution": {
            "timeout": config.execution.timeout,
            "cwd_strategy": config.execution.cwd_strategy,
            "env": dict(config.execution.env),
        },
        "languages": {tag: profile.to_dict() for tag, profile in sorted(config.languages.items())},
    }
    click.echo(pretty_repr(output, expand_all=True))

# 🔼⚙️
