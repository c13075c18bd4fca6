# src/testatpoint/cli/utils.py

import logging
from pathlib import Path

import click
import structlog
from rich.console import Console

from testatpoint.config import load_config
from testatpoint.config.loader import DEFAULT_CONFIG_NAME
from testatpoint.exceptions import ConfigurationError
from testatpoint.session import Session
from testatpoint.state import Job
from testatpoint.telemetry.logger import setup_logging as core_setup_logging

log = structlog.get_logger("cli.utils")

LOG_LEVEL_CHOICES = click.Choice(list(logging._nameToLevel.keys()), case_sensitive=False)


def logging_options(f):
    """Decorator to add logging options to any command."""
    f = click.option(
        "-l",
        "--log-level",
        type=LOG_LEVEL_CHOICES,
        default=None,
        envvar="TESTATPOINT_LOG_LEVEL",
        help="Set the logging level (overrides config file).",
    )(f)
    f = click.option(
        "--log-file",
        type=click.Path(dir_okay=False, writable=True, resolve_path=True),
        default=None,
        envvar="TESTATPOINT_LOG_FILE",
        help="Path to write logs to a file (JSON format).",
    )(f)
    f = click.option(
        "--json-logs",
        is_flag=True,
        default=None,
        envvar="TESTATPOINT_JSON_LOGS",
        help="Output console logs as JSON.",
    )(f)
    return f


def config_option(f):
    """Decorator adding the configuration file option."""
    return click.option(
        "-c",
        "--config-path",
        type=click.Path(exists=True, file_okay=True, dir_okay=False, readable=True, path_type=Path),
        default=None,
        envvar="TESTATPOINT_CONF",
        show_envvar=True,
        help=f"Path to the configuration file (defaults to ./{DEFAULT_CONFIG_NAME} when present).",
    )(f)


def setup_logging_from_context(
    ctx: click.Context,
    local_log_level: str | None = None,
    local_log_file: str | None = None,
    local_json_logs: bool | None = None,
    default_log_level: str = "WARNING",
) -> None:
    """
    Setup logging using context values, allowing local overrides.
    """
    obj = ctx.obj or {}
    log_level_str = local_log_level or obj.get("LOG_LEVEL") or default_log_level
    log_file_path = local_log_file or obj.get("LOG_FILE")
    use_json_logs = local_json_logs if local_json_logs is not None else obj.get("JSON_LOGS", False)

    numeric_level = logging.getLevelName(log_level_str.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.WARNING
        log_level_str = "WARNING"

    core_setup_logging(
        level=numeric_level,
        json_logs=use_json_logs,
        log_file=log_file_path,
    )

    log.debug(
        "CLI logging initialized via utils",
        level=log_level_str,
        file=log_file_path or "console",
        json=use_json_logs,
    )


def setup_command_logging(ctx: click.Context, kwargs: dict) -> None:
    if kwargs.get("log_level"):
        ctx.ensure_object(dict)["LOG_LEVEL"] = kwargs["log_level"]
    setup_logging_from_context(
        ctx,
        local_log_level=kwargs.get("log_level"),
        local_log_file=kwargs.get("log_file"),
        local_json_logs=kwargs.get("json_logs"),
    )


def resolve_config_path(config_path: Path | None) -> Path | None:
    if config_path is not None:
        return config_path
    candidate = Path.cwd() / DEFAULT_CONFIG_NAME
    return candidate if candidate.is_file() else None


def load_session(ctx: click.Context, config_path: Path | None, console: Console | None = None) -> Session:
    """Loads configuration and creates a Session, exiting with status 1 on configuration errors."""
    path = resolve_config_path(config_path)
    try:
        config = load_config(path)
    except ConfigurationError as e:
        log.error("Failed to load or validate configuration", error=str(e))
        click.echo(f"Error: Configuration problem: {e}", err=True)
        ctx.exit(1)

    if not (ctx.obj or {}).get("LOG_LEVEL"):
        setup_logging_from_context(ctx, local_log_level=config.global_config.log_level)
    return Session(config, console=console)


def exit_code_for(jobs: list[Job]) -> int:
    """0 when every job passed; otherwise the first failing job's exit code (at least 1)."""
    for job in jobs:
        if not job.succeeded:
            code = job.exit_code if job.exit_code is not None else 1
            return code if code > 0 else 1
    return 0

# ⚙️🛠️
