#
# src/testatpoint/config/loader.py
#
"""
Loads the TOML configuration file and merges it over the built-in defaults.

Precedence: environment variables > project overrides > config file > defaults.
"""

import copy
import os
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import structlog

from testatpoint.config.defaults import DEFAULT_LANGUAGES
from testatpoint.config.models import (
    PROFILE_FIELDS,
    ExecutionConfig,
    GlobalConfig,
    LanguageProfile,
    OutputConfig,
    TestAtPointConfig,
)
from testatpoint.config.registry import LanguageRegistry
from testatpoint.exceptions import ConfigurationError, PatternError

log = structlog.get_logger("config.loader")

DEFAULT_CONFIG_NAME = "testatpoint.toml"
ENV_LOG_LEVEL = "TESTATPOINT_LOG_LEVEL"
ENV_OUTPUT_MODE = "TESTATPOINT_OUTPUT_MODE"
ENV_TIMEOUT = "TESTATPOINT_TIMEOUT"


def _read_toml(config_path: Path) -> dict[str, Any]:
    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigurationError("Configuration file not found", path=str(config_path), details=e) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML syntax: {e}", path=str(config_path), details=e) from e
    except OSError as e:
        raise ConfigurationError(f"Could not read configuration file: {e}", path=str(config_path), details=e) from e


def _merge_language(base: Mapping[str, Any], override: Mapping[str, Any], tag: str) -> dict[str, Any]:
    unknown = set(override) - PROFILE_FIELDS
    if unknown:
        raise ConfigurationError(
            f"Unknown keys for language '{tag}': {sorted(unknown)}. Allowed: {sorted(PROFILE_FIELDS)}"
        )
    merged = dict(base)
    merged.update(override)
    return merged


def _section(data: Mapping[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name, {})
    if not isinstance(value, Mapping):
        raise ConfigurationError(f"Section '[{name}]' must be a table, got {type(value).__name__}")
    return dict(value)


def _apply_env_overrides(
    global_data: dict[str, Any], output_data: dict[str, Any], execution_data: dict[str, Any]
) -> None:
    if level := os.environ.get(ENV_LOG_LEVEL):
        log.debug("Overriding log_level from environment", value=level)
        global_data["log_level"] = level
    if mode := os.environ.get(ENV_OUTPUT_MODE):
        log.debug("Overriding output mode from environment", value=mode)
        output_data["mode"] = mode
    if timeout := os.environ.get(ENV_TIMEOUT):
        try:
            execution_data["timeout"] = int(timeout)
        except ValueError as e:
            raise ConfigurationError(f"{ENV_TIMEOUT} must be an integer, got '{timeout}'", details=e) from e


def load_config(config_path: Path | None = None, project_name: str | None = None) -> TestAtPointConfig:
    """
    Builds a TestAtPointConfig from defaults and an optional TOML file.

    Args:
        config_path: TOML file to read. `None` uses the built-in defaults only.
        project_name: Name used to select a `[projects.<name>]` table. Defaults
            to the base name of the current working directory.

    Raises:
        ConfigurationError: If the file cannot be read or any value is invalid.
    """
    data: dict[str, Any] = {}
    path_str = str(config_path) if config_path else None
    if config_path is not None:
        log.debug("Loading configuration file", path=path_str)
        data = _read_toml(config_path)
    else:
        log.debug("No configuration file given, using built-in defaults")

    global_data = _section(data, "global")
    output_data = _section(data, "output")
    execution_data = _section(data, "execution")
    projects = _section(data, "projects")
    _apply_env_overrides(global_data, output_data, execution_data)

    languages: dict[str, dict[str, Any]] = copy.deepcopy(DEFAULT_LANGUAGES)
    for tag, override in _section(data, "languages").items():
        if not isinstance(override, Mapping):
            raise ConfigurationError(f"Language '{tag}' must be a table", path=path_str)
        languages[tag] = _merge_language(languages.get(tag, {}), override, tag)

    project_name = project_name if project_name is not None else Path.cwd().name
    project_overrides = projects.get(project_name)
    if isinstance(project_overrides, Mapping):
        log.info("Applying project-specific overrides", project=project_name)
        for tag, override in project_overrides.items():
            if tag in languages and isinstance(override, Mapping):
                languages[tag] = _merge_language(languages[tag], override, tag)
            else:
                log.warning("Ignoring project override for unknown language", project=project_name, language=tag)

    try:
        profiles = {}
        for tag, fields in languages.items():
            try:
                profiles[tag] = LanguageProfile(**fields)
            except PatternError as e:
                raise PatternError(str(e), pattern=e.pattern, language=tag) from e
        config = TestAtPointConfig(
            languages=profiles,
            global_config=GlobalConfig(**global_data),
            output=OutputConfig(**output_data),
            execution=ExecutionConfig(**execution_data),
            projects=projects,
        )
    except ConfigurationError:
        raise
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid configuration value: {e}", path=path_str, details=e) from e

    log.info(
        "Configuration loaded",
        path=path_str or "<defaults>",
        languages=sorted(config.languages),
        output_mode=config.output.mode,
        cwd_strategy=config.execution.cwd_strategy,
    )
    return config


def build_registry(config: TestAtPointConfig) -> LanguageRegistry:
    """Creates a registry populated with every profile in the configuration."""
    return LanguageRegistry(config.languages)


# 🔼⚙️
