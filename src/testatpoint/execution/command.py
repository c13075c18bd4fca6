#
# src/testatpoint/execution/command.py
#
"""
Expands command templates into argument vectors.

Placeholders:
    %s  test name
    %S  test name qualified by its enclosing context, e.g. `TestMath::test_add`
    %f  file path relative to the project root
    %F  absolute file path
    %d  containing directory
    %n  file name without extension
    %e  file extension (without the dot)

The template is split on whitespace first and every argument is expanded in a
single left-to-right pass, so substituted text is never scanned again and a
value containing spaces stays one argument. Any other `%` sequence is kept.
"""

from enum import Enum
from pathlib import Path

import structlog

from testatpoint.config.models import PLACEHOLDER_RE, LanguageProfile
from testatpoint.detection.models import TestInfo
from testatpoint.exceptions import BuildError, ConfigurationError
from testatpoint.utils.paths import project_root_for, relative_to_root

log = structlog.get_logger("execution.command")

# Joins context and name for %S when the profile names no separator.
DEFAULT_QUALIFIER = "::"


class RunMode(str, Enum):
    NORMAL = "normal"
    DEBUG = "debug"
    COVERAGE = "coverage"


def select_templates(profile: LanguageProfile, mode: RunMode | str = RunMode.NORMAL) -> tuple[str, ...]:
    """
    Picks the template list for `mode`, falling back to the normal commands.

    Raises:
        ConfigurationError: If the profile has no normal commands to fall back on.
    """
    mode = RunMode(mode)
    templates: tuple[str, ...] | None = None
    if mode is RunMode.DEBUG:
        templates = profile.debug_commands
    elif mode is RunMode.COVERAGE:
        templates = profile.coverage_commands

    if not templates:
        if mode is not RunMode.NORMAL:
            log.debug("No templates for mode, falling back to normal commands", mode=mode.value)
        templates = profile.commands

    if not templates:
        raise ConfigurationError("No command templates configured")
    return templates


def qualified_name(test_info: TestInfo, separator: str | None = None) -> str:
    """The test name prefixed by its enclosing class or module path, if it has one."""
    context = test_info.context
    if context is None or context.file_scope:
        return test_info.name
    return f"{context.describe}{separator or DEFAULT_QUALIFIER}{test_info.name}"


def placeholder_values(
    test_info: TestInfo, project_root: Path | None, separator: str | None = None
) -> dict[str, str]:
    path = test_info.file_path
    return {
        "s": test_info.name,
        "S": qualified_name(test_info, separator),
        "f": relative_to_root(path, project_root),
        "F": str(path),
        "d": str(path.parent),
        "n": path.stem,
        "e": path.suffix.lstrip("."),
    }


def expand_template(template: str, values: dict[str, str]) -> list[str]:
    """Splits `template` on whitespace and expands placeholders inside each argument."""
    argv = []
    for raw_arg in template.split():
        arg = PLACEHOLDER_RE.sub(lambda m: values[m.group(1)], raw_arg)
        if arg:
            argv.append(arg)
    return argv


def build_command(
    profile: LanguageProfile,
    test_info: TestInfo,
    mode: RunMode | str = RunMode.NORMAL,
    project_root: Path | None = None,
) -> list[str]:
    """
    Builds the argument vector for running `test_info`.

    Only the first template of the selected list is used. `%f` is relative to
    `project_root`, which defaults to the same root the engine runs tests in.

    Raises:
        ConfigurationError: No usable template list.
        BuildError: Expansion produced an empty command.
    """
    template = select_templates(profile, mode)[0]

    if project_root is None:
        project_root = project_root_for(profile.root_markers, test_info.file_path)

    values = placeholder_values(test_info, project_root, profile.context_separator)
    argv = expand_template(template, values)
    if not argv:
        raise BuildError(f"Command template '{template}' expanded to an empty command")

    log.debug("Built test command", template=template, command=argv, mode=RunMode(mode).value, emoji_key="build")
    return argv


# 🔼⚙️
