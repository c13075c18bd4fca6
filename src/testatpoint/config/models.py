#
# src/testatpoint/config/models.py
#
"""
Attrs-based data models for test-at-point configuration and language profiles.
"""

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

import attrs
import structlog
from attrs import define, field

from testatpoint.exceptions import PatternError

log = structlog.get_logger("config.models")

OUTPUT_MODES = ("quickfix", "terminal", "floating")
CWD_STRATEGIES = ("current", "file_dir", "project_root")
CONTEXT_STRATEGIES = ("indent_stack", "enclosing_class", "file_scope", "module_block")
PLACEHOLDER_RE = re.compile(r"%([sSfFdne])")


# --- Validators and converters ---
def _validate_log_level(inst: Any, attr: Any, value: str) -> None:
    """Validator for standard logging level names."""
    valid = logging._nameToLevel.keys()
    if value.upper() not in valid:
        raise ValueError(f"Invalid log_level '{value}'. Must be one of {list(valid)}.")


def _validate_positive_int(inst: Any, attr: Any, value: int) -> None:
    """Validator ensures integer is positive."""
    if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
        raise ValueError(f"Field '{attr.name}' must be positive integer, got {value}")


def _one_of(choices: tuple[str, ...]):
    def _validate(inst: Any, attr: Any, value: str | None) -> None:
        if value is not None and value not in choices:
            raise ValueError(f"Invalid {attr.name} '{value}'. Must be one of {list(choices)}.")

    return _validate


def compile_pattern(pattern: str | re.Pattern[str]) -> re.Pattern[str]:
    """
    Compiles a detection pattern and checks that it exposes exactly one capture group.

    Raises:
        PatternError: If the expression is malformed or has the wrong number of groups.
    """
    if isinstance(pattern, re.Pattern):
        compiled = pattern
    else:
        if not isinstance(pattern, str):
            raise PatternError(f"Pattern must be a string, got {type(pattern).__name__}", pattern=repr(pattern))
        try:
            compiled = re.compile(pattern)
        except re.error as e:
            raise PatternError(f"Invalid regex pattern '{pattern}': {e}", pattern=pattern) from e

    if compiled.groups != 1:
        raise PatternError(
            f"Pattern '{compiled.pattern}' must have exactly one capture group, found {compiled.groups}",
            pattern=compiled.pattern,
        )
    return compiled


def _compile_patterns(value: Iterable[str | re.Pattern[str]] | None) -> tuple[re.Pattern[str], ...]:
    if value is None:
        return ()
    if isinstance(value, (str, re.Pattern)):
        value = [value]
    return tuple(compile_pattern(p) for p in value)


def _to_templates(value: Iterable[str] | str | None) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        return (value,)
    return tuple(value)


def _to_optional_templates(value: Iterable[str] | str | None) -> tuple[str, ...] | None:
    if value is None:
        return None
    return _to_templates(value)


def _to_extensions(value: Iterable[str] | None) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(ext.lower().lstrip(".") for ext in value)


# --- Language profiles ---
@define(frozen=True, slots=True)
class LanguageProfile:
    """
    Per-file-type bundle of detection patterns, command templates and naming rules.

    Patterns are compiled on construction, so an invalid profile can never be
    registered.
    """

    patterns: tuple[re.Pattern[str], ...] = field(factory=tuple, converter=_compile_patterns)
    commands: tuple[str, ...] = field(factory=tuple, converter=_to_templates)
    debug_commands: tuple[str, ...] | None = field(default=None, converter=_to_optional_templates)
    coverage_commands: tuple[str, ...] | None = field(default=None, converter=_to_optional_templates)
    root_markers: frozenset[str] = field(factory=frozenset, converter=frozenset)
    test_file_naming: tuple[str, ...] = field(factory=tuple, converter=tuple)
    extensions: tuple[str, ...] = field(factory=tuple, converter=_to_extensions)
    context: str | None = field(default=None, validator=_one_of(CONTEXT_STRATEGIES))
    scope_patterns: tuple[re.Pattern[str], ...] = field(factory=tuple, converter=_compile_patterns)
    context_separator: str | None = field(default=None)

    def __attrs_post_init__(self) -> None:
        for template in self.all_templates():
            tokens = PLACEHOLDER_RE.findall(template)
            repeated = sorted({t for t in tokens if tokens.count(t) > 1})
            if repeated:
                log.warning(
                    "Command template repeats a placeholder; every occurrence receives the same value",
                    template=template,
                    placeholders=[f"%{t}" for t in repeated],
                )

    def all_templates(self) -> list[str]:
        templates = list(self.commands)
        templates.extend(self.debug_commands or ())
        templates.extend(self.coverage_commands or ())
        return templates

    def to_dict(self) -> dict[str, Any]:
        """Returns a plain representation suitable for merging with overrides."""
        return {
            "patterns": [p.pattern for p in self.patterns],
            "commands": list(self.commands),
            "debug_commands": list(self.debug_commands) if self.debug_commands is not None else None,
            "coverage_commands": list(self.coverage_commands) if self.coverage_commands is not None else None,
            "root_markers": sorted(self.root_markers),
            "test_file_naming": list(self.test_file_naming),
            "extensions": list(self.extensions),
            "context": self.context,
            "scope_patterns": [p.pattern for p in self.scope_patterns],
            "context_separator": self.context_separator,
        }


PROFILE_FIELDS = frozenset(a.name for a in attrs.fields(LanguageProfile))


# --- Runtime settings ---
@define(frozen=True, slots=True)
class OutputConfig:
    """Default result presentation."""

    mode: str = field(default="quickfix", validator=_one_of(OUTPUT_MODES))


@define(frozen=True, slots=True)
class ExecutionConfig:
    """Process execution settings. `timeout` is in milliseconds."""

    timeout: int = field(default=30000, validator=_validate_positive_int)
    cwd_strategy: str = field(default="project_root", validator=_one_of(CWD_STRATEGIES))
    env: Mapping[str, str] = field(factory=dict)


@define(frozen=True, slots=True)
class GlobalConfig:
    """Global default settings for test-at-point."""

    log_level: str = field(default="WARNING", validator=_validate_log_level)


@define(frozen=True, slots=True)
class TestAtPointConfig:
    """Root configuration object for the test-at-point application."""

    __test__ = False

    languages: dict[str, LanguageProfile] = field(factory=dict)
    global_config: GlobalConfig = field(factory=GlobalConfig, metadata={"toml_name": "global"})
    output: OutputConfig = field(factory=OutputConfig)
    execution: ExecutionConfig = field(factory=ExecutionConfig)
    projects: Mapping[str, Mapping[str, Mapping[str, Any]]] = field(factory=dict)


# 🔼⚙️
