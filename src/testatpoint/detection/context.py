#
# src/testatpoint/detection/context.py
#
"""
Resolves the enclosing suite, class or module of a located test.

Each language profile names one strategy; the resolver dispatches on that name
instead of branching on language tags.
"""

import re
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

import structlog

from testatpoint.config.models import LanguageProfile
from testatpoint.config.registry import LanguageRegistry
from testatpoint.detection.models import TestContext
from testatpoint.exceptions import ConfigurationError

log = structlog.get_logger("detection.context")

CLOSING_BRACE_RE = re.compile(r"^\s*\}\s*$")
SCOPE_OPENER_RE = re.compile(r"^(?:async\s+def|def|class)\s")


def indent_width(text: str) -> int:
    """Width of the leading whitespace of `text`."""
    return len(text) - len(text.lstrip())


def _first_capture(text: str, patterns: Sequence[re.Pattern[str]]) -> str | None:
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


@runtime_checkable
class ContextStrategy(Protocol):
    """Protocol for a per-language-family context extraction strategy."""

    def resolve(
        self,
        lines: Sequence[str],
        test_line: int,
        profile: LanguageProfile,
        file_path: Path | None,
    ) -> TestContext | None:
        """
        Derives the TestContext for the test declared at `test_line` (1-based).

        Returns None when the test has no enclosing context.
        """
        ...


class IndentStackStrategy:
    """Nested suite blocks (e.g. `describe(...)`) tracked by indentation."""

    default_separator = " > "

    def _walk(
        self, lines: Sequence[str], test_line: int, profile: LanguageProfile, pop_on_close: bool
    ) -> list[tuple[str, int]]:
        stack: list[tuple[str, int]] = []
        for text in lines[: max(test_line - 1, 0)]:
            indent = indent_width(text)
            name = _first_capture(text, profile.scope_patterns)
            if name is not None:
                while stack and stack[-1][1] >= indent:
                    stack.pop()
                stack.append((name, indent))
            elif pop_on_close and stack and CLOSING_BRACE_RE.match(text) and indent <= stack[-1][1]:
                stack.pop()
        return stack

    def resolve(self, lines, test_line, profile, file_path):
        stack = self._walk(lines, test_line, profile, pop_on_close=False)
        if not stack:
            return None
        separator = profile.context_separator or self.default_separator
        return TestContext(
            describe=separator.join(name for name, _ in stack),
            nested_level=len(stack) - 1,
            file_scope=False,
        )


class ModuleBlockStrategy(IndentStackStrategy):
    """Brace-delimited modules; a lone closing brace also closes the innermost module."""

    default_separator = "::"

    def resolve(self, lines, test_line, profile, file_path):
        stack = self._walk(lines, test_line, profile, pop_on_close=True)
        if stack:
            separator = profile.context_separator or self.default_separator
            return TestContext(
                describe=separator.join(name for name, _ in stack),
                nested_level=len(stack) - 1,
                file_scope=False,
            )
        if file_path is None or not Path(file_path).stem:
            return None
        return TestContext(describe=Path(file_path).stem, nested_level=0, file_scope=True)


class EnclosingClassStrategy:
    """
    At most one enclosing class, found by scanning backward for a column-0 opener.

    Any other column-0 `def`/`class` met first means the test is not inside a
    matching class.
    """

    def resolve(self, lines, test_line, profile, file_path):
        if not 0 < test_line <= len(lines):
            return None
        if indent_width(lines[test_line - 1]) == 0:
            return None

        for lnum in range(test_line - 1, 0, -1):
            text = lines[lnum - 1]
            if not text.strip() or indent_width(text) > 0:
                continue
            name = _first_capture(text, profile.scope_patterns)
            if name is not None:
                return TestContext(describe=name, nested_level=0, file_scope=False)
            if SCOPE_OPENER_RE.match(text):
                return None
        return None


class FileScopeStrategy:
    """Tests live at package level; the package is named after the containing directory."""

    def resolve(self, lines, test_line, profile, file_path):
        if file_path is None:
            return None
        package = Path(file_path).parent.name
        if not package:
            return None
        return TestContext(describe=f"package {package}", nested_level=0, file_scope=True)


STRATEGY_MAP: dict[str, ContextStrategy] = {
    "indent_stack": IndentStackStrategy(),
    "enclosing_class": EnclosingClassStrategy(),
    "file_scope": FileScopeStrategy(),
    "module_block": ModuleBlockStrategy(),
}


class ContextResolver:
    """Looks up the strategy named by a language profile and applies it."""

    def __init__(self, registry: LanguageRegistry, strategies: dict[str, ContextStrategy] | None = None):
        self._registry = registry
        self._strategies = dict(STRATEGY_MAP if strategies is None else strategies)

    def register_strategy(self, name: str, strategy: ContextStrategy) -> None:
        self._strategies[name] = strategy

    def resolve(
        self,
        lines: Sequence[str],
        test_line: int,
        language: str,
        file_path: Path | str | None = None,
    ) -> TestContext | None:
        profile = self._registry.find(language)
        if profile is None or profile.context is None:
            return None

        strategy = self._strategies.get(profile.context)
        if strategy is None:
            raise ConfigurationError(
                f"Unknown context strategy '{profile.context}' for language '{language}'. "
                f"Available: {sorted(self._strategies)}"
            )

        context = strategy.resolve(lines, test_line, profile, Path(file_path) if file_path else None)
        log.debug(
            "Resolved test context",
            language=language,
            strategy=profile.context,
            line=test_line,
            describe=context.describe if context else None,
        )
        return context


# 🔼⚙️
