# src/testatpoint/session.py

"""
High-level operations of test-at-point.

A Session is created once at startup and owns the "last test" register and the
"selected tests" set. All mutations happen on the event-loop thread.
"""

from collections.abc import Sequence
from pathlib import Path

import attrs
import structlog
from rich.console import Console

from testatpoint.config import LanguageProfile, LanguageRegistry, TestAtPointConfig, build_registry
from testatpoint.detection import ContextResolver, TestInfo, find_all, find_nearest
from testatpoint.detection import naming
from testatpoint.exceptions import BuildError, ConfigurationError
from testatpoint.execution import ExecutionEngine, RunMode, build_command
from testatpoint.state import ExecutionOptions, Job
from testatpoint.telemetry import StructLogger

log: StructLogger = structlog.get_logger("session")


def read_buffer(file_path: Path | str) -> list[str]:
    """Reads a file into a list of lines without trailing newlines."""
    with open(file_path, encoding="utf-8", errors="replace") as f:
        return f.read().splitlines()


class Session:
    """Coordinates detection, command building and execution for one tool process."""

    def __init__(
        self,
        config: TestAtPointConfig,
        registry: LanguageRegistry | None = None,
        engine: ExecutionEngine | None = None,
        console: Console | None = None,
    ):
        self.config = config
        self.registry = registry or build_registry(config)
        self.context_resolver = ContextResolver(self.registry)
        self.engine = engine or ExecutionEngine(config, self.registry, console=console)
        self.last_test: TestInfo | None = None
        self._selected: list[TestInfo] = []
        log.debug("Session initialized", languages=sorted(self.registry))

    # --- Registry ---

    def register_language(self, tag: str, profile: LanguageProfile) -> None:
        self.registry.register(tag, profile)

    def language_for(self, file_path: Path | str, language: str | None = None) -> str:
        tag = language or self.registry.language_for_path(file_path)
        if not tag:
            raise ConfigurationError(f"Cannot determine the file type of '{file_path}'")
        return tag

    # --- Detection ---

    def locate(
        self,
        file_path: Path | str,
        lines: Sequence[str] | None,
        cursor_line: int,
        language: str | None = None,
    ) -> TestInfo | None:
        """
        Finds the test governing `cursor_line` and resolves its context.

        Raises:
            ConfigurationError: If no profile exists for the file type.
        """
        path = Path(file_path).resolve()
        tag = self.language_for(path, language)
        profile = self.registry.get(tag)
        lines = read_buffer(path) if lines is None else lines

        info = find_nearest(lines, cursor_line, profile.patterns, file_path=path, language=tag)
        if info is None:
            return None
        context = self.context_resolver.resolve(lines, info.line, tag, path)
        return attrs.evolve(info, context=context)

    def find_all_tests(
        self, file_path: Path | str, lines: Sequence[str] | None = None, language: str | None = None
    ) -> list[TestInfo]:
        path = Path(file_path).resolve()
        try:
            tag = self.language_for(path, language)
            profile = self.registry.get(tag)
        except ConfigurationError as e:
            log.warning("No configuration found for file", file=str(path), error=str(e))
            return []

        lines = read_buffer(path) if lines is None else lines
        tests = find_all(lines, profile.patterns, file_path=path, language=tag)
        if not tests:
            log.warning("No tests found in file", file=str(path))
        return [
            attrs.evolve(t, context=self.context_resolver.resolve(lines, t.line, tag, path)) for t in tests
        ]

    # --- Execution ---

    def run_test(self, test_info: TestInfo, options: ExecutionOptions | None = None) -> Job | None:
        """
        Builds and dispatches the command for `test_info`.

        Configuration and build errors are reported here and yield None.
        """
        options = options or ExecutionOptions()
        self.last_test = attrs.evolve(test_info)
        try:
            profile = self.registry.get(test_info.language)
            command = build_command(profile, test_info, RunMode(options.mode))
            job = self.engine.create_job(command, test_info, options)
            self.engine.run(job)
        except (ConfigurationError, BuildError) as e:
            log.error("Failed to run test", test=test_info.name, error=str(e))
            return None
        except ValueError as e:
            log.error("Invalid run mode", test=test_info.name, mode=options.mode, error=str(e))
            return None
        return job

    def run_test_at_point(
        self,
        file_path: Path | str,
        lines: Sequence[str] | None,
        cursor_line: int,
        options: ExecutionOptions | None = None,
        language: str | None = None,
    ) -> Job | None:
        try:
            test_info = self.locate(file_path, lines, cursor_line, language)
        except ConfigurationError as e:
            log.error("Cannot locate test", file=str(file_path), error=str(e))
            return None
        if test_info is None:
            log.warning("No test found at cursor position", file=str(file_path), line=cursor_line)
            return None
        return self.run_test(test_info, options)

    def debug_test_at_point(
        self,
        file_path: Path | str,
        lines: Sequence[str] | None,
        cursor_line: int,
        options: ExecutionOptions | None = None,
        language: str | None = None,
    ) -> Job | None:
        options = attrs.evolve(options or ExecutionOptions(), mode=RunMode.DEBUG.value)
        return self.run_test_at_point(file_path, lines, cursor_line, options, language)

    def run_last_test(self, options: ExecutionOptions | None = None) -> Job | None:
        if self.last_test is None:
            log.warning("No previous test to run")
            return None
        return self.run_test(self.last_test, options)

    def stop(self, job: Job) -> bool:
        return self.engine.stop(job)

    # --- Selection ---

    def select_test(self, test_info: TestInfo) -> bool:
        """Adds a copy of `test_info` to the selection. Returns False if it was already selected."""
        if any(selected.key == test_info.key for selected in self._selected):
            log.info("Test already selected", test=test_info.name)
            return False
        self._selected.append(attrs.evolve(test_info))
        log.info("Selected test", test=test_info.name, total=len(self._selected))
        return True

    def select_test_at_point(
        self,
        file_path: Path | str,
        lines: Sequence[str] | None,
        cursor_line: int,
        language: str | None = None,
    ) -> TestInfo | None:
        try:
            test_info = self.locate(file_path, lines, cursor_line, language)
        except ConfigurationError as e:
            log.error("Cannot locate test", file=str(file_path), error=str(e))
            return None
        if test_info is None:
            log.warning("No test found at cursor position", file=str(file_path), line=cursor_line)
            return None
        self.select_test(test_info)
        return test_info

    @property
    def selected_tests(self) -> list[TestInfo]:
        return [attrs.evolve(t) for t in self._selected]

    def clear_selected_tests(self) -> None:
        self._selected.clear()
        log.info("Cleared selected tests")

    def run_selected_tests(self, options: ExecutionOptions | None = None) -> list[Job]:
        """Dispatches every selected test at once; completions arrive in any order."""
        if not self._selected:
            log.warning("No tests selected")
            return []
        jobs = []
        for test_info in list(self._selected):
            job = self.run_test(test_info, options)
            if job is not None:
                jobs.append(job)
        return jobs

    # --- Navigation ---

    def switch_file(self, file_path: Path | str) -> Path | None:
        counterpart = naming.switch_file(Path(file_path).resolve(), self.registry)
        if counterpart is None:
            log.warning("No counterpart file found", file=str(file_path))
        return counterpart


# 🔼⚙️
