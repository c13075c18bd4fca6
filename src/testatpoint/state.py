# src/testatpoint/state.py
#
"""
Defines the lifecycle state of a single test-execution job.
"""

import time
from collections.abc import Mapping
from enum import Enum, auto
from pathlib import Path

import structlog
from attrs import define, field, mutable

from testatpoint.detection.models import TestInfo
from testatpoint.exceptions import JobStateError

# Logger specific to job state management
log: structlog.stdlib.BoundLogger = structlog.get_logger("state")

# Exit status recorded when the configured timeout elapsed.
TIMEOUT_EXIT_CODE = 124
# Exit status recorded when the test program could not be started.
SPAWN_FAILURE_EXIT_CODE = 127
# Exit status recorded when a job is cancelled.
CANCELLED_EXIT_CODE = -1


class JobState(Enum):
    """Lifecycle of a job: CREATED -> RUNNING -> COMPLETED | CANCELLED."""

    CREATED = auto()  # Command built, not yet dispatched.
    RUNNING = auto()  # Process dispatched.
    COMPLETED = auto()  # Process exited, timed out, or could not be spawned.
    CANCELLED = auto()  # Stopped on request before natural completion.


TERMINAL_STATES = frozenset({JobState.COMPLETED, JobState.CANCELLED})

ALLOWED_TRANSITIONS: Mapping[JobState, frozenset[JobState]] = {
    JobState.CREATED: frozenset({JobState.RUNNING}),
    JobState.RUNNING: frozenset({JobState.COMPLETED, JobState.CANCELLED}),
    JobState.COMPLETED: frozenset(),
    JobState.CANCELLED: frozenset(),
}

STATE_EMOJI_MAP = {
    JobState.CREATED: "📝",
    JobState.RUNNING: "🔄",
    JobState.COMPLETED: "🏁",
    JobState.CANCELLED: "⏹️",
}


@define(frozen=True, slots=True)
class ExecutionOptions:
    """
    Per-invocation execution overrides. `None` means "use the configured default".

    `timeout` is in milliseconds.
    """

    mode: str = field(default="normal")
    output_mode: str | None = field(default=None)
    cwd_strategy: str | None = field(default=None)
    timeout: int | None = field(default=None)
    env: Mapping[str, str] = field(factory=dict)


@mutable(slots=True)
class Job:
    """
    Holds the lifecycle record of one test-execution attempt.

    Mutable because the execution engine fills in the outcome as the process
    runs. `exit_code` is set exactly when the job reaches a terminal state.
    """

    command: list[str] = field()
    test_info: TestInfo = field()
    options: ExecutionOptions = field(factory=ExecutionOptions)
    state: JobState = field(default=JobState.CREATED)
    stdout_lines: list[str] = field(factory=list)
    stderr_lines: list[str] = field(factory=list)
    exit_code: int | None = field(default=None)
    start_time: float | None = field(default=None)
    end_time: float | None = field(default=None)
    cwd: Path | None = field(default=None)
    timed_out: bool = field(default=False)
    error_message: str | None = field(default=None)

    def __attrs_post_init__(self):
        log.debug(
            "Initialized job",
            test=self.test_info.name,
            command=" ".join(self.command),
            initial_state=self.state.name,
        )

    @property
    def is_terminal(self) -> bool:
        return self.state in TERMINAL_STATES

    @property
    def is_running(self) -> bool:
        return self.state is JobState.RUNNING

    @property
    def succeeded(self) -> bool:
        return self.state is JobState.COMPLETED and self.exit_code == 0

    @property
    def could_not_run(self) -> bool:
        """True when the failure is the system's, not the test's (spawn failure or timeout)."""
        return self.timed_out or self.error_message is not None

    @property
    def duration(self) -> float | None:
        if self.start_time is None or self.end_time is None:
            return None
        return self.end_time - self.start_time

    @property
    def state_emoji(self) -> str:
        return STATE_EMOJI_MAP.get(self.state, "❓")

    def mark_running(self, cwd: Path) -> None:
        self._transition(JobState.RUNNING)
        self.cwd = cwd
        self.start_time = time.monotonic()

    def mark_completed(
        self,
        exit_code: int,
        stdout_lines: list[str] | None = None,
        stderr_lines: list[str] | None = None,
        *,
        timed_out: bool = False,
        error_message: str | None = None,
    ) -> None:
        """Records the final outcome; output is replaced wholesale."""
        self._transition(JobState.COMPLETED)
        self._finish(exit_code, stdout_lines, stderr_lines)
        self.timed_out = timed_out
        self.error_message = error_message

    def mark_cancelled(self) -> None:
        self._transition(JobState.CANCELLED)
        self._finish(CANCELLED_EXIT_CODE, None, None)

    def _finish(self, exit_code: int, stdout_lines: list[str] | None, stderr_lines: list[str] | None) -> None:
        self.exit_code = exit_code
        self.end_time = time.monotonic()
        if stdout_lines is not None:
            self.stdout_lines = list(stdout_lines)
        if stderr_lines is not None:
            self.stderr_lines = list(stderr_lines)

    def _transition(self, new_state: JobState) -> None:
        old_state = self.state
        if new_state not in ALLOWED_TRANSITIONS[old_state]:
            raise JobStateError(
                f"Illegal job transition {old_state.name} -> {new_state.name} for '{self.test_info.name}'"
            )
        self.state = new_state
        log.debug(
            "Job state changed",
            test=self.test_info.name,
            old_state=old_state.name,
            new_state=new_state.name,
        )


# 🔼⚙️
