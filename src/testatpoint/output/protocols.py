#
# src/testatpoint/output/protocols.py
#
"""
Defines the protocol for result sinks and the shared job summary.
"""

from typing import Protocol, runtime_checkable

from attrs import define

from testatpoint.state import Job, JobState


@define(frozen=True, slots=True)
class JobSummary:
    """
    One-line outcome of a terminal job, shared by every sink.
    """

    label: str
    style: str
    passed: bool
    could_not_run: bool


def summarize(job: Job) -> JobSummary:
    """Derives the pass/fail summary of a terminal job from its exit code."""
    if job.state is JobState.CANCELLED:
        return JobSummary("CANCELLED", "yellow", passed=False, could_not_run=False)
    if job.timed_out:
        return JobSummary(f"TIMED OUT (exit {job.exit_code})", "bold red", passed=False, could_not_run=True)
    if job.error_message is not None:
        return JobSummary(f"COULD NOT RUN (exit {job.exit_code})", "bold red", passed=False, could_not_run=True)
    if job.exit_code == 0:
        return JobSummary("PASSED", "bold green", passed=True, could_not_run=False)
    return JobSummary(f"FAILED (exit {job.exit_code})", "bold red", passed=False, could_not_run=False)


@runtime_checkable
class OutputSink(Protocol):
    """
    Protocol for rendering a job after it reaches a terminal state.
    """

    def render(self, job: Job) -> None:
        """
        Presents the outcome and every captured output line of `job`.

        Args:
            job: A job in the COMPLETED or CANCELLED state.
        """
        ...

# 🔼⚙️
