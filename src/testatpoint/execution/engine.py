#
# src/testatpoint/execution/engine.py
#
"""
Runs test commands as asyncio subprocesses and drives each Job to a terminal state.
"""

import asyncio
import contextlib
import functools
import os
import signal
from collections.abc import Callable, Iterable
from pathlib import Path

import structlog
from rich.console import Console

from testatpoint.config.models import CWD_STRATEGIES, TestAtPointConfig
from testatpoint.config.registry import LanguageRegistry
from testatpoint.detection.models import TestInfo
from testatpoint.exceptions import ConfigurationError, ExecutionError, JobStateError
from testatpoint.output.factory import get_output_sink
from testatpoint.output.protocols import OutputSink
from testatpoint.state import (
    SPAWN_FAILURE_EXIT_CODE,
    TIMEOUT_EXIT_CODE,
    ExecutionOptions,
    Job,
    JobState,
)
from testatpoint.utils.paths import project_root_for

log = structlog.get_logger("execution.engine")

IS_POSIX = os.name == "posix"
# Seconds to wait after SIGTERM before escalating to SIGKILL.
KILL_GRACE_PERIOD = 2.0
# Bytes per read from a pipe; lines of any length are reassembled from chunks.
READ_CHUNK_SIZE = 64 * 1024

SinkFactory = Callable[[str, Console | None], OutputSink]


class ExecutionEngine:
    """
    Dispatches jobs without blocking the caller and delivers each finished job
    to exactly one output sink.

    Every process is started in its own session, so timeouts and cancellation
    signal the whole process group rather than only the direct child.
    """

    def __init__(
        self,
        config: TestAtPointConfig,
        registry: LanguageRegistry,
        console: Console | None = None,
        sink_factory: SinkFactory = get_output_sink,
    ):
        self.config = config
        self.registry = registry
        self.console = console
        self._sink_factory = sink_factory
        self._tasks: dict[int, asyncio.Task[Job]] = {}
        log.debug("ExecutionEngine initialized.")

    # --- Job creation and dispatch ---

    def create_job(self, command: list[str], test_info: TestInfo, options: ExecutionOptions | None = None) -> Job:
        return Job(command=list(command), test_info=test_info, options=options or ExecutionOptions())

    def resolve_cwd(self, test_info: TestInfo, strategy: str | None = None) -> Path:
        """
        Picks the working directory for a test process.

        `project_root` is the same root `%f` is relative to, falling back to the
        test file's directory.
        """
        strategy = strategy or self.config.execution.cwd_strategy
        file_dir = test_info.file_path.parent

        if strategy == "current":
            return Path.cwd()
        if strategy == "file_dir":
            return file_dir
        if strategy == "project_root":
            profile = self.registry.find(test_info.language)
            root = project_root_for(profile.root_markers if profile else (), test_info.file_path)
            if root is not None:
                return root
            log.debug("No project root found, using file directory", file=str(test_info.file_path))
            return file_dir

        raise ConfigurationError(f"Invalid cwd strategy '{strategy}'. Must be one of {list(CWD_STRATEGIES)}.")

    def run(self, job: Job) -> asyncio.Task[Job]:
        """
        Starts `job` on the running event loop and returns its task immediately.

        Raises:
            JobStateError: If the job has already been dispatched.
            ConfigurationError: If the working-directory strategy is invalid.
            RuntimeError: If no event loop is running; the job stays CREATED.
        """
        if job.state is not JobState.CREATED:
            raise JobStateError(f"Job for '{job.test_info.name}' was already dispatched ({job.state.name})")
        asyncio.get_running_loop()

        cwd = self.resolve_cwd(job.test_info, job.options.cwd_strategy)
        job.mark_running(cwd)
        log.info(
            "Dispatching test", test=job.test_info.name, command=" ".join(job.command), cwd=str(cwd), emoji_key="run"
        )

        task = asyncio.create_task(self._drive(job), name=f"testatpoint:{job.test_info.name}")
        self._tasks[id(job)] = task
        task.add_done_callback(functools.partial(self._on_task_done, job))
        return task

    def stop(self, job: Job) -> bool:
        """
        Cancels a running job and kills its process group.

        Returns False, without changing anything, if the job is not running.
        """
        if job.state is not JobState.RUNNING:
            log.debug("Stop ignored, job is not running", test=job.test_info.name, state=job.state.name)
            return False

        job.mark_cancelled()
        task = self._tasks.get(id(job))
        if task is not None and not task.done():
            task.cancel()
        log.info("Stopped test execution", test=job.test_info.name)
        return True

    async def wait(self, job: Job) -> Job:
        """Waits until a dispatched job has been delivered to its sink."""
        task = self._tasks.get(id(job))
        if task is not None:
            await asyncio.wait({task})
        return job

    async def wait_all(self, jobs: Iterable[Job]) -> list[Job]:
        jobs = list(jobs)
        tasks = {self._tasks[id(j)] for j in jobs if id(j) in self._tasks}
        if tasks:
            await asyncio.wait(tasks)
        return jobs

    @property
    def active_count(self) -> int:
        return sum(1 for t in self._tasks.values() if not t.done())

    # --- Process handling ---

    async def _drive(self, job: Job) -> Job:
        timeout_ms = job.options.timeout or self.config.execution.timeout
        try:
            exit_code, stdout_lines, stderr_lines, timed_out = await self._execute(job, timeout_ms / 1000)
        except ExecutionError as e:
            log.error("Test command could not be started", test=job.test_info.name, error=str(e))
            if not job.is_terminal:
                job.mark_completed(SPAWN_FAILURE_EXIT_CODE, [], [], error_message=str(e))
            return job

        if job.is_terminal:
            return job
        if timed_out:
            message = f"Test timed out after {timeout_ms} ms"
            log.warning("Test command timed out", test=job.test_info.name, timeout_ms=timeout_ms, emoji_key="time")
            job.mark_completed(TIMEOUT_EXIT_CODE, stdout_lines, stderr_lines, timed_out=True, error_message=message)
        else:
            log.info(
                "Test command finished",
                test=job.test_info.name,
                exit_code=exit_code,
                emoji_key="pass" if exit_code == 0 else "fail",
            )
            job.mark_completed(exit_code, stdout_lines, stderr_lines)
        return job

    async def _execute(self, job: Job, timeout: float) -> tuple[int, list[str], list[str], bool]:
        runner_log = log.bind(command=" ".join(job.command), working_dir=str(job.cwd))
        env = {**os.environ, **self.config.execution.env, **job.options.env}

        try:
            process = await asyncio.create_subprocess_exec(
                *job.command,
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=job.cwd,
                env=env,
                start_new_session=IS_POSIX,
            )
        except FileNotFoundError as e:
            raise ExecutionError(
                f"Test command not found: '{job.command[0]}'. Is it installed and in the system's PATH?"
            ) from e
        except OSError as e:
            raise ExecutionError(f"Could not start test command '{job.command[0]}': {e}") from e

        runner_log.debug("Test process started", pid=process.pid)
        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        async def collect() -> int:
            await asyncio.gather(
                _read_lines(process.stdout, stdout_lines),
                _read_lines(process.stderr, stderr_lines),
            )
            return await process.wait()

        try:
            exit_code = await asyncio.wait_for(collect(), timeout)
        except asyncio.TimeoutError:
            await _kill_process_group(process)
            return TIMEOUT_EXIT_CODE, stdout_lines, stderr_lines, True
        except (asyncio.CancelledError, Exception):
            runner_log.debug("Job interrupted, killing process group", pid=process.pid)
            await _kill_process_group(process)
            raise

        runner_log.debug("Test command output", stdout_len=len(stdout_lines), stderr_len=len(stderr_lines))
        return exit_code, stdout_lines, stderr_lines, False

    # --- Completion ---

    def _on_task_done(self, job: Job, task: asyncio.Task[Job]) -> None:
        self._tasks.pop(id(job), None)

        if task.cancelled():
            if not job.is_terminal:
                job.mark_cancelled()
        elif (exc := task.exception()) is not None:
            log.error("Job task failed unexpectedly", test=job.test_info.name, error=str(exc), exc_info=exc)
            if not job.is_terminal:
                job.mark_completed(SPAWN_FAILURE_EXIT_CODE, error_message=f"Internal error: {exc}")

        self._deliver(job)

    def _deliver(self, job: Job) -> None:
        output_mode = job.options.output_mode or self.config.output.mode
        try:
            sink = self._sink_factory(output_mode, self.console)
            sink.render(job)
        except Exception as e:
            log.error("Output sink failed to render job", output_mode=output_mode, error=str(e), exc_info=True)


def _decode_line(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace").rstrip("\r")


async def _read_lines(stream: asyncio.StreamReader | None, sink: list[str]) -> None:
    """Appends every line of `stream` to `sink`, however long the line is."""
    if stream is None:
        return
    pending = bytearray()
    while chunk := await stream.read(READ_CHUNK_SIZE):
        pending += chunk
        *complete, rest = pending.split(b"\n")
        sink.extend(_decode_line(line) for line in complete)
        pending = bytearray(rest)
    if pending:
        sink.append(_decode_line(bytes(pending)))


async def _kill_process_group(process: asyncio.subprocess.Process) -> None:
    """SIGTERM the process group, then SIGKILL it if it outlives the grace period."""
    try:
        if IS_POSIX:
            os.killpg(process.pid, signal.SIGTERM)
        else:
            process.terminate()
    except ProcessLookupError:
        return

    try:
        await asyncio.wait_for(process.wait(), KILL_GRACE_PERIOD)
    except asyncio.TimeoutError:
        log.warning("Process group ignored SIGTERM, sending SIGKILL", pid=process.pid)
        with contextlib.suppress(ProcessLookupError):
            if IS_POSIX:
                os.killpg(process.pid, signal.SIGKILL)
            else:
                process.kill()
        await process.wait()


# 🔼⚙️
