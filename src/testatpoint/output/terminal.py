#
# src/testatpoint/output/terminal.py
#
"""
Console sink: prints the full process transcript.
"""

import structlog
from rich.console import Console
from rich.rule import Rule
from rich.text import Text

from testatpoint.output.protocols import summarize
from testatpoint.state import Job

log = structlog.get_logger("output.terminal")


class TerminalSink:
    def __init__(self, console: Console | None = None):
        self.console = console or Console()

    def render(self, job: Job) -> None:
        summary = summarize(job)
        log.debug("Rendering terminal transcript", test=job.test_info.name)

        self.console.print(Rule(f"$ {' '.join(job.command)}", align="left"))
        for line in job.stdout_lines:
            self.console.print(line, markup=False, highlight=False)
        for line in job.stderr_lines:
            self.console.print(Text(line, style="red"))
        if job.error_message:
            self.console.print(Text(job.error_message, style="bold red"))

        duration = f" in {job.duration:.2f}s" if job.duration is not None else ""
        self.console.print(
            Rule(Text.assemble(f"{job.state_emoji} ", (summary.label, summary.style), duration), align="left")
        )

# 🔼⚙️
