#
# src/testatpoint/output/floating.py
#
"""
Overlay-style sink: the outcome and output framed in a single panel.
"""

import structlog
from rich.console import Console, Group
from rich.panel import Panel
from rich.text import Text

from testatpoint.output.protocols import summarize
from testatpoint.state import Job

log = structlog.get_logger("output.floating")


class FloatingSink:
    def __init__(self, console: Console | None = None, width: float = 0.8):
        self.console = console or Console()
        self.width = width

    def render(self, job: Job) -> None:
        summary = summarize(job)
        log.debug("Rendering floating panel", test=job.test_info.name)

        body = [Text(line) for line in job.stdout_lines]
        body += [Text(line, style="red") for line in job.stderr_lines]
        if job.error_message:
            body.append(Text(job.error_message, style="bold red"))
        if not body:
            body.append(Text("(no output)", style="dim"))

        panel = Panel(
            Group(*body),
            title=Text.assemble(f"{job.state_emoji} ", job.test_info.display_name),
            subtitle=Text(summary.label, style=summary.style),
            border_style="green" if summary.passed else "red",
            width=max(int(self.console.width * self.width), 20),
        )
        self.console.print(panel)

# 🔼⚙️
