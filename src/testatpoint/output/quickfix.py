#
# src/testatpoint/output/quickfix.py
#
"""
Quickfix-style sink: a list of failure locations extracted from test output.
"""

import re
from pathlib import Path

import structlog
from attrs import define
from rich.console import Console
from rich.table import Table
from rich.text import Text

from testatpoint.output.protocols import summarize
from testatpoint.state import Job

log = structlog.get_logger("output.quickfix")

# file.ext:line[:col] anywhere in a line, e.g. "foo_test.go:12:" or "src/lib.rs:10:5".
LOCATION_RE = re.compile(r"(?P<file>[\w./\\-]*[\w-]\.[A-Za-z]\w*):(?P<line>\d+)(?::(?P<col>\d+))?")


@define(frozen=True, slots=True)
class QuickfixEntry:
    filename: str
    line: int
    column: int
    text: str


def parse_locations(lines: list[str], cwd: Path | None = None) -> list[QuickfixEntry]:
    """Extracts file/line locations from output lines, one entry per line at most."""
    entries = []
    for raw in lines:
        match = LOCATION_RE.search(raw)
        if not match:
            continue
        filename = match["file"]
        if cwd is not None and not Path(filename).is_absolute():
            filename = str(cwd / filename)
        entries.append(
            QuickfixEntry(
                filename=filename,
                line=int(match["line"]),
                column=int(match["col"] or 1),
                text=raw.strip(),
            )
        )
    return entries


class QuickfixSink:
    """Collects failure locations into `entries` and prints them as a table."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self.entries: list[QuickfixEntry] = []

    def build_entries(self, job: Job) -> list[QuickfixEntry]:
        summary = summarize(job)
        if summary.passed:
            return []
        entries = parse_locations(job.stdout_lines + job.stderr_lines, job.cwd)
        if not entries:
            info = job.test_info
            entries = [
                QuickfixEntry(
                    filename=str(info.file_path),
                    line=info.line,
                    column=info.column,
                    text=f"{info.name}: {summary.label}",
                )
            ]
        return entries

    def render(self, job: Job) -> None:
        summary = summarize(job)
        self.entries = self.build_entries(job)
        log.debug("Rendering quickfix list", test=job.test_info.name, entries=len(self.entries))

        self.console.print(Text.assemble((f"{summary.label}", summary.style), f"  {job.test_info.display_name}"))
        if self.entries:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Location", no_wrap=True)
            table.add_column("Message")
            for entry in self.entries:
                table.add_row(f"{entry.filename}:{entry.line}:{entry.column}", entry.text)
            self.console.print(table)
        for line in job.stdout_lines:
            self.console.print(line, markup=False, highlight=False)
        for line in job.stderr_lines:
            self.console.print(Text(line, style="red"))

# 🔼⚙️
