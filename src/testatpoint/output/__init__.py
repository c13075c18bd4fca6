#
# src/testatpoint/output/__init__.py
#
"""
Result rendering sub-package for test-at-point.
"""
from .factory import SINK_MAP, get_output_sink
from .floating import FloatingSink
from .protocols import JobSummary, OutputSink, summarize
from .quickfix import QuickfixEntry, QuickfixSink, parse_locations
from .terminal import TerminalSink

__all__ = [
    "SINK_MAP",
    "FloatingSink",
    "JobSummary",
    "OutputSink",
    "QuickfixEntry",
    "QuickfixSink",
    "TerminalSink",
    "get_output_sink",
    "parse_locations",
    "summarize",
]

# 🔼⚙️
