#
# src/testatpoint/output/factory.py
#
"""
Factory for creating OutputSink instances.
"""

import structlog
from rich.console import Console

from testatpoint.exceptions import ConfigurationError
from testatpoint.output.floating import FloatingSink
from testatpoint.output.protocols import OutputSink
from testatpoint.output.quickfix import QuickfixSink
from testatpoint.output.terminal import TerminalSink

log = structlog.get_logger("output.factory")

SINK_MAP = {
    "quickfix": QuickfixSink,
    "terminal": TerminalSink,
    "floating": FloatingSink,
}


def get_output_sink(output_mode: str, console: Console | None = None) -> OutputSink:
    """
    Factory function to get an OutputSink for an output mode.
    """
    sink_class = SINK_MAP.get(output_mode.lower())

    if not sink_class:
        log.error("Unsupported output mode specified", output_mode=output_mode)
        raise ConfigurationError(
            f"Unsupported output mode: '{output_mode}'. "
            f"Available modes: {list(SINK_MAP.keys())}"
        )

    log.debug("Instantiating output sink", output_mode=output_mode)
    return sink_class(console=console)

# 🔼⚙️
