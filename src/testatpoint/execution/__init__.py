#
# src/testatpoint/execution/__init__.py
#
"""
Command building and process execution sub-package for test-at-point.
"""
from .command import RunMode, build_command, expand_template, select_templates
from .engine import ExecutionEngine

__all__ = [
    "ExecutionEngine",
    "RunMode",
    "build_command",
    "expand_template",
    "select_templates",
]

# 🔼⚙️
