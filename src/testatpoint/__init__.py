#
# src/testatpoint/__init__.py
#
"""
test-at-point: locate the test nearest a cursor position, build the command
that runs it, and manage the resulting process.
"""

from .session import Session

__all__ = ["Session"]

# 🔼⚙️
