#
# src/testatpoint/telemetry/__init__.py
#
"""
Logging setup for test-at-point.
"""
from .logger import StructLogger, setup_logging

__all__ = ["StructLogger", "setup_logging"]

# 🔼⚙️
