#
# src/testatpoint/config/__init__.py
#
"""
Configuration handling sub-package for test-at-point.

Exports the loading function, the profile registry and the configuration models.
"""

from .loader import build_registry, load_config
from .models import (
    CWD_STRATEGIES,
    OUTPUT_MODES,
    ExecutionConfig,
    GlobalConfig,
    LanguageProfile,
    OutputConfig,
    TestAtPointConfig,
)
from .registry import LanguageRegistry

__all__ = [
    "CWD_STRATEGIES",
    "OUTPUT_MODES",
    "ExecutionConfig",
    "GlobalConfig",
    "LanguageProfile",
    "LanguageRegistry",
    "OutputConfig",
    "TestAtPointConfig",
    "build_registry",
    "load_config",
]

# 🔼⚙️
