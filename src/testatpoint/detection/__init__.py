#
# src/testatpoint/detection/__init__.py
#
"""
Test detection sub-package: locating tests, resolving their context and
mapping between source and test files.
"""

from .context import (
    ContextResolver,
    ContextStrategy,
    EnclosingClassStrategy,
    FileScopeStrategy,
    IndentStackStrategy,
    ModuleBlockStrategy,
)
from .locator import find_all, find_nearest
from .models import TestContext, TestInfo

__all__ = [
    "ContextResolver",
    "ContextStrategy",
    "EnclosingClassStrategy",
    "FileScopeStrategy",
    "IndentStackStrategy",
    "ModuleBlockStrategy",
    "TestContext",
    "TestInfo",
    "find_all",
    "find_nearest",
]

# 🔼⚙️
