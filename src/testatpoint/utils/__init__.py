#
# src/testatpoint/utils/__init__.py
#
"""
Shared helpers for test-at-point.
"""

from .paths import find_project_root, project_root_for, relative_to_root

__all__ = ["find_project_root", "project_root_for", "relative_to_root"]

# 🔼⚙️
