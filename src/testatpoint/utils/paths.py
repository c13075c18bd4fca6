#
# src/testatpoint/utils/paths.py
#
"""
Filesystem helpers for locating project roots.
"""

from collections.abc import Iterable
from pathlib import Path

import structlog

from testatpoint.config.defaults import GENERIC_ROOT_MARKERS

log = structlog.get_logger("utils.paths")


def find_project_root(markers: Iterable[str], start: Path | str) -> Path | None:
    """
    Walks upward from `start` until a directory containing any marker is found.

    Markers may be files or directories. Returns None if the filesystem root is
    reached without a match.
    """
    markers = list(markers)
    if not markers:
        return None

    current = Path(start)
    if current.is_file():
        current = current.parent

    for directory in (current, *current.parents):
        for marker in markers:
            if (directory / marker).exists():
                log.debug("Found project root", root=str(directory), marker=marker)
                return directory
    return None


def project_root_for(root_markers: Iterable[str], file_path: Path | str) -> Path | None:
    """
    The project root of a test file: the nearest ancestor holding one of the
    profile's markers or a generic marker such as `.git`.

    Command paths and the `project_root` working directory both use this root.
    """
    return find_project_root([*root_markers, *GENERIC_ROOT_MARKERS], Path(file_path).parent)


def relative_to_root(file_path: Path | str, root: Path | None) -> str:
    """Path of `file_path` relative to `root`, or just its name when outside it."""
    path = Path(file_path)
    if root is not None:
        try:
            return path.relative_to(root).as_posix()
        except ValueError:
            pass
    return path.name

# 🔼⚙️
