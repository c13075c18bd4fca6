#
# src/testatpoint/detection/locator.py
#
"""
Pattern-based test location within a text buffer.
"""

import re
from collections.abc import Sequence
from pathlib import Path

import structlog

from testatpoint.detection.models import TestInfo

log = structlog.get_logger("detection.locator")


def _match_line(text: str, patterns: Sequence[re.Pattern[str]]) -> tuple[str, int] | None:
    """Returns (name, 1-based column) for the first pattern that matches `text`."""
    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return match.group(1), match.start() + 1
    return None


def find_nearest(
    lines: Sequence[str],
    cursor_line: int,
    patterns: Sequence[re.Pattern[str]],
    *,
    file_path: Path | str = "",
    language: str = "",
) -> TestInfo | None:
    """
    Finds the test that governs `cursor_line` by scanning backward to line 1.

    The closest matching line wins; pattern order only breaks ties within a
    single line. Returns None when nothing at or above the cursor matches.
    """
    if not patterns or not lines:
        return None

    start = min(cursor_line, len(lines))
    for lnum in range(start, 0, -1):
        found = _match_line(lines[lnum - 1], patterns)
        if found:
            name, column = found
            log.debug("Found nearest test", name=name, line=lnum, cursor_line=cursor_line, emoji_key="detect")
            return TestInfo(name=name, file_path=file_path, line=lnum, column=column, language=language)

    log.debug("No test found at or above cursor", cursor_line=cursor_line)
    return None


def find_all(
    lines: Sequence[str],
    patterns: Sequence[re.Pattern[str]],
    *,
    file_path: Path | str = "",
    language: str = "",
) -> list[TestInfo]:
    """Returns every test in the buffer in ascending line order, at most one per line."""
    tests: list[TestInfo] = []
    if not patterns:
        return tests

    for lnum, text in enumerate(lines, start=1):
        found = _match_line(text, patterns)
        if found:
            name, column = found
            tests.append(TestInfo(name=name, file_path=file_path, line=lnum, column=column, language=language))

    log.debug("Located tests in buffer", count=len(tests), file=Path(file_path).name)
    return tests


# 🔼⚙️
