#
# src/testatpoint/detection/naming.py
#
"""
Heuristic mapping between source files and their test files.

Candidates follow the `test_<name>`, `<name>_test` and `<name>.test` naming
rules and are looked up beside the file and in the usual test directories.
A candidate only counts if it exists on disk.
"""

import fnmatch
import re
from pathlib import Path

import structlog

from testatpoint.config.models import LanguageProfile
from testatpoint.config.registry import LanguageRegistry

log = structlog.get_logger("detection.naming")

TEST_DIRS = ("test", "tests", "__tests__", "spec")

_REVERSE_RULES = (
    re.compile(r"^test_(?P<base>.+)\.(?P<ext>[^.]+)$"),
    re.compile(r"^(?P<base>.+)_test\.(?P<ext>[^.]+)$"),
    re.compile(r"^(?P<base>.+)\.test\.(?P<ext>[^.]+)$"),
    re.compile(r"^(?P<base>.+)\.spec\.(?P<ext>[^.]+)$"),
)


def _candidate_test_names(source: Path) -> list[str]:
    stem, suffix = source.stem, source.suffix
    return [f"test_{source.name}", f"{stem}_test{suffix}", f"{stem}.test{suffix}"]


def _name_glob(rule: str) -> str:
    """Reduces a naming rule such as `src/**/*test*.rs` to its file-name part."""
    return rule.rsplit("/", 1)[-1]


def is_test_file(path: Path | str, profile: LanguageProfile) -> bool:
    name = Path(path).name
    return any(fnmatch.fnmatchcase(name, _name_glob(rule)) for rule in profile.test_file_naming)


def get_test_file(source_path: Path | str) -> Path | None:
    """Returns an existing test file for `source_path`, or None."""
    source = Path(source_path)
    names = _candidate_test_names(source)
    search_dirs = [source.parent] + [source.parent / d for d in TEST_DIRS]
    if source.parent.parent != source.parent:
        search_dirs += [source.parent.parent / d for d in TEST_DIRS]

    for directory in search_dirs:
        if not directory.is_dir():
            continue
        for name in names:
            candidate = directory / name
            if candidate.is_file():
                log.debug("Resolved test file", source=str(source), test_file=str(candidate))
                return candidate
    return None


def get_source_file(test_path: Path | str) -> Path | None:
    """Returns an existing source file for `test_path`, or None."""
    test_file = Path(test_path)
    search_dirs = [test_file.parent]
    if test_file.parent.name in TEST_DIRS:
        search_dirs.append(test_file.parent.parent)
        search_dirs.append(test_file.parent.parent / "src")

    for rule in _REVERSE_RULES:
        match = rule.match(test_file.name)
        if not match:
            continue
        source_name = f"{match['base']}.{match['ext']}"
        for directory in search_dirs:
            candidate = directory / source_name
            if candidate.is_file() and candidate != test_file:
                log.debug("Resolved source file", test_file=str(test_file), source=str(candidate))
                return candidate
    return None


def switch_file(path: Path | str, registry: LanguageRegistry) -> Path | None:
    """Returns the counterpart of `path`: its source if it is a test file, else its test file."""
    path = Path(path)
    tag = registry.language_for_path(path)
    profile = registry.find(tag) if tag else None
    looks_like_test = is_test_file(path, profile) if profile else any(r.match(path.name) for r in _REVERSE_RULES)

    if looks_like_test:
        return get_source_file(path)
    return get_test_file(path)


def find_test_files(root: Path | str, profiles: dict[str, LanguageProfile] | LanguageRegistry) -> list[Path]:
    """Lists every file under `root` matching any profile's naming rules, sorted and unique."""
    root = Path(root)
    if not root.is_dir():
        log.error("Invalid directory path", path=str(root))
        return []

    globs = {_name_glob(rule) for _, profile in profiles.items() for rule in profile.test_file_naming}
    if not globs:
        log.warning("No test file naming rules configured")
        return []

    found: set[Path] = set()
    for pattern in sorted(globs):
        found.update(p for p in root.rglob(pattern) if p.is_file())

    log.debug("Found test files", count=len(found), root=str(root))
    return sorted(found)


# 🔼⚙️
