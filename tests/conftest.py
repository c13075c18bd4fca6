import io
import logging
import sys
from pathlib import Path

import pytest
from rich.console import Console

from testatpoint.config import LanguageProfile, LanguageRegistry, TestAtPointConfig, build_registry, load_config
from testatpoint.detection import TestInfo

RUNNER_SCRIPT = """\
import sys

name = sys.argv[1] if len(sys.argv) > 1 else ""
print(f"running {name}")
if "failing" in name:
    print("sample.tst:2: expected pass", file=sys.stderr)
    sys.exit(1)
"""


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for var in ("TESTATPOINT_LOG_LEVEL", "TESTATPOINT_OUTPUT_MODE", "TESTATPOINT_TIMEOUT", "TESTATPOINT_CONF"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture(autouse=True)
def _reset_root_handlers():
    """CLI invocations attach handlers to streams that CliRunner closes afterwards."""
    yield
    root = logging.getLogger()
    for handler in list(root.handlers):
        if type(handler) in (logging.StreamHandler, logging.FileHandler):
            root.removeHandler(handler)


@pytest.fixture
def default_config() -> TestAtPointConfig:
    return load_config(None, project_name="")


@pytest.fixture
def registry(default_config: TestAtPointConfig) -> LanguageRegistry:
    return build_registry(default_config)


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def python_project(tmp_path: Path) -> Path:
    """A small Python project with a root marker and a test file two levels down."""
    root = tmp_path / "proj"
    (root / "tests" / "unit").mkdir(parents=True)
    (root / "pyproject.toml").write_text("[project]\nname = 'proj'\n")
    (root / "tests" / "unit" / "test_math.py").write_text("def test_add():\n    assert 1 + 1 == 2\n")
    return root


@pytest.fixture
def python_test_info(python_project: Path) -> TestInfo:
    return TestInfo(
        name="test_add",
        file_path=python_project / "tests" / "unit" / "test_math.py",
        line=1,
        language="python",
    )


@pytest.fixture
def sample_language(tmp_path: Path) -> tuple[str, LanguageProfile]:
    """
    A language whose tests are `# test: <name>` comments and whose command runs
    a small Python script that fails for names containing "failing".
    """
    (tmp_path / "runner.py").write_text(RUNNER_SCRIPT)
    profile = LanguageProfile(
        patterns=[r"^# test: (\w+)"],
        commands=[f"{sys.executable} %d/runner.py %s"],
        root_markers=["runner.py"],
        test_file_naming=["*.tst"],
        extensions=["tst"],
    )
    return "sample", profile


@pytest.fixture
def sample_file(tmp_path: Path) -> Path:
    path = tmp_path / "sample.tst"
    path.write_text("# test: passing_case\n# test: failing_case\n")
    return path
