#
# tests/unit/test_cli.py
#
"""
Tests for the command line interface.
"""

import sys
from pathlib import Path

import pytest
from click.testing import CliRunner

from testatpoint.cli.main import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def sample_config(tmp_path: Path, sample_language) -> Path:
    """A config file registering the `sample` language from conftest."""
    path = tmp_path / "testatpoint.toml"
    path.write_text(
        f"""
[output]
mode = "terminal"

[execution]
timeout = 20000

[languages.sample]
patterns = ['^# test: (\\w+)']
commands = ['{sys.executable} %d/runner.py %s']
root_markers = ["runner.py"]
test_file_naming = ["*.tst"]
extensions = ["tst"]
"""
    )
    return path


class TestMainCLI:
    """Test main CLI entry point."""

    def test_cli_help(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "test-at-point" in result.output
        for command in ("run", "batch", "list", "switch", "config"):
            assert command in result.output

    def test_cli_version(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_global_log_level_option(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["--log-level", "DEBUG", "config", "show", "--help"])
        assert result.exit_code == 0

        result = runner.invoke(cli, ["--log-level", "INVALID", "config", "show", "--help"])
        assert result.exit_code != 0


class TestConfigCommands:
    def test_config_show_defaults(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["config", "show"])

        assert result.exit_code == 0
        assert "'quickfix'" in result.output
        assert "'python'" in result.output
        assert "'project_root'" in result.output

    def test_config_show_file(self, runner: CliRunner, sample_config: Path) -> None:
        result = runner.invoke(cli, ["config", "show", "-c", str(sample_config)])

        assert result.exit_code == 0
        assert "'sample'" in result.output
        assert "20000" in result.output

    def test_config_show_invalid(self, runner: CliRunner, tmp_path: Path) -> None:
        bad = tmp_path / "bad.toml"
        bad.write_text('[output]\nmode = "popup"\n')

        result = runner.invoke(cli, ["config", "show", "-c", str(bad)])

        assert result.exit_code == 1
        assert "Configuration problem" in result.output

    def test_config_path_must_exist(self, runner: CliRunner, tmp_path: Path) -> None:
        result = runner.invoke(cli, ["config", "show", "-c", str(tmp_path / "missing.toml")])
        assert result.exit_code == 2


class TestRunCommand:
    def test_dry_run_prints_command(self, runner: CliRunner, python_project: Path) -> None:
        test_file = python_project / "tests" / "unit" / "test_math.py"

        result = runner.invoke(cli, ["run", str(test_file), "--line", "2", "--dry-run"])

        assert result.exit_code == 0
        assert "pytest -xvs tests/unit/test_math.py::test_add" in result.output

    def test_dry_run_debug_mode(self, runner: CliRunner, python_project: Path) -> None:
        test_file = python_project / "tests" / "unit" / "test_math.py"

        result = runner.invoke(cli, ["run", str(test_file), "--dry-run", "--mode", "debug"])

        assert result.exit_code == 0
        assert "debugpy" in result.output

    def test_passing_test(self, runner: CliRunner, sample_config: Path, sample_file: Path) -> None:
        result = runner.invoke(cli, ["run", str(sample_file), "--line", "1", "-c", str(sample_config)])

        assert result.exit_code == 0, result.output
        assert "running passing_case" in result.output
        assert "PASSED" in result.output

    def test_failing_test(self, runner: CliRunner, sample_config: Path, sample_file: Path) -> None:
        result = runner.invoke(
            cli, ["run", str(sample_file), "--line", "2", "-c", str(sample_config), "--output", "quickfix"]
        )

        assert result.exit_code == 1
        assert "FAILED (exit 1)" in result.output
        assert "expected pass" in result.output

    def test_timeout_option(self, runner: CliRunner, sample_config: Path, tmp_path: Path) -> None:
        slow = tmp_path / "slow.tst"
        slow.write_text("# test: slow_case\n")
        (tmp_path / "runner.py").write_text("import time\ntime.sleep(30)\n")

        result = runner.invoke(cli, ["run", str(slow), "-c", str(sample_config), "--timeout", "300"])

        assert result.exit_code == 124
        assert "TIMED OUT" in result.output

    def test_no_test_found(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "test_empty.py"
        path.write_text("x = 1\n")

        result = runner.invoke(cli, ["run", str(path)])

        assert result.exit_code == 1
        assert "No test found" in result.output

    def test_unknown_file_type(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "notes.txt"
        path.write_text("test everything\n")

        result = runner.invoke(cli, ["run", str(path)])

        assert result.exit_code == 1
        assert "Cannot determine the file type" in result.output


class TestBatchCommand:
    def test_runs_every_target(self, runner: CliRunner, sample_config: Path, sample_file: Path) -> None:
        result = runner.invoke(
            cli, ["batch", f"{sample_file}:1", f"{sample_file}:2", f"{sample_file}:2", "-c", str(sample_config)]
        )

        assert "Running 2 selected test(s)" in result.output
        assert "running passing_case" in result.output
        assert "running failing_case" in result.output
        assert result.exit_code == 1

    def test_malformed_target(self, runner: CliRunner) -> None:
        result = runner.invoke(cli, ["batch", "no-line-number"])
        assert result.exit_code == 2
        assert "FILE:LINE" in result.output


class TestInspectCommands:
    def test_list(self, runner: CliRunner, sample_config: Path, sample_file: Path) -> None:
        result = runner.invoke(cli, ["list", str(sample_file), "-c", str(sample_config)])

        assert result.exit_code == 0
        assert result.output.splitlines() == ["1:1\tpassing_case\t-", "2:1\tfailing_case\t-"]

    def test_list_with_context(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "test_calc.py"
        path.write_text("class TestCalc:\n    def test_add(self):\n        pass\n")

        result = runner.invoke(cli, ["list", str(path)])

        assert result.exit_code == 0
        assert "2:1\ttest_add\tTestCalc" in result.output

    def test_list_without_tests(self, runner: CliRunner, tmp_path: Path) -> None:
        path = tmp_path / "test_nothing.py"
        path.write_text("x = 1\n")

        result = runner.invoke(cli, ["list", str(path)])

        assert result.exit_code == 1

    def test_switch(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "calc.go").write_text("package calc\n")
        (tmp_path / "calc_test.go").write_text("package calc\n")

        result = runner.invoke(cli, ["switch", str(tmp_path / "calc.go")])

        assert result.exit_code == 0
        assert result.output.strip().endswith("calc_test.go")

    def test_switch_without_counterpart(self, runner: CliRunner, tmp_path: Path) -> None:
        (tmp_path / "alone.go").write_text("package calc\n")

        result = runner.invoke(cli, ["switch", str(tmp_path / "alone.go")])

        assert result.exit_code == 1
        assert "No counterpart" in result.output
