#
# tests/unit/test_locator.py
#
"""Unit tests for pattern-based test location."""

import re

from testatpoint.detection import find_all, find_nearest

GO_PATTERNS = [re.compile(r"^func\s+(Test\w+)"), re.compile(r"^func\s+(Benchmark\w+)")]


def _go_buffer() -> list[str]:
    lines = ["package math", "", 'import "testing"', "", "func helper() int {", "\treturn 1", "}", "", ""]
    lines.append("func TestAdd(t *testing.T) {")  # line 10
    lines += ["\tgot := helper()", "\tif got != 1 {", "\t\tt.Fatal(got)", "\t}", "}"]  # lines 11-15
    lines += ["", "func BenchmarkAdd(b *testing.B) {", "}"]  # line 17
    return lines


class TestFindNearest:
    def test_finds_enclosing_go_test(self) -> None:
        info = find_nearest(_go_buffer(), 15, GO_PATTERNS, file_path="/src/math_test.go", language="go")

        assert info is not None
        assert info.name == "TestAdd"
        assert info.line == 10
        assert info.column == 1
        assert info.language == "go"

    def test_cursor_on_declaration_line(self) -> None:
        info = find_nearest(_go_buffer(), 10, GO_PATTERNS)
        assert info is not None and info.line == 10

    def test_proximity_dominates_pattern_order(self) -> None:
        info = find_nearest(_go_buffer(), 18, GO_PATTERNS)
        assert info is not None
        assert info.name == "BenchmarkAdd"
        assert info.line == 17

    def test_pattern_order_breaks_ties_on_same_line(self) -> None:
        patterns = [re.compile(r"it\('([^']+)'"), re.compile(r"test\('([^']+)'")]
        lines = ["test('second') || it('first')"]
        info = find_nearest(lines, 1, patterns)
        assert info is not None
        assert info.name == "first"
        assert info.column == lines[0].index("it(") + 1

    def test_cursor_above_any_test_returns_none(self) -> None:
        assert find_nearest(_go_buffer(), 5, GO_PATTERNS) is None

    def test_test_free_buffer_returns_none(self) -> None:
        assert find_nearest(["package main", "", "func main() {}"], 3, GO_PATTERNS) is None

    def test_cursor_past_end_is_clamped(self) -> None:
        info = find_nearest(_go_buffer(), 500, GO_PATTERNS)
        assert info is not None and info.name == "BenchmarkAdd"

    def test_no_patterns_or_lines(self) -> None:
        assert find_nearest(_go_buffer(), 10, []) is None
        assert find_nearest([], 1, GO_PATTERNS) is None


class TestFindAll:
    def test_returns_tests_in_line_order(self) -> None:
        tests = find_all(_go_buffer(), GO_PATTERNS, file_path="/src/math_test.go", language="go")

        assert [t.name for t in tests] == ["TestAdd", "BenchmarkAdd"]
        assert [t.line for t in tests] == [10, 17]

    def test_line_claimed_by_first_matching_pattern_only(self) -> None:
        patterns = [re.compile(r"^def (test_\w+)"), re.compile(r"def (\w+)")]
        tests = find_all(["def test_one():", "    pass", "def test_two():"], patterns)

        assert [t.name for t in tests] == ["test_one", "test_two"]
        assert len({t.line for t in tests}) == len(tests)

    def test_line_numbers_are_non_decreasing(self) -> None:
        lines = ["def test_a():", "def test_b():", "x = 1", "def test_c():"]
        tests = find_all(lines, [re.compile(r"def (test_\w+)")])
        numbers = [t.line for t in tests]
        assert numbers == sorted(numbers) == [1, 2, 4]

    def test_empty_results(self) -> None:
        assert find_all(["nothing here"], GO_PATTERNS) == []
        assert find_all(_go_buffer(), []) == []
