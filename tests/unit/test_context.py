#
# tests/unit/test_context.py
#
"""Tests for context resolution strategies."""

from pathlib import Path

import pytest

from testatpoint.config import LanguageProfile, LanguageRegistry
from testatpoint.detection import ContextResolver, TestContext
from testatpoint.exceptions import ConfigurationError

JS_SPEC = [
    "describe('outer', () => {",  # 1
    "  beforeEach(() => {});",  # 2
    "  describe('inner', () => {",  # 3
    "    it('works', () => {",  # 4
    "      expect(1).toBe(1);",  # 5
    "    });",  # 6
    "  });",  # 7
    "  describe('sibling', () => {",  # 8
    "    it('also works', () => {});",  # 9
    "  });",  # 10
    "});",  # 11
]


@pytest.fixture
def resolver(registry: LanguageRegistry) -> ContextResolver:
    return ContextResolver(registry)


class TestIndentStack:
    def test_nested_describe_blocks(self, resolver: ContextResolver) -> None:
        context = resolver.resolve(JS_SPEC, 4, "javascript", "/app/math.test.js")

        assert context == TestContext(describe="outer > inner", nested_level=1, file_scope=False)

    def test_sibling_block_replaces_previous_one(self, resolver: ContextResolver) -> None:
        context = resolver.resolve(JS_SPEC, 9, "javascript")

        assert context is not None
        assert context.describe == "outer > sibling"
        assert context.nested_level == 1

    def test_single_level(self, resolver: ContextResolver) -> None:
        lines = ["describe('math', () => {", "  test('adds', () => {});", "});"]
        context = resolver.resolve(lines, 2, "typescript")
        assert context == TestContext(describe="math", nested_level=0)

    def test_no_describe_block(self, resolver: ContextResolver) -> None:
        assert resolver.resolve(["test('alone', () => {});"], 1, "javascript") is None


class TestEnclosingClass:
    def test_method_inside_test_class(self, resolver: ContextResolver) -> None:
        lines = [
            "import pytest",
            "",
            "class TestMath:",
            "    def helper(self):",
            "        return 1",
            "",
            "    def test_add(self):",
            "        assert 1 + 1 == 2",
        ]
        context = resolver.resolve(lines, 7, "python", "/proj/test_math.py")
        assert context == TestContext(describe="TestMath", nested_level=0, file_scope=False)

    def test_top_level_function_has_no_context(self, resolver: ContextResolver) -> None:
        lines = ["class TestMath:", "    pass", "", "def test_add():", "    pass"]
        assert resolver.resolve(lines, 4, "python") is None

    def test_non_test_class_stops_the_scan(self, resolver: ContextResolver) -> None:
        lines = ["class TestMath:", "    pass", "", "class Helper:", "    def test_like(self):", "        pass"]
        assert resolver.resolve(lines, 5, "python") is None

    def test_module_level_statements_do_not_stop_the_scan(self, resolver: ContextResolver) -> None:
        lines = ["class TestMath:", "    x = 1", "CONSTANT = 2", "    def test_add(self):", "        pass"]
        context = resolver.resolve(lines, 4, "python")
        assert context is not None and context.describe == "TestMath"


class TestFileScope:
    def test_go_package_from_directory(self, resolver: ContextResolver) -> None:
        context = resolver.resolve(["package calc"], 1, "go", Path("/src/calc/calc_test.go"))
        assert context == TestContext(describe="package calc", nested_level=0, file_scope=True)

    def test_without_file_path(self, resolver: ContextResolver) -> None:
        assert resolver.resolve(["package calc"], 1, "go") is None


class TestModuleBlock:
    def test_nested_modules(self, resolver: ContextResolver) -> None:
        lines = [
            "mod tests {",  # 1
            "    mod parsing {",  # 2
            "        #[test]",  # 3
            "        fn parses() {}",  # 4
            "    }",  # 5
            "}",  # 6
        ]
        context = resolver.resolve(lines, 3, "rust", "/crate/src/lib.rs")
        assert context == TestContext(describe="tests::parsing", nested_level=1, file_scope=False)

    def test_closing_brace_pops_module(self, resolver: ContextResolver) -> None:
        lines = [
            "mod tests {",  # 1
            "    mod parsing {",  # 2
            "        fn helper() {}",  # 3
            "    }",  # 4
            "    #[test]",  # 5
            "    fn top() {}",  # 6
            "}",  # 7
        ]
        context = resolver.resolve(lines, 5, "rust", "/crate/src/lib.rs")
        assert context is not None
        assert context.describe == "tests"
        assert context.nested_level == 0

    def test_falls_back_to_file_stem(self, resolver: ContextResolver) -> None:
        lines = ["#[test]", "fn standalone() {}"]
        context = resolver.resolve(lines, 1, "rust", "/crate/tests/integration.rs")
        assert context == TestContext(describe="integration", nested_level=0, file_scope=True)


class TestContextResolver:
    def test_language_without_strategy(self) -> None:
        registry = LanguageRegistry({"plain": LanguageProfile(patterns=[r"^check (\w+)"])})
        assert ContextResolver(registry).resolve(["check one"], 1, "plain") is None

    def test_unknown_language(self, resolver: ContextResolver) -> None:
        assert resolver.resolve(["x"], 1, "cobol") is None

    def test_missing_strategy_is_a_configuration_error(self, registry: LanguageRegistry) -> None:
        resolver = ContextResolver(registry, strategies={})
        with pytest.raises(ConfigurationError, match="Unknown context strategy 'indent_stack'"):
            resolver.resolve(JS_SPEC, 4, "javascript")

    def test_custom_strategy(self, registry: LanguageRegistry) -> None:
        class FixedStrategy:
            def resolve(self, lines, test_line, profile, file_path):
                return TestContext(describe="fixed")

        resolver = ContextResolver(registry)
        resolver.register_strategy("file_scope", FixedStrategy())
        assert resolver.resolve(["package x"], 1, "go", "/a/b_test.go") == TestContext(describe="fixed")
