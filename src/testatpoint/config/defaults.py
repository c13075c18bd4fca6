#
# src/testatpoint/config/defaults.py
#
"""
Built-in language profiles.

Templates carry no shell quoting: arguments are split before placeholders are
expanded, so a test name with spaces remains a single argument.
"""

from typing import Any

# Markers used to locate a project root when a profile supplies none of its own.
GENERIC_ROOT_MARKERS: tuple[str, ...] = (
    ".git",
    "Cargo.toml",
    "go.mod",
    "package.json",
    "pyproject.toml",
    "Makefile",
)

_JS_TEST_PATTERNS = [
    r"^\s*test(?:\.only|\.skip)?\s*\(\s*['\"`]([^'\"`]+)['\"`]",
    r"^\s*it(?:\.only|\.skip)?\s*\(\s*['\"`]([^'\"`]+)['\"`]",
]

_JS_SCOPE_PATTERNS = [
    r"^\s*describe\s*\(\s*['\"`]([^'\"`]+)['\"`]",
    r"^\s*describe\.skip\s*\(\s*['\"`]([^'\"`]+)['\"`]",
    r"^\s*describe\.only\s*\(\s*['\"`]([^'\"`]+)['\"`]",
    r"^\s*context\s*\(\s*['\"`]([^'\"`]+)['\"`]",
]

DEFAULT_LANGUAGES: dict[str, dict[str, Any]] = {
    "go": {
        "patterns": [
            r"^func\s+(Test\w+)",
            r"^func\s+(Benchmark\w+)",
            r"^func\s+(Example\w+)",
            r"^func\s+(Fuzz\w+)",
        ],
        "commands": [
            "go test -v -run ^%s$ ./...",
            "go test -v -run ^%s$ .",
        ],
        "debug_commands": ["dlv test . -- -test.run ^%s$"],
        "coverage_commands": ["go test -v -cover -run ^%s$ ./..."],
        "root_markers": ["go.mod", "go.sum"],
        "test_file_naming": ["*_test.go"],
        "extensions": ["go"],
        "context": "file_scope",
    },
    "python": {
        "patterns": [
            r"^\s*def\s+(test_\w+)",
            r"^\s*async\s+def\s+(test_\w+)",
            r"^\s*class\s+(Test\w+)",
        ],
        "commands": [
            "pytest -xvs %f::%S",
            "python -m pytest -xvs %f::%S",
        ],
        "debug_commands": [
            "python -m debugpy --listen 5678 --wait-for-client -m pytest -xvs %f::%S",
        ],
        "coverage_commands": ["pytest -xvs --cov --cov-report=term-missing %f::%S"],
        "root_markers": ["pytest.ini", "setup.py", "pyproject.toml"],
        "test_file_naming": ["test_*.py", "*_test.py"],
        "extensions": ["py"],
        "context": "enclosing_class",
        "scope_patterns": [r"^class\s+(Test\w+)"],
    },
    "rust": {
        "patterns": [
            r"#\[test\]\s*fn\s+(\w+)",
            r"#\[tokio::test\]\s*async\s+fn\s+(\w+)",
            r"#\[rstest\]\s*fn\s+(\w+)",
            r"^\s*(?:pub\s+)?(?:async\s+)?fn\s+(test_\w+)",
        ],
        "commands": [
            "cargo test %s --",
            "cargo nextest run %s",
        ],
        "debug_commands": ["rust-gdb --args cargo test %s --"],
        "root_markers": ["Cargo.toml"],
        "test_file_naming": ["src/**/*test*.rs", "tests/**/*.rs"],
        "extensions": ["rs"],
        "context": "module_block",
        "scope_patterns": [r"^\s*(?:pub(?:\([^)]*\))?\s+)?mod\s+(\w+)\s*\{"],
        "context_separator": "::",
    },
    "javascript": {
        "patterns": _JS_TEST_PATTERNS,
        "commands": [
            "npm test -- --testNamePattern=%s",
            "jest --testNamePattern=%s",
        ],
        "coverage_commands": ["npm test -- --coverage --testNamePattern=%s"],
        "root_markers": ["package.json", "jest.config.js"],
        "test_file_naming": ["**/*.test.js", "**/*.spec.js"],
        "extensions": ["js", "jsx", "mjs", "cjs"],
        "context": "indent_stack",
        "scope_patterns": _JS_SCOPE_PATTERNS,
        "context_separator": " > ",
    },
    "typescript": {
        "patterns": _JS_TEST_PATTERNS,
        "commands": [
            "npm test -- --testNamePattern=%s",
            "vitest run -t %s",
        ],
        "coverage_commands": ["vitest run --coverage -t %s"],
        "root_markers": ["package.json", "vitest.config.ts"],
        "test_file_naming": ["**/*.test.ts", "**/*.spec.ts"],
        "extensions": ["ts", "tsx", "mts", "cts"],
        "context": "indent_stack",
        "scope_patterns": _JS_SCOPE_PATTERNS,
        "context_separator": " > ",
    },
}

# 🔼⚙️
