#
# src/testatpoint/exceptions.py
#
"""
Custom exceptions for test-at-point.
"""


class TestAtPointError(Exception):
    """Base class for all test-at-point errors."""

    __test__ = False


class ConfigurationError(TestAtPointError):
    """
    Raised when no language profile is registered for a file type, a command
    template list is missing, or a configuration value is invalid.
    """

    def __init__(self, message: str, path: str | None = None, details: Exception | None = None):
        self.path = path
        self.details = details
        full_message = message
        if path:
            full_message += f" (Config: '{path}')"
        super().__init__(full_message)
        if details and hasattr(self, "add_note"):
            self.add_note(f"Original error: {type(details).__name__}: {details}")


class PatternError(ConfigurationError):
    """A detection pattern failed to compile or does not expose exactly one capture group."""

    def __init__(self, message: str, pattern: str | None = None, language: str | None = None):
        self.pattern = pattern
        self.language = language
        prefix = f"[{language}] " if language else ""
        super().__init__(f"{prefix}{message}")


class BuildError(TestAtPointError):
    """Template expansion produced an empty or malformed argument vector."""

    pass


class ExecutionError(TestAtPointError):
    """A test process could not be spawned or exceeded its timeout."""

    pass


class JobStateError(TestAtPointError):
    """An illegal job state transition was requested."""

    pass


# 🔼⚙️
