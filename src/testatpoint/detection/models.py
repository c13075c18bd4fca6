#
# src/testatpoint/detection/models.py
#
"""
Value objects produced by test detection.
"""

from pathlib import Path

from attrs import define, field


def _validate_non_negative(inst, attr, value: int) -> None:
    if value < 0:
        raise ValueError(f"Field '{attr.name}' must be non-negative, got {value}")


def _validate_describe(inst, attr, value: str) -> None:
    if not value:
        raise ValueError("TestContext.describe must be a non-empty string")


@define(frozen=True, slots=True)
class TestContext:
    """The enclosing suite/class/module of a located test."""

    __test__ = False

    describe: str = field(validator=_validate_describe)
    nested_level: int = field(default=0, validator=_validate_non_negative)
    file_scope: bool = field(default=False)


@define(frozen=True, slots=True)
class TestInfo:
    """
    Identity and position of a located test.

    `line` and `column` are 1-based. Instances are immutable; the session stores
    copies made with `attrs.evolve`.
    """

    __test__ = False

    name: str
    file_path: Path = field(converter=Path)
    line: int
    column: int = field(default=1)
    language: str = field(default="")
    context: TestContext | None = field(default=None)

    @property
    def key(self) -> tuple[str, Path]:
        """Identity used to deduplicate the selection set."""
        return (self.name, self.file_path)

    @property
    def display_name(self) -> str:
        if self.context is not None and not self.context.file_scope:
            return f"{self.file_path.name}::{self.context.describe}::{self.name}"
        return f"{self.file_path.name}::{self.name}"


# 🔼⚙️
