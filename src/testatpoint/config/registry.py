#
# src/testatpoint/config/registry.py
#
"""
Registry of language profiles keyed by file-type tag.
"""

from collections.abc import Iterator, Mapping
from pathlib import Path

import structlog

from testatpoint.config.models import LanguageProfile
from testatpoint.exceptions import ConfigurationError

log = structlog.get_logger("config.registry")


class LanguageRegistry:
    """
    Maps file-type tags to immutable LanguageProfile instances.

    `register` always overwrites whatever profile was stored under the tag.
    """

    def __init__(self, profiles: Mapping[str, LanguageProfile] | None = None):
        self._profiles: dict[str, LanguageProfile] = {}
        for tag, profile in (profiles or {}).items():
            self.register(tag, profile)

    def register(self, tag: str, profile: LanguageProfile) -> None:
        if not isinstance(profile, LanguageProfile):
            raise ConfigurationError(
                f"Profile for '{tag}' must be a LanguageProfile, got {type(profile).__name__}"
            )
        replaced = tag in self._profiles
        self._profiles[tag] = profile
        log.debug("Registered language profile", language=tag, replaced=replaced)

    def get(self, tag: str) -> LanguageProfile:
        """
        Returns the profile registered for `tag`.

        Raises:
            ConfigurationError: If no profile is registered for the tag.
        """
        profile = self._profiles.get(tag)
        if profile is None:
            raise ConfigurationError(
                f"No language profile registered for file type '{tag}'. "
                f"Available: {sorted(self._profiles)}"
            )
        return profile

    def find(self, tag: str) -> LanguageProfile | None:
        return self._profiles.get(tag)

    def language_for_path(self, path: Path | str) -> str | None:
        """Guesses the file-type tag from the file extension."""
        suffix = Path(path).suffix.lower().lstrip(".")
        if not suffix:
            return None
        for tag, profile in self._profiles.items():
            if suffix in profile.extensions:
                return tag
        return None

    def __contains__(self, tag: object) -> bool:
        return tag in self._profiles

    def __iter__(self) -> Iterator[str]:
        return iter(self._profiles)

    def __len__(self) -> int:
        return len(self._profiles)

    def items(self):
        return self._profiles.items()


# 🔼⚙️
