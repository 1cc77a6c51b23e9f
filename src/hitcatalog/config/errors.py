"""Configuration error definitions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path


class ConfigurationError(RuntimeError):
    """Base class for unusable configuration."""


class MissingConfigurationError(ConfigurationError):
    """One or more required environment variables are unset or blank."""

    def __init__(self, names: Iterable[str]) -> None:
        self.names = tuple(sorted(names))
        super().__init__(f"Missing configuration for: {', '.join(self.names)}")


class InvalidPathConfigurationError(ConfigurationError):
    """A configured path exists but cannot be used for its purpose."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        super().__init__(f"{reason}: {path}")
