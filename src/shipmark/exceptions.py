"""Exception hierarchy for shipmark.

Every error raised by shipmark derives from :class:`ShipmarkError` and may
carry a list of suggestions that the CLI prints as remediation hints.
"""

from __future__ import annotations


class ShipmarkError(Exception):
    """Base class for all shipmark errors."""

    def __init__(self, message: str, suggestions: list[str] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.suggestions = list(suggestions or [])


# =============================================================================
# Validation
# =============================================================================


class ValidationError(ShipmarkError):
    """Raised for malformed version strings and invalid bump arguments."""


# =============================================================================
# Configuration
# =============================================================================


class ConfigError(ShipmarkError):
    """Raised when a configuration file cannot be loaded."""


class ConfigNotFoundError(ConfigError):
    """Raised when an expected configuration file does not exist."""


class ConfigValidationError(ConfigError):
    """Raised when configuration values do not match the schema."""


# =============================================================================
# Git
# =============================================================================


class GitError(ShipmarkError):
    """Raised when a git command fails."""

    def __init__(
        self,
        message: str,
        suggestions: list[str] | None = None,
        *,
        stderr: str | None = None,
    ) -> None:
        super().__init__(message, suggestions)
        self.stderr = stderr


# =============================================================================
# Version files
# =============================================================================


class VersionFileError(ShipmarkError):
    """Raised by a version file handler when a read or write fails."""


class DynamicVersionError(VersionFileError):
    """Raised when writing a version that the manifest declares as dynamic."""


class KeyPathError(VersionFileError):
    """Raised when a dotted key path cannot be resolved in a document."""


# =============================================================================
# Changelog
# =============================================================================


class ChangelogError(ShipmarkError):
    """Raised when the changelog cannot be generated or written."""
