"""Release error taxonomy.

Every failure raised by the orchestrator derives from ReleaseError. The
command line layer turns any of them into a one-line message and exit 1.
"""

from __future__ import annotations


class ReleaseError(Exception):
    """Base class for all release failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class UsageError(ReleaseError):
    """The version argument is missing or empty."""


class PreconditionError(ReleaseError):
    """The working tree has staged or unstaged changes."""


class ManifestError(ReleaseError):
    """The manifest is missing, malformed, or lacks a package version."""


class ToolMissingError(ReleaseError):
    """A required external tool is not on PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(f"Required tool not found on PATH: {tool}")
        self.tool = tool


class LockGenerationError(ReleaseError):
    """Lock regeneration failed both offline and with network access."""

    def __init__(self, lockfile: str) -> None:
        super().__init__(
            f"Failed to regenerate {lockfile} (offline and online attempts both failed)"
        )
        self.lockfile = lockfile


class IntegrityError(ReleaseError):
    """The lock file is missing or empty after regeneration."""


class VcsError(ReleaseError):
    """A git command exited non-zero."""

    def __init__(self, command: str, stderr: str) -> None:
        detail = stderr.strip() or "no output"
        super().__init__(f"git {command} failed: {detail}")
        self.command = command
        self.stderr = stderr
