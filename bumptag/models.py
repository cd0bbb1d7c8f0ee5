"""Data models for bumptag.

These Pydantic models represent the configuration and results passed
through the release pipeline.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


class LockMode(str, Enum):
    """How the lock file is reconciled during a release.

    Attributes:
        REQUIRED: Regenerate the lock; any failure aborts the release.
        BEST_EFFORT: Regenerate if the tool is available; failures are skipped.
        DISABLED: Never read, write, or stage the lock.
    """

    REQUIRED = "required"
    BEST_EFFORT = "best-effort"
    DISABLED = "disabled"


DEFAULT_LOCK_MODE = LockMode.REQUIRED


class ReleaseConfig(BaseModel):
    """Where the release reads and writes, and how it treats the lock.

    Attributes:
        root: Repository root; git and cargo run here.
        manifest: Manifest file name relative to root.
        table: Name of the manifest table holding the package version.
        lockfile: Lock file name relative to root.
        lock_mode: Explicit lock mode, or None to read it from the manifest's
                   ``[<table>.metadata.release]`` table before falling back
                   to DEFAULT_LOCK_MODE.
    """

    root: Path = Field(default_factory=Path.cwd)
    manifest: str = "Cargo.toml"
    table: str = "package"
    lockfile: str = "Cargo.lock"
    lock_mode: LockMode | None = None

    @property
    def manifest_path(self) -> Path:
        return self.root / self.manifest

    @property
    def lock_path(self) -> Path:
        return self.root / self.lockfile


class VersionBump(BaseModel):
    """Records the manifest version change made by a release.

    Attributes:
        old: The version before the release.
        new: The version after the release.
    """

    old: str
    new: str


class ReleaseResult(BaseModel):
    """Outcome of a successful release.

    Attributes:
        tag: Name of the created tag (``v<version>``).
        bump: The manifest version change.
        files: Files included in the release commit.
        lock_included: True if the lock file is part of the commit.
    """

    tag: str
    bump: VersionBump
    files: list[str] = Field(default_factory=list)
    lock_included: bool = False

    @property
    def push_commands(self) -> list[str]:
        """Commands the caller runs to publish the release."""
        return ["git push", f"git push origin {self.tag}"]
