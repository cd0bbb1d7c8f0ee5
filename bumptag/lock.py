"""Lock file reconciliation.

The package manager is reached through a narrow protocol so the lock policy
can be exercised without cargo installed. reconcile_lock() implements the
three lock modes; CargoClient is the real package manager.
"""

from __future__ import annotations

from pathlib import Path
from typing import Protocol

from .errors import IntegrityError, LockGenerationError, ToolMissingError
from .models import LockMode
from .shell import run, warn, which


class PackageManager(Protocol):
    name: str

    def is_available(self) -> bool: ...

    def regenerate_lock(self, allow_network: bool) -> bool: ...


class CargoClient:
    """Regenerate Cargo.lock with ``cargo generate-lockfile``."""

    name = "cargo"

    def __init__(self, root: Path) -> None:
        self.root = root

    def is_available(self) -> bool:
        return which(self.name) is not None

    def regenerate_lock(self, allow_network: bool) -> bool:
        args = ["cargo", "generate-lockfile"]
        if not allow_network:
            args.append("--offline")
        return run(*args, cwd=self.root).returncode == 0


def regenerate(manager: PackageManager, lock_path: Path) -> None:
    """Regenerate the lock offline, falling back to a networked attempt.

    Raises:
        LockGenerationError: If both attempts fail.
    """
    if manager.regenerate_lock(allow_network=False):
        print(f"  {lock_path.name} regenerated (offline)")
        return
    warn(f"Offline regeneration of {lock_path.name} failed; retrying with network")
    if manager.regenerate_lock(allow_network=True):
        print(f"  {lock_path.name} regenerated (online)")
        return
    raise LockGenerationError(lock_path.name)


def check_integrity(lock_path: Path) -> None:
    """Raise IntegrityError unless the lock exists and is non-empty."""
    if not lock_path.is_file() or lock_path.stat().st_size == 0:
        raise IntegrityError(f"{lock_path.name} missing or empty after regeneration")


def reconcile_lock(manager: PackageManager, mode: LockMode, lock_path: Path) -> bool:
    """Bring the lock file in line with the manifest according to ``mode``.

    - required: the tool must exist and regeneration must succeed, leaving a
      non-empty lock file. Any failure propagates.
    - best-effort: a missing tool or failed regeneration is reported and
      skipped, leaving the lock file out of the commit.
    - disabled: nothing is done and the lock file is not looked at.

    Returns:
        True if the lock file should be staged with the release commit.
    """
    if mode is LockMode.DISABLED:
        print("  Lock handling disabled")
        return False

    if mode is LockMode.REQUIRED:
        if not manager.is_available():
            raise ToolMissingError(manager.name)
        regenerate(manager, lock_path)
        check_integrity(lock_path)
        return True

    if not manager.is_available():
        warn(f"{manager.name} not found; releasing without updating {lock_path.name}")
        return False
    try:
        regenerate(manager, lock_path)
    except LockGenerationError as exc:
        warn(f"{exc.message}; releasing without it")
        return False
    return lock_path.is_file()
