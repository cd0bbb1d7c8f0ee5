"""Version-control capability.

The orchestrator only needs three git operations, so it talks to a narrow
protocol. GitClient is the real implementation; tests substitute fakes.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from .errors import ToolMissingError, VcsError
from .shell import git, which


class VersionControl(Protocol):
    def is_clean(self) -> bool: ...

    def stage_and_commit(self, files: Sequence[str], message: str) -> None: ...

    def create_tag(self, name: str) -> None: ...

    def is_ignored(self, path: str) -> bool: ...


class GitClient:
    """Run git in a single checkout."""

    def __init__(self, root: Path) -> None:
        self.root = root

    def _git(self, *args: str) -> str:
        if which("git") is None:
            raise ToolMissingError("git")
        result = git(*args, cwd=self.root)
        if result.returncode != 0:
            raise VcsError(" ".join(args), result.stderr or result.stdout)
        return result.stdout.strip()

    def _quiet_diff(self, *args: str) -> bool:
        """Return True if ``git diff --quiet <args>`` reports no changes."""
        if which("git") is None:
            raise ToolMissingError("git")
        result = git("diff", "--quiet", *args, cwd=self.root)
        # 1 means differences; anything else is a real failure
        if result.returncode not in (0, 1):
            raise VcsError(" ".join(["diff", "--quiet", *args]), result.stderr)
        return result.returncode == 0

    def is_clean(self) -> bool:
        """True if there are neither unstaged nor staged changes.

        Untracked files are ignored; they never enter the release commit.
        """
        return self._quiet_diff() and self._quiet_diff("--cached")

    def stage_and_commit(self, files: Sequence[str], message: str) -> None:
        self._git("add", "--", *files)
        self._git("commit", "-m", message)

    def create_tag(self, name: str) -> None:
        """Create a lightweight tag at HEAD. Fails if the name is taken."""
        self._git("tag", name)

    def is_ignored(self, path: str) -> bool:
        """True if git would refuse to stage ``path`` because it is ignored.

        Tracked files are never reported as ignored.
        """
        if which("git") is None:
            raise ToolMissingError("git")
        result = git("check-ignore", "-q", "--", path, cwd=self.root)
        # 0 ignored, 1 not ignored, anything else is a real failure
        if result.returncode not in (0, 1):
            raise VcsError(f"check-ignore -q -- {path}", result.stderr)
        return result.returncode == 0
