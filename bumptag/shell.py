"""Shell and git utilities.

Thin wrappers around subprocess calls for running git and the package
manager, plus output formatting helpers.
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from pathlib import Path


def git(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[str]:
    """Run a git command with captured text output.

    Never raises on a non-zero exit; callers inspect ``returncode`` and
    ``stderr`` themselves so failures can be reported with git's own message.

    Args:
        *args: Arguments to pass to git (e.g., "diff", "--quiet").
        cwd: Directory to run in. Defaults to the current directory.
    """
    return subprocess.run(
        ["git", *args], capture_output=True, text=True, check=False, cwd=cwd
    )


def run(*args: str, cwd: Path | None = None) -> subprocess.CompletedProcess[bytes]:
    """Run an arbitrary command.

    Unlike git(), this doesn't capture output - it streams directly to
    the terminal so users can see resolver progress, etc.
    """
    return subprocess.run(args, check=False, cwd=cwd)


def which(tool: str) -> str | None:
    """Return the resolved path of ``tool`` on PATH, or None."""
    return shutil.which(tool)


def step(msg: str) -> None:
    """Print a visually distinct step header."""
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")


def warn(msg: str) -> None:
    """Print a non-fatal warning to stderr."""
    print(f"WARNING: {msg}", file=sys.stderr)
