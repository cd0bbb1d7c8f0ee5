"""Shared test fixtures."""

from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from bumptag.errors import VcsError

CARGO_TOML = """\
[package]
name = "demo"
version = "0.3.0" # bumped by release
edition = "2021"

[dependencies]
serde = { version = "1.0", features = ["derive"] }

[dependencies.tokio]
version = "1.37"

[workspace.package]
version = "9.9.9"
"""


class FakeVcs:
    """In-memory VersionControl that records calls in order."""

    def __init__(self, clean: bool = True, ignored: Sequence[str] = ()) -> None:
        self.clean = clean
        self.ignored = set(ignored)
        self.calls: list[str] = []
        self.commits: list[tuple[list[str], str]] = []
        self.tags: list[str] = []

    def is_clean(self) -> bool:
        self.calls.append("is_clean")
        return self.clean

    def stage_and_commit(self, files: Sequence[str], message: str) -> None:
        self.calls.append("commit")
        self.commits.append((list(files), message))
        self.clean = True

    def create_tag(self, name: str) -> None:
        self.calls.append("tag")
        if name in self.tags:
            raise VcsError(f"tag {name}", f"fatal: tag '{name}' already exists")
        self.tags.append(name)

    def is_ignored(self, path: str) -> bool:
        return path in self.ignored


class FakePackageManager:
    """PackageManager whose attempts succeed or fail from a script."""

    name = "cargo"

    def __init__(
        self,
        lock_path: Path,
        available: bool = True,
        outcomes: Sequence[bool] = (True,),
        lock_content: str | None = "# generated\nversion = 3\n",
    ) -> None:
        self.lock_path = lock_path
        self.available = available
        self.outcomes = list(outcomes)
        self.lock_content = lock_content
        self.attempts: list[bool] = []

    def is_available(self) -> bool:
        return self.available

    def regenerate_lock(self, allow_network: bool) -> bool:
        self.attempts.append(allow_network)
        ok = self.outcomes[len(self.attempts) - 1]
        if ok and self.lock_content is not None:
            self.lock_path.write_text(self.lock_content)
        return ok


@pytest.fixture
def tmp_manifest(tmp_path: Path) -> Path:
    """Create a temporary Cargo.toml file."""
    manifest = tmp_path / "Cargo.toml"
    manifest.write_text(CARGO_TOML)
    return manifest


@pytest.fixture
def fake_vcs() -> FakeVcs:
    return FakeVcs()


@pytest.fixture
def make_package_manager(tmp_path: Path) -> Callable[..., FakePackageManager]:
    """Factory for FakePackageManager writing Cargo.lock under tmp_path."""

    def factory(**kwargs: object) -> FakePackageManager:
        return FakePackageManager(tmp_path / "Cargo.lock", **kwargs)  # type: ignore[arg-type]

    return factory


def _git(root: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args], cwd=root, capture_output=True, text=True, check=True
    )
    return result.stdout.strip()


@pytest.fixture
def git_repo(tmp_path: Path) -> Path:
    """A real git checkout with a committed Cargo.toml."""
    if shutil.which("git") is None:
        pytest.skip("git not installed")
    _git(tmp_path, "init", "-q")
    _git(tmp_path, "config", "user.name", "Release Bot")
    _git(tmp_path, "config", "user.email", "release@example.com")
    _git(tmp_path, "config", "commit.gpgsign", "false")
    _git(tmp_path, "config", "tag.gpgsign", "false")
    (tmp_path / "Cargo.toml").write_text(CARGO_TOML)
    (tmp_path / "README.md").write_text("demo\n")
    _git(tmp_path, "add", "Cargo.toml", "README.md")
    _git(tmp_path, "commit", "-q", "-m", "initial")
    return tmp_path


@pytest.fixture
def git_cmd() -> Callable[..., str]:
    """Run git in a given directory and return stripped stdout."""
    return _git
