"""Release pipeline: validate → check tree → bump → lock → commit → tag.

This module orchestrates a single-package release:
1. Reject a missing or empty version
2. Refuse to run on a working tree with staged or unstaged changes
3. Rewrite the package version in the manifest (atomic replace)
4. Reconcile the lock file according to the lock mode
5. Commit the manifest (and lock) as "release v<version>"
6. Create the lightweight tag v<version>
7. Report the tag and the commands that publish it

Nothing is pushed. A failure after step 3 leaves the edited manifest in the
working tree for the operator to inspect or discard; there is no rollback.
"""

from __future__ import annotations

from .errors import PreconditionError, UsageError
from .lock import CargoClient, PackageManager, reconcile_lock
from .manifest import bump_manifest, get_lock_mode, get_package_version, load_manifest
from .models import DEFAULT_LOCK_MODE, LockMode, ReleaseConfig, ReleaseResult, VersionBump
from .shell import step
from .vcs import GitClient, VersionControl


def tag_name(version: str) -> str:
    return f"v{version}"


def commit_message(version: str) -> str:
    return f"release {tag_name(version)}"


def validate_version(version: str | None) -> str:
    """Return ``version`` unchanged, or raise UsageError if it is blank."""
    if not version or not version.strip():
        raise UsageError("Missing version. Usage: bumptag X.Y.Z")
    return version


def ensure_clean_tree(vcs: VersionControl) -> None:
    """Abort unless the working tree has no staged or unstaged changes."""
    step("Checking working tree")
    if not vcs.is_clean():
        raise PreconditionError("Working tree not clean. Commit or stash changes first.")
    print("  clean")


def resolve_lock_mode(config: ReleaseConfig) -> LockMode:
    """Pick the lock mode: explicit config, then manifest metadata, then default.

    Also serves as the manifest precondition check: the manifest must parse
    and carry a package version before anything is written.
    """
    doc = load_manifest(config.manifest_path)
    get_package_version(doc, config.table)
    if config.lock_mode is not None:
        return config.lock_mode
    return get_lock_mode(doc, config.table) or DEFAULT_LOCK_MODE


def bump_version(config: ReleaseConfig, version: str) -> VersionBump:
    step(f"Bumping {config.manifest} [{config.table}] version")
    bump = bump_manifest(config.manifest_path, version, config.table)
    print(f"  {bump.old} → {bump.new}")
    return bump


def update_lock(
    config: ReleaseConfig,
    mode: LockMode,
    package_manager: PackageManager,
    vcs: VersionControl,
) -> bool:
    """Reconcile the lock and report whether it goes into the release commit.

    A lock file git ignores (common for library crates) is kept on disk but
    left out of the commit.
    """
    step(f"Reconciling {config.lockfile} ({mode.value})")
    if not reconcile_lock(package_manager, mode, config.lock_path):
        return False
    if vcs.is_ignored(config.lockfile):
        print(f"  {config.lockfile} is ignored by git; not committed")
        return False
    return True


def commit_and_tag(vcs: VersionControl, files: list[str], version: str) -> str:
    """Commit ``files`` with the release message, then tag the commit."""
    step("Committing and tagging")
    message = commit_message(version)
    vcs.stage_and_commit(files, message)
    print(f"  committed: {message}")
    tag = tag_name(version)
    vcs.create_tag(tag)
    print(f"  tagged: {tag}")
    return tag


def run_release(
    version: str | None,
    config: ReleaseConfig | None = None,
    *,
    vcs: VersionControl | None = None,
    package_manager: PackageManager | None = None,
) -> ReleaseResult:
    """Execute the full release.

    Args:
        version: Version to release; used verbatim for the manifest and tag.
        config: Paths and lock mode. Defaults to Cargo.toml in the cwd.
        vcs: Version-control client. Defaults to git in ``config.root``.
        package_manager: Lock regenerator. Defaults to cargo in ``config.root``.

    Raises:
        ReleaseError: On the first failing step; see bumptag.errors.
    """
    version = validate_version(version)
    config = config or ReleaseConfig()
    vcs = vcs or GitClient(config.root)
    package_manager = package_manager or CargoClient(config.root)

    ensure_clean_tree(vcs)
    mode = resolve_lock_mode(config)

    bump = bump_version(config, version)
    files = [config.manifest]
    lock_included = update_lock(config, mode, package_manager, vcs)
    if lock_included:
        files.append(config.lockfile)

    tag = commit_and_tag(vcs, files, version)
    result = ReleaseResult(tag=tag, bump=bump, files=files, lock_included=lock_included)

    print(f"\nCreated tag {tag}. Push with:")
    for command in result.push_commands:
        print(f"  {command}")
    return result
