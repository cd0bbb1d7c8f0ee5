"""CLI entry point for bumptag."""

from __future__ import annotations

from pathlib import Path

import click

from bumptag.errors import ReleaseError
from bumptag.models import LockMode, ReleaseConfig
from bumptag.pipeline import run_release


@click.command()
@click.version_option(package_name="bumptag")
# Optional at parse time so a missing version exits 1, not click's 2.
@click.argument("version_arg", metavar="VERSION", required=False)
@click.option(
    "--lock-mode",
    type=click.Choice([m.value for m in LockMode]),
    envvar="BUMPTAG_LOCK_MODE",
    default=None,
    help=(
        "How to treat Cargo.lock. Falls back to [package.metadata.release] "
        "lock-mode in the manifest, then 'required'."
    ),
)
@click.option(
    "--manifest",
    type=click.Path(dir_okay=False, path_type=Path),
    default="Cargo.toml",
    show_default=True,
    help="Package manifest to bump; the lock file sits beside it.",
)
def cli(version_arg: str | None, lock_mode: str | None, manifest: Path) -> None:
    """Bump the package version, commit, and tag a release as vVERSION."""
    manifest = manifest.absolute()
    config = ReleaseConfig(
        root=manifest.parent,
        manifest=manifest.name,
        lock_mode=LockMode(lock_mode) if lock_mode else None,
    )
    try:
        run_release(version_arg, config)
    except ReleaseError as exc:
        raise click.ClickException(exc.message) from exc
