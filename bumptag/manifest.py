"""Manifest reading and rewriting.

The version rewrite is done on the raw text so that every byte outside the
package table's ``version`` value survives untouched. tomlkit is used to
read the manifest and to check that the rewritten text still parses and
carries the new version.
"""

from __future__ import annotations

import os
import re
import tempfile
from pathlib import Path

import tomlkit
from tomlkit.exceptions import ParseError

from .errors import ManifestError
from .models import LockMode, VersionBump

# Any table or array-of-tables header ends the current table.
_HEADER_RE = re.compile(r"^\s*\[")
_VERSION_RE = re.compile(
    r"^(?P<lead>\s*version\s*=\s*)(?P<quote>[\"'])(?P<value>[^\"'\n]*)(?P=quote)"
)


def _table_header_re(table: str) -> re.Pattern[str]:
    return re.compile(rf"^\s*\[\s*{re.escape(table)}\s*\]\s*(#.*)?$")


def load_manifest(path: Path) -> tomlkit.TOMLDocument:
    """Load and parse a manifest file.

    Raises:
        ManifestError: If the file is missing or is not valid TOML.
    """
    try:
        return tomlkit.parse(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise ManifestError(f"Manifest not found: {path}") from exc
    except ParseError as exc:
        raise ManifestError(f"Cannot parse {path.name}: {exc}") from exc


def get_package_version(doc: tomlkit.TOMLDocument, table: str = "package") -> str:
    """Return ``[table].version``.

    Raises:
        ManifestError: If the table is absent or has no literal string version
                       (e.g. ``version.workspace = true``).
    """
    section = doc.get(table)
    if not isinstance(section, dict):
        raise ManifestError(f"No [{table}] table in manifest")
    version = section.get("version")
    if not isinstance(version, str):
        raise ManifestError(f"No string version field in [{table}] table")
    return str(version)


def get_lock_mode(doc: tomlkit.TOMLDocument, table: str = "package") -> LockMode | None:
    """Read ``lock-mode`` from ``[table.metadata.release]``, if set.

    Raises:
        ManifestError: If the value is not a known lock mode.
    """
    settings = doc.get(table, {}).get("metadata", {}).get("release", {})
    raw = settings.get("lock-mode")
    if raw is None:
        return None
    try:
        return LockMode(str(raw))
    except ValueError as exc:
        choices = ", ".join(m.value for m in LockMode)
        raise ManifestError(
            f"Invalid lock-mode {raw!r} in [{table}.metadata.release]; "
            f"expected one of: {choices}"
        ) from exc


def _scan_line(body: str, multiline: str | None, depth: int) -> tuple[str | None, int]:
    """Carry string and bracket state across one line.

    ``multiline`` is the delimiter of an open multi-line string (three double
    or three single quotes) or None; ``depth`` counts unclosed ``[`` and ``{`` outside
    strings. Lines seen while either is open are values, never headers or
    keys.
    """
    i = 0
    while i < len(body):
        if multiline is not None:
            if multiline == '"""' and body[i] == "\\":
                i += 2
            elif body.startswith(multiline, i):
                multiline = None
                i += 3
            else:
                i += 1
            continue
        c = body[i]
        if c == "#":
            break
        if body.startswith('"""', i) or body.startswith("'''", i):
            multiline = body[i : i + 3]
            i += 3
        elif c == '"':
            i += 1
            while i < len(body) and body[i] != '"':
                i += 2 if body[i] == "\\" else 1
            i += 1
        elif c == "'":
            end = body.find("'", i + 1)
            i = len(body) if end < 0 else end + 1
        else:
            if c in "[{":
                depth += 1
            elif c in "]}":
                depth -= 1
            i += 1
    return multiline, depth


def rewrite_version(content: str, version: str, table: str = "package") -> str:
    """Return ``content`` with the ``version`` value of ``[table]`` replaced.

    Only the first ``version = "..."`` line between the table header and the
    next header (or end of file) is touched. Lines inside multi-line strings
    and arrays are skipped, so a value starting with ``[`` never ends the
    table. The version line keeps its spacing, quote style and trailing
    comment. All other lines are returned unchanged,
    line endings included.

    Examples:
        '[package]\\nversion = "0.3.0"\\n' -> '[package]\\nversion = "0.4.0"\\n'

    Raises:
        ManifestError: If the table or its version line is not found.
    """
    header_re = _table_header_re(table)
    lines = content.splitlines(keepends=True)
    in_table = False
    seen_table = False
    multiline: str | None = None
    depth = 0

    for i, line in enumerate(lines):
        body = line.rstrip("\r\n")
        at_top = multiline is None and depth == 0
        multiline, depth = _scan_line(body, multiline, depth)
        if not at_top:
            continue
        if header_re.match(body):
            in_table = seen_table = True
            continue
        if _HEADER_RE.match(body):
            in_table = False
            continue
        if not in_table:
            continue
        m = _VERSION_RE.match(body)
        if m:
            quote = m.group("quote")
            lines[i] = (
                f"{m.group('lead')}{quote}{version}{quote}"
                f"{body[m.end():]}{line[len(body):]}"
            )
            return "".join(lines)

    if not seen_table:
        raise ManifestError(f"No [{table}] table in manifest")
    raise ManifestError(f"No version field in [{table}] table")


def atomic_write_text(path: Path, content: str) -> None:
    """Write ``content`` to ``path`` via a temp file and rename.

    The target is never observed partially written; an interrupted write
    leaves the original file in place.
    """
    fd, tmp_name = tempfile.mkstemp(
        prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent)
    )
    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as handle:
            handle.write(content)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            os.chmod(tmp_path, path.stat().st_mode & 0o7777)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()


def bump_manifest(path: Path, version: str, table: str = "package") -> VersionBump:
    """Set the package version in the manifest at ``path``.

    The rewritten text is validated with tomlkit before anything is written.

    Returns:
        The old and new versions.
    """
    # Bytes, so CRLF line endings are not translated away.
    old_content = path.read_bytes().decode("utf-8")
    old_version = get_package_version(load_manifest(path), table)

    new_content = rewrite_version(old_content, version, table)
    try:
        written = get_package_version(tomlkit.parse(new_content), table)
    except ParseError as exc:
        raise ManifestError(f"Rewritten {path.name} is not valid TOML: {exc}") from exc
    if written != version:
        raise ManifestError(
            f"Rewritten {path.name} reports version {written!r}, expected {version!r}"
        )

    atomic_write_text(path, new_content)
    return VersionBump(old=old_version, new=version)
