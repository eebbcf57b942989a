"""Zip the staging bundle into the release archive.

Member paths are relative to the staging parent, so every entry lives under
``{package-id}/`` and extraction reproduces the bundle on any machine.
"""

from __future__ import annotations

import os
import tempfile
import zipfile
from pathlib import Path
from zipfile import ZIP_DEFLATED, ZipFile

from deckpack.core.result import Err, Ok, Result
from deckpack.output.console import Style
from deckpack.services.base import BaseService
from deckpack.services.errors import ArchiveFailure, ReleaseError


def archive_members(bundle_root: Path) -> list[tuple[Path, str]]:
    """(path, arcname) pairs for the bundle, parents before children."""
    base = bundle_root.parent
    members = [(bundle_root, f"{bundle_root.name}/")]
    for path in sorted(bundle_root.rglob("*")):
        arc = path.relative_to(base).as_posix()
        members.append((path, f"{arc}/" if path.is_dir() else arc))
    return members


def write_zip(zip_path: Path, members: list[tuple[Path, str]]) -> None:
    """Write a zip next to zip_path, then move it into place."""
    zip_path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{zip_path.name}.", suffix=".tmp", dir=str(zip_path.parent))
    os.close(fd)
    tmp_path = Path(tmp_name)
    try:
        # Container builds can leave mtime=0 files; ZIP cannot store pre-1980 dates.
        with ZipFile(tmp_path, "w", compression=ZIP_DEFLATED, strict_timestamps=False) as zf:
            for src, arc in members:
                zf.write(src, arcname=arc)
        os.replace(tmp_path, zip_path)
    finally:
        tmp_path.unlink(missing_ok=True)


class Archiver(BaseService):
    def archive(self, *, dry_run: bool = False) -> Result[Path, ReleaseError]:
        """Compress the staging bundle, replacing any previous archive."""
        p = self._project
        bundle = p.staging_dir
        out = p.archive_path

        self._console.print(f"zip -r {out.name} {p.package_id}/", Style.DIM)
        if dry_run:
            return Ok(out)

        if not bundle.is_dir():
            reason = f"staging bundle not found: {bundle} (run collect first)"
            return Err(ArchiveFailure(path=out, reason=reason))

        try:
            write_zip(out, archive_members(bundle))
        except (OSError, zipfile.BadZipFile, ValueError) as e:
            return Err(ArchiveFailure(path=out, reason=str(e)))

        return Ok(out)
