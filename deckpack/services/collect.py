"""Assembly of the staging bundle.

The bundle is rebuilt from scratch on every run: the staging parent is
deleted first, so repeated runs over the same build outputs produce the same
tree and nothing from an earlier run survives.
"""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from deckpack.core.config import BuildTarget
from deckpack.core.result import Err, Ok, Result
from deckpack.output.console import Style
from deckpack.platform.files import remove_tree
from deckpack.services.base import BaseService
from deckpack.services.errors import MissingArtifact, MissingInput, ReleaseError


@dataclass(frozen=True, slots=True)
class StagingBundle:
    root: Path
    package_id: str
    binaries: tuple[str, ...]

    def files(self) -> list[str]:
        """All files in the bundle, relative to its root, sorted."""
        return sorted(p.relative_to(self.root).as_posix() for p in self.root.rglob("*") if p.is_file())


class Collector(BaseService):
    def missing_artifacts(self, targets: tuple[BuildTarget, ...] | None = None) -> list[BuildTarget]:
        selected = targets if targets is not None else self._project.targets
        return [t for t in selected if not self._project.artifact_path(t).is_file()]

    def collect(
        self,
        targets: tuple[BuildTarget, ...] | None = None,
        *,
        dry_run: bool = False,
    ) -> Result[StagingBundle, ReleaseError]:
        """Recreate the staging bundle from assets, manifest and binaries.

        Fails with MissingArtifact naming the first target whose binary is
        absent. Nothing is staged in that case.
        """
        p = self._project
        selected = targets if targets is not None else p.targets
        staging = p.staging_dir

        if dry_run:
            self._console.print(f"dry-run: would recreate {staging}", Style.DIM)
            for t in selected:
                self._console.print(
                    f"  {p.artifact_path(t)} -> {t.bundle_filename(p.binary)}",
                    Style.DIM,
                )
            return Ok(StagingBundle(root=staging, package_id=p.package_id, binaries=()))

        remove_tree(p.build_dir)

        missing = self.missing_artifacts(selected)
        if missing:
            target = missing[0]
            return Err(MissingArtifact(target=target.name, path=p.artifact_path(target)))
        if not p.assets_dir.is_dir():
            return Err(MissingInput(path=p.assets_dir))
        if not p.manifest_path.is_file():
            return Err(MissingInput(path=p.manifest_path))

        staging.mkdir(parents=True)

        self._console.print(f"cp -r {p.assets_dir.name} {staging}", Style.DIM)
        shutil.copytree(p.assets_dir, staging / p.assets_dir.name)
        shutil.copy2(p.manifest_path, staging / p.manifest_path.name)

        binaries: list[str] = []
        for t in selected:
            name = t.bundle_filename(p.binary)
            self._console.print(f"cp {p.artifact_path(t)} {name}", Style.DIM)
            shutil.copy2(p.artifact_path(t), staging / name)
            binaries.append(name)

        return Ok(StagingBundle(root=staging, package_id=p.package_id, binaries=tuple(binaries)))
