"""Composite pipelines: package, release, and the pre-flight report.

    package = build (all targets, joined) -> collect -> zip
    release = bump -> package -> tag

Steps run strictly in order and the first failure halts the pipeline. There
is no rollback; every step can be re-run on its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from deckpack.core.config import BuildTarget
from deckpack.core.project import Project
from deckpack.core.result import Err, Ok, Result
from deckpack.git.repository import Repository
from deckpack.output.console import ConsoleProtocol
from deckpack.services.archive import Archiver
from deckpack.services.base import BaseService, Confirm
from deckpack.services.changelog import GitCliff
from deckpack.services.collect import Collector
from deckpack.services.cross_build import CrossBuildRunner
from deckpack.services.errors import ReleaseError
from deckpack.services.tagging import TagService
from deckpack.services.versioning import VersionSynchronizer


@dataclass(frozen=True, slots=True)
class ArtifactStatus:
    target: BuildTarget
    path: Path
    present: bool


@dataclass(frozen=True, slots=True)
class PreflightReport:
    versions: tuple[tuple[str, str | None], ...]
    artifacts: tuple[ArtifactStatus, ...]
    bundle_present: bool
    archive_present: bool

    @property
    def versions_agree(self) -> bool:
        values = {v for _, v in self.versions}
        return len(values) == 1 and None not in values

    @property
    def artifacts_complete(self) -> bool:
        return all(a.present for a in self.artifacts)

    @property
    def ok(self) -> bool:
        return self.versions_agree and self.artifacts_complete


@dataclass(frozen=True, slots=True)
class ReleaseOutcome:
    version: str
    tag: str
    archive: Path


class ReleasePipeline(BaseService):
    def __init__(
        self,
        *,
        project: Project,
        console: ConsoleProtocol,
        confirm: Confirm | None = None,
        repo: Repository | None = None,
        cliff: GitCliff | None = None,
    ) -> None:
        super().__init__(project=project, console=console, confirm=confirm)
        repo = repo or Repository(project.root)
        cliff = cliff or GitCliff(project=project, console=console)
        self.versions = VersionSynchronizer(
            project=project, console=console, confirm=confirm, repo=repo, cliff=cliff
        )
        self.tagger = TagService(project=project, console=console, confirm=confirm, repo=repo, cliff=cliff)
        self.builder = CrossBuildRunner(project=project, console=console)
        self.collector = Collector(project=project, console=console)
        self.archiver = Archiver(project=project, console=console)

    def preflight(self) -> PreflightReport:
        """Read-only snapshot of what each step would find on disk."""
        versions: list[tuple[str, str | None]] = []
        for decl in self.versions.files:
            try:
                found = decl.find_version(decl.read_text())
            except (OSError, UnicodeDecodeError):
                found = None
            versions.append((decl.name, found))

        artifacts: list[ArtifactStatus] = []
        for t in self._project.targets:
            path = self._project.artifact_path(t)
            artifacts.append(ArtifactStatus(target=t, path=path, present=path.is_file()))

        return PreflightReport(
            versions=tuple(versions),
            artifacts=tuple(artifacts),
            bundle_present=self._project.staging_dir.is_dir(),
            archive_present=self._project.archive_path.is_file(),
        )

    def package(self, *, jobs: int | None = None, dry_run: bool = False) -> Result[Path, ReleaseError]:
        self._console.header("Build")
        built = self.builder.build_all(jobs=jobs, dry_run=dry_run)
        if isinstance(built, Err):
            return built

        self._console.header("Collect")
        bundle = self.collector.collect(dry_run=dry_run)
        if isinstance(bundle, Err):
            return bundle

        self._console.header("Zip")
        return self.archiver.archive(dry_run=dry_run)

    def release(
        self,
        explicit_next: str | None = None,
        *,
        jobs: int | None = None,
        dry_run: bool = False,
        assume_yes: bool = False,
    ) -> Result[ReleaseOutcome, ReleaseError]:
        self._console.header("Bump")
        version = self.versions.bump(explicit_next, dry_run=dry_run, assume_yes=assume_yes)
        if isinstance(version, Err):
            return version

        archive = self.package(jobs=jobs, dry_run=dry_run)
        if isinstance(archive, Err):
            return archive

        if dry_run:
            # The files were not rewritten, so the tag step cannot check them.
            tag = self._project.config.package.tag_for(version.value)
            return Ok(ReleaseOutcome(version=version.value, tag=tag, archive=archive.value))

        self._console.header("Tag")
        tag = self.tagger.tag(version.value, assume_yes=assume_yes)
        if isinstance(tag, Err):
            return tag

        return Ok(ReleaseOutcome(version=version.value, tag=tag.value, archive=archive.value))
